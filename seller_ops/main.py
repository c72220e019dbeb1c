from contextlib import asynccontextmanager

from fastapi import FastAPI

from seller_ops.config import Settings, get_settings
from seller_ops.core.logging import setup_logging
from seller_ops.core.scheduler import build_scheduler
from seller_ops.database import init_db
from seller_ops.routers import (
    admin_router,
    ai_router,
    analytics_router,
    health_router,
    ingest_router,
    invitations_router,
    products_router,
    sales_router,
    settings_router,
)
from seller_ops.services.reorder_service import run_auto_reorder_for_all_users

setup_logging()
settings: Settings = get_settings()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_db()
    scheduler = None
    if settings.AUTO_REORDER_SCHEDULER_ENABLED:
        scheduler = build_scheduler(settings, run_auto_reorder_for_all_users)
        scheduler.start()
    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.stop()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.include_router(health_router)
app.include_router(invitations_router)
app.include_router(products_router)
app.include_router(sales_router)
app.include_router(analytics_router)
app.include_router(ai_router)
app.include_router(settings_router)
app.include_router(admin_router)
app.include_router(ingest_router)


__all__ = ["app"]
