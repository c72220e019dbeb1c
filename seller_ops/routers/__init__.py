from seller_ops.routers.admin import router as admin_router
from seller_ops.routers.ai import router as ai_router
from seller_ops.routers.analytics import router as analytics_router
from seller_ops.routers.health import router as health_router
from seller_ops.routers.ingest import router as ingest_router
from seller_ops.routers.invitations import router as invitations_router
from seller_ops.routers.products import router as products_router
from seller_ops.routers.sales import router as sales_router
from seller_ops.routers.settings import router as settings_router

__all__ = [
    "admin_router",
    "ai_router",
    "analytics_router",
    "health_router",
    "ingest_router",
    "invitations_router",
    "products_router",
    "sales_router",
    "settings_router",
]
