import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seller_ops.config import get_settings
from seller_ops.dependencies import get_db
from seller_ops.models.product import Product

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check():
    settings = get_settings()
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "time": datetime.now(timezone.utc).isoformat(),
    }


@router.api_route("/cron/keep-alive", methods=["GET", "POST"])
def keep_alive(db: Session = Depends(get_db)):
    try:
        db.execute(select(func.count(Product.id))).scalar_one()
    except SQLAlchemyError as exc:
        logger.exception("Keep-alive ping failed")
        return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})

    timestamp = datetime.now(timezone.utc).isoformat()
    logger.info("Database pinged successfully at %s", timestamp)
    return {"success": True, "message": "Database is active", "timestamp": timestamp}
