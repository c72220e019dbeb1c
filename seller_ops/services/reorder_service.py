import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seller_ops.core.reorder import should_trigger_auto_reorder
from seller_ops.database import session_scope
from seller_ops.models.ai_recommendation import AIRecommendation
from seller_ops.models.app_settings import AppSettings
from seller_ops.services.ai_service import store_recommendation
from seller_ops.services.analytics_service import reorder_recommendations
from seller_ops.services.settings_service import get_or_create_settings

logger = logging.getLogger(__name__)


def reorder_already_pending(db: Session, user_id: str, product_id) -> bool:
    stmt = (
        select(AIRecommendation.id)
        .where(
            AIRecommendation.user_id == user_id,
            AIRecommendation.product_id == product_id,
            AIRecommendation.recommendation_type == "reorder",
            AIRecommendation.is_applied.is_(False),
        )
        .limit(1)
    )
    return db.execute(stmt).first() is not None


def run_auto_reorder(db: Session, user_id: str) -> dict:
    settings = get_or_create_settings(db, user_id)
    recommendations = reorder_recommendations(db, user_id)
    stats = {"evaluated": len(recommendations), "triggered": 0, "skipped": 0}

    try:
        for recommendation in recommendations:
            if not should_trigger_auto_reorder(recommendation, settings.auto_reorder_enabled):
                continue
            if reorder_already_pending(db, user_id, recommendation.product_id):
                stats["skipped"] += 1
                continue
            store_recommendation(
                db,
                user_id,
                "reorder",
                "Reorder {} units of {}".format(recommendation.recommended_quantity, recommendation.name),
                product_id=recommendation.product_id,
                commit=False,
            )
            stats["triggered"] += 1
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    if stats["triggered"]:
        logger.info(
            "Auto-reorder queued %d recommendation(s) for user %s",
            stats["triggered"],
            user_id,
            extra={"user_id": user_id, "job": "auto-reorder"},
        )
    return stats


def run_auto_reorder_for_all_users() -> dict:
    """Daily pass over every user with auto-reorder switched on."""
    totals = {"users": 0, "evaluated": 0, "triggered": 0, "skipped": 0}
    with session_scope() as db:
        user_ids = db.execute(
            select(AppSettings.user_id).where(AppSettings.auto_reorder_enabled.is_(True))
        ).scalars().all()
        for user_id in user_ids:
            stats = run_auto_reorder(db, user_id)
            totals["users"] += 1
            for key, value in stats.items():
                totals[key] += value
    logger.info("Auto-reorder run complete: %s", totals, extra={"job": "auto-reorder"})
    return totals
