import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seller_ops.core.constants import DEFAULT_APP_SETTINGS
from seller_ops.models.app_settings import AppSettings
from seller_ops.models.profile import Profile

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = tuple(DEFAULT_APP_SETTINGS)


def load_settings(db: Session, user_id: str) -> AppSettings | None:
    return (
        db.execute(select(AppSettings).where(AppSettings.user_id == user_id))
        .scalars()
        .first()
    )


def get_or_create_settings(db: Session, user_id: str) -> AppSettings:
    settings = load_settings(db, user_id)
    if settings is not None:
        return settings
    settings = AppSettings(user_id=user_id, **DEFAULT_APP_SETTINGS)
    db.add(settings)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(settings)
    logger.info("Created default settings for user %s", user_id)
    return settings


def update_settings(db: Session, user_id: str, values: dict) -> AppSettings:
    settings = get_or_create_settings(db, user_id)
    for key, value in values.items():
        if key not in _EDITABLE_FIELDS:
            raise ValueError("Unknown setting: {}".format(key))
        if value is None:
            continue
        if key == "minimum_profit_margin" and not 0 <= float(value) <= 100:
            raise ValueError("minimum_profit_margin must be between 0 and 100")
        if key in ("shipping_base_cost", "label_cost", "cancellation_shipping_loss") and float(value) < 0:
            raise ValueError("{} must be non-negative".format(key))
        setattr(settings, key, value)
    settings.updated_at = datetime.now(timezone.utc)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(settings)
    return settings


def get_or_create_profile(db: Session, user_id: str, *, email=None) -> Profile:
    profile = db.get(Profile, user_id)
    if profile is None:
        profile = Profile(id=user_id, email=email, is_admin=False)
        db.add(profile)
        db.flush()
    elif email and not profile.email:
        profile.email = email
    return profile


def setup_new_user(db: Session, user_id: str, *, email=None, first_name=None, last_name=None, company_name=None):
    """Create the profile and default settings for a freshly signed-up user."""
    profile = get_or_create_profile(db, user_id, email=email)
    if first_name is not None:
        profile.first_name = first_name
    if last_name is not None:
        profile.last_name = last_name
    if company_name is not None:
        profile.company_name = company_name

    created = False
    settings = load_settings(db, user_id)
    if settings is None:
        settings = AppSettings(user_id=user_id, **DEFAULT_APP_SETTINGS)
        db.add(settings)
        created = True
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(settings)
    return {"profile": profile, "settings": settings, "created": created}
