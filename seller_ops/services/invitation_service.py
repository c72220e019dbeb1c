import logging
import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seller_ops.core.constants import MIN_INVITATION_CODE_LENGTH
from seller_ops.models.invitation import Invitation
from seller_ops.models.profile import Profile
from seller_ops.services.settings_service import get_or_create_profile

logger = logging.getLogger(__name__)

DEFAULT_INVITATION_DAYS = 7


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _normalize_code(code) -> str:
    if code is None or not str(code).strip():
        raise ValueError("Invitation code is required")
    return str(code).strip()


def find_invitation(db: Session, code: str) -> Invitation | None:
    return (
        db.execute(select(Invitation).where(Invitation.code == code))
        .scalars()
        .first()
    )


def invitation_is_usable(invitation: Invitation | None, *, now: datetime | None = None) -> bool:
    if invitation is None:
        return False
    if invitation.status != "active" or invitation.used_by is not None:
        return False
    expires_at = _as_utc(invitation.expires_at)
    now = now or datetime.now(timezone.utc)
    return expires_at is None or expires_at > now


def is_invitation_valid(db: Session, code) -> bool:
    code = _normalize_code(code)
    return invitation_is_usable(find_invitation(db, code))


def use_invitation(db: Session, code, user_id: str) -> bool:
    """Redeem an invitation for ``user_id``; admin invitations promote the profile."""
    code = _normalize_code(code)
    invitation = find_invitation(db, code)
    if not invitation_is_usable(invitation):
        return False

    invitation.used_by = user_id
    invitation.used_at = datetime.now(timezone.utc)
    invitation.status = "used"
    if invitation.is_admin:
        profile = get_or_create_profile(db, user_id)
        profile.is_admin = True
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("Invitation %s used by %s", invitation.id, user_id)
    return True


def generate_code(length: int = 12) -> str:
    return secrets.token_urlsafe(length)[:length].upper()


def create_invitation(
    db: Session,
    created_by: str,
    *,
    email: str | None = None,
    code: str | None = None,
    is_admin: bool = False,
    expires_in_days: int | None = DEFAULT_INVITATION_DAYS,
) -> Invitation:
    code = (code or generate_code()).strip()
    if len(code) < MIN_INVITATION_CODE_LENGTH:
        raise ValueError(
            "Invitation code must be at least {} characters".format(MIN_INVITATION_CODE_LENGTH)
        )
    if find_invitation(db, code) is not None:
        raise ValueError("Invitation code already exists")

    expires_at = None
    if expires_in_days is not None:
        if expires_in_days <= 0:
            raise ValueError("expires_in_days must be positive")
        expires_at = datetime.now(timezone.utc) + timedelta(days=expires_in_days)

    invitation = Invitation(
        code=code,
        email=email,
        created_by=created_by,
        is_admin=is_admin,
        status="active",
        expires_at=expires_at,
    )
    db.add(invitation)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(invitation)
    return invitation


def list_invitations(db: Session) -> list[Invitation]:
    return list(
        db.execute(select(Invitation).order_by(Invitation.created_at.desc(), Invitation.id.desc()))
        .scalars()
        .all()
    )


def revoke_invitation(db: Session, invitation_id: int) -> Invitation:
    invitation = db.get(Invitation, invitation_id)
    if invitation is None:
        raise LookupError("Invitation not found")
    if invitation.status == "used":
        raise ValueError("Invitation has already been used")
    invitation.status = "revoked"
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(invitation)
    return invitation


def is_admin(db: Session, user_id: str) -> bool:
    profile = db.get(Profile, user_id)
    return bool(profile and profile.is_admin)


def list_profiles(db: Session) -> list[Profile]:
    return list(db.execute(select(Profile).order_by(Profile.created_at)).scalars().all())
