from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Index, Integer, String

from seller_ops.database.base import Base


class Invitation(Base):
    __tablename__ = "invitations"

    id = Column(Integer, primary_key=True)
    code = Column(String, nullable=False, unique=True)
    email = Column(String)

    created_by = Column(String)
    used_by = Column(String)
    is_admin = Column(Boolean, nullable=False, default=False)
    status = Column(String, nullable=False, default="active")

    expires_at = Column(DateTime(timezone=True))
    used_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint("length(code) >= 6", name="ck_invitations_code_length"),
        Index("idx_invitations_status", "status"),
    )


__all__ = ["Invitation"]
