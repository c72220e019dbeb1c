from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, String

from seller_ops.database.base import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True)
    email = Column(String)
    first_name = Column(String)
    last_name = Column(String)
    company_name = Column(String)
    is_admin = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


__all__ = ["Profile"]
