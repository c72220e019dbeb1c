from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String

from seller_ops.database.base import Base


class AppSettings(Base):
    __tablename__ = "app_settings"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, unique=True)

    shipping_base_cost = Column(Float, nullable=False, default=5.0)
    label_cost = Column(Float, nullable=False, default=1.0)
    cancellation_shipping_loss = Column(Float, nullable=False, default=5.0)
    minimum_profit_margin = Column(Float, nullable=False, default=10.0)
    auto_reorder_enabled = Column(Boolean, nullable=False, default=False)
    auto_price_adjustment_enabled = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True))


__all__ = ["AppSettings"]
