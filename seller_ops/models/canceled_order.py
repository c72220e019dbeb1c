from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint

from seller_ops.database.base import Base


class CanceledOrder(Base):
    __tablename__ = "canceled_orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False)

    cancellation_date = Column(Date, nullable=False)
    cancellation_type = Column(String, nullable=False)
    refund_amount = Column(Float, nullable=False, default=0)
    shipping_cost_loss = Column(Float, nullable=False, default=0)
    product_cost_loss = Column(Float, nullable=False, default=0)
    total_loss = Column(Float, nullable=False, default=0)
    notes = Column(String)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("sale_id", name="uq_canceled_orders_sale"),
    )


__all__ = ["CanceledOrder"]
