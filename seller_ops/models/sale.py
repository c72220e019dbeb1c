from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Index, Integer, String

from seller_ops.database.base import Base


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"))

    sku = Column(String, nullable=False)
    product_name = Column(String)
    order_number = Column(String)

    quantity_sold = Column(Integer, nullable=False)
    sale_price = Column(Float, nullable=False)
    shipping_fee_per_unit = Column(Float, nullable=False, default=0)
    cost_per_unit = Column(Float, nullable=False, default=0)
    additional_costs = Column(Float, nullable=False, default=0)

    total_revenue = Column(Float, nullable=False, default=0)
    platform_fee = Column(Float, nullable=False, default=0)
    net_profit = Column(Float, nullable=False, default=0)
    profit_margin = Column(Float, nullable=False, default=0)
    roi = Column(Float)

    sale_date = Column(Date, nullable=False)
    status = Column(String, nullable=False, default="active")

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("idx_sales_user_date", "user_id", "sale_date"),
        Index("idx_sales_user_order", "user_id", "order_number"),
        Index("idx_sales_sku", "sku"),
    )


__all__ = ["Sale"]
