from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, Index, Integer, String, UniqueConstraint

from seller_ops.database.base import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)

    sku = Column(String, nullable=False)
    name = Column(String, nullable=False)

    quantity = Column(Integer, nullable=False, default=0)
    total_purchased = Column(Integer, nullable=False, default=0)
    sales_qty = Column(Integer, nullable=False, default=0)
    cost_per_item = Column(Float, nullable=False, default=0)
    stock_value = Column(Float, nullable=False, default=0)

    supplier = Column(String)
    source = Column(String)
    image_url = Column(String)
    product_link = Column(String)
    remarks = Column(String)
    status = Column(String, nullable=False, default="active")
    purchase_date = Column(Date)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(DateTime(timezone=True))

    __table_args__ = (
        UniqueConstraint("user_id", "sku", name="uq_products_user_sku"),
        Index("idx_products_user_status", "user_id", "status"),
    )


__all__ = ["Product"]
