from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Index, Integer, String

from seller_ops.database.base import Base


class ProductBatch(Base):
    __tablename__ = "product_batches"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    user_id = Column(String, nullable=False)

    quantity_purchased = Column(Integer, nullable=False)
    quantity_available = Column(Integer, nullable=False)
    cost_per_item = Column(Float, nullable=False)
    purchase_date = Column(Date, nullable=False)
    batch_reference = Column(String)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("idx_batches_product_date", "product_id", "purchase_date"),
    )


__all__ = ["ProductBatch"]
