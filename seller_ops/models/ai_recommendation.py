from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text

from seller_ops.database.base import Base


class AIRecommendation(Base):
    __tablename__ = "ai_recommendations"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"))

    recommendation_type = Column(String, nullable=False)
    recommendation_text = Column(Text, nullable=False)
    is_applied = Column(Boolean, nullable=False, default=False)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_ai_recommendations_user_type", "user_id", "recommendation_type"),
    )


__all__ = ["AIRecommendation"]
