from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict


class ProductPerformance(BaseModel):
    sku: str
    name: Optional[str] = None
    quantity_sold: float = 0
    order_count: int = 0
    total_revenue: float = 0
    total_profit: float = 0
    last_sale_date: Optional[date] = None
    avg_quantity_per_order: float = 0
    avg_revenue: float = 0
    profit_margin: float = 0
    profit_margin_trend: Optional[float] = None
    quantity_trend: Optional[float] = None


class AIProductRequest(BaseModel):
    products: Optional[List[ProductPerformance]] = None
    time_range: Literal["week", "month", "quarter", "year"] = "month"


class RecommendationRead(BaseModel):
    id: int
    recommendation_type: str
    recommendation_text: str
    product_id: Optional[int] = None
    is_applied: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
