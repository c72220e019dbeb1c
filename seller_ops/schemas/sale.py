from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class SaleCreate(BaseModel):
    sku: str = Field(min_length=1)
    quantity_sold: int = Field(gt=0)
    sale_price: float = Field(ge=0)
    shipping_fee_per_unit: float = Field(default=0, ge=0)
    cost_per_unit: Optional[float] = Field(default=None, ge=0)
    additional_costs: float = Field(default=0, ge=0)
    order_number: Optional[str] = None
    product_name: Optional[str] = None
    sale_date: Optional[date] = None


class SaleRead(BaseModel):
    id: int
    product_id: Optional[int] = None
    sku: str
    product_name: Optional[str] = None
    order_number: Optional[str] = None
    quantity_sold: int
    sale_price: float
    shipping_fee_per_unit: float
    cost_per_unit: float
    additional_costs: float
    total_revenue: float
    platform_fee: float
    net_profit: float
    profit_margin: float
    roi: Optional[float] = None
    sale_date: date
    status: str

    model_config = ConfigDict(from_attributes=True)


class CancelSaleRequest(BaseModel):
    cancellation_type: Literal["before_shipping", "after_shipping"]
    refund_amount: Optional[float] = Field(default=None, ge=0)
    cancellation_date: Optional[date] = None
    notes: Optional[str] = None


class CanceledOrderRead(BaseModel):
    id: int
    sale_id: int
    cancellation_date: date
    cancellation_type: str
    refund_amount: float
    shipping_cost_loss: float
    product_cost_loss: float
    total_loss: float
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
