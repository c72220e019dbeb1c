from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SettingsRead(BaseModel):
    shipping_base_cost: float
    label_cost: float
    cancellation_shipping_loss: float
    minimum_profit_margin: float
    auto_reorder_enabled: bool
    auto_price_adjustment_enabled: bool

    model_config = ConfigDict(from_attributes=True)


class SettingsUpdate(BaseModel):
    shipping_base_cost: Optional[float] = Field(default=None, ge=0)
    label_cost: Optional[float] = Field(default=None, ge=0)
    cancellation_shipping_loss: Optional[float] = Field(default=None, ge=0)
    minimum_profit_margin: Optional[float] = Field(default=None, ge=0, le=100)
    auto_reorder_enabled: Optional[bool] = None
    auto_price_adjustment_enabled: Optional[bool] = None
