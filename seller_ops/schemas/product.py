from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductBase(BaseModel):
    name: str
    supplier: Optional[str] = None
    source: Optional[str] = None
    image_url: Optional[str] = None
    product_link: Optional[str] = None
    remarks: Optional[str] = None


class ProductCreate(ProductBase):
    sku: str = Field(min_length=1)
    quantity: int = Field(default=0, ge=0)
    cost_per_item: float = Field(default=0, ge=0)
    purchase_date: Optional[date] = None
    batch_reference: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    supplier: Optional[str] = None
    source: Optional[str] = None
    image_url: Optional[str] = None
    product_link: Optional[str] = None
    remarks: Optional[str] = None
    status: Optional[str] = None


class ProductRead(ProductBase):
    id: int
    sku: str
    quantity: int
    total_purchased: int
    sales_qty: int
    cost_per_item: float
    stock_value: float
    status: str
    purchase_date: Optional[date] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BatchCreate(BaseModel):
    quantity: int = Field(gt=0)
    cost_per_item: float = Field(ge=0)
    purchase_date: Optional[date] = None
    batch_reference: Optional[str] = None


class BatchRead(BaseModel):
    id: int
    product_id: int
    quantity_purchased: int
    quantity_available: int
    cost_per_item: float
    purchase_date: date
    batch_reference: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
