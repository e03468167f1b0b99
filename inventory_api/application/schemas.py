from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Generic, List, Optional, TypeVar
from datetime import datetime
from inventory_api.domain.models import DEFAULT_LOW_STOCK_THRESHOLD, MAX_STOCK_QUANTITY

T = TypeVar("T")

class ProductCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=3, max_length=20)
    description: str = Field(..., min_length=1, max_length=50)
    stock_quantity: int = Field(0, ge=0, le=MAX_STOCK_QUANTITY)
    low_stock_threshold: int = Field(DEFAULT_LOW_STOCK_THRESHOLD, ge=0, le=MAX_STOCK_QUANTITY)

class ProductUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=3, max_length=20)
    description: Optional[str] = Field(None, min_length=1, max_length=50)
    stock_quantity: Optional[int] = Field(None, ge=0, le=MAX_STOCK_QUANTITY)
    low_stock_threshold: Optional[int] = Field(None, ge=0, le=MAX_STOCK_QUANTITY)

class ProductRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    stock_quantity: int
    low_stock_threshold: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class StockChange(BaseModel):
    # Validated by StockAdjuster
    quantity: Any = None

class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    count: Optional[int] = None
    data: Optional[T] = None

class ProductEnvelope(Envelope[ProductRead]):
    pass

class ProductListEnvelope(Envelope[List[ProductRead]]):
    pass
