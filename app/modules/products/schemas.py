from pydantic import AliasChoices, BaseModel, Field, field_validator
from decimal import Decimal
from typing import Optional
from datetime import datetime

from app.common.validators import round_money


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200, description="Display name")
    price: Decimal = Field(..., ge=0, description="Unit price")
    stock: int = Field(0, description="Units on hand")

    @field_validator('price')
    @classmethod
    def validate_decimals(cls, v):
        return round_money(v)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    price: Optional[Decimal] = Field(None, ge=0)
    stock: Optional[int] = None

    @field_validator('price')
    @classmethod
    def validate_decimals(cls, v):
        return round_money(v)


class StockMove(BaseModel):
    """Quantity added to or removed from stock."""
    quantity: int = Field(..., gt=0, validation_alias=AliasChoices("quantity", "quantite"))


class ProductOut(BaseModel):
    id: int
    name: str
    price: Decimal
    stock: int
    is_out_of_stock: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ProductList(BaseModel):
    products: list[ProductOut]
    total: int
    limit: int
    offset: int
