"""
Pydantic schemas for orders.

Request bodies also accept the field names of the legacy front-end
(clientId, produits, produit, prix, quantite, remise, remiseGlobale).
"""

from pydantic import AliasChoices, BaseModel, Field, field_validator
from decimal import Decimal
from typing import Optional, List
from datetime import datetime

from app.common.validators import round_money


# ===== ITEM SCHEMAS =====

class OrderLineItemCreate(BaseModel):
    product_id: int = Field(..., validation_alias=AliasChoices("product_id", "produit"))
    quantity: int = Field(..., gt=0, validation_alias=AliasChoices("quantity", "quantite"))
    unit_price: Optional[Decimal] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("unit_price", "prix"),
        description="Defaults to the product's catalogue price"
    )
    discount: Decimal = Field(
        Decimal("0"),
        ge=0,
        validation_alias=AliasChoices("discount", "remise"),
        description="Absolute amount taken once off the line"
    )

    @field_validator('unit_price', 'discount')
    @classmethod
    def validate_decimals(cls, v):
        return round_money(v)


class OrderServiceItemCreate(BaseModel):
    service_id: int = Field(..., validation_alias=AliasChoices("service_id", "service"))
    price: Optional[Decimal] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("price", "prix"),
        description="Defaults to the service's catalogue price"
    )
    discount: Decimal = Field(Decimal("0"), ge=0, validation_alias=AliasChoices("discount", "remise"))

    @field_validator('price', 'discount')
    @classmethod
    def validate_decimals(cls, v):
        return round_money(v)


class OrderLineItemOut(BaseModel):
    id: int
    product_id: int
    unit_price: Decimal
    quantity: int
    discount: Decimal
    total: Decimal

    model_config = {"from_attributes": True}


class OrderServiceItemOut(BaseModel):
    id: int
    service_id: int
    price: Decimal
    discount: Decimal
    total: Decimal

    model_config = {"from_attributes": True}


# ===== ORDER SCHEMAS =====

class OrderCreate(BaseModel):
    client_id: int = Field(..., validation_alias=AliasChoices("client_id", "clientId", "client"))
    items: List[OrderLineItemCreate] = Field(
        default=[],
        validation_alias=AliasChoices("items", "produits")
    )
    services: List[OrderServiceItemCreate] = Field(default=[])
    global_discount: Decimal = Field(
        Decimal("0"),
        ge=0,
        validation_alias=AliasChoices("global_discount", "remiseGlobale"),
        description="Absolute amount taken once off the subtotal"
    )

    @field_validator('global_discount')
    @classmethod
    def validate_decimals(cls, v):
        return round_money(v)


class OrderUpdate(OrderCreate):
    """Full replacement of the order's client, items and global discount."""
    pass


class OrderOut(BaseModel):
    id: int
    client_id: int
    global_discount: Decimal
    is_paid: bool
    session_id: Optional[int] = None
    created_at: datetime
    items: List[OrderLineItemOut] = Field(default=[])
    services: List[OrderServiceItemOut] = Field(default=[])
    subtotal: Decimal
    total: Decimal

    model_config = {"from_attributes": True}


class OrderList(BaseModel):
    orders: List[OrderOut]
    total: int
    limit: int
    offset: int


class OrderSummary(BaseModel):
    order_id: int
    subtotal: Decimal
    global_discount: Decimal
    total: Decimal
    paid: Decimal
    remaining_due: Decimal
    is_paid: bool
    payment_count: int
