from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from datetime import datetime

from app.common.validators import positive_money


class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., gt=0)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError('Invalid service name')
        return cleaned

    @field_validator('price')
    @classmethod
    def validate_decimals(cls, v):
        return positive_money(v)


# Updates replace both fields
ServiceUpdate = ServiceCreate


class ServiceOut(BaseModel):
    id: int
    name: str
    price: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}


class ServiceList(BaseModel):
    services: list[ServiceOut]
    total: int
    limit: int
    offset: int
