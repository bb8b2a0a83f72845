from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime


class ClientCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    address: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=50)

    @field_validator('name', 'address', 'phone')
    @classmethod
    def strip_required(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError('Field cannot be blank')
        return cleaned


class ClientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, min_length=1, max_length=50)


class ClientOut(BaseModel):
    id: int
    name: str
    address: str
    phone: str
    created_at: datetime

    class Config:
        from_attributes = True


class ClientList(BaseModel):
    clients: list[ClientOut]
    total: int
    limit: int
    offset: int
