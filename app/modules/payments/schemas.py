from pydantic import AliasChoices, BaseModel, Field, field_validator
from decimal import Decimal
from typing import Optional
from datetime import datetime

from app.common.validators import positive_money
from app.modules.payments.models import PaymentMethod


# Labels sent by the legacy front-end
LEGACY_METHODS = {
    "espèces": PaymentMethod.CASH.value,
    "especes": PaymentMethod.CASH.value,
    "carte": PaymentMethod.CARD.value,
    "chèque": PaymentMethod.CHECK.value,
    "cheque": PaymentMethod.CHECK.value,
    "virement": PaymentMethod.TRANSFER.value,
}


def _normalize_method(v):
    if isinstance(v, str):
        key = v.strip().lower()
        return LEGACY_METHODS.get(key, key)
    return v


class PaymentCreate(BaseModel):
    order_id: int = Field(..., validation_alias=AliasChoices("order_id", "commande", "commandeId"))
    amount: Decimal = Field(..., gt=0, validation_alias=AliasChoices("amount", "montant"))
    method: PaymentMethod = Field(..., validation_alias=AliasChoices("method", "methode", "typePaiement"))

    @field_validator('method', mode='before')
    @classmethod
    def map_legacy_method(cls, v):
        return _normalize_method(v)

    @field_validator('amount')
    @classmethod
    def validate_decimals(cls, v):
        return positive_money(v)


class PaymentUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, gt=0, validation_alias=AliasChoices("amount", "montant"))
    method: Optional[PaymentMethod] = Field(None, validation_alias=AliasChoices("method", "methode"))

    @field_validator('method', mode='before')
    @classmethod
    def map_legacy_method(cls, v):
        return _normalize_method(v)

    @field_validator('amount')
    @classmethod
    def validate_decimals(cls, v):
        return positive_money(v)


class PaymentOut(BaseModel):
    id: int
    order_id: int
    amount: Decimal
    method: PaymentMethod
    session_id: Optional[int] = None
    created_at: datetime

    model_config = {"from_attributes": True}
