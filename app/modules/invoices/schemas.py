from pydantic import AliasChoices, BaseModel, Field
from decimal import Decimal
from typing import List, Optional
from datetime import datetime


class InvoiceCreate(BaseModel):
    order_id: int = Field(..., validation_alias=AliasChoices("order_id", "commande", "commandeId"))


class InvoiceOut(BaseModel):
    id: int
    number: Optional[str] = None
    order_id: int
    subtotal: Decimal
    discount: Decimal
    total: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}


class InvoiceList(BaseModel):
    invoices: List[InvoiceOut]
    total: int
    limit: int
    offset: int
