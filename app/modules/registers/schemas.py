"""
Pydantic schemas for register sessions and ledger entries.

Request bodies accept the legacy French field names (montant, motif) and
entry types (depot, retrait) next to the English ones.
"""

from pydantic import AliasChoices, BaseModel, Field, field_validator
from decimal import Decimal
from typing import Optional, List
from datetime import datetime

from app.common.validators import positive_money
from app.modules.registers.models import EntryType


LEGACY_ENTRY_TYPES = {
    "depot": EntryType.DEPOSIT.value,
    "dépôt": EntryType.DEPOSIT.value,
    "retrait": EntryType.WITHDRAWAL.value,
}


# ===== LEDGER ENTRY SCHEMAS =====

class LedgerEntryCreate(BaseModel):
    type: EntryType = Field(..., description="deposit or withdrawal")
    amount: Decimal = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("amount", "montant"),
        description="Always positive; the type gives the sign"
    )
    reason: Optional[str] = Field(
        None,
        max_length=255,
        validation_alias=AliasChoices("reason", "motif")
    )

    @field_validator('type', mode='before')
    @classmethod
    def map_legacy_type(cls, v):
        if isinstance(v, str):
            return LEGACY_ENTRY_TYPES.get(v.strip().lower(), v.strip().lower())
        return v

    @field_validator('amount')
    @classmethod
    def validate_decimals(cls, v):
        return positive_money(v)


class LedgerEntryOut(BaseModel):
    id: int
    type: EntryType
    amount: Decimal
    signed_amount: Decimal
    reason: Optional[str] = None
    occurred_at: datetime
    session_id: int

    model_config = {"from_attributes": True}


class LedgerSummary(BaseModel):
    total_deposits: Decimal
    total_withdrawals: Decimal
    net: Decimal
    count: int


# ===== REGISTER SESSION SCHEMAS =====

class RegisterSessionOut(BaseModel):
    id: int
    opening_balance: Decimal
    closing_balance: Decimal
    net_change: Decimal
    opened_at: datetime
    closed_at: Optional[datetime] = None
    is_open: bool

    model_config = {"from_attributes": True}


class RegisterSessionDetail(RegisterSessionOut):
    entries: List[LedgerEntryOut] = Field(default=[])
    summary: LedgerSummary


class RegisterSessionList(BaseModel):
    sessions: List[RegisterSessionOut]
    total: int
    limit: int
    offset: int
