"""
Pydantic schemas for credit cards, payments and installments.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field

from family_ledger.schemas.common import StoredAmount


class CardCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    billing_day: int = Field(ge=1, le=31)
    payment_day: int = Field(ge=1, le=31)
    credit_limit: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=4)


class CardPayment(BaseModel):
    """Pay down a card from a cash-like account."""
    source_account_id: int
    amount: Decimal = Field(gt=0, decimal_places=4)
    date: dt.date


class CardResponse(BaseModel):
    id: int
    ledger_id: int
    name: str
    billing_day: int
    payment_day: int
    credit_limit: StoredAmount
    deleted_at: dt.datetime | None
    created_at: dt.datetime
    liability: StoredAmount

    model_config = {"from_attributes": True}


class InstallmentResponse(BaseModel):
    id: int
    card_id: int
    description: str
    total_amount: StoredAmount
    total_months: int
    remaining_months: int
    start_date: dt.date

    model_config = {"from_attributes": True}
