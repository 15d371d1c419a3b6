"""
Pydantic schemas for transactions.

The declared type only drives validation of the request. What
is stored is the set of references; the kind returned in
responses is inferred from them.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from family_ledger.models.enums import TransactionType, TransactionKind
from family_ledger.schemas.common import StoredAmount


class TransactionCreate(BaseModel):
    type: TransactionType
    amount: Decimal = Field(gt=0, decimal_places=4)
    date: dt.date
    description: str = Field(min_length=1, max_length=255)
    category_id: int | None = None
    source_account_id: int | None = None
    destination_account_id: int | None = None
    credit_card_id: int | None = None
    installment_months: int = Field(default=1, ge=1, le=120)

    @model_validator(mode="after")
    def references_match_type(self):
        if self.type == TransactionType.EXPENSE:
            if self.source_account_id is None and self.credit_card_id is None:
                raise ValueError("expense requires a source account or a credit card")
        elif self.type == TransactionType.INCOME:
            if self.destination_account_id is None:
                raise ValueError("income requires a destination account")
        elif self.type == TransactionType.TRANSFER:
            if self.source_account_id is None or self.destination_account_id is None:
                raise ValueError("transfer requires source and destination accounts")
        return self


class TransactionUpdate(BaseModel):
    """
    Partial edit. Fields left out keep their stored value;
    references sent as null are cleared.
    """
    type: TransactionType | None = None
    amount: Decimal | None = Field(default=None, gt=0, decimal_places=4)
    date: dt.date | None = None
    description: str | None = Field(default=None, min_length=1, max_length=255)
    category_id: int | None = None
    source_account_id: int | None = None
    destination_account_id: int | None = None
    credit_card_id: int | None = None
    installment_months: int | None = Field(default=None, ge=1, le=120)


class TransactionResponse(BaseModel):
    id: int
    ledger_id: int
    created_by: int
    kind: TransactionKind
    date: dt.date
    amount: StoredAmount
    description: str
    category_id: int | None
    source_account_id: int | None
    destination_account_id: int | None
    credit_card_id: int | None
    installment_id: int | None
    created_at: dt.datetime

    model_config = {"from_attributes": True}
