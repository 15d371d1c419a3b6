"""
Pydantic schemas for accounts.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from family_ledger.models.enums import AccountKind
from family_ledger.schemas.common import StoredAmount


class AccountCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    kind: AccountKind
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    balance: Decimal = Field(default=Decimal("0"), decimal_places=4)
    is_visible: bool = True


class AccountPatch(BaseModel):
    """Partial update. A supplied balance overwrites the stored one."""
    name: str | None = Field(default=None, min_length=1, max_length=100)
    kind: AccountKind | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    balance: Decimal | None = Field(default=None, decimal_places=4)
    is_visible: bool | None = None


class AccountResponse(BaseModel):
    id: int
    ledger_id: int
    name: str
    kind: AccountKind
    currency: str
    balance: StoredAmount
    is_visible: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
