"""
Shared schema types.

Requests carry display-unit decimals; the database stores
fixed-point integers. StoredAmount converts on the way out.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, BeforeValidator

from family_ledger.money import from_fixed


def _from_stored(value):
    if isinstance(value, int) and not isinstance(value, bool):
        return from_fixed(value)
    return value


# A fixed-point integer read from the database, shown as a decimal
StoredAmount = Annotated[Decimal, BeforeValidator(_from_stored)]


class SuccessResponse(BaseModel):
    success: bool = True
    deleted_id: int | None = None


class PasswordBody(BaseModel):
    """Optional ledger password sent with verify/delete."""
    password: str | None = None
