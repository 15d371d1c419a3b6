"""Pydantic schemas for the ledger dashboard."""

from pydantic import BaseModel

from family_ledger.schemas.common import StoredAmount
from family_ledger.schemas.transaction import TransactionResponse


class DashboardResponse(BaseModel):
    total_assets: StoredAmount
    total_liabilities: StoredAmount
    net_worth: StoredAmount
    monthly_expenses: StoredAmount
    recent_transactions: list[TransactionResponse]
