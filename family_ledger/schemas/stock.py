"""
Pydantic schemas for stock trades and holdings.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from family_ledger.schemas.common import StoredAmount


class _StockTrade(BaseModel):
    ticker: str = Field(min_length=1, max_length=20)
    shares: Decimal = Field(gt=0, decimal_places=4)
    price: Decimal = Field(gt=0, decimal_places=4)
    date: dt.date
    description: str | None = Field(default=None, max_length=255)
    owner_label: str = Field(default="Self", min_length=1, max_length=50)

    @field_validator("ticker")
    @classmethod
    def upper_ticker(cls, v: str) -> str:
        return v.strip().upper()


class StockBuy(_StockTrade):
    source_account_id: int


class StockSell(_StockTrade):
    destination_account_id: int


class StockHoldingResponse(BaseModel):
    id: int
    ledger_id: int
    ticker: str
    owner_label: str
    shares: StoredAmount
    avg_cost: StoredAmount

    model_config = {"from_attributes": True}


class TradeResponse(BaseModel):
    success: bool = True
    message: str
    transaction_id: int
    amount: StoredAmount
    realized_pnl: StoredAmount | None = None
