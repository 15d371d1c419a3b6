"""
Stock service: holdings bought from and sold into ledger accounts.

A buy deducts its cost from a cash account (rejected when the
account cannot cover it) and is recorded as an expense
transaction. A sell credits an account and is recorded as an
income transaction. Holdings keep a weighted average cost;
selling never changes it.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from family_ledger.errors import Conflict
from family_ledger.models.stock import StockHolding
from family_ledger.models.transaction import Transaction
from family_ledger.money import to_fixed, from_fixed, scaled_product, scaled_quotient
from family_ledger.schemas.stock import StockBuy, StockSell
from family_ledger.services.access_service import LedgerScope
from family_ledger.services.account_service import AccountService

logger = logging.getLogger(__name__)


class StockService:

    def __init__(self, db: Session):
        self.db = db
        self.account_service = AccountService(db)

    def _get_holding(
        self, ledger_id: int, ticker: str, owner_label: str
    ) -> StockHolding | None:
        return self.db.execute(
            select(StockHolding).where(
                StockHolding.ledger_id == ledger_id,
                StockHolding.ticker == ticker,
                StockHolding.owner_label == owner_label,
            )
        ).scalar_one_or_none()

    def list_holdings(self, ledger_id: int) -> list[StockHolding]:
        holdings = self.db.execute(
            select(StockHolding)
            .where(StockHolding.ledger_id == ledger_id)
            .order_by(StockHolding.owner_label.desc(), StockHolding.id.desc())
        ).scalars().all()
        return list(holdings)

    def buy(self, scope: LedgerScope, request: StockBuy) -> Transaction:
        ledger_id = scope.ledger_id
        shares = to_fixed(request.shares)
        price = to_fixed(request.price)
        cost = scaled_product(shares, price)

        self.account_service.get_account(ledger_id, request.source_account_id)
        self.account_service.adjust_balance(
            ledger_id, request.source_account_id, -cost, require_funds=True
        )

        holding = self._get_holding(ledger_id, request.ticker, request.owner_label)
        if holding:
            total_value = scaled_product(holding.shares, holding.avg_cost) + cost
            holding.shares += shares
            holding.avg_cost = scaled_quotient(total_value, holding.shares)
        else:
            holding = StockHolding(
                ledger_id=ledger_id,
                ticker=request.ticker,
                owner_label=request.owner_label,
                shares=shares,
                avg_cost=price,
            )
            self.db.add(holding)

        txn = Transaction(
            ledger_id=ledger_id,
            created_by=scope.user_id,
            date=request.date,
            amount=cost,
            description=request.description or (
                f"Buy {request.ticker}: {request.shares} @ {request.price} "
                f"({request.owner_label})"
            ),
            source_account_id=request.source_account_id,
        )
        self.db.add(txn)
        self.db.flush()
        logger.info(
            "Bought %s %s for %s in ledger %s (cost %s)",
            request.shares, request.ticker, request.owner_label, ledger_id, cost,
        )
        return txn

    def sell(self, scope: LedgerScope, request: StockSell) -> tuple[Transaction, int]:
        """Sell shares; returns the income transaction and realized PnL."""
        ledger_id = scope.ledger_id
        shares = to_fixed(request.shares)
        price = to_fixed(request.price)
        revenue = scaled_product(shares, price)

        self.account_service.get_account(ledger_id, request.destination_account_id)
        holding = self._get_holding(ledger_id, request.ticker, request.owner_label)
        if not holding or holding.shares < shares:
            raise Conflict("Insufficient shares")

        cost_basis = scaled_product(shares, holding.avg_cost)
        realized_pnl = revenue - cost_basis

        self.account_service.adjust_balance(
            ledger_id, request.destination_account_id, revenue
        )

        holding.shares -= shares
        if holding.shares == 0:
            self.db.delete(holding)

        txn = Transaction(
            ledger_id=ledger_id,
            created_by=scope.user_id,
            date=request.date,
            amount=revenue,
            description=request.description or (
                f"Sell {request.ticker}: {request.shares} @ {request.price} "
                f"({request.owner_label}) (PnL: {from_fixed(realized_pnl)})"
            ),
            destination_account_id=request.destination_account_id,
        )
        self.db.add(txn)
        self.db.flush()
        logger.info(
            "Sold %s %s for %s in ledger %s (revenue %s, pnl %s)",
            request.shares, request.ticker, request.owner_label,
            ledger_id, revenue, realized_pnl,
        )
        return txn, realized_pnl
