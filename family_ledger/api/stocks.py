"""
Stock portfolio API endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from family_ledger.api.deps import get_ledger_scope, http_error, require_editor
from family_ledger.errors import LedgerError
from family_ledger.models.base import get_db
from family_ledger.schemas.stock import (
    StockBuy,
    StockHoldingResponse,
    StockSell,
    TradeResponse,
)
from family_ledger.services.access_service import LedgerScope
from family_ledger.services.stock_service import StockService

router = APIRouter(prefix="/stocks", tags=["Stocks"])


@router.get("", response_model=list[StockHoldingResponse])
def list_holdings(
    scope: LedgerScope = Depends(get_ledger_scope),
    db: Session = Depends(get_db),
):
    return StockService(db).list_holdings(scope.ledger_id)


@router.post("/buy", response_model=TradeResponse, status_code=201)
def buy_stock(
    request: StockBuy,
    scope: LedgerScope = Depends(require_editor),
    db: Session = Depends(get_db),
):
    """Buy shares with cash from an account; 409 on insufficient funds."""
    service = StockService(db)
    try:
        txn = service.buy(scope, request)
        db.commit()
        return TradeResponse(
            message=f"Bought {request.ticker} for {request.owner_label}",
            transaction_id=txn.id,
            amount=txn.amount,
        )
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.post("/sell", response_model=TradeResponse, status_code=201)
def sell_stock(
    request: StockSell,
    scope: LedgerScope = Depends(require_editor),
    db: Session = Depends(get_db),
):
    """Sell shares into an account; 409 when the holding is too small."""
    service = StockService(db)
    try:
        txn, realized_pnl = service.sell(scope, request)
        db.commit()
        return TradeResponse(
            message=f"Sold {request.ticker} for {request.owner_label}",
            transaction_id=txn.id,
            amount=txn.amount,
            realized_pnl=realized_pnl,
        )
    except LedgerError as e:
        db.rollback()
        raise http_error(e)
