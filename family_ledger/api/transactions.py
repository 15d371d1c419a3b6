"""
Transaction API endpoints.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from family_ledger.api.deps import get_ledger_scope, http_error, require_editor
from family_ledger.errors import LedgerError
from family_ledger.models.base import get_db
from family_ledger.schemas.common import SuccessResponse
from family_ledger.schemas.transaction import (
    TransactionCreate,
    TransactionResponse,
    TransactionUpdate,
)
from family_ledger.services.access_service import LedgerScope
from family_ledger.services.transaction_service import TransactionService

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.get("", response_model=list[TransactionResponse])
def list_transactions(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    scope: LedgerScope = Depends(get_ledger_scope),
    db: Session = Depends(get_db),
):
    return TransactionService(db).list_transactions(scope, limit=limit, offset=offset)


@router.post("", response_model=TransactionResponse, status_code=201)
def create_transaction(
    request: TransactionCreate,
    scope: LedgerScope = Depends(require_editor),
    db: Session = Depends(get_db),
):
    """Record a transaction and apply its balance effect."""
    service = TransactionService(db)
    try:
        txn = service.create_transaction(scope, request)
        db.commit()
        return txn
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: int,
    scope: LedgerScope = Depends(get_ledger_scope),
    db: Session = Depends(get_db),
):
    try:
        return TransactionService(db).get_transaction(scope, transaction_id)
    except LedgerError as e:
        raise http_error(e)


@router.patch("/{transaction_id}", response_model=TransactionResponse)
def edit_transaction(
    transaction_id: int,
    request: TransactionUpdate,
    scope: LedgerScope = Depends(require_editor),
    db: Session = Depends(get_db),
):
    """Edit a transaction, reverting its old effect before applying the new one."""
    service = TransactionService(db)
    try:
        txn = service.edit_transaction(scope, transaction_id, request)
        db.commit()
        return txn
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.delete("/{transaction_id}", response_model=SuccessResponse)
def delete_transaction(
    transaction_id: int,
    scope: LedgerScope = Depends(require_editor),
    db: Session = Depends(get_db),
):
    service = TransactionService(db)
    try:
        service.delete_transaction(scope, transaction_id)
        db.commit()
        return SuccessResponse(deleted_id=transaction_id)
    except LedgerError as e:
        db.rollback()
        raise http_error(e)
