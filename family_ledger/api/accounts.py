"""
Account API endpoints.

Reads need any role in the selected ledger; writes need
owner or editor.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from family_ledger.api.deps import get_ledger_scope, http_error, require_editor
from family_ledger.errors import LedgerError
from family_ledger.models.base import get_db
from family_ledger.schemas.account import AccountCreate, AccountPatch, AccountResponse
from family_ledger.schemas.common import SuccessResponse
from family_ledger.services.access_service import LedgerScope
from family_ledger.services.account_service import AccountService

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.get("", response_model=list[AccountResponse])
def list_accounts(
    scope: LedgerScope = Depends(get_ledger_scope),
    db: Session = Depends(get_db),
):
    return AccountService(db).list_accounts(scope.ledger_id)


@router.post("", response_model=AccountResponse, status_code=201)
def create_account(
    request: AccountCreate,
    scope: LedgerScope = Depends(require_editor),
    db: Session = Depends(get_db),
):
    service = AccountService(db)
    try:
        account = service.create_account(scope.ledger_id, request)
        db.commit()
        return account
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: int,
    scope: LedgerScope = Depends(get_ledger_scope),
    db: Session = Depends(get_db),
):
    try:
        return AccountService(db).get_account(scope.ledger_id, account_id)
    except LedgerError as e:
        raise http_error(e)


@router.patch("/{account_id}", response_model=AccountResponse)
def patch_account(
    account_id: int,
    request: AccountPatch,
    scope: LedgerScope = Depends(require_editor),
    db: Session = Depends(get_db),
):
    service = AccountService(db)
    try:
        account = service.patch_account(scope.ledger_id, account_id, request)
        db.commit()
        return account
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.delete("/{account_id}", response_model=SuccessResponse)
def delete_account(
    account_id: int,
    scope: LedgerScope = Depends(require_editor),
    db: Session = Depends(get_db),
):
    """Delete an account. Unlike cards, a non-zero balance does not block this."""
    service = AccountService(db)
    try:
        service.delete_account(scope.ledger_id, account_id)
        db.commit()
        return SuccessResponse(deleted_id=account_id)
    except LedgerError as e:
        db.rollback()
        raise http_error(e)
