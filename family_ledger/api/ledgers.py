"""
Ledger API endpoints.

These routes address a ledger by path rather than by the
ledger header, so membership is resolved here directly. A
caller who is not a member gets 403 whether or not the
ledger exists.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from family_ledger.api.deps import get_current_user, http_error
from family_ledger.errors import LedgerError
from family_ledger.models.base import get_db
from family_ledger.models.user import User
from family_ledger.schemas.common import PasswordBody, SuccessResponse
from family_ledger.schemas.ledger import (
    LedgerCreate,
    LedgerResponse,
    LedgerSummary,
    MemberAdd,
    MemberResponse,
    MemberRoleUpdate,
    VerifyResponse,
)
from family_ledger.services.access_service import AccessGate
from family_ledger.services.ledger_service import LedgerService

router = APIRouter(prefix="/ledgers", tags=["Ledgers"])


@router.post("", response_model=LedgerResponse, status_code=201)
def create_ledger(
    request: LedgerCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a ledger; the caller becomes its owner."""
    service = LedgerService(db)
    try:
        ledger = service.create_ledger(user, request)
        db.commit()
        return ledger
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("", response_model=list[LedgerSummary])
def list_ledgers(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """The caller's ledgers, most recently used first."""
    return LedgerService(db).list_ledgers(user)


@router.post("/{ledger_id}/verify", response_model=VerifyResponse)
def verify_ledger(
    ledger_id: int,
    body: PasswordBody | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Check the entry password of a locked ledger."""
    try:
        AccessGate(db).scope(user, ledger_id)
        LedgerService(db).verify_entry(ledger_id, body.password if body else None)
        return VerifyResponse()
    except LedgerError as e:
        raise http_error(e)


@router.delete("/{ledger_id}", response_model=SuccessResponse)
def delete_ledger(
    ledger_id: int,
    body: PasswordBody | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete the ledger and everything in it. Owner only."""
    try:
        AccessGate(db).scope(user, ledger_id)
        LedgerService(db).delete_ledger(
            ledger_id, user, body.password if body else None
        )
        db.commit()
        return SuccessResponse(deleted_id=ledger_id)
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


# --- Members ---

@router.get("/{ledger_id}/members", response_model=list[MemberResponse])
def list_members(
    ledger_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        AccessGate(db).scope(user, ledger_id)
    except LedgerError as e:
        raise http_error(e)
    return LedgerService(db).list_members(ledger_id)


@router.post("/{ledger_id}/members", response_model=SuccessResponse, status_code=201)
def add_member(
    ledger_id: int,
    request: MemberAdd,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Invite an existing user by email. Owner only."""
    try:
        AccessGate(db).scope(user, ledger_id)
        LedgerService(db).add_member(ledger_id, user, request)
        db.commit()
        return SuccessResponse()
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.patch("/{ledger_id}/members/{user_id}", response_model=SuccessResponse)
def change_member_role(
    ledger_id: int,
    user_id: int,
    request: MemberRoleUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        AccessGate(db).scope(user, ledger_id)
        LedgerService(db).change_member_role(ledger_id, user, user_id, request.role)
        db.commit()
        return SuccessResponse()
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.delete("/{ledger_id}/members/{user_id}", response_model=SuccessResponse)
def remove_member(
    ledger_id: int,
    user_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        AccessGate(db).scope(user, ledger_id)
        LedgerService(db).remove_member(ledger_id, user, user_id)
        db.commit()
        return SuccessResponse(deleted_id=user_id)
    except LedgerError as e:
        db.rollback()
        raise http_error(e)
