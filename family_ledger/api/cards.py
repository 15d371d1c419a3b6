"""
Credit card API endpoints.

Liability is included in every card response. It is computed
from the card's transactions at read time.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from family_ledger.api.deps import get_ledger_scope, http_error, require_editor
from family_ledger.errors import LedgerError
from family_ledger.models.base import get_db
from family_ledger.models.credit_card import CreditCard
from family_ledger.schemas.card import (
    CardCreate,
    CardPayment,
    CardResponse,
    InstallmentResponse,
)
from family_ledger.schemas.common import SuccessResponse
from family_ledger.schemas.transaction import TransactionResponse
from family_ledger.services.access_service import LedgerScope
from family_ledger.services.card_service import CardService

router = APIRouter(prefix="/cards", tags=["Cards"])


def _card_response(service: CardService, card: CreditCard) -> CardResponse:
    return CardResponse(
        id=card.id,
        ledger_id=card.ledger_id,
        name=card.name,
        billing_day=card.billing_day,
        payment_day=card.payment_day,
        credit_limit=card.credit_limit,
        deleted_at=card.deleted_at,
        created_at=card.created_at,
        liability=service.compute_liability(card.id),
    )


@router.get("", response_model=list[CardResponse])
def list_cards(
    scope: LedgerScope = Depends(get_ledger_scope),
    db: Session = Depends(get_db),
):
    """Active cards with their current liability."""
    service = CardService(db)
    return [_card_response(service, card) for card in service.list_cards(scope.ledger_id)]


@router.post("", response_model=CardResponse, status_code=201)
def create_card(
    request: CardCreate,
    scope: LedgerScope = Depends(require_editor),
    db: Session = Depends(get_db),
):
    service = CardService(db)
    try:
        card = service.create_card(scope.ledger_id, request)
        db.commit()
        return _card_response(service, card)
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("/{card_id}", response_model=CardResponse)
def get_card(
    card_id: int,
    scope: LedgerScope = Depends(get_ledger_scope),
    db: Session = Depends(get_db),
):
    """A card by id, including soft-deleted ones."""
    service = CardService(db)
    try:
        return _card_response(service, service.get_card(scope.ledger_id, card_id))
    except LedgerError as e:
        raise http_error(e)


@router.put("/{card_id}", response_model=CardResponse)
def update_card(
    card_id: int,
    request: CardCreate,
    scope: LedgerScope = Depends(require_editor),
    db: Session = Depends(get_db),
):
    service = CardService(db)
    try:
        card = service.update_card(scope.ledger_id, card_id, request)
        db.commit()
        return _card_response(service, card)
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.delete("/{card_id}", response_model=SuccessResponse)
def delete_card(
    card_id: int,
    scope: LedgerScope = Depends(require_editor),
    db: Session = Depends(get_db),
):
    """Soft-delete a card. Rejected with 409 while it has a balance."""
    service = CardService(db)
    try:
        service.delete_card(scope.ledger_id, card_id)
        db.commit()
        return SuccessResponse(deleted_id=card_id)
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.post("/{card_id}/pay", response_model=TransactionResponse, status_code=201)
def pay_card(
    card_id: int,
    request: CardPayment,
    scope: LedgerScope = Depends(require_editor),
    db: Session = Depends(get_db),
):
    """Pay the card from an account; 409 if the account cannot cover it."""
    service = CardService(db)
    try:
        payment = service.pay_card(scope.ledger_id, card_id, scope.user, request)
        db.commit()
        return payment
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("/{card_id}/installments", response_model=list[InstallmentResponse])
def list_installments(
    card_id: int,
    scope: LedgerScope = Depends(get_ledger_scope),
    db: Session = Depends(get_db),
):
    service = CardService(db)
    try:
        installments = service.list_installments(scope.ledger_id, card_id)
        db.commit()
        return installments
    except LedgerError as e:
        db.rollback()
        raise http_error(e)
