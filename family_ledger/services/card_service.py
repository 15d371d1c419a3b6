"""
Card service: credit cards, payments and installment plans.

A card's liability is never stored. It is derived on every
read from the transactions tagged with the card:

    liability = sum(amount where no source account)   # charges
              - sum(amount where source account set)  # payments

so there is no counter to keep in step with the history.
"""

import datetime as dt
import logging

from sqlalchemy import select, func, case
from sqlalchemy.orm import Session

from family_ledger.errors import Conflict, NotFound
from family_ledger.models.base import utcnow
from family_ledger.models.credit_card import CreditCard, Installment
from family_ledger.models.transaction import Transaction
from family_ledger.models.user import User
from family_ledger.money import to_fixed
from family_ledger.schemas.card import CardCreate, CardPayment
from family_ledger.services.account_service import AccountService

logger = logging.getLogger(__name__)


class CardService:

    def __init__(self, db: Session):
        self.db = db
        self.account_service = AccountService(db)

    def create_card(self, ledger_id: int, request: CardCreate) -> CreditCard:
        card = CreditCard(
            ledger_id=ledger_id,
            name=request.name.strip(),
            billing_day=request.billing_day,
            payment_day=request.payment_day,
            credit_limit=to_fixed(request.credit_limit),
        )
        self.db.add(card)
        self.db.flush()
        return card

    def update_card(
        self, ledger_id: int, card_id: int, request: CardCreate
    ) -> CreditCard:
        card = self.get_card(ledger_id, card_id)
        card.name = request.name.strip()
        card.billing_day = request.billing_day
        card.payment_day = request.payment_day
        card.credit_limit = to_fixed(request.credit_limit)
        self.db.flush()
        return card

    def get_card(
        self, ledger_id: int, card_id: int, include_deleted: bool = True
    ) -> CreditCard:
        """
        Get a card in the ledger.

        Soft-deleted cards stay readable by id unless
        include_deleted is False.
        """
        card = self.db.get(CreditCard, card_id)
        if not card or card.ledger_id != ledger_id:
            raise NotFound(f"Card {card_id} not found")
        if card.is_deleted and not include_deleted:
            raise NotFound(f"Card {card_id} not found")
        return card

    def list_cards(self, ledger_id: int) -> list[CreditCard]:
        """Active (not soft-deleted) cards in the ledger."""
        cards = self.db.execute(
            select(CreditCard)
            .where(
                CreditCard.ledger_id == ledger_id,
                CreditCard.deleted_at.is_(None),
            )
            .order_by(CreditCard.id)
        ).scalars().all()
        return list(cards)

    def compute_liability(self, card_id: int) -> int:
        """Outstanding balance on the card, fixed point."""
        signed_amount = case(
            (Transaction.source_account_id.is_(None), Transaction.amount),
            else_=-Transaction.amount,
        )
        total = self.db.execute(
            select(func.coalesce(func.sum(signed_amount), 0)).where(
                Transaction.credit_card_id == card_id
            )
        ).scalar()
        return int(total)

    def pay_card(
        self, ledger_id: int, card_id: int, user: User, request: CardPayment
    ) -> Transaction:
        """
        Pay down a card from an account in the same ledger.

        Deducts the amount from the source account and records a
        transaction carrying both the account and the card, which
        compute_liability() reads as a payment.
        """
        card = self.get_card(ledger_id, card_id, include_deleted=False)
        self.account_service.get_account(ledger_id, request.source_account_id)
        amount = to_fixed(request.amount)

        # Raises Conflict when the account cannot cover the amount
        self.account_service.adjust_balance(
            ledger_id, request.source_account_id, -amount, require_funds=True
        )

        payment = Transaction(
            ledger_id=ledger_id,
            created_by=user.id,
            date=request.date,
            amount=amount,
            description=f"Payment for credit card {card.name}",
            source_account_id=request.source_account_id,
            credit_card_id=card.id,
        )
        self.db.add(payment)
        self.db.flush()
        logger.info(
            "Paid %s on card %s from account %s",
            amount, card.id, request.source_account_id,
        )
        return payment

    def delete_card(self, ledger_id: int, card_id: int) -> CreditCard:
        """Soft-delete a card that has nothing outstanding."""
        card = self.get_card(ledger_id, card_id, include_deleted=False)

        liability = self.compute_liability(card.id)
        if liability > 0:
            raise Conflict(
                "Card has an outstanding balance. Please pay it off first."
            )

        card.deleted_at = utcnow()
        self.db.flush()
        logger.info("Soft-deleted card %s in ledger %s", card.id, ledger_id)
        return card

    # --- Installments ---

    def list_installments(
        self, ledger_id: int, card_id: int, today: dt.date | None = None
    ) -> list[Installment]:
        """Installments on the card, with remaining months brought up to date."""
        card = self.get_card(ledger_id, card_id)
        installments = self.db.execute(
            select(Installment)
            .where(Installment.card_id == card.id)
            .order_by(Installment.start_date.desc(), Installment.id.desc())
        ).scalars().all()
        self.refresh_installments(installments, today)
        return list(installments)

    def refresh_installments(
        self, installments: list[Installment], today: dt.date | None = None
    ) -> None:
        today = today or dt.date.today()
        changed = False
        for installment in installments:
            remaining = installment.months_remaining_on(today)
            if remaining != installment.remaining_months:
                installment.remaining_months = remaining
                changed = True
        if changed:
            self.db.flush()
