"""
Transaction service: the balance and liability engine.

Every operation works out the balance effect of a transaction
from its kind (see models.transaction.classify):

    expense        source      -= amount
    income         destination += amount
    transfer       source -= amount, destination += amount
    card_expense   nothing (the card's liability rises by derivation)
    card_payment   source      -= amount (liability falls by derivation)

Create applies the effect, delete reverts it, and edit reverts
the old effect before applying the new one. Editing fields in
place without the revert would double-count or drop money.

Balances move only through AccountService.adjust_balance(),
one atomic UPDATE per account. If any step fails the session
is rolled back before the error propagates, so a transaction
row never survives without its balance change.
"""

import datetime as dt
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from family_ledger.errors import Conflict, NotFound, ValidationError
from family_ledger.models.account import Account
from family_ledger.models.category import Category
from family_ledger.models.credit_card import Installment
from family_ledger.models.enums import TransactionKind, TransactionType
from family_ledger.models.transaction import Transaction, classify
from family_ledger.money import to_fixed
from family_ledger.schemas.transaction import TransactionCreate, TransactionUpdate
from family_ledger.services.access_service import LedgerScope
from family_ledger.services.account_service import AccountService
from family_ledger.services.card_service import CardService

logger = logging.getLogger(__name__)


def balance_effects(
    kind: TransactionKind,
    amount: int,
    source_account_id: int | None,
    destination_account_id: int | None,
) -> list[tuple[int, int]]:
    """(account_id, delta) pairs a transaction of this kind applies."""
    if kind in (TransactionKind.EXPENSE, TransactionKind.CARD_PAYMENT):
        return [(source_account_id, -amount)]
    if kind == TransactionKind.INCOME:
        return [(destination_account_id, amount)]
    if kind == TransactionKind.TRANSFER:
        return [
            (source_account_id, -amount),
            (destination_account_id, amount),
        ]
    return []


def effects_of(txn: Transaction) -> list[tuple[int, int]]:
    return balance_effects(
        txn.kind, txn.amount, txn.source_account_id, txn.destination_account_id
    )


def _check_declared_type(
    declared: TransactionType,
    source_account_id: int | None,
    destination_account_id: int | None,
    credit_card_id: int | None,
) -> tuple[int | None, int | None, int | None]:
    """
    Normalize references for the declared type.

    A card expense never debits an account, so a source account
    sent alongside a card is dropped.
    """
    if declared == TransactionType.EXPENSE:
        if credit_card_id is not None:
            return None, None, credit_card_id
        if source_account_id is None:
            raise ValidationError("expense requires a source account or a credit card")
        return source_account_id, None, None
    if declared == TransactionType.INCOME:
        if destination_account_id is None:
            raise ValidationError("income requires a destination account")
        return None, destination_account_id, None
    if source_account_id is None or destination_account_id is None:
        raise ValidationError("transfer requires source and destination accounts")
    return source_account_id, destination_account_id, None


class TransactionService:

    def __init__(self, db: Session):
        self.db = db
        self.account_service = AccountService(db)
        self.card_service = CardService(db)

    # --- Validation helpers ---

    def _validate_references(
        self,
        ledger_id: int,
        source_account_id: int | None = None,
        destination_account_id: int | None = None,
        credit_card_id: int | None = None,
        category_id: int | None = None,
    ) -> None:
        """Every reference must exist inside the caller's ledger."""
        if (
            source_account_id is not None
            and source_account_id == destination_account_id
        ):
            raise ValidationError("Cannot transfer to the same account")
        if source_account_id is not None:
            self.account_service.get_account(ledger_id, source_account_id)
        if destination_account_id is not None:
            self.account_service.get_account(ledger_id, destination_account_id)
        if credit_card_id is not None:
            self.card_service.get_card(ledger_id, credit_card_id, include_deleted=False)
        if category_id is not None:
            category = self.db.get(Category, category_id)
            if not category or category.ledger_id != ledger_id:
                raise NotFound(f"Category {category_id} not found")

    def _apply(self, ledger_id: int, effects: list[tuple[int, int]]) -> None:
        for account_id, delta in effects:
            self.account_service.adjust_balance(ledger_id, account_id, delta)

    def _revert(self, ledger_id: int, effects: list[tuple[int, int]]) -> None:
        for account_id, delta in effects:
            self.account_service.revert_balance(ledger_id, account_id, delta)

    def _live_effects(
        self, effects: list[tuple[int, int]]
    ) -> list[tuple[int, int]]:
        """Drop effects on accounts deleted since the row was recorded."""
        return [
            (account_id, delta)
            for account_id, delta in effects
            if self.db.get(Account, account_id) is not None
        ]

    def _check_card_open(self, ledger_id: int, card_id: int | None) -> None:
        """
        Refuse changes that would move a soft-deleted card's liability.

        A card is only deleted once settled, so its history is closed.
        """
        if card_id is None:
            return
        if self.card_service.get_card(ledger_id, card_id).is_deleted:
            raise Conflict(f"Card {card_id} is deleted; its transactions are closed")

    def _sync_installment(self, txn: Transaction, months: int) -> None:
        """Create, resize or drop the installment plan to match the row."""
        installment = txn.installment
        wants_plan = txn.credit_card_id is not None and months > 1

        if not wants_plan:
            if installment is not None:
                txn.installment = None
                self.db.flush()
                self.db.delete(installment)
            return

        if installment is None:
            installment = Installment(
                card_id=txn.credit_card_id,
                description=txn.description,
                total_amount=txn.amount,
                total_months=months,
                remaining_months=months,
                start_date=txn.date,
            )
            self.db.add(installment)
            self.db.flush()
            txn.installment = installment
            return

        installment.card_id = txn.credit_card_id
        installment.description = txn.description
        installment.total_amount = txn.amount
        installment.total_months = months
        installment.start_date = txn.date
        installment.remaining_months = installment.months_remaining_on(dt.date.today())

    # --- Operations ---

    def create_transaction(
        self, scope: LedgerScope, request: TransactionCreate
    ) -> Transaction:
        """
        Record a transaction and apply its balance effect.

        The row insert and the balance updates are one unit: on
        any failure the session is rolled back and nothing of
        this call stays visible.
        """
        ledger_id = scope.ledger_id
        source, destination, card = _check_declared_type(
            request.type,
            request.source_account_id,
            request.destination_account_id,
            request.credit_card_id,
        )
        self._validate_references(
            ledger_id, source, destination, card, request.category_id
        )
        kind = classify(source, destination, card)

        try:
            txn = Transaction(
                ledger_id=ledger_id,
                created_by=scope.user_id,
                date=request.date,
                amount=to_fixed(request.amount),
                description=request.description.strip(),
                category_id=request.category_id,
                source_account_id=source,
                destination_account_id=destination,
                credit_card_id=card,
            )
            self.db.add(txn)
            self.db.flush()

            self._sync_installment(txn, request.installment_months)
            self._apply(ledger_id, effects_of(txn))
            self.db.flush()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Created %s transaction %s of %s in ledger %s",
            kind.value, txn.id, txn.amount, ledger_id,
        )
        return txn

    def get_transaction(self, scope: LedgerScope, transaction_id: int) -> Transaction:
        txn = self.db.get(Transaction, transaction_id)
        if not txn or txn.ledger_id != scope.ledger_id:
            raise NotFound(f"Transaction {transaction_id} not found")
        return txn

    def list_transactions(
        self, scope: LedgerScope, limit: int = 20, offset: int = 0
    ) -> list[Transaction]:
        """Newest first by date, then by creation time."""
        txns = self.db.execute(
            select(Transaction)
            .where(Transaction.ledger_id == scope.ledger_id)
            .order_by(
                Transaction.date.desc(),
                Transaction.created_at.desc(),
                Transaction.id.desc(),
            )
            .limit(limit)
            .offset(offset)
        ).scalars().all()
        return list(txns)

    def edit_transaction(
        self, scope: LedgerScope, transaction_id: int, request: TransactionUpdate
    ) -> Transaction:
        """
        Change a transaction: revert the old effect, apply the new.

        Fields not sent keep their stored value. The result must
        still classify as a valid kind.
        """
        ledger_id = scope.ledger_id
        txn = self.get_transaction(scope, transaction_id)
        sent = request.model_fields_set

        source = request.source_account_id if "source_account_id" in sent else txn.source_account_id
        destination = (
            request.destination_account_id
            if "destination_account_id" in sent
            else txn.destination_account_id
        )
        card = request.credit_card_id if "credit_card_id" in sent else txn.credit_card_id
        category = request.category_id if "category_id" in sent else txn.category_id

        if request.type is not None:
            source, destination, card = _check_declared_type(
                request.type, source, destination, card
            )
        classify(source, destination, card)

        # Only references that change need re-checking; unchanged
        # ones may point at an account deleted since.
        self._validate_references(
            ledger_id,
            source if source != txn.source_account_id else None,
            destination if destination != txn.destination_account_id else None,
            card if card != txn.credit_card_id else None,
            category if category != txn.category_id else None,
        )
        if source is not None and source == destination:
            raise ValidationError("Cannot transfer to the same account")

        amount = to_fixed(request.amount) if request.amount is not None else txn.amount
        if (
            card != txn.credit_card_id
            or amount != txn.amount
            or (source is None) != (txn.source_account_id is None)
        ):
            self._check_card_open(ledger_id, txn.credit_card_id)

        if request.installment_months is not None:
            months = request.installment_months
        elif txn.installment is not None:
            months = txn.installment.total_months
        else:
            months = 1

        try:
            self._revert(ledger_id, effects_of(txn))

            txn.source_account_id = source
            txn.destination_account_id = destination
            txn.credit_card_id = card
            txn.category_id = category
            txn.amount = amount
            if request.date is not None:
                txn.date = request.date
            if request.description is not None:
                txn.description = request.description.strip()

            self._sync_installment(txn, months)
            self._apply(ledger_id, self._live_effects(effects_of(txn)))
            self.db.flush()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Edited transaction %s in ledger %s (now %s of %s)",
            txn.id, ledger_id, txn.kind.value, txn.amount,
        )
        return txn

    def delete_transaction(self, scope: LedgerScope, transaction_id: int) -> None:
        """Revert the transaction's effect and remove it."""
        ledger_id = scope.ledger_id
        txn = self.get_transaction(scope, transaction_id)
        self._check_card_open(ledger_id, txn.credit_card_id)

        try:
            self._revert(ledger_id, effects_of(txn))
            installment = txn.installment
            self.db.delete(txn)
            self.db.flush()
            if installment is not None:
                self.db.delete(installment)
                self.db.flush()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Deleted transaction %s in ledger %s", transaction_id, ledger_id)
