"""
Comprehensive tests for the TransactionService.

Balance properties checked here:
- create then delete restores every touched balance
- an edit equals revert(old) followed by apply(new)
- a failed balance update leaves no transaction behind
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select, func

from family_ledger.errors import Conflict, NotFound, ValidationError
from family_ledger.models import Installment, Transaction, classify
from family_ledger.models.enums import (
    AccountKind,
    CategoryType,
    TransactionKind,
    TransactionType,
)
from family_ledger.schemas.account import AccountCreate
from family_ledger.schemas.card import CardCreate, CardPayment
from family_ledger.schemas.category import CategoryCreate
from family_ledger.schemas.ledger import LedgerCreate
from family_ledger.schemas.transaction import TransactionCreate, TransactionUpdate
from family_ledger.services.access_service import AccessGate
from family_ledger.services.account_service import AccountService
from family_ledger.services.card_service import CardService
from family_ledger.services.category_service import CategoryService
from family_ledger.services.ledger_service import LedgerService
from family_ledger.services.transaction_service import (
    TransactionService,
    balance_effects,
    effects_of,
)


def open_account(db_session, ledger_id, name, balance="0"):
    account = AccountService(db_session).create_account(ledger_id, AccountCreate(
        name=name, kind=AccountKind.BANK, balance=Decimal(balance),
    ))
    db_session.commit()
    return account


def balance_of(db_session, account):
    db_session.refresh(account)
    return account.balance


def count_transactions(db_session):
    return db_session.execute(select(func.count(Transaction.id))).scalar_one()


@pytest.fixture
def bank(db_session, scope):
    return open_account(db_session, scope.ledger_id, "Bank", "500.00")


@pytest.fixture
def wallet(db_session, scope):
    return open_account(db_session, scope.ledger_id, "Wallet", "100.00")


@pytest.fixture
def card(db_session, scope):
    card = CardService(db_session).create_card(scope.ledger_id, CardCreate(
        name="Visa", billing_day=5, payment_day=25,
    ))
    db_session.commit()
    return card


def expense(account, amount="200.00", **extra):
    return TransactionCreate(
        type=TransactionType.EXPENSE,
        amount=Decimal(amount),
        date=date(2024, 3, 1),
        description="Groceries",
        source_account_id=account.id,
        **extra,
    )


# --- Classification ---

class TestClassify:

    @pytest.mark.parametrize("refs,kind", [
        ((1, None, None), TransactionKind.EXPENSE),
        ((None, 1, None), TransactionKind.INCOME),
        ((1, 2, None), TransactionKind.TRANSFER),
        ((None, None, 1), TransactionKind.CARD_EXPENSE),
        ((1, None, 1), TransactionKind.CARD_PAYMENT),
    ])
    def test_valid_shapes(self, refs, kind):
        assert classify(*refs) == kind

    @pytest.mark.parametrize("refs", [
        (None, None, None),
        (None, 1, 1),
        (1, 2, 1),
    ])
    def test_invalid_shapes(self, refs):
        with pytest.raises(ValidationError):
            classify(*refs)

    def test_effects_table(self):
        assert balance_effects(TransactionKind.EXPENSE, 5, 1, None) == [(1, -5)]
        assert balance_effects(TransactionKind.INCOME, 5, None, 2) == [(2, 5)]
        assert balance_effects(TransactionKind.TRANSFER, 5, 1, 2) == [(1, -5), (2, 5)]
        assert balance_effects(TransactionKind.CARD_EXPENSE, 5, None, None) == []
        assert balance_effects(TransactionKind.CARD_PAYMENT, 5, 1, None) == [(1, -5)]


# --- Create ---

class TestCreateTransaction:

    def test_expense_debits_source(self, db_session, scope, bank):
        """500.00 less a 200.00 expense leaves 300.00."""
        txn = TransactionService(db_session).create_transaction(scope, expense(bank))
        db_session.commit()

        assert txn.kind == TransactionKind.EXPENSE
        assert txn.amount == 2_000_000
        assert txn.created_by == scope.user_id
        assert balance_of(db_session, bank) == 3_000_000

    def test_income_credits_destination(self, db_session, scope, bank):
        TransactionService(db_session).create_transaction(scope, TransactionCreate(
            type=TransactionType.INCOME,
            amount=Decimal("1000"),
            date=date(2024, 3, 1),
            description="Salary",
            destination_account_id=bank.id,
        ))
        db_session.commit()

        assert balance_of(db_session, bank) == 15_000_000

    def test_transfer_moves_money(self, db_session, scope, bank, wallet):
        txn = TransactionService(db_session).create_transaction(scope, TransactionCreate(
            type=TransactionType.TRANSFER,
            amount=Decimal("50"),
            date=date(2024, 3, 1),
            description="Top up",
            source_account_id=bank.id,
            destination_account_id=wallet.id,
        ))
        db_session.commit()

        assert txn.kind == TransactionKind.TRANSFER
        assert balance_of(db_session, bank) == 4_500_000
        assert balance_of(db_session, wallet) == 1_500_000

    def test_card_expense_touches_no_account(self, db_session, scope, bank, card):
        # A source sent alongside a card is dropped
        txn = TransactionService(db_session).create_transaction(
            scope, expense(bank, credit_card_id=card.id),
        )
        db_session.commit()

        assert txn.kind == TransactionKind.CARD_EXPENSE
        assert txn.source_account_id is None
        assert balance_of(db_session, bank) == 5_000_000
        assert CardService(db_session).compute_liability(card.id) == 2_000_000

    def test_expense_may_overdraw(self, db_session, scope, bank):
        TransactionService(db_session).create_transaction(scope, expense(bank, "600.00"))
        db_session.commit()

        assert balance_of(db_session, bank) == -1_000_000

    def test_transfer_to_same_account_rejected(self, db_session, scope, bank):
        with pytest.raises(ValidationError):
            TransactionService(db_session).create_transaction(scope, TransactionCreate(
                type=TransactionType.TRANSFER,
                amount=Decimal("1"),
                date=date(2024, 3, 1),
                description="Loop",
                source_account_id=bank.id,
                destination_account_id=bank.id,
            ))

    def test_foreign_account_not_found(self, db_session, owner, scope):
        other = LedgerService(db_session).create_ledger(owner, LedgerCreate(name="Other"))
        foreign = open_account(db_session, other.id, "Foreign", "100")

        with pytest.raises(NotFound):
            TransactionService(db_session).create_transaction(scope, expense(foreign, "1"))
        assert count_transactions(db_session) == 0

    def test_foreign_category_not_found(self, db_session, owner, scope, bank):
        other = LedgerService(db_session).create_ledger(owner, LedgerCreate(name="Other"))
        category = CategoryService(db_session).create_category(other.id, CategoryCreate(
            name="Food", type=CategoryType.EXPENSE,
        ))
        db_session.commit()

        with pytest.raises(NotFound):
            TransactionService(db_session).create_transaction(
                scope, expense(bank, category_id=category.id),
            )

    def test_deleted_card_not_found(self, db_session, scope, bank, card):
        CardService(db_session).delete_card(scope.ledger_id, card.id)
        db_session.commit()

        with pytest.raises(NotFound):
            TransactionService(db_session).create_transaction(
                scope, expense(bank, credit_card_id=card.id),
            )

    def test_installment_ignored_without_card(self, db_session, scope, bank):
        txn = TransactionService(db_session).create_transaction(
            scope, expense(bank, installment_months=6),
        )
        db_session.commit()

        assert txn.installment_id is None

    def test_failed_balance_update_leaves_no_row(
        self, db_session, scope, bank, monkeypatch
    ):
        def broken_adjust(*args, **kwargs):
            raise RuntimeError("database went away")

        monkeypatch.setattr(AccountService, "adjust_balance", broken_adjust)

        with pytest.raises(RuntimeError):
            TransactionService(db_session).create_transaction(scope, expense(bank))

        assert count_transactions(db_session) == 0
        assert balance_of(db_session, bank) == 5_000_000


class TestListTransactions:

    def test_newest_first_with_paging(self, db_session, scope, bank):
        service = TransactionService(db_session)
        for day in (1, 3, 2):
            service.create_transaction(scope, TransactionCreate(
                type=TransactionType.EXPENSE,
                amount=Decimal("1"),
                date=date(2024, 3, day),
                description=f"Day {day}",
                source_account_id=bank.id,
            ))
        db_session.commit()

        page = service.list_transactions(scope)
        assert [t.date.day for t in page] == [3, 2, 1]

        page = service.list_transactions(scope, limit=1, offset=1)
        assert [t.description for t in page] == ["Day 2"]

    def test_other_ledgers_hidden(self, db_session, owner, scope, bank):
        other = LedgerService(db_session).create_ledger(owner, LedgerCreate(name="Other"))
        db_session.commit()
        other_scope = AccessGate(db_session).scope(owner, other.id)
        txn = TransactionService(db_session).create_transaction(scope, expense(bank))
        db_session.commit()

        service = TransactionService(db_session)
        assert service.list_transactions(other_scope) == []
        with pytest.raises(NotFound):
            service.get_transaction(other_scope, txn.id)


# --- Delete ---

class TestDeleteTransaction:

    def test_create_then_delete_restores_balances(self, db_session, scope, bank, wallet):
        service = TransactionService(db_session)
        txn = service.create_transaction(scope, TransactionCreate(
            type=TransactionType.TRANSFER,
            amount=Decimal("123.4567"),
            date=date(2024, 3, 1),
            description="Move",
            source_account_id=bank.id,
            destination_account_id=wallet.id,
        ))
        db_session.commit()

        service.delete_transaction(scope, txn.id)
        db_session.commit()

        assert balance_of(db_session, bank) == 5_000_000
        assert balance_of(db_session, wallet) == 1_000_000
        assert count_transactions(db_session) == 0

    def test_delete_removes_installment(self, db_session, scope, bank, card):
        service = TransactionService(db_session)
        txn = service.create_transaction(
            scope, expense(bank, credit_card_id=card.id, installment_months=3),
        )
        db_session.commit()

        service.delete_transaction(scope, txn.id)
        db_session.commit()

        remaining = db_session.execute(select(func.count(Installment.id))).scalar_one()
        assert remaining == 0
        assert CardService(db_session).compute_liability(card.id) == 0

    def test_delete_after_account_removed(self, db_session, scope, bank):
        service = TransactionService(db_session)
        txn = service.create_transaction(scope, expense(bank))
        db_session.commit()
        AccountService(db_session).delete_account(scope.ledger_id, bank.id)
        db_session.commit()

        service.delete_transaction(scope, txn.id)
        db_session.commit()
        assert count_transactions(db_session) == 0

    def test_missing_transaction(self, db_session, scope):
        with pytest.raises(NotFound):
            TransactionService(db_session).delete_transaction(scope, 9999)


# --- Edit ---

class TestEditTransaction:

    def test_amount_change_is_revert_then_apply(self, db_session, scope, bank):
        service = TransactionService(db_session)
        txn = service.create_transaction(scope, expense(bank, "200.00"))
        db_session.commit()

        service.edit_transaction(scope, txn.id, TransactionUpdate(amount=Decimal("50.00")))
        db_session.commit()

        assert balance_of(db_session, bank) == 4_500_000

    def test_move_expense_to_other_account(self, db_session, scope, bank, wallet):
        service = TransactionService(db_session)
        txn = service.create_transaction(scope, expense(bank, "20.00"))
        db_session.commit()

        service.edit_transaction(scope, txn.id, TransactionUpdate(source_account_id=wallet.id))
        db_session.commit()

        assert balance_of(db_session, bank) == 5_000_000
        assert balance_of(db_session, wallet) == 800_000

    def test_expense_to_income(self, db_session, scope, bank):
        service = TransactionService(db_session)
        txn = service.create_transaction(scope, expense(bank, "100.00"))
        db_session.commit()

        edited = service.edit_transaction(scope, txn.id, TransactionUpdate(
            type=TransactionType.INCOME,
            source_account_id=None,
            destination_account_id=bank.id,
        ))
        db_session.commit()

        assert edited.kind == TransactionKind.INCOME
        assert balance_of(db_session, bank) == 6_000_000

    def test_edit_to_invalid_shape_rejected(self, db_session, scope, bank):
        service = TransactionService(db_session)
        txn = service.create_transaction(scope, expense(bank))
        db_session.commit()

        with pytest.raises(ValidationError):
            service.edit_transaction(
                scope, txn.id, TransactionUpdate(source_account_id=None),
            )
        db_session.rollback()
        assert balance_of(db_session, bank) == 3_000_000

    def test_cash_expense_becomes_card_expense(self, db_session, scope, bank, card):
        service = TransactionService(db_session)
        txn = service.create_transaction(scope, expense(bank, "300.00"))
        db_session.commit()

        edited = service.edit_transaction(scope, txn.id, TransactionUpdate(
            type=TransactionType.EXPENSE,
            credit_card_id=card.id,
            installment_months=3,
        ))
        db_session.commit()

        assert edited.kind == TransactionKind.CARD_EXPENSE
        assert edited.installment.total_months == 3
        assert balance_of(db_session, bank) == 5_000_000
        assert CardService(db_session).compute_liability(card.id) == 3_000_000

    def test_installment_resized_then_dropped(self, db_session, scope, card):
        service = TransactionService(db_session)
        txn = service.create_transaction(scope, TransactionCreate(
            type=TransactionType.EXPENSE,
            amount=Decimal("1200"),
            date=date.today(),
            description="Phone",
            credit_card_id=card.id,
            installment_months=12,
        ))
        db_session.commit()

        edited = service.edit_transaction(
            scope, txn.id, TransactionUpdate(installment_months=6),
        )
        db_session.commit()
        assert edited.installment.total_months == 6
        assert edited.installment.remaining_months == 6

        edited = service.edit_transaction(
            scope, txn.id, TransactionUpdate(installment_months=1),
        )
        db_session.commit()
        assert edited.installment_id is None
        remaining = db_session.execute(select(func.count(Installment.id))).scalar_one()
        assert remaining == 0

    def test_unchanged_reference_to_deleted_account(self, db_session, scope, bank):
        service = TransactionService(db_session)
        txn = service.create_transaction(scope, expense(bank))
        db_session.commit()
        AccountService(db_session).delete_account(scope.ledger_id, bank.id)
        db_session.commit()

        edited = service.edit_transaction(
            scope, txn.id, TransactionUpdate(description="Renamed"),
        )
        db_session.commit()

        assert edited.description == "Renamed"
        assert edited.kind == TransactionKind.EXPENSE

    def test_failed_apply_keeps_old_state(self, db_session, scope, bank, monkeypatch):
        service = TransactionService(db_session)
        txn = service.create_transaction(scope, expense(bank, "200.00"))
        db_session.commit()

        def broken_adjust(*args, **kwargs):
            raise RuntimeError("database went away")

        monkeypatch.setattr(AccountService, "adjust_balance", broken_adjust)

        with pytest.raises(RuntimeError):
            service.edit_transaction(scope, txn.id, TransactionUpdate(amount=Decimal("1")))

        db_session.refresh(txn)
        assert txn.amount == 2_000_000
        assert balance_of(db_session, bank) == 3_000_000


class TestBalanceMatchesHistory:

    def test_mixed_sequence(self, db_session, scope, bank, wallet):
        """After any mix of operations, balance = opening + sum of live effects."""
        service = TransactionService(db_session)

        def create(type_, amount, **refs):
            txn = service.create_transaction(scope, TransactionCreate(
                type=type_, amount=Decimal(amount), date=date(2024, 3, 1),
                description="Entry", **refs,
            ))
            db_session.commit()
            return txn

        a = create(TransactionType.EXPENSE, "10", source_account_id=bank.id)
        b = create(TransactionType.INCOME, "75.5", destination_account_id=bank.id)
        c = create(TransactionType.TRANSFER, "30",
                   source_account_id=bank.id, destination_account_id=wallet.id)
        create(TransactionType.EXPENSE, "4.25", source_account_id=wallet.id)

        service.edit_transaction(scope, a.id, TransactionUpdate(amount=Decimal("12")))
        service.edit_transaction(scope, c.id, TransactionUpdate(
            source_account_id=wallet.id, destination_account_id=bank.id,
        ))
        service.delete_transaction(scope, b.id)
        db_session.commit()

        expected = {bank.id: 5_000_000, wallet.id: 1_000_000}
        for txn in service.list_transactions(scope, limit=100):
            for account_id, delta in effects_of(txn):
                expected[account_id] += delta

        assert balance_of(db_session, bank) == expected[bank.id]
        assert balance_of(db_session, wallet) == expected[wallet.id]


class TestSettledCardHistory:
    """Once a card is paid off and deleted its liability stays at zero."""

    def _settle_and_delete(self, db_session, scope, bank, card):
        service = TransactionService(db_session)
        purchase = service.create_transaction(
            scope, expense(bank, "100.00", credit_card_id=card.id),
        )
        db_session.commit()
        payment = CardService(db_session).pay_card(
            scope.ledger_id, card.id, scope.user, CardPayment(
                source_account_id=bank.id, amount=Decimal("100.00"), date=date(2024, 3, 5),
            ),
        )
        CardService(db_session).delete_card(scope.ledger_id, card.id)
        db_session.commit()
        return purchase, payment

    def test_payment_cannot_be_deleted(self, db_session, scope, bank, card):
        _, payment = self._settle_and_delete(db_session, scope, bank, card)

        with pytest.raises(Conflict):
            TransactionService(db_session).delete_transaction(scope, payment.id)
        assert CardService(db_session).compute_liability(card.id) == 0
        assert balance_of(db_session, bank) == 4_000_000

    def test_charge_amount_cannot_change(self, db_session, scope, bank, card):
        purchase, _ = self._settle_and_delete(db_session, scope, bank, card)

        with pytest.raises(Conflict):
            TransactionService(db_session).edit_transaction(
                scope, purchase.id, TransactionUpdate(amount=Decimal("150.00")),
            )
        assert CardService(db_session).compute_liability(card.id) == 0

    def test_description_still_editable(self, db_session, scope, bank, card):
        purchase, _ = self._settle_and_delete(db_session, scope, bank, card)

        edited = TransactionService(db_session).edit_transaction(
            scope, purchase.id, TransactionUpdate(description="Concert tickets"),
        )
        db_session.commit()

        assert edited.description == "Concert tickets"
        assert CardService(db_session).compute_liability(card.id) == 0
