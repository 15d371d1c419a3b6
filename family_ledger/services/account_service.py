"""
Account service: cash-like accounts and their stored balances.

adjust_balance() is the only way a balance changes outside a
direct create/patch. It issues a single
`UPDATE accounts SET balance = balance + :delta` statement, so
two requests touching the same account cannot lose each
other's update the way a read-modify-write in Python would.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from family_ledger.config import get_settings
from family_ledger.errors import Conflict, NotFound
from family_ledger.models.account import Account
from family_ledger.models.base import utcnow
from family_ledger.money import to_fixed
from family_ledger.schemas.account import AccountCreate, AccountPatch

logger = logging.getLogger(__name__)


class AccountService:

    def __init__(self, db: Session):
        self.db = db

    def create_account(self, ledger_id: int, request: AccountCreate) -> Account:
        account = Account(
            ledger_id=ledger_id,
            name=request.name.strip(),
            kind=request.kind,
            currency=(request.currency or get_settings().DEFAULT_CURRENCY).upper(),
            balance=to_fixed(request.balance),
            is_visible=request.is_visible,
        )
        self.db.add(account)
        self.db.flush()
        return account

    def list_accounts(self, ledger_id: int) -> list[Account]:
        accounts = self.db.execute(
            select(Account)
            .where(Account.ledger_id == ledger_id)
            .order_by(Account.id)
        ).scalars().all()
        return list(accounts)

    def get_account(self, ledger_id: int, account_id: int) -> Account:
        """Get an account, treating other ledgers' accounts as absent."""
        account = self.db.get(Account, account_id)
        if not account or account.ledger_id != ledger_id:
            raise NotFound(f"Account {account_id} not found")
        return account

    def patch_account(
        self, ledger_id: int, account_id: int, request: AccountPatch
    ) -> Account:
        account = self.get_account(ledger_id, account_id)
        changes = request.model_dump(exclude_unset=True)

        for field in ("name", "kind", "is_visible"):
            if changes.get(field) is not None:
                setattr(account, field, changes[field])
        if changes.get("currency") is not None:
            account.currency = changes["currency"].upper()
        if changes.get("balance") is not None:
            account.balance = to_fixed(changes["balance"])

        account.updated_at = utcnow()
        self.db.flush()
        return account

    def delete_account(self, ledger_id: int, account_id: int) -> None:
        """
        Delete an account regardless of its balance.

        Transactions keep the account's id so their kind, and the
        liability of any card they touch, stay the same.
        """
        account = self.get_account(ledger_id, account_id)
        self.db.delete(account)
        self.db.flush()
        logger.info(
            "Deleted account %s in ledger %s (balance %s)",
            account_id, ledger_id, account.balance,
        )

    def adjust_balance(
        self,
        ledger_id: int,
        account_id: int,
        delta: int,
        require_funds: bool = False,
    ) -> None:
        """
        Atomically add `delta` (fixed point, may be negative).

        With require_funds the update only applies when the
        resulting balance stays non-negative; the check and the
        write are the same statement.
        """
        stmt = (
            update(Account)
            .where(Account.id == account_id, Account.ledger_id == ledger_id)
            .values(balance=Account.balance + delta, updated_at=utcnow())
        )
        if require_funds:
            stmt = stmt.where(Account.balance + delta >= 0)

        result = self.db.execute(stmt)
        if result.rowcount == 0:
            # Distinguish a missing account from a funds failure
            self.get_account(ledger_id, account_id)
            raise Conflict(f"Insufficient funds in account {account_id}")

    def revert_balance(self, ledger_id: int, account_id: int, delta: int) -> None:
        """
        Undo an earlier delta.

        An account deleted since the delta was applied has nothing
        left to undo, so a missing row is not an error here.
        """
        self.db.execute(
            update(Account)
            .where(Account.id == account_id, Account.ledger_id == ledger_id)
            .values(balance=Account.balance - delta, updated_at=utcnow())
        )
