"""
Ledger service: ledger identity, entry passwords and membership.

Rules enforced here:
1. Creating a ledger makes the creator its owner, in the same unit
2. Only an owner may delete a ledger or manage its members
3. A ledger always keeps at least one owner
4. Deleting a ledger removes everything it owns in one batch

The service takes a database session as a constructor argument,
so the caller controls the transaction boundary.
"""

import logging

from sqlalchemy import select, update, delete, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from family_ledger.errors import Conflict, Forbidden, NotFound
from family_ledger.models.account import Account
from family_ledger.models.base import utcnow
from family_ledger.models.category import Category
from family_ledger.models.credit_card import CreditCard, Installment
from family_ledger.models.enums import LedgerRole
from family_ledger.models.ledger import Ledger, LedgerMember
from family_ledger.models.stock import StockHolding
from family_ledger.models.transaction import Transaction
from family_ledger.models.user import User
from family_ledger.schemas.ledger import LedgerCreate, MemberAdd

logger = logging.getLogger(__name__)


class LedgerService:

    def __init__(self, db: Session):
        self.db = db

    def _get_ledger(self, ledger_id: int) -> Ledger:
        ledger = self.db.get(Ledger, ledger_id)
        if not ledger:
            raise NotFound(f"Ledger {ledger_id} not found")
        return ledger

    def _get_membership(self, ledger_id: int, user_id: int) -> LedgerMember | None:
        return self.db.execute(
            select(LedgerMember).where(
                LedgerMember.ledger_id == ledger_id,
                LedgerMember.user_id == user_id,
            )
        ).scalar_one_or_none()

    def _require_owner(self, ledger_id: int, user_id: int) -> LedgerMember:
        membership = self._get_membership(ledger_id, user_id)
        if not membership or membership.role != LedgerRole.OWNER:
            raise Forbidden(f"User {user_id} does not own ledger {ledger_id}")
        return membership

    def _owner_count(self, ledger_id: int) -> int:
        return self.db.execute(
            select(func.count(LedgerMember.id)).where(
                LedgerMember.ledger_id == ledger_id,
                LedgerMember.role == LedgerRole.OWNER,
            )
        ).scalar_one()

    # --- Ledgers ---

    def create_ledger(self, user: User, request: LedgerCreate) -> Ledger:
        """Create a ledger and grant its creator the owner role."""
        ledger = Ledger(
            name=request.name.strip(),
            password=request.password or None,
        )
        self.db.add(ledger)
        self.db.flush()

        self.db.add(LedgerMember(
            ledger_id=ledger.id,
            user_id=user.id,
            role=LedgerRole.OWNER,
            last_accessed_at=utcnow(),
        ))
        self.db.flush()
        logger.info("User %s created ledger %s", user.id, ledger.id)
        return ledger

    def list_ledgers(self, user: User) -> list[dict]:
        """The caller's ledgers, most recently accessed first."""
        rows = self.db.execute(
            select(LedgerMember, Ledger)
            .join(Ledger, Ledger.id == LedgerMember.ledger_id)
            .where(LedgerMember.user_id == user.id)
            .order_by(LedgerMember.last_accessed_at.desc(), Ledger.id.desc())
        ).all()
        return [
            {
                "id": ledger.id,
                "name": ledger.name,
                "role": membership.role,
                "last_accessed_at": membership.last_accessed_at,
                "has_password": ledger.has_password,
            }
            for membership, ledger in rows
        ]

    def verify_entry(self, ledger_id: int, password: str | None) -> bool:
        """
        Check the entry password of a locked ledger.

        Plain equality against the stored value. An unlocked
        ledger always verifies.
        """
        ledger = self._get_ledger(ledger_id)
        if ledger.password and ledger.password != password:
            raise Forbidden(f"Invalid password for ledger {ledger_id}")
        return True

    def delete_ledger(
        self, ledger_id: int, requester: User, password: str | None
    ) -> None:
        """
        Delete a ledger and everything it owns.

        Order: transactions, installments, stocks, cards, accounts,
        categories, memberships, ledger. All statements run in the
        caller's transaction, so a failure part way leaves nothing
        deleted once the caller rolls back.
        """
        self._require_owner(ledger_id, requester.id)
        self.verify_entry(ledger_id, password)

        card_ids = select(CreditCard.id).where(CreditCard.ledger_id == ledger_id)

        self.db.execute(
            delete(Transaction).where(Transaction.ledger_id == ledger_id)
        )
        self.db.execute(
            delete(Installment).where(Installment.card_id.in_(card_ids))
        )
        self.db.execute(
            delete(StockHolding).where(StockHolding.ledger_id == ledger_id)
        )
        self.db.execute(
            delete(CreditCard).where(CreditCard.ledger_id == ledger_id)
        )
        self.db.execute(
            delete(Account).where(Account.ledger_id == ledger_id)
        )
        self.db.execute(
            delete(Category).where(Category.ledger_id == ledger_id)
        )
        self.db.execute(
            delete(LedgerMember).where(LedgerMember.ledger_id == ledger_id)
        )
        self.db.execute(delete(Ledger).where(Ledger.id == ledger_id))
        self.db.flush()
        logger.info("User %s deleted ledger %s", requester.id, ledger_id)

    # --- Members ---

    def list_members(self, ledger_id: int) -> list[dict]:
        rows = self.db.execute(
            select(LedgerMember, User)
            .join(User, User.id == LedgerMember.user_id)
            .where(LedgerMember.ledger_id == ledger_id)
            .order_by(LedgerMember.id)
        ).all()
        return [
            {
                "user_id": user.id,
                "email": user.email,
                "name": user.name,
                "role": membership.role,
                "last_accessed_at": membership.last_accessed_at,
            }
            for membership, user in rows
        ]

    def add_member(
        self, ledger_id: int, requester: User, request: MemberAdd
    ) -> LedgerMember:
        """Invite an existing user into the ledger."""
        self._require_owner(ledger_id, requester.id)

        invitee = self.db.execute(
            select(User).where(User.email == request.email)
        ).scalars().first()
        if not invitee:
            raise NotFound(f"No user with email '{request.email}'")

        if self._get_membership(ledger_id, invitee.id):
            raise Conflict(f"User {invitee.id} is already a member")

        membership = LedgerMember(
            ledger_id=ledger_id,
            user_id=invitee.id,
            role=request.role,
            last_accessed_at=utcnow(),
        )
        self.db.add(membership)
        self.db.flush()
        logger.info(
            "User %s added user %s to ledger %s as %s",
            requester.id, invitee.id, ledger_id, request.role.value,
        )
        return membership

    def change_member_role(
        self, ledger_id: int, requester: User, user_id: int, role: LedgerRole
    ) -> LedgerMember:
        self._require_owner(ledger_id, requester.id)

        membership = self._get_membership(ledger_id, user_id)
        if not membership:
            raise NotFound(f"User {user_id} is not a member of ledger {ledger_id}")

        if (
            membership.role == LedgerRole.OWNER
            and role != LedgerRole.OWNER
            and self._owner_count(ledger_id) == 1
        ):
            raise Conflict("A ledger must keep at least one owner")

        membership.role = role
        self.db.flush()
        logger.info(
            "User %s set role of user %s in ledger %s to %s",
            requester.id, user_id, ledger_id, role.value,
        )
        return membership

    def remove_member(self, ledger_id: int, requester: User, user_id: int) -> None:
        self._require_owner(ledger_id, requester.id)

        membership = self._get_membership(ledger_id, user_id)
        if not membership:
            raise NotFound(f"User {user_id} is not a member of ledger {ledger_id}")

        if membership.role == LedgerRole.OWNER and self._owner_count(ledger_id) == 1:
            raise Conflict("A ledger must keep at least one owner")

        self.db.delete(membership)
        self.db.flush()
        logger.info(
            "User %s removed user %s from ledger %s",
            requester.id, user_id, ledger_id,
        )

    def touch_membership(self, ledger_id: int, user_id: int) -> None:
        """
        Record that the user just worked in the ledger.

        Best effort: this commits on its own and a failure is
        logged, never raised, so it cannot break the request
        that triggered it. Call it before the request's own
        unit of work starts.
        """
        try:
            self.db.execute(
                update(LedgerMember)
                .where(
                    LedgerMember.ledger_id == ledger_id,
                    LedgerMember.user_id == user_id,
                )
                .values(last_accessed_at=utcnow())
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(
                "Could not update last access for user %s in ledger %s: %s",
                user_id, ledger_id, e,
            )
