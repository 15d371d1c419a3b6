"""
Access gate: identity, ledger scoping and role checks.

A request moves through three states:

    Unauthenticated -> Identified(user) -> LedgerScoped(user, ledger, role)

Every ledger-scoped operation declares which Action it needs;
ROLE_PERMISSIONS is the single source of truth for which roles
may perform it. A missing membership is reported as Forbidden,
never NotFound, so ledger ids cannot be probed.
"""

import enum
import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from family_ledger.errors import Forbidden
from family_ledger.identity import Identity
from family_ledger.models.enums import LedgerRole
from family_ledger.models.ledger import Ledger, LedgerMember
from family_ledger.models.user import User

logger = logging.getLogger(__name__)


class Action(str, enum.Enum):
    READ = "read"
    WRITE = "write"
    ADMIN = "admin"


ROLE_PERMISSIONS: dict[LedgerRole, set[Action]] = {
    LedgerRole.OWNER: {Action.READ, Action.WRITE, Action.ADMIN},
    LedgerRole.EDITOR: {Action.READ, Action.WRITE},
    LedgerRole.VIEWER: {Action.READ},
}


@dataclass(frozen=True)
class LedgerScope:
    """The resolved (user, ledger, role) for one request."""
    user: User
    ledger: Ledger
    role: LedgerRole

    @property
    def user_id(self) -> int:
        return self.user.id

    @property
    def ledger_id(self) -> int:
        return self.ledger.id

    def can(self, action: Action) -> bool:
        return action in ROLE_PERMISSIONS.get(self.role, set())


class AccessGate:

    def __init__(self, db: Session):
        self.db = db

    def identify(self, identity: Identity) -> User:
        """
        Return the user for an identity, provisioning it on first sight.

        Keyed by external_id so repeated calls are idempotent.
        """
        user = self.db.execute(
            select(User).where(User.external_id == identity.external_id)
        ).scalar_one_or_none()

        if user:
            if identity.email and user.email != identity.email:
                user.email = identity.email
                self.db.flush()
            return user

        user = User(
            external_id=identity.external_id,
            email=identity.email,
            name=identity.name or (identity.email or identity.external_id).split("@")[0],
        )
        self.db.add(user)
        self.db.flush()
        logger.info("Provisioned user %s for identity %s", user.id, identity.external_id)
        return user

    def scope(self, user: User, ledger_id: int | None) -> LedgerScope:
        """Resolve the caller's membership in a ledger."""
        if ledger_id is None:
            raise Forbidden("No ledger selected")

        membership = self.db.execute(
            select(LedgerMember).where(
                LedgerMember.ledger_id == ledger_id,
                LedgerMember.user_id == user.id,
            )
        ).scalar_one_or_none()

        if not membership:
            raise Forbidden(f"User {user.id} is not a member of ledger {ledger_id}")

        return LedgerScope(user=user, ledger=membership.ledger, role=membership.role)

    def authorize(self, scope: LedgerScope, action: Action) -> LedgerScope:
        """Raise Forbidden unless the scope's role permits the action."""
        if not scope.can(action):
            raise Forbidden(
                f"Role {scope.role.value} may not perform {action.value}"
            )
        return scope
