"""
Request dependencies: the access gate as FastAPI sees it.

get_current_user      Unauthenticated -> Identified
get_ledger_scope      Identified      -> LedgerScoped (any role)
require_editor        LedgerScoped with write permission

Routes depend on the narrowest of these they need, so each
endpoint's role requirement is visible in its signature.
"""

import logging

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from family_ledger.config import get_settings
from family_ledger.errors import Forbidden, LedgerError, Unauthorized
from family_ledger.identity import IdentityResolver, UnverifiedJWTResolver, bearer_token
from family_ledger.models.base import get_db
from family_ledger.models.user import User
from family_ledger.services.access_service import AccessGate, Action, LedgerScope
from family_ledger.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)

settings = get_settings()


def http_error(error: LedgerError) -> HTTPException:
    """Translate a domain error into the matching HTTPException."""
    if isinstance(error, (Forbidden, Unauthorized)):
        # The client only sees a generic detail; keep the reason here
        logger.info("%s: %s", error.__class__.__name__, error.message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(error, Unauthorized) else None
    return HTTPException(
        status_code=error.status_code, detail=error.detail, headers=headers
    )


def get_identity_resolver() -> IdentityResolver:
    return UnverifiedJWTResolver()


def get_current_user(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> User:
    """Resolve the bearer token to a user, provisioning it if new."""
    try:
        identity = resolver.resolve(bearer_token(authorization))
        user = AccessGate(db).identify(identity)
        db.commit()
        return user
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


def _parse_ledger_id(raw: str | None) -> int | None:
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise Forbidden(f"Malformed ledger id {raw!r}")


def get_ledger_scope(
    ledger_id: str | None = Header(default=None, alias=settings.LEDGER_HEADER),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> LedgerScope:
    """Resolve the selected ledger against the caller's memberships."""
    try:
        scope = AccessGate(db).scope(user, _parse_ledger_id(ledger_id))
    except LedgerError as e:
        raise http_error(e)

    LedgerService(db).touch_membership(scope.ledger_id, user.id)
    return scope


def require_editor(
    scope: LedgerScope = Depends(get_ledger_scope),
    db: Session = Depends(get_db),
) -> LedgerScope:
    try:
        return AccessGate(db).authorize(scope, Action.WRITE)
    except LedgerError as e:
        raise http_error(e)
