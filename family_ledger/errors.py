"""
Domain errors raised by the services.

Each error carries the HTTP status the API layer reports it with.
Services never raise HTTPException directly; routes translate
these into HTTP responses.
"""


class LedgerError(Exception):
    """Base class for all business-rule failures."""

    status_code: int = 400

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    @property
    def detail(self) -> str:
        return self.message or self.__class__.__name__


class ValidationError(LedgerError, ValueError):
    """Malformed input or a missing reference for the transaction type."""
    status_code = 422


class Unauthorized(LedgerError):
    """The caller token could not be resolved to an identity."""
    status_code = 401

    @property
    def detail(self) -> str:
        return "Unauthorized"


class Forbidden(LedgerError):
    """
    Insufficient role, no membership, or a bad ledger password.

    The detail sent to clients is always "Forbidden"; the
    reason is only logged.
    """
    status_code = 403

    @property
    def detail(self) -> str:
        return "Forbidden"


class NotFound(LedgerError):
    """Entity absent or outside the caller's ledger."""
    status_code = 404


class Conflict(LedgerError):
    """The request is well-formed but breaks a business rule."""
    status_code = 409

