"""
Shared enumerations for database models.

Mapping Python enums to database enums means only valid
roles, kinds and types can be stored.
"""

import enum


class LedgerRole(str, enum.Enum):
    """A member's permission level inside one ledger."""
    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"


class AccountKind(str, enum.Enum):
    CASH = "cash"
    BANK = "bank"
    DIGITAL = "digital"


class CategoryType(str, enum.Enum):
    INCOME = "income"
    EXPENSE = "expense"


class TransactionType(str, enum.Enum):
    """The type a caller declares when creating a transaction."""
    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"


class TransactionKind(str, enum.Enum):
    """
    The semantic kind of a stored transaction.

    Never stored: it is inferred from which references
    (source, destination, card) are populated.
    """
    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"
    CARD_EXPENSE = "card_expense"
    CARD_PAYMENT = "card_payment"
