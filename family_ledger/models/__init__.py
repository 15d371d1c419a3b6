"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from family_ledger.models.base import Base
from family_ledger.models.enums import (
    LedgerRole,
    AccountKind,
    CategoryType,
    TransactionType,
    TransactionKind,
)
from family_ledger.models.user import User
from family_ledger.models.ledger import Ledger, LedgerMember
from family_ledger.models.account import Account
from family_ledger.models.credit_card import CreditCard, Installment
from family_ledger.models.category import Category
from family_ledger.models.stock import StockHolding
from family_ledger.models.transaction import Transaction, classify

__all__ = [
    "Base",
    "LedgerRole",
    "AccountKind",
    "CategoryType",
    "TransactionType",
    "TransactionKind",
    "User",
    "Ledger",
    "LedgerMember",
    "Account",
    "CreditCard",
    "Installment",
    "Category",
    "StockHolding",
    "Transaction",
    "classify",
]
