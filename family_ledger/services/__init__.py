"""Business logic services."""

from family_ledger.services.access_service import AccessGate, Action, LedgerScope
from family_ledger.services.ledger_service import LedgerService
from family_ledger.services.account_service import AccountService
from family_ledger.services.card_service import CardService
from family_ledger.services.transaction_service import TransactionService
from family_ledger.services.category_service import CategoryService
from family_ledger.services.stock_service import StockService
from family_ledger.services.dashboard_service import DashboardService

__all__ = [
    "AccessGate",
    "Action",
    "LedgerScope",
    "LedgerService",
    "AccountService",
    "CardService",
    "TransactionService",
    "CategoryService",
    "StockService",
    "DashboardService",
]
