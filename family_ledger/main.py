"""
Family Ledger FastAPI application.

This is the entry point for the application.
All routers are registered here.
"""

from fastapi import FastAPI

from family_ledger.config import get_settings
from family_ledger.logging_setup import setup_logging

setup_logging()

from family_ledger.api.health import router as health_router
from family_ledger.api.users import router as users_router
from family_ledger.api.ledgers import router as ledgers_router
from family_ledger.api.accounts import router as accounts_router
from family_ledger.api.cards import router as cards_router
from family_ledger.api.transactions import router as transactions_router
from family_ledger.api.categories import router as categories_router
from family_ledger.api.stocks import router as stocks_router
from family_ledger.api.dashboard import router as dashboard_router

settings = get_settings()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Shared household ledgers with account balances and card liabilities",
)

# Register routers
app.include_router(health_router)
app.include_router(users_router)
app.include_router(ledgers_router)
app.include_router(accounts_router)
app.include_router(cards_router)
app.include_router(transactions_router)
app.include_router(categories_router)
app.include_router(stocks_router)
app.include_router(dashboard_router)
