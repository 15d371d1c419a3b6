"""
Dashboard service: ledger-wide totals for the overview page.
"""

import datetime as dt

from sqlalchemy import select, func, or_, and_
from sqlalchemy.orm import Session

from family_ledger.models.account import Account
from family_ledger.models.transaction import Transaction
from family_ledger.services.card_service import CardService


class DashboardService:

    def __init__(self, db: Session):
        self.db = db
        self.card_service = CardService(db)

    def summary(self, ledger_id: int, today: dt.date | None = None) -> dict:
        """
        Assets, liabilities, net worth, this month's spending and
        the five most recent transactions.

        Monthly expenses count cash expenses and card charges dated
        from the first of the month up to today. Transfers and card
        payments move money without spending it.
        """
        today = today or dt.date.today()
        month_start = today.replace(day=1)

        total_assets = self.db.execute(
            select(func.coalesce(func.sum(Account.balance), 0)).where(
                Account.ledger_id == ledger_id
            )
        ).scalar()

        total_liabilities = sum(
            self.card_service.compute_liability(card.id)
            for card in self.card_service.list_cards(ledger_id)
        )

        spending = or_(
            and_(
                Transaction.source_account_id.is_not(None),
                Transaction.destination_account_id.is_(None),
                Transaction.credit_card_id.is_(None),
            ),
            and_(
                Transaction.credit_card_id.is_not(None),
                Transaction.source_account_id.is_(None),
            ),
        )
        monthly_expenses = self.db.execute(
            select(func.coalesce(func.sum(Transaction.amount), 0)).where(
                Transaction.ledger_id == ledger_id,
                Transaction.date >= month_start,
                Transaction.date <= today,
                spending,
            )
        ).scalar()

        recent = self.db.execute(
            select(Transaction)
            .where(Transaction.ledger_id == ledger_id)
            .order_by(
                Transaction.date.desc(),
                Transaction.created_at.desc(),
                Transaction.id.desc(),
            )
            .limit(5)
        ).scalars().all()

        return {
            "total_assets": int(total_assets),
            "total_liabilities": int(total_liabilities),
            "net_worth": int(total_assets) - int(total_liabilities),
            "monthly_expenses": int(monthly_expenses),
            "recent_transactions": list(recent),
        }
