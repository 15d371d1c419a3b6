"""
Dashboard API endpoint.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from family_ledger.api.deps import get_ledger_scope
from family_ledger.models.base import get_db
from family_ledger.schemas.dashboard import DashboardResponse
from family_ledger.schemas.transaction import TransactionResponse
from family_ledger.services.access_service import LedgerScope
from family_ledger.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    scope: LedgerScope = Depends(get_ledger_scope),
    db: Session = Depends(get_db),
):
    summary = DashboardService(db).summary(scope.ledger_id)
    summary["recent_transactions"] = [
        TransactionResponse.model_validate(t) for t in summary["recent_transactions"]
    ]
    return DashboardResponse(**summary)
