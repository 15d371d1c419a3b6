"""
Category API endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from family_ledger.api.deps import get_ledger_scope, http_error, require_editor
from family_ledger.errors import LedgerError
from family_ledger.models.base import get_db
from family_ledger.schemas.category import CategoryCreate, CategoryResponse, SeedResponse
from family_ledger.schemas.common import SuccessResponse
from family_ledger.services.access_service import LedgerScope
from family_ledger.services.category_service import CategoryService

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=list[CategoryResponse])
def list_categories(
    scope: LedgerScope = Depends(get_ledger_scope),
    db: Session = Depends(get_db),
):
    return CategoryService(db).list_categories(scope.ledger_id)


@router.post("", response_model=CategoryResponse, status_code=201)
def create_category(
    request: CategoryCreate,
    scope: LedgerScope = Depends(require_editor),
    db: Session = Depends(get_db),
):
    service = CategoryService(db)
    try:
        category = service.create_category(scope.ledger_id, request)
        db.commit()
        return category
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.post("/seed", response_model=SeedResponse)
def seed_categories(
    scope: LedgerScope = Depends(require_editor),
    db: Session = Depends(get_db),
):
    """Initialize the default categories in an empty ledger."""
    seeded = CategoryService(db).seed_defaults(scope.ledger_id)
    db.commit()
    if not seeded:
        return SeedResponse(message="Categories already initialized", count=0)
    return SeedResponse(message="Seeded successfully", count=len(seeded))


@router.delete("/{category_id}", response_model=SuccessResponse)
def delete_category(
    category_id: int,
    scope: LedgerScope = Depends(require_editor),
    db: Session = Depends(get_db),
):
    service = CategoryService(db)
    try:
        service.delete_category(scope.ledger_id, category_id)
        db.commit()
        return SuccessResponse(deleted_id=category_id)
    except LedgerError as e:
        db.rollback()
        raise http_error(e)
