"""
Category service: per-ledger income and expense categories.
"""

import logging

from sqlalchemy import select, update, func
from sqlalchemy.orm import Session

from family_ledger.errors import NotFound
from family_ledger.models.category import Category
from family_ledger.models.enums import CategoryType
from family_ledger.models.transaction import Transaction
from family_ledger.schemas.category import CategoryCreate

logger = logging.getLogger(__name__)


DEFAULT_CATEGORIES: list[tuple[str, CategoryType, str]] = [
    ("Food", CategoryType.EXPENSE, "utensils"),
    ("Transport", CategoryType.EXPENSE, "bus"),
    ("Housing", CategoryType.EXPENSE, "home"),
    ("Entertainment", CategoryType.EXPENSE, "gamepad-2"),
    ("Shopping", CategoryType.EXPENSE, "shopping-bag"),
    ("Health", CategoryType.EXPENSE, "heart-pulse"),
    ("Education", CategoryType.EXPENSE, "graduation-cap"),
    ("Salary", CategoryType.INCOME, "briefcase"),
    ("Bonus", CategoryType.INCOME, "gift"),
    ("Investment", CategoryType.INCOME, "trending-up"),
    ("Other", CategoryType.INCOME, "more-horizontal"),
]


class CategoryService:

    def __init__(self, db: Session):
        self.db = db

    def list_categories(self, ledger_id: int) -> list[Category]:
        categories = self.db.execute(
            select(Category)
            .where(Category.ledger_id == ledger_id)
            .order_by(Category.type, Category.id)
        ).scalars().all()
        return list(categories)

    def create_category(self, ledger_id: int, request: CategoryCreate) -> Category:
        category = Category(
            ledger_id=ledger_id,
            name=request.name.strip(),
            type=request.type,
            icon=request.icon,
        )
        self.db.add(category)
        self.db.flush()
        return category

    def delete_category(self, ledger_id: int, category_id: int) -> None:
        """Delete a category; its transactions become uncategorized."""
        category = self.db.get(Category, category_id)
        if not category or category.ledger_id != ledger_id:
            raise NotFound(f"Category {category_id} not found")

        self.db.execute(
            update(Transaction)
            .where(Transaction.category_id == category_id)
            .values(category_id=None)
        )
        self.db.delete(category)
        self.db.flush()

    def seed_defaults(self, ledger_id: int) -> list[Category]:
        """
        Insert the default categories into an empty ledger.

        Returns the inserted rows, or an empty list when the
        ledger already has categories.
        """
        existing = self.db.execute(
            select(func.count(Category.id)).where(Category.ledger_id == ledger_id)
        ).scalar_one()
        if existing:
            return []

        categories = [
            Category(ledger_id=ledger_id, name=name, type=type_, icon=icon)
            for name, type_, icon in DEFAULT_CATEGORIES
        ]
        self.db.add_all(categories)
        self.db.flush()
        logger.info("Seeded %d categories in ledger %s", len(categories), ledger_id)
        return categories
