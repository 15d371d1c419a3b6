"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18 00:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("external_id", sa.String(128), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_external_id", "users", ["external_id"], unique=True)

    op.create_table(
        "ledgers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("password", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "ledger_members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ledger_id", sa.Integer(), sa.ForeignKey("ledgers.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "role",
            sa.Enum("OWNER", "EDITOR", "VIEWER", name="ledger_role_enum", create_constraint=True),
            nullable=False,
        ),
        sa.Column("last_accessed_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("ledger_id", "user_id", name="uq_ledger_member"),
    )
    op.create_index("ix_ledger_members_ledger_id", "ledger_members", ["ledger_id"])
    op.create_index("ix_ledger_members_user_id", "ledger_members", ["user_id"])

    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ledger_id", sa.Integer(), sa.ForeignKey("ledgers.id"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column(
            "kind",
            sa.Enum("CASH", "BANK", "DIGITAL", name="account_kind_enum", create_constraint=True),
            nullable=False,
        ),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("balance", sa.BigInteger(), nullable=False),
        sa.Column("is_visible", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_accounts_ledger_id", "accounts", ["ledger_id"])

    op.create_table(
        "credit_cards",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ledger_id", sa.Integer(), sa.ForeignKey("ledgers.id"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("billing_day", sa.Integer(), nullable=False),
        sa.Column("payment_day", sa.Integer(), nullable=False),
        sa.Column("credit_limit", sa.BigInteger(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("billing_day BETWEEN 1 AND 31", name="ck_billing_day"),
        sa.CheckConstraint("payment_day BETWEEN 1 AND 31", name="ck_payment_day"),
    )
    op.create_index("ix_credit_cards_ledger_id", "credit_cards", ["ledger_id"])

    op.create_table(
        "installments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("card_id", sa.Integer(), sa.ForeignKey("credit_cards.id"), nullable=False),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("total_amount", sa.BigInteger(), nullable=False),
        sa.Column("total_months", sa.Integer(), nullable=False),
        sa.Column("remaining_months", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
    )
    op.create_index("ix_installments_card_id", "installments", ["card_id"])

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ledger_id", sa.Integer(), sa.ForeignKey("ledgers.id"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column(
            "type",
            sa.Enum("INCOME", "EXPENSE", name="category_type_enum", create_constraint=True),
            nullable=False,
        ),
        sa.Column("icon", sa.String(50), nullable=True),
    )
    op.create_index("ix_categories_ledger_id", "categories", ["ledger_id"])

    op.create_table(
        "stock_holdings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ledger_id", sa.Integer(), sa.ForeignKey("ledgers.id"), nullable=False),
        sa.Column("ticker", sa.String(20), nullable=False),
        sa.Column("owner_label", sa.String(50), nullable=False),
        sa.Column("shares", sa.BigInteger(), nullable=False),
        sa.Column("avg_cost", sa.BigInteger(), nullable=False),
        sa.UniqueConstraint("ledger_id", "ticker", "owner_label", name="uq_stock_holding"),
    )
    op.create_index("ix_stock_holdings_ledger_id", "stock_holdings", ["ledger_id"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ledger_id", sa.Integer(), sa.ForeignKey("ledgers.id"), nullable=False),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("amount", sa.BigInteger(), nullable=False),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id"), nullable=True),
        sa.Column("source_account_id", sa.Integer(), nullable=True),
        sa.Column("destination_account_id", sa.Integer(), nullable=True),
        sa.Column("credit_card_id", sa.Integer(), sa.ForeignKey("credit_cards.id"), nullable=True),
        sa.Column(
            "installment_id", sa.Integer(), sa.ForeignKey("installments.id"),
            nullable=True, unique=True,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_transactions_ledger_id", "transactions", ["ledger_id"])
    op.create_index("ix_transactions_date", "transactions", ["date"])
    op.create_index("ix_transactions_source_account_id", "transactions", ["source_account_id"])
    op.create_index(
        "ix_transactions_destination_account_id", "transactions", ["destination_account_id"]
    )
    op.create_index("ix_transactions_credit_card_id", "transactions", ["credit_card_id"])


def downgrade() -> None:
    op.drop_table("transactions")
    op.drop_table("stock_holdings")
    op.drop_table("categories")
    op.drop_table("installments")
    op.drop_table("credit_cards")
    op.drop_table("accounts")
    op.drop_table("ledger_members")
    op.drop_table("ledgers")
    op.drop_table("users")
