"""
Account model.

A cash-like balance holder (cash, bank, digital wallet).
Unlike a card, the balance IS stored. It only changes through
a direct create/patch of the account or through an atomic
balance delta issued by AccountService.adjust_balance().
"""

from datetime import datetime

from sqlalchemy import (
    String, Boolean, DateTime, BigInteger, ForeignKey,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from family_ledger.models.base import Base, utcnow
from family_ledger.models.enums import AccountKind


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    ledger_id: Mapped[int] = mapped_column(
        ForeignKey("ledgers.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    kind: Mapped[AccountKind] = mapped_column(
        SAEnum(AccountKind, name="account_kind_enum", create_constraint=True),
        nullable=False,
    )
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="TWD"
    )
    # Fixed point, x10000
    balance: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0
    )
    is_visible: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<Account {self.id} {self.kind.value} {self.balance}>"
