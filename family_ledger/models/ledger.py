"""
Ledger and membership models.

A ledger is the isolation boundary: every account, card,
category and transaction belongs to exactly one. Users reach
a ledger only through a LedgerMember row carrying their role.
"""

from datetime import datetime

from sqlalchemy import (
    String, DateTime, ForeignKey, UniqueConstraint,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from family_ledger.models.base import Base, utcnow
from family_ledger.models.enums import LedgerRole


class Ledger(Base):
    __tablename__ = "ledgers"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # Stored and compared as plaintext; see DESIGN.md
    password: Mapped[str | None] = mapped_column(
        String(255), nullable=True, default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    members: Mapped[list["LedgerMember"]] = relationship(
        back_populates="ledger"
    )

    @property
    def has_password(self) -> bool:
        return bool(self.password)

    def __repr__(self) -> str:
        return f"<Ledger {self.id} {self.name!r}>"


class LedgerMember(Base):
    """Exactly one role per (user, ledger) pair."""

    __tablename__ = "ledger_members"
    __table_args__ = (
        UniqueConstraint("ledger_id", "user_id", name="uq_ledger_member"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    ledger_id: Mapped[int] = mapped_column(
        ForeignKey("ledgers.id"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    role: Mapped[LedgerRole] = mapped_column(
        SAEnum(LedgerRole, name="ledger_role_enum", create_constraint=True),
        nullable=False,
    )
    last_accessed_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    ledger: Mapped["Ledger"] = relationship(back_populates="members")
    user: Mapped["User"] = relationship(back_populates="memberships")

    def __repr__(self) -> str:
        return f"<LedgerMember user={self.user_id} ledger={self.ledger_id} {self.role.value}>"
