"""
Credit card and installment models.

A card's liability is never stored. It is derived from the
transactions tagged with the card (see CardService), so there
is no counter that can drift from the history.
"""

from datetime import date, datetime

from sqlalchemy import (
    String, Integer, Date, DateTime, BigInteger, ForeignKey,
    CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from family_ledger.models.base import Base, utcnow


class CreditCard(Base):
    __tablename__ = "credit_cards"
    __table_args__ = (
        CheckConstraint("billing_day BETWEEN 1 AND 31", name="ck_billing_day"),
        CheckConstraint("payment_day BETWEEN 1 AND 31", name="ck_payment_day"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    ledger_id: Mapped[int] = mapped_column(
        ForeignKey("ledgers.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    billing_day: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_day: Mapped[int] = mapped_column(Integer, nullable=False)
    credit_limit: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    installments: Mapped[list["Installment"]] = relationship(
        back_populates="card"
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self) -> str:
        return f"<CreditCard {self.id} {self.name!r}>"


class Installment(Base):
    """A multi-month plan attached to one card-expense transaction."""

    __tablename__ = "installments"

    id: Mapped[int] = mapped_column(primary_key=True)
    card_id: Mapped[int] = mapped_column(
        ForeignKey("credit_cards.id"), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    total_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    total_months: Mapped[int] = mapped_column(Integer, nullable=False)
    remaining_months: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)

    card: Mapped["CreditCard"] = relationship(back_populates="installments")

    def months_remaining_on(self, today: date) -> int:
        """Months still unbilled as of `today`, never below zero."""
        elapsed = (
            (today.year - self.start_date.year) * 12
            + (today.month - self.start_date.month)
        )
        return max(0, self.total_months - max(0, elapsed))

    def __repr__(self) -> str:
        return (
            f"<Installment {self.id} card={self.card_id} "
            f"{self.remaining_months}/{self.total_months}>"
        )
