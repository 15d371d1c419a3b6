"""
Transaction model.

A transaction never stores its type. The kind is inferred from
which references are populated, and classify() is the only
place that inference is written down:

    source  destination  card   kind
    set     -            -      expense
    -       set          -      income
    set     set          -      transfer
    -       -            set    card_expense
    set     -            set    card_payment

Any other combination is invalid.
"""

import datetime as dt
from typing import Optional

from sqlalchemy import (
    String, Integer, Date, DateTime, BigInteger, ForeignKey,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from family_ledger.errors import ValidationError
from family_ledger.models.base import Base, utcnow
from family_ledger.models.enums import TransactionKind


_KINDS_BY_SHAPE: dict[tuple[bool, bool, bool], TransactionKind] = {
    (True, False, False): TransactionKind.EXPENSE,
    (False, True, False): TransactionKind.INCOME,
    (True, True, False): TransactionKind.TRANSFER,
    (False, False, True): TransactionKind.CARD_EXPENSE,
    (True, False, True): TransactionKind.CARD_PAYMENT,
}


def classify(
    source_account_id: int | None,
    destination_account_id: int | None,
    credit_card_id: int | None,
) -> TransactionKind:
    """Infer the transaction kind from its populated references."""
    shape = (
        source_account_id is not None,
        destination_account_id is not None,
        credit_card_id is not None,
    )
    kind = _KINDS_BY_SHAPE.get(shape)
    if kind is None:
        raise ValidationError(
            "Invalid combination of source account, destination account "
            "and credit card"
        )
    return kind


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(primary_key=True)
    ledger_id: Mapped[int] = mapped_column(
        ForeignKey("ledgers.id"), nullable=False, index=True
    )
    created_by: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    # Fixed point, x10000, always positive
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    category_id: Mapped[int | None] = mapped_column(
        ForeignKey("categories.id"), nullable=True
    )
    # Plain ids rather than foreign keys: account deletion is
    # unconditional and the history must outlive the account.
    source_account_id: Mapped[int | None] = mapped_column(
        Integer, nullable=True, index=True
    )
    destination_account_id: Mapped[int | None] = mapped_column(
        Integer, nullable=True, index=True
    )
    credit_card_id: Mapped[int | None] = mapped_column(
        ForeignKey("credit_cards.id"), nullable=True, index=True
    )
    installment_id: Mapped[int | None] = mapped_column(
        ForeignKey("installments.id"), nullable=True, unique=True
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    installment: Mapped[Optional["Installment"]] = relationship()

    @property
    def kind(self) -> TransactionKind:
        return classify(
            self.source_account_id,
            self.destination_account_id,
            self.credit_card_id,
        )

    def __repr__(self) -> str:
        return f"<Transaction {self.id} {self.amount} ({self.kind.value})>"
