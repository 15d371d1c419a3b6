"""
Stock holding model.

One row per (ledger, ticker, owner label). Shares and average
cost are fixed point so fractional shares are supported.
"""

from sqlalchemy import String, BigInteger, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from family_ledger.models.base import Base


class StockHolding(Base):
    __tablename__ = "stock_holdings"
    __table_args__ = (
        UniqueConstraint(
            "ledger_id", "ticker", "owner_label", name="uq_stock_holding"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    ledger_id: Mapped[int] = mapped_column(
        ForeignKey("ledgers.id"), nullable=False, index=True
    )
    ticker: Mapped[str] = mapped_column(String(20), nullable=False)
    owner_label: Mapped[str] = mapped_column(
        String(50), nullable=False, default="Self"
    )
    shares: Mapped[int] = mapped_column(BigInteger, nullable=False)
    avg_cost: Mapped[int] = mapped_column(BigInteger, nullable=False)

    def __repr__(self) -> str:
        return f"<StockHolding {self.ticker} ({self.owner_label}) {self.shares}>"
