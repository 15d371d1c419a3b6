"""
User model.

A user profile is provisioned the first time an identity is
seen. external_id is whatever stable subject the identity
provider hands us.
"""

from datetime import datetime

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from family_ledger.models.base import Base, utcnow


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    external_id: Mapped[str] = mapped_column(
        String(128), unique=True, nullable=False, index=True
    )
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    memberships: Mapped[list["LedgerMember"]] = relationship(
        back_populates="user"
    )

    def __repr__(self) -> str:
        return f"<User {self.external_id}>"
