from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CHAR,
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    return datetime.now(UTC)


# ---------------------------
# Core: nc_transactions
# ---------------------------


class NcTransaction(Base):
    """A transaction captured from a bank notification or SMS.

    ``posted_at_ms`` is the event's epoch-millisecond timestamp and drives the
    duplicate-detection window; ``created_at`` is when the row was written.
    """

    __tablename__ = "nc_transactions"

    # SQLite only autoincrements INTEGER PRIMARY KEY.
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    currency_code: Mapped[str] = mapped_column(CHAR(3), nullable=False)
    original_amount: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    original_currency_code: Mapped[str | None] = mapped_column(CHAR(3), nullable=True)
    type: Mapped[str] = mapped_column(String, nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False)
    merchant: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    source_kind: Mapped[str] = mapped_column(String, nullable=False)
    source_package: Mapped[str | None] = mapped_column(String, nullable=True)
    posted_at_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)
    credits_earned: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_nc_tx_amount_positive"),
        CheckConstraint("type in ('EXPENSE','INCOME')", name="ck_nc_tx_type"),
        CheckConstraint("source_kind in ('NOTIFICATION','SMS')", name="ck_nc_tx_source_kind"),
        CheckConstraint(
            "(original_amount IS NULL) = (original_currency_code IS NULL)",
            name="ck_nc_tx_original_pair",
        ),
        Index("ix_nc_tx_source_posted", "source_kind", "posted_at_ms"),
    )


__all__ = [
    "Base",
    "NcTransaction",
]
