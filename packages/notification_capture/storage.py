"""Storage collaborators for captured transactions.

The pipeline only needs two operations from a store:

- ``insert(candidate) -> id``
- ``query_recent_by_source(since_ms, source_kind) -> list[StoredTransaction]``
  returning rows with ``timestamp >= since_ms``, newest first.

``InMemoryTransactionStore`` backs tests and embedding; ``SqlTransactionStore``
writes ``nc_transactions`` through the shared ``db`` library.
"""

from __future__ import annotations

import itertools
import threading
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from db.client import get_engine, session_scope
from db.models.capture import Base, NcTransaction

from .models import (
    CandidateTransaction,
    Category,
    Currency,
    SourceKind,
    StoredTransaction,
    TransactionType,
)


class StorageError(RuntimeError):
    """A store could not complete a read or write."""


class TransactionStore(Protocol):
    def insert(self, candidate: CandidateTransaction) -> int | str: ...

    def query_recent_by_source(
        self, since_ms: int, source_kind: SourceKind
    ) -> list[StoredTransaction]: ...


class InMemoryTransactionStore:
    """Thread-safe list-backed store."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._rows: list[StoredTransaction] = []

    def insert(self, candidate: CandidateTransaction) -> int:
        with self._lock:
            tx_id = next(self._ids)
            self._rows.append(
                StoredTransaction(
                    id=tx_id,
                    amount=candidate.amount,
                    source_kind=candidate.source_kind,
                    timestamp=candidate.timestamp,
                    merchant=candidate.merchant,
                    currency=candidate.currency,
                    type=candidate.type,
                    category=candidate.category,
                    description=candidate.description,
                )
            )
        return tx_id

    def query_recent_by_source(
        self, since_ms: int, source_kind: SourceKind
    ) -> list[StoredTransaction]:
        with self._lock:
            rows = [
                r for r in self._rows if r.source_kind is source_kind and r.timestamp >= since_ms
            ]
        rows.sort(key=lambda r: r.timestamp, reverse=True)
        return rows

    def all(self) -> list[StoredTransaction]:
        with self._lock:
            return list(self._rows)

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)


def _to_stored(row: NcTransaction) -> StoredTransaction:
    return StoredTransaction(
        id=row.id,
        amount=row.amount,
        source_kind=SourceKind(row.source_kind),
        timestamp=row.posted_at_ms,
        merchant=row.merchant,
        currency=Currency(row.currency_code),
        type=TransactionType(row.type),
        category=Category(row.category),
        description=row.description,
    )


class SqlTransactionStore:
    """``nc_transactions`` store; soft-deleted rows are invisible to queries."""

    def __init__(self, database_url: str | None = None) -> None:
        self._database_url = database_url

    def create_schema(self) -> None:
        """Create missing tables (SQLite/scratch databases; use Alembic elsewhere)."""

        Base.metadata.create_all(get_engine(database_url=self._database_url))

    def insert(self, candidate: CandidateTransaction) -> int:
        row = NcTransaction(
            amount=candidate.amount,
            currency_code=str(candidate.currency),
            original_amount=candidate.original_amount,
            original_currency_code=(
                str(candidate.original_currency) if candidate.original_currency else None
            ),
            type=str(candidate.type),
            category=str(candidate.category),
            merchant=candidate.merchant,
            description=candidate.description,
            source_kind=str(candidate.source_kind),
            source_package=candidate.source_package,
            posted_at_ms=candidate.timestamp,
            credits_earned=candidate.credits_earned,
        )
        try:
            with session_scope(database_url=self._database_url) as session:
                session.add(row)
                session.flush()
                return row.id
        except SQLAlchemyError as e:
            raise StorageError(f"failed to insert transaction: {e}") from e

    def query_recent_by_source(
        self, since_ms: int, source_kind: SourceKind
    ) -> list[StoredTransaction]:
        stmt = (
            select(NcTransaction)
            .where(
                NcTransaction.source_kind == str(source_kind),
                NcTransaction.posted_at_ms >= since_ms,
                NcTransaction.is_deleted.is_(False),
            )
            .order_by(NcTransaction.posted_at_ms.desc(), NcTransaction.id.desc())
        )
        try:
            with session_scope(database_url=self._database_url) as session:
                return [_to_stored(r) for r in session.scalars(stmt)]
        except SQLAlchemyError as e:
            raise StorageError(f"failed to query recent transactions: {e}") from e


__all__ = [
    "InMemoryTransactionStore",
    "SqlTransactionStore",
    "StorageError",
    "TransactionStore",
]
