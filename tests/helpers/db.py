"""DB helpers for tests: bootstrap a temporary SQLite DB and add raw rows."""

from __future__ import annotations

import os
from decimal import Decimal
from pathlib import Path

from db import Base
from db.client import get_engine, session_scope
from db.models.capture import NcTransaction
from sqlalchemy import text as sql_text


def bootstrap_sqlite_db(db_file: Path, *, set_default_env: bool = False) -> str:
    """Create a SQLite database file, initialize schema, and return the URL.

    Using a file-backed SQLite DB ensures multiple SQLAlchemy connections share
    the same state (in-memory DBs are per-connection by default).
    """

    url = f"sqlite+pysqlite:///{db_file}"
    db_file.parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=get_engine(database_url=url))
    _assert_transactions_schema_in_sync(url)

    if set_default_env:
        os.environ.setdefault("DATABASE_URL", url)
    return url


def add_transaction_row(
    database_url: str,
    *,
    amount: str,
    posted_at_ms: int,
    source_kind: str = "NOTIFICATION",
    merchant: str | None = None,
    is_deleted: bool = False,
) -> int:
    """Insert a row directly, bypassing the store (soft-deleted rows, fixtures)."""

    with session_scope(database_url=database_url) as session:
        row = NcTransaction(
            amount=Decimal(amount),
            currency_code="RSD",
            type="EXPENSE",
            category="OTHER_EXPENSE",
            merchant=merchant,
            description=f"Payment at {merchant}" if merchant else "fixture",
            source_kind=source_kind,
            posted_at_ms=posted_at_ms,
            is_deleted=is_deleted,
        )
        session.add(row)
        session.flush()
        return row.id


def _assert_transactions_schema_in_sync(database_url: str) -> None:
    """Quick sanity check: ORM column set matches SQLite table column set."""

    expected = {c.name for c in NcTransaction.__table__.columns}
    with session_scope(database_url=database_url) as session:
        rows = session.execute(sql_text("PRAGMA table_info('nc_transactions')")).fetchall()
        got = {row[1] for row in rows}  # (cid, name, type, notnull, dflt_value, pk)
    missing = expected - got
    extra = got - expected
    assert not missing and not extra, (
        f"nc_transactions schema drift: missing={missing or '∅'}, extra={extra or '∅'}"
    )
