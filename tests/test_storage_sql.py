from __future__ import annotations

from decimal import Decimal

import pytest

from db.client import session_scope
from db.models.capture import NcTransaction
from notification_capture.models import (
    CandidateTransaction,
    Category,
    Currency,
    SourceKind,
    TransactionType,
)
from notification_capture.storage import SqlTransactionStore, StorageError
from tests.helpers.db import add_transaction_row, bootstrap_sqlite_db

T0 = 1_700_000_000_000


@pytest.fixture
def database_url(tmp_path) -> str:
    return bootstrap_sqlite_db(tmp_path / "capture.sqlite")


def _candidate(amount: str, ts: int, **kw) -> CandidateTransaction:
    fields = {
        "currency": Currency.RSD,
        "type": TransactionType.EXPENSE,
        "description": "Payment at MAXI",
        "source_kind": SourceKind.NOTIFICATION,
        "merchant": "MAXI",
    }
    fields.update(kw)
    return CandidateTransaction(amount=Decimal(amount), timestamp=ts, **fields)


def test_insert_persists_all_columns(database_url):
    store = SqlTransactionStore(database_url)
    candidate = _candidate(
        "2400.00",
        T0,
        category=Category.TRANSPORT_FUEL,
        original_amount=Decimal("40.00"),
        original_currency=Currency.BAM,
        credits_earned=5,
        source_package="rs.raiffeisenbank.mobilebanking",
    )
    tx_id = store.insert(candidate)

    with session_scope(database_url=database_url) as s:
        row = s.get(NcTransaction, tx_id)
        assert row is not None
        assert row.amount == Decimal("2400.00")
        assert row.currency_code == "RSD"
        assert row.original_amount == Decimal("40.00")
        assert row.original_currency_code == "BAM"
        assert row.type == "EXPENSE"
        assert row.category == "TRANSPORT_FUEL"
        assert row.source_kind == "NOTIFICATION"
        assert row.posted_at_ms == T0
        assert row.credits_earned == 5
        assert row.is_deleted is False
        assert row.created_at is not None


def test_query_recent_by_source_filters_and_orders(database_url):
    store = SqlTransactionStore(database_url)
    old = store.insert(_candidate("10.00", T0 - 10_000))
    first = store.insert(_candidate("20.00", T0))
    second = store.insert(_candidate("30.00", T0 + 5_000))
    store.insert(_candidate("40.00", T0 + 1_000, source_kind=SourceKind.SMS))

    rows = store.query_recent_by_source(T0, SourceKind.NOTIFICATION)
    assert [r.id for r in rows] == [second, first]
    assert old not in {r.id for r in rows}
    assert rows[0].amount == Decimal("30.00")
    assert rows[0].category is Category.OTHER_EXPENSE
    assert rows[0].merchant == "MAXI"

    sms = store.query_recent_by_source(T0, SourceKind.SMS)
    assert [r.amount for r in sms] == [Decimal("40.00")]


def test_soft_deleted_rows_are_ignored(database_url):
    add_transaction_row(database_url, amount="99.00", posted_at_ms=T0, is_deleted=True)
    live = add_transaction_row(database_url, amount="98.00", posted_at_ms=T0)
    rows = SqlTransactionStore(database_url).query_recent_by_source(T0, SourceKind.NOTIFICATION)
    assert [r.id for r in rows] == [live]


def test_create_schema_is_idempotent(tmp_path):
    url = f"sqlite+pysqlite:///{tmp_path / 'fresh.sqlite'}"
    store = SqlTransactionStore(url)
    store.create_schema()
    store.create_schema()
    assert store.query_recent_by_source(0, SourceKind.SMS) == []


def test_missing_table_raises_storage_error(tmp_path):
    store = SqlTransactionStore(f"sqlite+pysqlite:///{tmp_path / 'empty.sqlite'}")
    with pytest.raises(StorageError):
        store.query_recent_by_source(0, SourceKind.SMS)
    with pytest.raises(StorageError):
        store.insert(_candidate("1.00", T0))
