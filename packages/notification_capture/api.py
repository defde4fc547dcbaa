"""Public import surface for the ``notification_capture`` package.

The concrete implementations live in the component modules and are
re-exported here so callers (the platform listener, the CLI, tests) have one
stable place to import from.
"""

from __future__ import annotations

from collections.abc import Iterable

from .amounts import AmountExtractor, format_amount, parse_amount_token
from .classify import CategoryClassifier, TransactionTypeClassifier
from .config import CaptureConfig, load_config
from .currency import CurrencyNormalizer, RateSource, StaticRateTable
from .describe import build_description
from .duplicates import Deduplicator, merchant_similarity
from .event_filter import EventFilter
from .merchants import MerchantExtractor
from .models import (
    CandidateTransaction,
    CaptureAck,
    CaptureOutcome,
    CaptureResult,
    Category,
    Currency,
    NotificationEvent,
    ParsedAmount,
    SourceKind,
    StoredTransaction,
    TransactionType,
)
from .patterns import PatternTables, default_tables
from .pipeline import AckHandler, NotificationCapture
from .service import CaptureService, summarize
from .storage import InMemoryTransactionStore, SqlTransactionStore, StorageError, TransactionStore


def capture_events(
    events: Iterable[NotificationEvent],
    store: TransactionStore,
    config: CaptureConfig | None = None,
    *,
    on_captured: AckHandler | None = None,
) -> list[CaptureResult]:
    """Run a batch of events through a fresh pipeline on a worker pool.

    Results are returned in input order. The pool is shut down before
    returning.
    """

    capture = NotificationCapture(store, config, on_captured=on_captured)
    with CaptureService(capture) as service:
        return service.process_all(events)


__all__ = [
    "AckHandler",
    "AmountExtractor",
    "CandidateTransaction",
    "CaptureAck",
    "CaptureConfig",
    "CaptureOutcome",
    "CaptureResult",
    "CaptureService",
    "Category",
    "CategoryClassifier",
    "Currency",
    "CurrencyNormalizer",
    "Deduplicator",
    "EventFilter",
    "InMemoryTransactionStore",
    "MerchantExtractor",
    "NotificationCapture",
    "NotificationEvent",
    "ParsedAmount",
    "PatternTables",
    "RateSource",
    "SourceKind",
    "SqlTransactionStore",
    "StaticRateTable",
    "StorageError",
    "StoredTransaction",
    "TransactionStore",
    "TransactionType",
    "TransactionTypeClassifier",
    "build_description",
    "capture_events",
    "default_tables",
    "format_amount",
    "load_config",
    "merchant_similarity",
    "parse_amount_token",
    "summarize",
]
