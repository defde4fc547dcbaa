"""Per-event capture pipeline.

``NotificationCapture.process`` runs one event through every stage:

    filter -> amount -> currency -> type -> merchant/category -> description
        -> duplicate check -> insert -> acknowledgment

Each stop is reported as a :class:`CaptureResult` rather than an exception.
Every call is isolated: parsing stages are pure, and the store is the only
state shared between concurrent calls.
"""

from __future__ import annotations

import contextlib
import threading
from collections.abc import Callable

from .amounts import AmountExtractor
from .classify import CategoryClassifier, TransactionTypeClassifier
from .config import CaptureConfig
from .currency import CurrencyNormalizer, RateSource
from .describe import build_description
from .duplicates import Deduplicator
from .event_filter import EventFilter
from .logging_setup import get_logger
from .merchants import MerchantExtractor
from .models import (
    CandidateTransaction,
    CaptureAck,
    CaptureOutcome,
    CaptureResult,
    NotificationEvent,
    TransactionType,
)
from .patterns import PatternTables, default_tables
from .storage import TransactionStore

logger = get_logger("notification_capture.pipeline")

type AckHandler = Callable[[CaptureAck], None]


def log_ack(ack: CaptureAck) -> None:
    logger.info(
        "captured transaction %s: %s %s (%s), +%d credits",
        ack.transaction_id,
        ack.amount,
        ack.currency,
        ack.description,
        ack.credits,
    )


class NotificationCapture:
    """Wire the parsing components, the deduplicator and a store together.

    With ``serialize_capture`` set, dedup-check-then-insert runs under a lock
    owned by this instance. Workers sharing one ``NotificationCapture`` are
    serialized; separate instances (or processes) writing the same store are not.
    """

    def __init__(
        self,
        store: TransactionStore,
        config: CaptureConfig | None = None,
        *,
        tables: PatternTables | None = None,
        rates: RateSource | None = None,
        on_captured: AckHandler | None = None,
    ) -> None:
        self.config = config or CaptureConfig()
        self.store = store
        tables = tables or default_tables()
        cfg = self.config

        self.event_filter = EventFilter(cfg)
        self.amounts = AmountExtractor(tables)
        self.currency = CurrencyNormalizer(cfg.home_currency, rates, tables)
        self.types = TransactionTypeClassifier(tables)
        self.merchants = MerchantExtractor(tables, max_length=cfg.merchant_max_length)
        self.categories = CategoryClassifier(tables)
        self.deduplicator = Deduplicator(
            store,
            window_ms=cfg.dedup_window_ms,
            amount_tolerance=cfg.amount_tolerance,
            similarity_threshold=cfg.similarity_threshold,
        )
        self._on_captured = on_captured or log_ack
        # Per instance: closes the check-then-insert race among workers sharing it.
        self._commit_lock: contextlib.AbstractContextManager[object] = (
            threading.Lock() if cfg.serialize_capture else contextlib.nullcontext()
        )

    # -- parsing ------------------------------------------------------------

    def _parse(self, event: NotificationEvent) -> CandidateTransaction | CaptureResult:
        text = event.full_text

        raw = self.amounts.extract(text)
        if raw is None:
            logger.debug("no amount in event from %s", event.source_package)
            return CaptureResult(CaptureOutcome.UNPARSED, reason="no amount found")

        if self.config.skip_informational and self.types.is_informational(text):
            logger.debug("informational notice from %s skipped", event.source_package)
            return CaptureResult(CaptureOutcome.IGNORED, reason="informational notice")

        amount = self.currency.normalize(raw)
        if amount is None:
            return CaptureResult(CaptureOutcome.UNPARSED, reason="amount converts to zero")

        tx_type = self.types.classify(text)
        if tx_type is TransactionType.INCOME and not self.config.track_income:
            logger.debug("income from %s ignored; income tracking is off", event.source_package)
            return CaptureResult(CaptureOutcome.IGNORED, reason="income tracking disabled")

        merchant = self.merchants.extract(text)
        if tx_type is TransactionType.INCOME:
            category = self.categories.classify_income(text)
            fallback = self.categories.income_label(text)
        else:
            category = self.categories.classify(text, merchant)
            fallback = None

        description = build_description(
            event.text or text,
            merchant,
            amount,
            fallback=fallback,
            max_length=self.config.description_max_length,
        )
        return CandidateTransaction(
            amount=amount.value,
            currency=amount.currency,
            type=tx_type,
            description=description,
            timestamp=event.posted_at_ms,
            source_kind=event.source_kind,
            category=category,
            merchant=merchant,
            original_amount=amount.original_value,
            original_currency=amount.original_currency,
            credits_earned=self.config.reward_credits,
            source_package=event.source_package,
        )

    def build_candidate(self, event: NotificationEvent) -> CandidateTransaction | None:
        """Run only the parsing stages; ``None`` when the event yields nothing."""

        parsed = self._parse(event)
        return parsed if isinstance(parsed, CandidateTransaction) else None

    # -- full pipeline ------------------------------------------------------

    def process(self, event: NotificationEvent) -> CaptureResult:
        try:
            return self._process(event)
        except Exception as e:
            logger.exception("capture failed for event from %s", event.source_package)
            return CaptureResult(CaptureOutcome.FAILED, reason=f"{type(e).__name__}: {e}")

    def _process(self, event: NotificationEvent) -> CaptureResult:
        if not self.event_filter.accepts(event):
            return CaptureResult(CaptureOutcome.REJECTED, reason="source not whitelisted")

        parsed = self._parse(event)
        if isinstance(parsed, CaptureResult):
            return parsed
        candidate = parsed

        with self._commit_lock:
            existing = self.deduplicator.find_duplicate(candidate)
            if existing is not None:
                logger.info(
                    "duplicate %s %s from %s dropped (matches %s)",
                    candidate.amount,
                    candidate.currency,
                    candidate.source_kind,
                    existing.id,
                )
                return CaptureResult(
                    CaptureOutcome.DUPLICATE,
                    candidate=candidate,
                    transaction_id=existing.id,
                    reason="duplicate of a recent transaction",
                )
            try:
                tx_id = self.store.insert(candidate)
            except Exception as e:
                # At-most-once: the notification stays visible for manual entry.
                logger.exception("failed to store %s %s", candidate.amount, candidate.currency)
                return CaptureResult(
                    CaptureOutcome.FAILED, candidate=candidate, reason=f"storage error: {e}"
                )

        ack = CaptureAck(
            transaction_id=tx_id,
            amount=candidate.amount,
            currency=candidate.currency,
            description=candidate.description,
            credits=candidate.credits_earned,
        )
        try:
            self._on_captured(ack)
        except Exception:
            logger.exception("acknowledgment handler failed for transaction %s", tx_id)
        return CaptureResult(CaptureOutcome.CAPTURED, candidate=candidate, transaction_id=tx_id)


__all__ = ["AckHandler", "NotificationCapture", "log_ack"]
