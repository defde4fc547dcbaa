"""Time-windowed fuzzy duplicate detection.

A bank may report the same card payment twice: as an app push notification
and as an SMS, or as a repeated push. A candidate is a duplicate of a stored
transaction when, within the window before the candidate's own timestamp:

- the amounts differ by at most ``amount_tolerance``, and
- if both sides carry a merchant, the merchants are similar enough.

A missing merchant on either side makes the amount match sufficient. That
errs toward suppressing a repeated alert rather than double counting it.
"""

from __future__ import annotations

from decimal import Decimal

from rapidfuzz.distance import Levenshtein

from .logging_setup import get_logger
from .models import CandidateTransaction, StoredTransaction
from .storage import TransactionStore

logger = get_logger("notification_capture.duplicates")


def merchant_similarity(a: str, b: str) -> float:
    """Return ``1 - levenshtein(a, b) / max(len(a), len(b))`` on case-folded input.

    Identical strings score 1.0; an empty side scores 0.0 unless both are empty.
    """

    fa, fb = a.casefold(), b.casefold()
    if fa == fb:
        return 1.0
    longest = max(len(fa), len(fb))
    if longest == 0 or not fa or not fb:
        return 0.0
    return 1.0 - Levenshtein.distance(fa, fb) / longest


class Deduplicator:
    def __init__(
        self,
        store: TransactionStore,
        *,
        window_ms: int = 5 * 60 * 1000,
        amount_tolerance: Decimal = Decimal("0.01"),
        similarity_threshold: float = 0.7,
    ) -> None:
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")
        self._store = store
        self.window_ms = window_ms
        self.amount_tolerance = amount_tolerance
        self.similarity_threshold = similarity_threshold

    def is_same_transaction(
        self, candidate: CandidateTransaction, existing: StoredTransaction
    ) -> bool:
        if abs(candidate.amount - existing.amount) > self.amount_tolerance:
            return False
        if candidate.merchant and existing.merchant:
            score = merchant_similarity(candidate.merchant, existing.merchant)
            return score >= self.similarity_threshold
        return True

    def find_duplicate(self, candidate: CandidateTransaction) -> StoredTransaction | None:
        """Return the first stored transaction that ``candidate`` duplicates."""

        since = candidate.timestamp - self.window_ms
        for kind in (candidate.source_kind, candidate.source_kind.paired):
            for existing in self._store.query_recent_by_source(since, kind):
                # The store bounds the window from below only.
                if existing.timestamp > candidate.timestamp + self.window_ms:
                    continue
                if self.is_same_transaction(candidate, existing):
                    logger.debug(
                        "candidate %s %s matches stored transaction %s (%s)",
                        candidate.amount,
                        candidate.currency,
                        existing.id,
                        existing.source_kind,
                    )
                    return existing
        return None

    def is_duplicate(self, candidate: CandidateTransaction) -> bool:
        return self.find_duplicate(candidate) is not None


__all__ = ["Deduplicator", "merchant_similarity"]
