from __future__ import annotations

import threading
import time

import pytest

from notification_capture.api import capture_events
from notification_capture.config import CaptureConfig
from notification_capture.models import CaptureOutcome, NotificationEvent
from notification_capture.pipeline import NotificationCapture
from notification_capture.service import CaptureService, summarize
from notification_capture.storage import InMemoryTransactionStore

BANK = "rs.raiffeisenbank.mobilebanking"
T0 = 1_700_000_000_000


def _event(text: str, ts: int = T0) -> NotificationEvent:
    return NotificationEvent(source_package=BANK, title="Raiffeisen", text=text, posted_at_ms=ts)


def _distinct_events(n: int) -> list[NotificationEvent]:
    # Amounts differ by more than the tolerance so none are duplicates.
    return [_event(f"Plaćeno karticom: {100 + i},00 RSD na MAXI", ts=T0 + i) for i in range(n)]


def test_process_all_preserves_input_order():
    store = InMemoryTransactionStore()
    events = _distinct_events(20)
    with CaptureService(NotificationCapture(store), max_workers=4) as service:
        results = service.process_all(events)

    assert [r.outcome for r in results] == [CaptureOutcome.CAPTURED] * 20
    assert [r.candidate.timestamp for r in results] == [e.posted_at_ms for e in events]
    assert len(store) == 20


def test_process_all_accepts_a_lazy_iterable():
    store = InMemoryTransactionStore()
    with CaptureService(NotificationCapture(store), max_workers=2) as service:
        results = service.process_all(iter(_distinct_events(5)), concurrency=2)
    assert len(results) == 5


def test_process_all_respects_concurrency_limit():
    running = 0
    peak = 0
    lock = threading.Lock()

    class SlowStore(InMemoryTransactionStore):
        def query_recent_by_source(self, since_ms, source_kind):
            nonlocal running, peak
            with lock:
                running += 1
                peak = max(peak, running)
            time.sleep(0.01)
            with lock:
                running -= 1
            return super().query_recent_by_source(since_ms, source_kind)

    with CaptureService(NotificationCapture(SlowStore()), max_workers=8) as service:
        service.process_all(_distinct_events(12), concurrency=2)
    assert 1 <= peak <= 2


def test_submit_returns_future():
    store = InMemoryTransactionStore()
    with CaptureService(NotificationCapture(store)) as service:
        fut = service.submit(_event("Kupovina: 40.00 BAM na OMV PUMPA"))
        assert fut.result(timeout=5).outcome is CaptureOutcome.CAPTURED


def test_serialized_capture_keeps_one_of_concurrent_duplicates():
    store = InMemoryTransactionStore()
    capture = NotificationCapture(store, CaptureConfig(serialize_capture=True))
    same = [_event("Plaćeno karticom: 1.234,56 RSD na MAXI", ts=T0 + i) for i in range(8)]
    with CaptureService(capture, max_workers=8) as service:
        results = service.process_all(same)

    counts = summarize(results)
    assert counts["captured"] == 1
    assert counts["duplicate"] == 7
    assert len(store) == 1


def test_serialize_lock_belongs_to_each_capture_instance():
    cfg = CaptureConfig(serialize_capture=True)
    store = InMemoryTransactionStore()
    a = NotificationCapture(store, cfg)
    b = NotificationCapture(store, cfg)
    assert a._commit_lock is not b._commit_lock

    with a._commit_lock:
        # Another instance is not blocked by this one's lock.
        assert b.process(_event("Kupovina: 40.00 BAM na OMV PUMPA")).outcome is (
            CaptureOutcome.CAPTURED
        )


def test_summarize_lists_every_outcome():
    counts = summarize([])
    assert set(counts) == {o.value for o in CaptureOutcome}
    assert all(v == 0 for v in counts.values())


@pytest.mark.parametrize("workers", [0, -1])
def test_invalid_worker_count(workers):
    with pytest.raises(ValueError):
        CaptureService(NotificationCapture(InMemoryTransactionStore()), max_workers=workers)


def test_invalid_concurrency():
    with CaptureService(NotificationCapture(InMemoryTransactionStore())) as service:
        with pytest.raises(ValueError):
            service.process_all([], concurrency=0)


def test_capture_events_helper():
    store = InMemoryTransactionStore()
    acks = []
    results = capture_events(
        [
            _event("Plaćeno karticom: 1.234,56 RSD na MAXI"),
            _event("Dobrodošli u mobilno bankarstvo"),
        ],
        store,
        on_captured=acks.append,
    )
    assert [r.outcome for r in results] == [CaptureOutcome.CAPTURED, CaptureOutcome.UNPARSED]
    assert len(acks) == 1
