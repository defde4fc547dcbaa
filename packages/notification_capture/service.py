"""Background dispatch of events onto a bounded thread pool.

``CaptureService`` owns a ``ThreadPoolExecutor`` and runs
:meth:`NotificationCapture.process` for each event on it.

- ``submit(event)`` dispatches one event and returns its ``Future``; this is
  what a live notification listener calls.
- ``process_all(events)`` replays a batch with at most ``concurrency`` events
  in flight and returns results in input order. Submission is windowed so a
  large (or lazy) event stream is never materialized up front.

Events from different sources are not ordered relative to each other. No
cancellation is offered for in-flight events; ``close`` waits for them.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from types import TracebackType

from .logging_setup import get_logger
from .models import CaptureOutcome, CaptureResult, NotificationEvent
from .pipeline import NotificationCapture

logger = get_logger("notification_capture.service")


class CaptureService:
    def __init__(self, capture: NotificationCapture, *, max_workers: int | None = None) -> None:
        workers = max_workers if max_workers is not None else capture.config.max_workers
        if not isinstance(workers, int) or workers < 1:
            raise ValueError("max_workers must be a positive integer")
        self.capture = capture
        self.max_workers = workers
        self._pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="capture")

    def submit(self, event: NotificationEvent) -> Future[CaptureResult]:
        return self._pool.submit(self.capture.process, event)

    def process_all(
        self, events: Iterable[NotificationEvent], *, concurrency: int | None = None
    ) -> list[CaptureResult]:
        """Process ``events`` concurrently; results keep the input order."""

        limit = concurrency if concurrency is not None else self.max_workers
        if not isinstance(limit, int) or limit < 1:
            raise ValueError("concurrency must be a positive integer")

        it: Iterator[tuple[int, NotificationEvent]] = enumerate(events)
        results: dict[int, CaptureResult] = {}
        future_to_idx: dict[Future[CaptureResult], int] = {}

        def _submit_next() -> bool:
            try:
                idx, event = next(it)
            except StopIteration:
                return False
            future_to_idx[self.submit(event)] = idx
            return True

        # Prime the window
        for _ in range(limit):
            if not _submit_next():
                break

        active = set(future_to_idx)
        while active:
            done, active = wait(active, return_when=FIRST_COMPLETED)
            for fut in done:
                idx = future_to_idx.pop(fut)
                # process() already contains per-event failures.
                results[idx] = fut.result()
            for _ in range(len(done)):
                if not _submit_next():
                    break
            active |= set(future_to_idx) - active

        ordered = [results[i] for i in range(len(results))]
        logger.info("processed %d events: %s", len(ordered), summarize(ordered))
        return ordered

    def close(self, *, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> CaptureService:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def summarize(results: Iterable[CaptureResult]) -> dict[str, int]:
    """Count results per outcome, every outcome present (zero when absent)."""

    counts = {o.value: 0 for o in CaptureOutcome}
    for r in results:
        counts[r.outcome.value] += 1
    return counts


__all__ = ["CaptureService", "summarize"]
