"""Source whitelist check for inbound events."""

from __future__ import annotations

from .config import CaptureConfig
from .logging_setup import get_logger
from .models import NotificationEvent, SourceKind

logger = get_logger("notification_capture.event_filter")


class EventFilter:
    """Pure predicate over :class:`NotificationEvent`.

    An event passes when its package is a whitelisted bank or SMS app. SMS
    events (by ``source_kind`` or by coming from an SMS app) must also carry
    a known bank sender identifier in the title, compared case-insensitively.
    """

    def __init__(self, config: CaptureConfig) -> None:
        self._packages = config.whitelisted_packages
        self._sms_packages = config.sms_packages
        self._senders = tuple(s.casefold() for s in config.sms_senders)

    def is_sms(self, event: NotificationEvent) -> bool:
        return event.source_kind is SourceKind.SMS or event.source_package in self._sms_packages

    def accepts(self, event: NotificationEvent) -> bool:
        if event.source_package not in self._packages:
            logger.debug("rejected event from non-whitelisted package %s", event.source_package)
            return False
        if self.is_sms(event):
            title = event.title.casefold()
            if not any(s in title for s in self._senders):
                logger.debug("rejected SMS from unknown sender %r", event.title)
                return False
        return True


__all__ = ["EventFilter"]
