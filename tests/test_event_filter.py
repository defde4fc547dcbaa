from __future__ import annotations

import pytest

from notification_capture.config import CaptureConfig
from notification_capture.event_filter import EventFilter
from notification_capture.models import NotificationEvent, SourceKind

BANK = "rs.raiffeisenbank.mobilebanking"
SMS_APP = "com.google.android.apps.messaging"
MESSAGE = "Plaćeno karticom: 1.234,56 RSD na MAXI"


def _event(package: str, title: str = "Raiffeisen", kind: SourceKind = SourceKind.NOTIFICATION):
    return NotificationEvent(
        source_package=package, title=title, text=MESSAGE, posted_at_ms=0, source_kind=kind
    )


@pytest.fixture
def event_filter() -> EventFilter:
    return EventFilter(CaptureConfig())


def test_whitelisted_bank_app_passes(event_filter):
    assert event_filter.accepts(_event(BANK)) is True


def test_unknown_package_is_rejected_even_with_parseable_text(event_filter):
    assert event_filter.accepts(_event("com.whatsapp")) is False


@pytest.mark.parametrize("title", ["RAIFFEISEN", "Intesa Banka", "+381641234567", "otp"])
def test_sms_from_known_sender(event_filter, title):
    assert event_filter.accepts(_event(SMS_APP, title, SourceKind.SMS)) is True


@pytest.mark.parametrize("title", ["Mama", "", "Yettel"])
def test_sms_from_unknown_sender_is_rejected(event_filter, title):
    assert event_filter.accepts(_event(SMS_APP, title, SourceKind.SMS)) is False


def test_sms_app_checks_sender_even_when_kind_is_notification(event_filter):
    assert event_filter.accepts(_event(SMS_APP, "Mama")) is False


def test_custom_whitelist():
    config = CaptureConfig(
        bank_packages=frozenset({"com.example.bank"}),
        sms_senders=frozenset({"ExampleBank"}),
    )
    f = EventFilter(config)
    assert f.accepts(_event("com.example.bank")) is True
    assert f.accepts(_event(BANK)) is False
    assert f.accepts(_event(SMS_APP, "EXAMPLEBANK info", SourceKind.SMS)) is True
