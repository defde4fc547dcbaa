from __future__ import annotations

from decimal import Decimal

from notification_capture.describe import build_description
from notification_capture.models import Currency, ParsedAmount

HOME = ParsedAmount(value=Decimal("1234.56"), currency=Currency.RSD)
CONVERTED = ParsedAmount(
    value=Decimal("2400.00"),
    currency=Currency.RSD,
    original_value=Decimal("40"),
    original_currency=Currency.BAM,
)


def test_merchant_description():
    assert build_description("ignored", "MAXI", HOME) == "Payment at MAXI"


def test_merchant_description_with_original_amount():
    text = build_description("ignored", "OMV PUMPA", CONVERTED)
    assert text == "Payment at OMV PUMPA (40.00 BAM)"


def test_converted_without_merchant():
    assert build_description("ignored", None, CONVERTED) == "Transaction (40.00 BAM)"


def test_fallback_label_beats_raw_text():
    assert build_description("Priliv 5.000 RSD", None, HOME, fallback="Salary") == "Salary"


def test_raw_text_is_kept_when_short():
    assert build_description("Kupovina\n 1.000 RSD", None, HOME) == "Kupovina 1.000 RSD"


def test_raw_text_is_truncated_with_ellipsis():
    text = build_description("x" * 150, None, HOME)
    assert len(text) == 100
    assert text.endswith("...")
    assert text.startswith("x" * 97)


def test_exactly_max_length_is_not_truncated():
    assert build_description("y" * 100, None, HOME) == "y" * 100
    assert build_description("y" * 30, None, HOME, max_length=20) == "y" * 17 + "..."
