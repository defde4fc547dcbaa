from __future__ import annotations

import logging
import re
from decimal import Decimal

import pytest

from notification_capture.amounts import AmountExtractor, format_amount, parse_amount_token
from notification_capture.models import NumberStyle
from notification_capture.patterns import SeparatorMode


@pytest.fixture
def extractor() -> AmountExtractor:
    return AmountExtractor()


@pytest.mark.parametrize(
    ("text", "value", "token", "pattern"),
    [
        ("Plaćeno karticom: 1.234,56 RSD na MAXI", "1234.56", "RSD", "dot_grouped_comma_decimal"),
        ("Uspešna transakcija 1234,56 дин.", "1234.56", "дин.", "comma_decimal"),
        ("Card purchase 1,234.56 EUR at Zara", "1234.56", "EUR", "comma_grouped_dot_decimal"),
        ("Kupovina: 40.00 BAM na OMV PUMPA", "40.00", "BAM", "comma_grouped_dot_decimal"),
        ("Terećenje računa 1.200 RSD", "1200", "RSD", "grouped_integer"),
        ("Payment of $12.50 at Starbucks", "12.50", "$", "symbol_prefix"),
        ("Online purchase €100.00 Netflix", "100.00", "€", "symbol_prefix"),
        ("Placanje 50.00$ Steam", "50.00", "$", "symbol_suffix"),
        ("Iznos: 2.500,00 kod Lilly", "2500.00", "", "labelled_amount"),
    ],
)
def test_locale_patterns(extractor, text, value, token, pattern):
    raw = extractor.extract(text)
    assert raw is not None
    assert raw.value == Decimal(value)
    assert raw.token == token
    assert raw.pattern == pattern


def test_minor_currency_suffix_without_iso_code(extractor):
    raw = extractor.extract("Kartično plaćanje 12,5 kn Konzum")
    assert raw is not None
    assert raw.value == Decimal("12.5")
    assert raw.token.upper() == "KN"


def test_first_pattern_wins_when_message_has_several_amounts(extractor):
    # Transaction amount comes before the balance and uses the same format.
    raw = extractor.extract("Kupovina 1.000,00 RSD. Raspoloživo stanje: 25.000,00 RSD")
    assert raw is not None
    assert raw.value == Decimal("1000.00")


@pytest.mark.parametrize(
    "text",
    [
        "Vaš OTP kod je 482913",
        "Dobrodošli u mobilno bankarstvo",
        "Kupovina 0,00 RSD",
        "",
    ],
)
def test_no_amount(extractor, text):
    assert extractor.extract(text) is None


def test_zero_amount_falls_through_to_later_pattern(extractor):
    raw = extractor.extract("Autorizacija 0,00 RSD, naplaćeno 150 RSD")
    assert raw is not None
    assert raw.value == Decimal("150")


def test_unparseable_match_is_logged_and_skipped(extractor, caplog, monkeypatch):
    # A configured CLI run stops propagation at the package logger.
    monkeypatch.setattr(logging.getLogger("notification_capture"), "propagate", True)
    with caplog.at_level(logging.WARNING, logger="notification_capture.amounts"):
        raw = extractor.extract("€1.2,3.4 i 12.5 KM")

    assert raw is not None
    assert raw.value == Decimal("12.5")
    assert raw.token == "KM"
    assert raw.pattern == "minor_currency_suffix"
    assert any(
        r.levelno == logging.WARNING and "symbol_prefix" in r.getMessage() for r in caplog.records
    )


@pytest.mark.parametrize(
    ("token", "mode", "value", "style"),
    [
        ("1.234,56", SeparatorMode.DECIMAL, "1234.56", NumberStyle.DOT_GROUPED_COMMA_DECIMAL),
        ("1,234.56", SeparatorMode.DECIMAL, "1234.56", NumberStyle.COMMA_GROUPED_DOT_DECIMAL),
        ("1234,56", SeparatorMode.DECIMAL, "1234.56", NumberStyle.COMMA_DECIMAL),
        ("1.200", SeparatorMode.GROUPED_INTEGER, "1200", NumberStyle.DOT_GROUPED_INTEGER),
        ("1,200,000", SeparatorMode.GROUPED_INTEGER, "1200000", NumberStyle.COMMA_GROUPED_INTEGER),
        ("1.200", SeparatorMode.AUTO, "1200", NumberStyle.DOT_GROUPED_INTEGER),
        ("12.50", SeparatorMode.AUTO, "12.50", NumberStyle.DOT_DECIMAL),
        ("500", SeparatorMode.AUTO, "500", NumberStyle.PLAIN_INTEGER),
    ],
)
def test_parse_amount_token(token, mode, value, style):
    assert parse_amount_token(token, mode) == (Decimal(value), style)


def test_last_separator_is_decimal_regardless_of_mode():
    for mode in SeparatorMode:
        assert parse_amount_token("1.234,56", mode)[0] == Decimal("1234.56")
        assert parse_amount_token("1,234.56", mode)[0] == Decimal("1234.56")


@pytest.mark.parametrize("token", ["", "12a,50", "1.2.3,4,5", "--"])
def test_parse_amount_token_rejects_garbage(token):
    with pytest.raises(ValueError):
        parse_amount_token(token, SeparatorMode.DECIMAL)


def test_format_amount():
    v = Decimal("1234567.5")
    assert format_amount(v, NumberStyle.DOT_GROUPED_COMMA_DECIMAL) == "1.234.567,50"
    assert format_amount(v, NumberStyle.COMMA_GROUPED_DOT_DECIMAL) == "1,234,567.50"
    assert format_amount(v, NumberStyle.COMMA_DECIMAL) == "1234567,50"
    assert format_amount(v, NumberStyle.DOT_DECIMAL) == "1234567.50"
    assert format_amount(Decimal("1200"), NumberStyle.DOT_GROUPED_INTEGER) == "1.200"
    with pytest.raises(ValueError):
        format_amount(Decimal("1200.5"), NumberStyle.COMMA_GROUPED_INTEGER)


@pytest.mark.parametrize(
    "text",
    [
        "Plaćeno karticom: 9.876,54 RSD na IDEA",
        "Uspešna transakcija 4321,09 дин.",
        "Card purchase 12,345.67 EUR at Zara",
        "Kupovina: 40.00 BAM na OMV PUMPA",
        "Terećenje računa 12.000 RSD",
        "Payment of $12.50 at Starbucks",
    ],
)
def test_format_then_reparse_reproduces_value(extractor, text):
    raw = extractor.extract(text)
    assert raw is not None and raw.style is not None

    rendered = format_amount(raw.value, raw.style)
    again = extractor.extract(text.replace(_number_in(text), rendered))

    assert again is not None
    assert abs(again.value - raw.value) <= Decimal("1e-9")


def _number_in(text: str) -> str:
    m = re.search(r"\d[\d.,]*\d|\d", text)
    assert m is not None
    return m.group(0)
