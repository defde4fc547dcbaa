"""Static pattern and keyword tables for bank message parsing.

Every table is an immutable value (tuples, frozensets, read-only mappings)
bundled into :class:`PatternTables`. Components receive the bundle through
their constructor; :func:`default_tables` returns the shipped tables for
Serbian/Balkan banks plus English-language alerts.

Order matters in every ordered table: amount patterns and category rules are
evaluated top to bottom and the first hit wins. Tables may grow, but new
entries must be appended at the position that keeps existing expectations
stable (see ``tests/test_classify.py`` for the rule-by-rule checks).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Generic, TypeVar

from .models import Category, Currency

# ---------------------------------------------------------------------------
# Rule shapes
# ---------------------------------------------------------------------------

T = TypeVar("T")


class SeparatorMode(Enum):
    """How a matched numeric token treats a lone separator type.

    ``DECIMAL``: the last separator is the decimal point.
    ``GROUPED_INTEGER``: a lone separator type is thousands grouping.
    ``AUTO``: a single separator followed by exactly three digits, or a
    repeated separator, is grouping; otherwise it is the decimal point.

    When both separator types occur, the last one is always the decimal point
    regardless of mode.
    """

    DECIMAL = "decimal"
    GROUPED_INTEGER = "grouped_integer"
    AUTO = "auto"


@dataclass(frozen=True, slots=True)
class AmountPattern:
    """A locale pattern with named groups ``amount`` and (optionally) ``currency``."""

    name: str
    regex: re.Pattern[str]
    mode: SeparatorMode


@dataclass(frozen=True, slots=True)
class KeywordRule(Generic[T]):
    """``result`` applies when any keyword is a substring of the lowered text."""

    keywords: tuple[str, ...]
    result: T

    def matches(self, lowered: str) -> bool:
        return any(k in lowered for k in self.keywords)


@dataclass(frozen=True, slots=True)
class PatternTables:
    amount_patterns: tuple[AmountPattern, ...]
    currency_aliases: Mapping[str, Currency]
    merchant_patterns: tuple[re.Pattern[str], ...]
    income_keywords: tuple[str, ...]
    expense_keywords: tuple[str, ...]
    informational_keywords: tuple[str, ...]
    category_rules: tuple[KeywordRule[Category], ...]
    income_category_rules: tuple[KeywordRule[Category], ...]
    income_labels: tuple[KeywordRule[str], ...]


# ---------------------------------------------------------------------------
# Currency tokens
# ---------------------------------------------------------------------------

_CURRENCY_ALIASES: dict[str, Currency] = {}
for _currency, _aliases in (
    (Currency.RSD, ("RSD", "ДИН.", "ДИН", "DIN.", "DIN", "DINAR", "DINARA")),
    (Currency.EUR, ("EUR", "€", "EURO", "EVRO", "EURA", "EVRA")),
    (Currency.USD, ("USD", "$", "DOLLAR", "DOLAR")),
    (Currency.BAM, ("BAM", "KM", "MARKA", "KONVERTIBILNA MARKA")),
    (Currency.MKD, ("MKD", "ДЕН.", "ДЕН", "DENAR")),
    (Currency.HRK, ("HRK", "KN", "KUNA")),
):
    for _alias in _aliases:
        _CURRENCY_ALIASES[_alias] = _currency

_CODES = r"RSD|EUR|USD|BAM|MKD|HRK"
# Longest alternatives first so "dinara" is not cut to "din".
_WORDS = r"dinara|dinar|din\.?|дин\.?|ден\.?|evra|eura|evro|euro|KM|kn"
_SYMBOLS = r"[€$]"
# A currency word must not run on into a longer word ("KMH", "RSDX").
_END = r"(?![^\W\d_])"
# A numeric token must not start in the middle of another number.
_START = r"(?<![\d.,])"


def _amount(
    name: str, number: str, currencies: str | None, mode: SeparatorMode, *, prefix: str = ""
) -> AmountPattern:
    if currencies is None:
        body = rf"{prefix}(?P<amount>{number})(?!\d)"
    else:
        body = rf"{_START}(?P<amount>{number})\s*(?P<currency>{currencies}){_END}"
    return AmountPattern(name=name, regex=re.compile(body, re.IGNORECASE), mode=mode)


_AMOUNT_PATTERNS: tuple[AmountPattern, ...] = (
    # 1.234,56 RSD
    _amount(
        "dot_grouped_comma_decimal",
        r"\d{1,3}(?:\.\d{3})*,\d{2}(?!\d)",
        f"{_CODES}|{_WORDS}|{_SYMBOLS}",
        SeparatorMode.DECIMAL,
    ),
    # 1234,56 RSD
    _amount(
        "comma_decimal",
        r"\d+,\d{2}(?!\d)",
        f"{_CODES}|{_WORDS}|{_SYMBOLS}",
        SeparatorMode.DECIMAL,
    ),
    # 1,234.56 EUR
    _amount(
        "comma_grouped_dot_decimal",
        r"\d{1,3}(?:,\d{3})*\.\d{2}(?!\d)",
        _CODES,
        SeparatorMode.DECIMAL,
    ),
    # 1234.56 EUR
    _amount("dot_decimal", r"\d+\.\d{2}(?!\d)", _CODES, SeparatorMode.DECIMAL),
    # 1.200 RSD, 1,200 дин., 500 KM
    _amount(
        "grouped_integer",
        r"(?:\d{1,3}(?:[.,]\d{3})+|\d+)(?![.,]?\d)",
        f"{_CODES}|{_WORDS}",
        SeparatorMode.GROUPED_INTEGER,
    ),
    # €100.00, $ 50
    AmountPattern(
        name="symbol_prefix",
        regex=re.compile(rf"(?P<currency>{_SYMBOLS})\s*(?P<amount>\d+(?:[.,]\d+)*)"),
        mode=SeparatorMode.AUTO,
    ),
    # 100.00€, 50$
    AmountPattern(
        name="symbol_suffix",
        regex=re.compile(rf"{_START}(?P<amount>\d+(?:[.,]\d+)*)\s*(?P<currency>{_SYMBOLS})"),
        mode=SeparatorMode.AUTO,
    ),
    # 40.00 KM, 12,5 kn
    _amount(
        "minor_currency_suffix",
        r"\d{1,3}(?:[.,]\d{3})+(?:[.,]\d{1,2})?|\d+(?:[.,]\d{1,2})?",
        r"KM|kn|ден\.?|дин\.?|din\.?",
        SeparatorMode.AUTO,
    ),
    # "Iznos: 1.234,56" with no currency token; the normalizer falls back to
    # the home currency.
    _amount(
        "labelled_amount",
        r"\d{1,3}(?:\.\d{3})*,\d{2}|\d+,\d{2}",
        None,
        SeparatorMode.DECIMAL,
        prefix=r"iznos[:\s]+",
    ),
)

# ---------------------------------------------------------------------------
# Merchant extraction
# ---------------------------------------------------------------------------

_NAME_CHARS = r"A-Za-z0-9 \-.&'čćžšđČĆŽŠĐЀ-ӿ"
_NAME_START = r"A-Za-zčćžšđČĆŽŠĐЀ-ӿ"

_MERCHANT_PATTERNS: tuple[re.Pattern[str], ...] = (
    # "na OMV PUMPA", "kod MAXI", "u LIDL", "at Starbucks", "@ Wolt"
    # but not "na račun" / "na tekući račun" or "u iznosu od" / "u vrednosti od".
    re.compile(
        r"(?:(?<!\w)(?:na|kod|u|at)|@)\s+(?!ra[čc]un|teku[ćc]|iznos|vrednost)"
        rf"(?P<merchant>[{_NAME_CHARS}]+?)"
        r"\s*(?:,|\.(?!\w)|\n|\d|$)",
        re.IGNORECASE,
    ),
    # "Merchant: MAXI", "Prodajno mesto: OMV"
    re.compile(
        rf"(?:merchant|prodavac|trgovac|prodajno mesto)\s*:\s*(?P<merchant>[{_NAME_CHARS}]+)",
        re.IGNORECASE,
    ),
    # "1.234,56 RSD, MAXI"
    re.compile(
        rf"(?:{_CODES}|дин\.?|din\.?|KM),\s*(?P<merchant>[{_NAME_START}][{_NAME_CHARS}]*)",
        re.IGNORECASE,
    ),
)

# ---------------------------------------------------------------------------
# Transaction type keywords
# ---------------------------------------------------------------------------

# Checked first. Bare "plata" is excluded: it is a substring of
# "isplata" (withdrawal) and "uplata".
_INCOME_KEYWORDS: tuple[str, ...] = (
    "priliv",
    "uplata zarade",
    "uplata po racunu",
    "uplata po računu",
    "uplata na račun",
    "uplata na racun",
    "primljena uplata",
    "primljeno",
    "prihod",
    "primanje",
    "transfer primljen",
    "isplata zarade",
    "isplata plate",
    "zarada",
    "zarade",
    "salary",
    "storno",
    "refundacija",
    "povraćaj",
    "povracaj",
    "povrat sredstava",
    "odobrenje",
    "kredit na račun",
    "incoming",
    "deposit",
    "credited",
    "refund",
    "received",
)

_EXPENSE_KEYWORDS: tuple[str, ...] = (
    "koriscenje kartice",
    "korišćenje kartice",
    "korištenje kartice",
    "kupovina",
    "placeno",
    "plaćeno",
    "placanje",
    "plaćanje",
    "iznos transakcije",
    "transakcija",
    "odliv",
    "terećenje",
    "terecenje",
    "rashod",
    "pos terminal",
    "pos ",
    "karticom",
    "platna kartica",
    "debitna kartica",
    "podizanje gotovine",
    "bankomat",
    "atm",
    "isplata",
    "povlačenje",
    "withdrawal",
    "naplata",
    "provizija",
    "naknada",
    "payment",
    "purchase",
    "charge",
    "debited",
    "spent",
)

_INFORMATIONAL_KEYWORDS: tuple[str, ...] = (
    "stanje na računu",
    "stanje na racunu",
    "raspoloživo stanje",
    "raspolozivo stanje",
    "upit stanja",
    "proverite stanje",
    "vaše stanje",
    "vase stanje",
    "trenutno stanje",
    "preostalo",
    "dostupno",
    "aktivirano",
    "istekla",
    "podsjetnik",
    "podsetnik",
    "obavještenje",
    "obavestenje",
    "otp kod",
    "verifikacioni kod",
    "aktivacija",
    "available balance",
    "verification code",
)

# ---------------------------------------------------------------------------
# Category rules (first hit wins)
# ---------------------------------------------------------------------------


def _rule(result: Category, *keywords: str) -> KeywordRule[Category]:
    return KeywordRule(keywords=tuple(keywords), result=result)


_CATEGORY_RULES: tuple[KeywordRule[Category], ...] = (
    _rule(
        Category.FOOD_GROCERIES,
        "maxi", " idea", "lidl", "univerexport", "mercator", "merkator", " roda",
        "tempo", " aman", "dis market", "supermarket", "market", "grocery",
        "namirnice", "prodavnica", "pekara", "bakery",
    ),
    _rule(
        Category.FOOD_RESTAURANTS,
        "restaurant", "restoran", "kfc", "mcdonald", "burger", "pizza", "kafana",
        "bistro", "grill", "ćevap", "cevap", "fast food", "wolt", "glovo",
        "donesi", "dostava", "delivery",
    ),
    _rule(
        Category.FOOD_COFFEE,
        "coffee", "kafa", "starbucks", "costa", "kafić", "kafic", "caffe", "caffè", "cafe",
    ),
    _rule(
        Category.TRANSPORT_FUEL,
        "nis petrol", "petrol", "gazprom", "lukoil", "omv", "mol ", "benzin",
        "gorivo", "fuel", "pumpa", "gas station",
    ),
    _rule(Category.TRANSPORT_TAXI, "car:go", "cargo", "taxi", "taksi", "uber", "bolt", "yandex"),
    _rule(
        Category.TRANSPORT_PUBLIC,
        "jgsp", "gsp", "bus plus", "busplus", "javni prevoz", "metro", "parking", "garaža",
        "garaza",
    ),
    _rule(Category.UTILITIES_ELECTRICITY, "eps ", "elektro", "electric", "struja"),
    _rule(Category.UTILITIES_WATER, "vodovod", "water", "jkp", "voda"),
    _rule(Category.UTILITIES_GAS, "srbijagas", "toplana", "heating", "grejanje"),
    _rule(
        Category.UTILITIES_INTERNET,
        "mts", "telenor", "a1 ", "yettel", "sbb", "orion", "internet", "mobilni",
    ),
    _rule(
        Category.SHOPPING_CLOTHES,
        "zara", "h&m", "c&a", "reserved", "bershka", "pull&bear", "fashion", "odeća",
        "odeca", "obuća", "obuca", "shoes",
    ),
    _rule(
        Category.SHOPPING_ELECTRONICS,
        "tehnomanija", "gigatron", "winwin", "comtrade", "ct shop", "emmi", "computer",
        "electronic", "laptop",
    ),
    _rule(
        Category.ENTERTAINMENT_STREAMING,
        "netflix", "spotify", "youtube", "hbo", "disney", "deezer", "apple music",
    ),
    _rule(Category.ENTERTAINMENT_GAMES, "steam", "playstation", "xbox", "epic games", "nintendo"),
    _rule(
        Category.ENTERTAINMENT_EVENTS,
        "bioskop", "cinema", "cineplexx", "arena cinemas", "ticket", "karte", "koncert",
    ),
    _rule(Category.HEALTH_PHARMACY, "apoteka", "pharmacy", "benu", "lilly", "lekovi"),
    _rule(
        Category.HEALTH_DOCTOR,
        "doktor", "doctor", "klinika", "hospital", "medical", "dom zdravlja", "ordinacija",
    ),
    _rule(Category.HEALTH_GYM, "teretana", "fitnes", "fitness", "gym"),
)

_INCOME_CATEGORY_RULES: tuple[KeywordRule[Category], ...] = (
    _rule(Category.SALARY, "zarada", "zarade", "plata", "salary", "payroll"),
    _rule(
        Category.REFUND,
        "storno", "refund", "refundacija", "povraćaj", "povracaj", "povrat sredstava",
        "reklamacija",
    ),
)

_INCOME_LABELS: tuple[KeywordRule[str], ...] = (
    KeywordRule(keywords=("zarada", "zarade", "plata", "salary", "payroll"), result="Salary"),
    KeywordRule(keywords=("storno", "refund", "povraćaj", "povracaj", "povrat"), result="Refund"),
    KeywordRule(keywords=("transfer", "uplata", "priliv", "deposit"), result="Incoming transfer"),
)


def default_tables() -> PatternTables:
    """Return the shipped tables (a fresh, immutable bundle)."""

    return PatternTables(
        amount_patterns=_AMOUNT_PATTERNS,
        currency_aliases=MappingProxyType(dict(_CURRENCY_ALIASES)),
        merchant_patterns=_MERCHANT_PATTERNS,
        income_keywords=_INCOME_KEYWORDS,
        expense_keywords=_EXPENSE_KEYWORDS,
        informational_keywords=_INFORMATIONAL_KEYWORDS,
        category_rules=_CATEGORY_RULES,
        income_category_rules=_INCOME_CATEGORY_RULES,
        income_labels=_INCOME_LABELS,
    )


__all__ = [
    "AmountPattern",
    "KeywordRule",
    "PatternTables",
    "SeparatorMode",
    "default_tables",
]
