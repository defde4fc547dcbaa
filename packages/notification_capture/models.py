"""Data models for ``notification_capture``.

Domain records are frozen ``dataclass`` values: they are created once per
event, handed down the pipeline and never mutated, which keeps every parsing
stage safe to run concurrently. The one pydantic model here,
:class:`EventRecord`, validates external input (a JSON line of an event log)
before it becomes a :class:`NotificationEvent`.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum, StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, field_validator

if TYPE_CHECKING:
    from .config import CaptureConfig

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class SourceKind(StrEnum):
    """Where an event came from: an app push notification or an SMS."""

    NOTIFICATION = "NOTIFICATION"
    SMS = "SMS"

    @property
    def paired(self) -> SourceKind:
        """The other source a bank may use to report the same transaction."""

        return SourceKind.SMS if self is SourceKind.NOTIFICATION else SourceKind.NOTIFICATION


class TransactionType(StrEnum):
    EXPENSE = "EXPENSE"
    INCOME = "INCOME"


class Currency(StrEnum):
    """Canonical currencies understood by the normalizer."""

    RSD = "RSD"
    EUR = "EUR"
    USD = "USD"
    BAM = "BAM"
    MKD = "MKD"
    HRK = "HRK"

    @property
    def symbol(self) -> str:
        return _CURRENCY_SYMBOLS[self]


_CURRENCY_SYMBOLS: dict[Currency, str] = {
    Currency.RSD: "дин.",
    Currency.EUR: "€",
    Currency.USD: "$",
    Currency.BAM: "KM",
    Currency.MKD: "ден.",
    Currency.HRK: "kn",
}


class Category(StrEnum):
    # Expenses
    FOOD_GROCERIES = "FOOD_GROCERIES"
    FOOD_RESTAURANTS = "FOOD_RESTAURANTS"
    FOOD_COFFEE = "FOOD_COFFEE"
    TRANSPORT_FUEL = "TRANSPORT_FUEL"
    TRANSPORT_PUBLIC = "TRANSPORT_PUBLIC"
    TRANSPORT_TAXI = "TRANSPORT_TAXI"
    UTILITIES_ELECTRICITY = "UTILITIES_ELECTRICITY"
    UTILITIES_WATER = "UTILITIES_WATER"
    UTILITIES_GAS = "UTILITIES_GAS"
    UTILITIES_INTERNET = "UTILITIES_INTERNET"
    SHOPPING_CLOTHES = "SHOPPING_CLOTHES"
    SHOPPING_ELECTRONICS = "SHOPPING_ELECTRONICS"
    ENTERTAINMENT_STREAMING = "ENTERTAINMENT_STREAMING"
    ENTERTAINMENT_GAMES = "ENTERTAINMENT_GAMES"
    ENTERTAINMENT_EVENTS = "ENTERTAINMENT_EVENTS"
    HEALTH_PHARMACY = "HEALTH_PHARMACY"
    HEALTH_DOCTOR = "HEALTH_DOCTOR"
    HEALTH_GYM = "HEALTH_GYM"
    OTHER_EXPENSE = "OTHER_EXPENSE"
    # Income
    SALARY = "SALARY"
    REFUND = "REFUND"
    OTHER_INCOME = "OTHER_INCOME"

    @property
    def display_name(self) -> str:
        return _CATEGORY_NAMES[self]

    @property
    def is_expense(self) -> bool:
        return self not in _INCOME_CATEGORIES


_CATEGORY_NAMES: dict[Category, str] = {
    Category.FOOD_GROCERIES: "Groceries",
    Category.FOOD_RESTAURANTS: "Restaurants",
    Category.FOOD_COFFEE: "Coffee & Drinks",
    Category.TRANSPORT_FUEL: "Fuel",
    Category.TRANSPORT_PUBLIC: "Public Transport",
    Category.TRANSPORT_TAXI: "Taxi/Ride",
    Category.UTILITIES_ELECTRICITY: "Electricity",
    Category.UTILITIES_WATER: "Water",
    Category.UTILITIES_GAS: "Gas/Heating",
    Category.UTILITIES_INTERNET: "Internet",
    Category.SHOPPING_CLOTHES: "Clothing",
    Category.SHOPPING_ELECTRONICS: "Electronics",
    Category.ENTERTAINMENT_STREAMING: "Streaming",
    Category.ENTERTAINMENT_GAMES: "Games",
    Category.ENTERTAINMENT_EVENTS: "Events",
    Category.HEALTH_PHARMACY: "Pharmacy",
    Category.HEALTH_DOCTOR: "Medical",
    Category.HEALTH_GYM: "Fitness",
    Category.OTHER_EXPENSE: "Other",
    Category.SALARY: "Salary",
    Category.REFUND: "Refund",
    Category.OTHER_INCOME: "Other Income",
}

_INCOME_CATEGORIES = frozenset({Category.SALARY, Category.REFUND, Category.OTHER_INCOME})


class NumberStyle(Enum):
    """Numeric formatting convention a locale pattern was written for."""

    DOT_GROUPED_COMMA_DECIMAL = "1.234,56"
    COMMA_DECIMAL = "1234,56"
    COMMA_GROUPED_DOT_DECIMAL = "1,234.56"
    DOT_DECIMAL = "1234.56"
    DOT_GROUPED_INTEGER = "1.234"
    COMMA_GROUPED_INTEGER = "1,234"
    PLAIN_INTEGER = "1234"


class CaptureOutcome(StrEnum):
    """What happened to one event on its way through the pipeline."""

    REJECTED = "rejected"  # filtered out by source/sender whitelist
    UNPARSED = "unparsed"  # no amount could be extracted
    IGNORED = "ignored"  # informational notice, or income while tracking is off
    DUPLICATE = "duplicate"
    CAPTURED = "captured"
    FAILED = "failed"  # unexpected error or storage failure


# ---------------------------------------------------------------------------
# Pipeline records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NotificationEvent:
    """A raw event delivered by the OS boundary; consumed once."""

    source_package: str
    title: str
    text: str
    posted_at_ms: int
    source_kind: SourceKind = SourceKind.NOTIFICATION

    @property
    def full_text(self) -> str:
        return f"{self.title} {self.text}".strip()


@dataclass(frozen=True, slots=True)
class RawAmount:
    """Extractor output: a positive amount and the raw currency token."""

    value: Decimal
    token: str
    pattern: str
    style: NumberStyle | None = None


@dataclass(frozen=True, slots=True)
class ParsedAmount:
    """A normalized amount expressed in the canonical (home) currency.

    ``original_value``/``original_currency`` are present only when a
    conversion happened; both are absent when the parsed currency already is
    the canonical one.
    """

    value: Decimal
    currency: Currency
    original_value: Decimal | None = None
    original_currency: Currency | None = None

    def __post_init__(self) -> None:
        if self.value <= 0:
            raise ValueError("ParsedAmount.value must be positive")
        if (self.original_value is None) != (self.original_currency is None):
            raise ValueError("original_value and original_currency must be set together")
        if self.original_currency is not None and self.original_currency == self.currency:
            raise ValueError("original fields must be absent when no conversion occurred")

    @property
    def converted(self) -> bool:
        return self.original_currency is not None


@dataclass(frozen=True, slots=True)
class CandidateTransaction:
    """A transiently built transaction record, not yet persisted."""

    amount: Decimal
    currency: Currency
    type: TransactionType
    description: str
    timestamp: int
    source_kind: SourceKind
    category: Category = Category.OTHER_EXPENSE
    merchant: str | None = None
    original_amount: Decimal | None = None
    original_currency: Currency | None = None
    credits_earned: int = 0
    source_package: str | None = None

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise ValueError("CandidateTransaction.amount must be positive")


@dataclass(frozen=True, slots=True)
class StoredTransaction:
    """A persisted transaction as returned by the recent-window query."""

    id: int | str
    amount: Decimal
    source_kind: SourceKind
    timestamp: int
    merchant: str | None = None
    currency: Currency | None = None
    type: TransactionType | None = None
    category: Category | None = None
    description: str | None = None


@dataclass(frozen=True, slots=True)
class CaptureAck:
    """Lightweight local acknowledgment emitted after a successful capture."""

    transaction_id: int | str
    amount: Decimal
    currency: Currency
    description: str
    credits: int


@dataclass(frozen=True, slots=True)
class CaptureResult:
    outcome: CaptureOutcome
    candidate: CandidateTransaction | None = None
    transaction_id: int | str | None = None
    reason: str | None = None


# ---------------------------------------------------------------------------
# External input
# ---------------------------------------------------------------------------


class EventRecord(BaseModel):
    """One line of a JSONL event log, validated before entering the pipeline."""

    model_config = ConfigDict(strict=False, extra="ignore", str_strip_whitespace=True)

    package: str
    title: str = ""
    text: str = ""
    posted_at_ms: int
    source_kind: SourceKind | None = None

    @field_validator("package")
    @classmethod
    def _package_non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("package must be non-empty")
        return v

    @field_validator("posted_at_ms")
    @classmethod
    def _timestamp_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("posted_at_ms must be >= 0")
        return v

    def to_event(self, config: CaptureConfig) -> NotificationEvent:
        """Build the pipeline event, inferring SMS for the configured SMS apps."""

        kind = self.source_kind
        if kind is None:
            sms = self.package in config.sms_packages
            kind = SourceKind.SMS if sms else SourceKind.NOTIFICATION
        return NotificationEvent(
            source_package=self.package,
            title=self.title,
            text=self.text,
            posted_at_ms=self.posted_at_ms,
            source_kind=kind,
        )


__all__ = [
    "CandidateTransaction",
    "CaptureAck",
    "CaptureOutcome",
    "CaptureResult",
    "Category",
    "Currency",
    "EventRecord",
    "NotificationEvent",
    "NumberStyle",
    "ParsedAmount",
    "RawAmount",
    "SourceKind",
    "StoredTransaction",
    "TransactionType",
]
