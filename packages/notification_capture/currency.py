"""Currency token normalization and conversion to the home currency.

Rates are a static sheet, not a market feed. The rate collaborator is any
object with ``rate(currency) -> Decimal`` returning the multiplier that turns
one unit of ``currency`` into the home currency; :class:`StaticRateTable` is
the shipped implementation.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType
from typing import Protocol

from .logging_setup import get_logger
from .models import Currency, ParsedAmount, RawAmount
from .patterns import PatternTables, default_tables

logger = get_logger("notification_capture.currency")

_CENT = Decimal("0.01")

# 1 unit of currency = N RSD. Approximate; refresh periodically.
RSD_RATE_SHEET: Mapping[Currency, Decimal] = MappingProxyType(
    {
        Currency.RSD: Decimal("1"),
        Currency.EUR: Decimal("117.5"),
        Currency.USD: Decimal("108.0"),
        Currency.BAM: Decimal("60.0"),
        Currency.MKD: Decimal("1.9"),
        Currency.HRK: Decimal("15.6"),
    }
)


class RateSource(Protocol):
    def rate(self, currency: Currency) -> Decimal: ...


class StaticRateTable:
    """Rates re-based from a reference sheet onto ``home``.

    ``sheet`` maps each currency to its value in the sheet's base currency
    (RSD for :data:`RSD_RATE_SHEET`). Cross rates are derived as
    ``sheet[c] / sheet[home]``.
    """

    def __init__(
        self,
        home: Currency = Currency.RSD,
        sheet: Mapping[Currency, Decimal] = RSD_RATE_SHEET,
    ) -> None:
        if home not in sheet:
            raise ValueError(f"rate sheet has no entry for home currency {home}")
        for cur, val in sheet.items():
            if val <= 0:
                raise ValueError(f"rate for {cur} must be positive")
        self.home = home
        self._sheet = MappingProxyType(dict(sheet))

    def rate(self, currency: Currency) -> Decimal:
        try:
            return self._sheet[currency] / self._sheet[self.home]
        except KeyError:
            raise KeyError(f"no rate for {currency}") from None

    def convert(self, amount: Decimal, source: Currency, target: Currency) -> Decimal:
        """Convert between any two sheet currencies (no rounding)."""

        if source == target:
            return amount
        return amount * self._sheet[source] / self._sheet[target]


class CurrencyNormalizer:
    """Map raw currency tokens to :class:`Currency` and convert to home."""

    def __init__(
        self,
        home: Currency,
        rates: RateSource | None = None,
        tables: PatternTables | None = None,
    ) -> None:
        self.home = home
        self._rates = rates if rates is not None else StaticRateTable(home)
        self._aliases = (tables or default_tables()).currency_aliases

    def resolve(self, token: str | None) -> Currency:
        """Return the canonical currency for ``token``; unknown -> home."""

        key = (token or "").strip().upper()
        if not key:
            return self.home
        found = self._aliases.get(key)
        if found is None:
            logger.debug("unknown currency token %r; assuming %s", token, self.home)
            return self.home
        return found

    def normalize(self, raw: RawAmount) -> ParsedAmount | None:
        """Express ``raw`` in the home currency.

        Returns ``None`` when the converted amount rounds to zero.
        """

        currency = self.resolve(raw.token)
        if currency == self.home:
            return ParsedAmount(value=raw.value, currency=self.home)

        converted = (raw.value * self._rates.rate(currency)).quantize(_CENT, rounding=ROUND_HALF_UP)
        if converted <= 0:
            logger.debug("%s %s converts to zero %s", raw.value, currency, self.home)
            return None
        return ParsedAmount(
            value=converted,
            currency=self.home,
            original_value=raw.value,
            original_currency=currency,
        )


__all__ = ["CurrencyNormalizer", "RSD_RATE_SHEET", "RateSource", "StaticRateTable"]
