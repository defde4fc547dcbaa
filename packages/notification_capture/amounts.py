"""Locale-aware amount and currency extraction from free-form bank text.

The extractor walks the ordered locale patterns from
:class:`~notification_capture.patterns.PatternTables` and returns the first
positive amount. A pattern that matches but yields an unusable number is
logged and skipped; running out of patterns is the common "not a
transaction" case and returns ``None``.

Separator disambiguation is the same for every pattern: when both ``.`` and
``,`` occur, the last one is the decimal point and the other is grouping.
When only one separator type occurs, the pattern's
:class:`~notification_capture.patterns.SeparatorMode` decides.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .logging_setup import get_logger
from .models import NumberStyle, RawAmount
from .patterns import PatternTables, SeparatorMode, default_tables

logger = get_logger("notification_capture.amounts")

_SEPARATORS = (".", ",")


def parse_amount_token(token: str, mode: SeparatorMode) -> tuple[Decimal, NumberStyle]:
    """Parse a numeric token such as ``"1.234,56"`` into a ``Decimal``.

    Returns the value and the :class:`NumberStyle` the token was written in.
    Raises ``ValueError`` when the token holds anything but digits and
    separators.
    """

    s = token.strip()
    if not s:
        raise ValueError("amount token is empty")

    present = [sep for sep in _SEPARATORS if sep in s]
    decimal_sep: str | None = None
    group_sep: str | None = None

    if len(present) == 2:
        decimal_sep = "." if s.rfind(".") > s.rfind(",") else ","
        group_sep = "," if decimal_sep == "." else "."
    elif len(present) == 1:
        sep = present[0]
        if mode is SeparatorMode.DECIMAL:
            decimal_sep = sep
            if s.count(sep) > 1:
                group_sep = sep
        elif mode is SeparatorMode.GROUPED_INTEGER:
            group_sep = sep
        else:
            digits_after = len(s) - s.rfind(sep) - 1
            if s.count(sep) > 1 or digits_after == 3:
                group_sep = sep
            else:
                decimal_sep = sep

    if decimal_sep is not None:
        head, _, tail = s.rpartition(decimal_sep)
        if group_sep is not None:
            head = head.replace(group_sep, "")
        normalized = f"{head}.{tail}"
    elif group_sep is not None:
        normalized = s.replace(group_sep, "")
    else:
        normalized = s

    if not normalized.replace(".", "", 1).isdigit():
        raise ValueError(f"unexpected characters in amount: {token!r}")
    try:
        value = Decimal(normalized)
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {token!r}") from exc

    return value, _style_for(decimal_sep, group_sep)


def _style_for(decimal_sep: str | None, group_sep: str | None) -> NumberStyle:
    if decimal_sep == ",":
        return NumberStyle.DOT_GROUPED_COMMA_DECIMAL if group_sep else NumberStyle.COMMA_DECIMAL
    if decimal_sep == ".":
        return NumberStyle.COMMA_GROUPED_DOT_DECIMAL if group_sep else NumberStyle.DOT_DECIMAL
    if group_sep == ".":
        return NumberStyle.DOT_GROUPED_INTEGER
    if group_sep == ",":
        return NumberStyle.COMMA_GROUPED_INTEGER
    return NumberStyle.PLAIN_INTEGER


def format_amount(value: Decimal, style: NumberStyle) -> str:
    """Render ``value`` the way a bank using ``style`` would print it.

    Decimal styles always carry two fractional digits. Integer styles require
    an integral value.
    """

    if style in (
        NumberStyle.DOT_GROUPED_INTEGER,
        NumberStyle.COMMA_GROUPED_INTEGER,
        NumberStyle.PLAIN_INTEGER,
    ):
        if value != value.to_integral_value():
            raise ValueError(f"{style.name} cannot represent a fractional amount: {value}")
        whole = int(value)
        if style is NumberStyle.PLAIN_INTEGER:
            return str(whole)
        grouped = f"{whole:,}"
        return grouped.replace(",", ".") if style is NumberStyle.DOT_GROUPED_INTEGER else grouped

    q = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if style is NumberStyle.DOT_GROUPED_COMMA_DECIMAL:
        # Swap separators through a placeholder: 1,234.56 -> 1.234,56
        return f"{q:,.2f}".replace(",", "\0").replace(".", ",").replace("\0", ".")
    if style is NumberStyle.COMMA_DECIMAL:
        return f"{q:.2f}".replace(".", ",")
    if style is NumberStyle.COMMA_GROUPED_DOT_DECIMAL:
        return f"{q:,.2f}"
    return f"{q:.2f}"


class AmountExtractor:
    """Turn message text into a :class:`RawAmount` (or ``None``)."""

    def __init__(self, tables: PatternTables | None = None) -> None:
        self._patterns = (tables or default_tables()).amount_patterns

    def extract(self, text: str) -> RawAmount | None:
        for pattern in self._patterns:
            match = pattern.regex.search(text)
            if match is None:
                continue
            groups = match.groupdict()
            raw = groups.get("amount") or ""
            try:
                value, style = parse_amount_token(raw, pattern.mode)
            except ValueError as e:
                logger.warning("pattern %s matched %r but did not parse: %s", pattern.name, raw, e)
                continue
            if value <= 0:
                logger.debug("pattern %s matched a non-positive amount %r", pattern.name, raw)
                continue
            token = (groups.get("currency") or "").strip()
            return RawAmount(value=value, token=token, pattern=pattern.name, style=style)
        return None


__all__ = ["AmountExtractor", "format_amount", "parse_amount_token"]
