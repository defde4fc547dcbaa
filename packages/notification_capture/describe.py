"""Short human-readable labels for captured transactions."""

from __future__ import annotations

from .amounts import format_amount
from .models import NumberStyle, ParsedAmount


def _original_label(amount: ParsedAmount) -> str | None:
    if amount.original_value is None or amount.original_currency is None:
        return None
    value = format_amount(amount.original_value, NumberStyle.DOT_DECIMAL)
    return f"{value} {amount.original_currency}"


def build_description(
    text: str,
    merchant: str | None,
    amount: ParsedAmount,
    *,
    fallback: str | None = None,
    max_length: int = 100,
) -> str:
    """Compose the description, most specific source first.

    1. ``"Payment at {merchant}"``, with ``" (40.00 BAM)"`` appended when a
       conversion happened.
    2. ``"Transaction (40.00 BAM)"`` for a converted amount without merchant.
    3. ``fallback`` when given (income labels).
    4. The raw text, cut to ``max_length`` with a ``"..."`` marker.
    """

    original = _original_label(amount)
    if merchant:
        return f"Payment at {merchant} ({original})" if original else f"Payment at {merchant}"
    if original:
        return f"Transaction ({original})"
    if fallback:
        return fallback

    flat = " ".join(text.split())
    if len(flat) <= max_length:
        return flat
    return flat[: max_length - 3] + "..."


__all__ = ["build_description"]
