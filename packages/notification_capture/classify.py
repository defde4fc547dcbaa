"""Keyword-driven classification of bank messages.

Both classifiers are ordered rule tables evaluated top to bottom over
case-folded text; the first hit decides. Neither raises on a miss.

- :class:`TransactionTypeClassifier`: income keywords are checked before
  expense keywords, so a message carrying both (a refund of a card payment,
  say) is Income. No hit at all defaults to Expense, which dominates bank
  alert traffic.
- :class:`CategoryClassifier`: expense rules match against the message plus
  the extracted merchant; no hit is ``Category.OTHER_EXPENSE``. Income uses
  its own small table (salary, refund, other income).
"""

from __future__ import annotations

from .models import Category, TransactionType
from .patterns import PatternTables, default_tables


def _fold(*parts: str | None) -> str:
    return " ".join(p for p in parts if p).casefold()


class TransactionTypeClassifier:
    def __init__(self, tables: PatternTables | None = None) -> None:
        t = tables or default_tables()
        self._income = t.income_keywords
        self._expense = t.expense_keywords
        self._informational = t.informational_keywords

    def classify(self, text: str) -> TransactionType:
        folded = _fold(text)
        if any(k in folded for k in self._income):
            return TransactionType.INCOME
        if any(k in folded for k in self._expense):
            return TransactionType.EXPENSE
        return TransactionType.EXPENSE

    def is_informational(self, text: str) -> bool:
        """True for balance/OTP/reminder notices with no transaction keyword."""

        folded = _fold(text)
        if any(k in folded for k in self._income) or any(k in folded for k in self._expense):
            return False
        return any(k in folded for k in self._informational)


class CategoryClassifier:
    def __init__(self, tables: PatternTables | None = None) -> None:
        t = tables or default_tables()
        self._rules = t.category_rules
        self._income_rules = t.income_category_rules
        self._income_labels = t.income_labels

    def classify(self, text: str, merchant: str | None = None) -> Category:
        # Leading space so word-start keywords (" idea") also hit at offset 0.
        folded = " " + _fold(text, merchant)
        for rule in self._rules:
            if rule.matches(folded):
                return rule.result
        return Category.OTHER_EXPENSE

    def classify_income(self, text: str) -> Category:
        folded = _fold(text)
        for rule in self._income_rules:
            if rule.matches(folded):
                return rule.result
        return Category.OTHER_INCOME

    def income_label(self, text: str) -> str:
        folded = _fold(text)
        for rule in self._income_labels:
            if rule.matches(folded):
                return rule.result
        return "Income"


__all__ = ["CategoryClassifier", "TransactionTypeClassifier"]
