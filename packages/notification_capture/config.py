"""Deployment configuration for the capture pipeline.

``CaptureConfig`` is an immutable pydantic model injected into every
component that needs a tunable value. Nothing in the package reads module
level mutable state, so tests can build isolated configs side by side.

``load_config`` layers, lowest to highest precedence: model defaults, an
optional JSON file (``path`` or ``NC_CONFIG_PATH``), then ``NC_*``
environment variables.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from decimal import Decimal
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from .models import Currency

DEFAULT_BANK_PACKAGES: frozenset[str] = frozenset(
    {
        # Serbia
        "rs.raiffeisenbank.mobilebanking",
        "com.raiffeisen.mobile",
        "rs.unicreditbank.mobile",
        "rs.intesasanpaolo.mbanking",
        "rs.kombank.mbanking",
        "rs.aikbanka.mbanking",
        "rs.erstedigital.george",
        "rs.otp.mbanking",
        "rs.otp.bank",
        "rs.nlb.mbanking",
        "rs.postanska.mbanking",
        "rs.procredit.mbanking",
        "rs.api.mbanking",
        "rs.mts.banka",
        # Bosnia, Montenegro, Croatia
        "hr.pbz.mbanking",
        "hr.zaba.mbanking",
        "ba.raiffeisen.mbanking",
        "ba.unicredit.mbanking",
        "me.ckb.mbanking",
        "me.nlb.mbanking",
        # Development builds
        "site.giboworks.budgettracker.test",
    }
)

DEFAULT_SMS_PACKAGES: frozenset[str] = frozenset(
    {
        "com.google.android.apps.messaging",
        "com.samsung.android.messaging",
        "com.android.mms",
    }
)

# Some banks send alerts from plain phone numbers, hence the country prefixes.
DEFAULT_SMS_SENDERS: frozenset[str] = frozenset(
    {
        "RAIFFEISEN",
        "INTESA",
        "OTP",
        "UNICREDIT",
        "ERSTE",
        "KOMBANK",
        "AIK",
        "NLB",
        "PROCREDIT",
        "POSTANSKA",
        "381",
        "+381",
    }
)


class CaptureConfig(BaseModel):
    """Immutable, validated tunables for one deployment."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    home_currency: Currency = Currency.RSD
    bank_packages: frozenset[str] = DEFAULT_BANK_PACKAGES
    sms_packages: frozenset[str] = DEFAULT_SMS_PACKAGES
    sms_senders: frozenset[str] = DEFAULT_SMS_SENDERS

    dedup_window_ms: int = 5 * 60 * 1000
    amount_tolerance: Decimal = Decimal("0.01")
    similarity_threshold: float = 0.7

    merchant_max_length: int = 50
    description_max_length: int = 100
    reward_credits: int = 5

    track_income: bool = True
    skip_informational: bool = True

    max_workers: int = 4
    serialize_capture: bool = False

    @field_validator("home_currency", mode="before")
    @classmethod
    def _upper_currency(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("sms_senders", mode="after")
    @classmethod
    def _strip_senders(cls, v: frozenset[str]) -> frozenset[str]:
        senders = frozenset(s.strip() for s in v if s.strip())
        if not senders:
            raise ValueError("sms_senders must contain at least one identifier")
        return senders

    @field_validator("dedup_window_ms", "merchant_max_length", "max_workers")
    @classmethod
    def _positive_int(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("description_max_length")
    @classmethod
    def _room_for_ellipsis(cls, v: int) -> int:
        if v < 4:
            raise ValueError("description_max_length must be at least 4")
        return v

    @field_validator("reward_credits")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("reward_credits must be >= 0")
        return v

    @field_validator("amount_tolerance")
    @classmethod
    def _tolerance_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("amount_tolerance must be >= 0")
        return v

    @field_validator("similarity_threshold")
    @classmethod
    def _unit_interval(cls, v: float) -> float:
        if 0.0 <= v <= 1.0:
            return v
        raise ValueError("similarity_threshold must be within [0,1]")

    @property
    def whitelisted_packages(self) -> frozenset[str]:
        return self.bank_packages | self.sms_packages


# Environment variable -> config field. Values are handed to pydantic as
# strings; its coercion handles ints, decimals, floats and booleans.
_ENV_FIELDS: Mapping[str, str] = {
    "NC_HOME_CURRENCY": "home_currency",
    "NC_DEDUP_WINDOW_MS": "dedup_window_ms",
    "NC_AMOUNT_TOLERANCE": "amount_tolerance",
    "NC_SIMILARITY_THRESHOLD": "similarity_threshold",
    "NC_TRACK_INCOME": "track_income",
    "NC_SKIP_INFORMATIONAL": "skip_informational",
    "NC_MAX_WORKERS": "max_workers",
    "NC_SERIALIZE_CAPTURE": "serialize_capture",
}


def load_config(
    path: str | os.PathLike[str] | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> CaptureConfig:
    """Build a :class:`CaptureConfig` from defaults, a JSON file and env vars.

    Raises ``pydantic.ValidationError`` on invalid values and ``OSError`` /
    ``json.JSONDecodeError`` when the file cannot be read.
    """

    environ = os.environ if env is None else env
    data: dict[str, Any] = {}

    file_path = path or environ.get("NC_CONFIG_PATH")
    if file_path:
        with Path(file_path).open("r", encoding="utf-8") as f:
            loaded = json.load(f)
        if not isinstance(loaded, dict):
            raise ValueError(f"config file must hold a JSON object: {file_path}")
        data.update(loaded)

    for var, field in _ENV_FIELDS.items():
        raw = environ.get(var)
        if raw is not None and raw.strip():
            data[field] = raw.strip()

    return CaptureConfig.model_validate(data)


__all__ = [
    "CaptureConfig",
    "DEFAULT_BANK_PACKAGES",
    "DEFAULT_SMS_PACKAGES",
    "DEFAULT_SMS_SENDERS",
    "load_config",
]
