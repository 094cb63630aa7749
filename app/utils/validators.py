from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from app.exceptions import FailureKind, IntradayFailure

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
_TIMESTAMP_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")
TIME_SERIES_PREFIX = "time series"

NOTE_FIELD = "Note"
ERROR_MESSAGE_FIELD = "Error Message"


def _clean_numeric_text(value: Any) -> str | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return repr(value)
    if not isinstance(value, str):
        return None
    if "_" in value:
        return None
    cleaned = value.strip().replace(",", "")
    return cleaned or None


def parse_float(value: Any) -> float | None:
    """Parse a JSON string or number as a finite float, or return None."""
    text = _clean_numeric_text(value)
    if text is None:
        return None
    try:
        casted = float(text)
    except ValueError:
        return None
    if not math.isfinite(casted):
        return None
    return casted


def parse_int(value: Any) -> int | None:
    """Parse a JSON string or number as an integral value, or return None.

    ``"1e3"`` and ``"100.0"`` are accepted, ``"100.5"`` is not.
    """
    text = _clean_numeric_text(value)
    if text is None:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    if not number.is_finite() or number != number.to_integral_value():
        return None
    return int(number)


def parse_bar_timestamp(value: str) -> datetime | None:
    if not isinstance(value, str) or not _TIMESTAMP_PATTERN.match(value):
        return None
    try:
        parsed = datetime.strptime(value, TIMESTAMP_FORMAT)
    except ValueError:
        return None
    return parsed.replace(tzinfo=timezone.utc)


def _sentinel_text(value: Any, fallback: str) -> str:
    if value is None:
        return fallback
    return value if isinstance(value, str) else str(value)


def validate_response(document: Any) -> IntradayFailure | None:
    """Check the upstream body for rate-limit notes and error messages.

    A ``Note`` wins over an ``Error Message`` when both are present.
    """
    if not isinstance(document, dict):
        return None
    if NOTE_FIELD in document:
        return IntradayFailure(
            FailureKind.UPSTREAM_ADVISORY,
            _sentinel_text(document[NOTE_FIELD], "AlphaVantage returned a note (rate limit or other)."),
        )
    if ERROR_MESSAGE_FIELD in document:
        return IntradayFailure(
            FailureKind.UPSTREAM_CLIENT,
            _sentinel_text(document[ERROR_MESSAGE_FIELD], "AlphaVantage returned an error."),
        )
    return None


def extract_time_series(document: Any) -> dict[str, Any] | None:
    if not isinstance(document, dict):
        return None
    for name, value in document.items():
        if name.lower().startswith(TIME_SERIES_PREFIX):
            return value if isinstance(value, dict) else None
    return None
