"""Lenient conversions for values coming from external API payloads."""

import logging
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """
    Parse a monetary amount, falling back to ``default`` when it is not numeric.

    Accepts Decimal, int, float and numeric strings. Booleans, NaN, infinities
    and anything unparseable yield ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            logger.debug(f"Non-numeric amount {value!r}, using {default}")
            return default

    if not result.is_finite():
        return default
    return result


def to_strict_decimal(value: Any) -> Decimal:
    """Parse a decimal, raising ``ValueError`` instead of defaulting."""
    if value is None or isinstance(value, bool):
        raise ValueError(f"Invalid decimal value: {value!r}")
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid decimal value: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Invalid decimal value: {value!r}")
    return result


def to_positive_int(value: Any, field: str = "quantity") -> int:
    """Parse a strictly positive integer (``"2"``, ``2`` and ``2.0`` are accepted)."""
    if value is None or isinstance(value, bool):
        raise ValueError(f"{field} must be a positive integer, got {value!r}")
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"{field} must be a positive integer, got {value!r}") from e

    if not number.is_finite() or number != number.to_integral_value() or number <= 0:
        raise ValueError(f"{field} must be a positive integer, got {value!r}")
    return int(number)


def ensure_utc_datetime(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime carries a timezone; naive values are assumed to be UTC.

    Args:
        dt: Naive or aware datetime

    Returns:
        Aware datetime, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is not None:
        return dt

    return dt.replace(tzinfo=UTC)


def parse_timestamp(value: Any) -> datetime:
    """
    Parse an ISO-8601 timestamp (``Z`` suffix allowed) or datetime into aware UTC.

    Raises:
        ValueError: If the value is not a timestamp
    """
    if isinstance(value, datetime):
        return ensure_utc_datetime(value).astimezone(UTC)
    if isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise ValueError(f"Invalid timestamp: {value!r}") from e
        return ensure_utc_datetime(parsed).astimezone(UTC)
    raise ValueError(f"Invalid timestamp: {value!r}")


def is_truthy(value: Any) -> bool:
    """Interpret payload flags the way form/JSON APIs send them."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)
