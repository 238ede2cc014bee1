"""
Input validation for device payloads and query parameters.
"""

import math
from typing import Any

from app.core.exceptions import ValidationError

# JSON key -> model field
READING_FIELDS = {
    "temperature": "temperature",
    "humidity": "humidity",
    "pressure": "pressure",
    "gasResistance": "gas_resistance",
}

INVALID_READING_MESSAGE = (
    "Invalid data: temperature, humidity, pressure, and gasResistance must be numbers"
)


def is_number(value: Any) -> bool:
    """
    Check for a finite JSON number.

    bool is an int subclass in Python but `true` is not a number in JSON,
    so it is rejected along with numeric strings, NaN and infinities.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(float(value))
    except OverflowError:
        # JSON integer literal beyond float range
        return False


def validate_reading_payload(body: Any) -> dict[str, float]:
    """
    Check that all four measurement fields are present and numeric.

    Args:
        body: Decoded JSON body

    Returns:
        Dict keyed by model field names with float values

    Raises:
        ValidationError: if the body is not an object or any field is
            missing or not a number (nothing partial is accepted)
    """
    if not isinstance(body, dict):
        raise ValidationError(INVALID_READING_MESSAGE)

    values = {}
    for key, field in READING_FIELDS.items():
        value = body.get(key)
        if not is_number(value):
            raise ValidationError(INVALID_READING_MESSAGE)
        values[field] = float(value)
    return values


def parse_limit(raw: str | None, default: int = 1000) -> int:
    """
    Parse the `limit` query parameter.

    Anything that is not a positive integer string falls back to the
    default instead of failing the request.
    """
    if raw is None:
        return default
    try:
        limit = int(raw.strip())
    except (TypeError, ValueError):
        return default
    return limit if limit > 0 else default
