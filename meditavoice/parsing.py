"""Shared parsing helpers for configuration and request value normalization."""

from __future__ import annotations

import math


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_positive_number(value: object, field_name: str) -> float:
    """Parse a strictly positive number, rejecting booleans and blank values.

    Raises:
        ValueError: If the value is missing, non-numeric, or not greater than zero.
    """

    if isinstance(value, bool) or value is None:
        raise ValueError(f"`{field_name}` must be a positive number.")
    try:
        parsed = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"`{field_name}` must be a positive number.") from exc
    if not math.isfinite(parsed) or parsed <= 0:
        raise ValueError(f"`{field_name}` must be a positive number.")
    return parsed


def sanitize_filename_stem(value: str) -> str:
    """Replace non-alphanumeric characters with `_` and lowercase the result."""

    return "".join(
        character if character.isascii() and character.isalnum() else "_"
        for character in value
    ).lower()
