"""Unit tests for shared parsing helpers."""

from __future__ import annotations

import pytest

from meditavoice.parsing import (
    normalize_optional_string,
    parse_positive_number,
    sanitize_filename_stem,
)


def test_normalize_optional_string_strips_and_blanks() -> None:
    assert normalize_optional_string("  value ") == "value"
    assert normalize_optional_string("   ") is None
    assert normalize_optional_string(None) is None
    assert normalize_optional_string(5) == "5"


def test_parse_positive_number() -> None:
    """Positive numbers and numeric strings parse; everything else is rejected."""

    assert parse_positive_number("2.5", "amount") == 2.5
    assert parse_positive_number(3, "amount") == 3.0
    for invalid in (0, -1, "x", None, False, "nan", float("inf")):
        with pytest.raises(ValueError):
            parse_positive_number(invalid, "amount")


def test_sanitize_filename_stem_replaces_non_alphanumerics() -> None:
    """Non-alphanumeric characters become `_` and letters are lowercased."""

    assert sanitize_filename_stem("Evening Calm!") == "evening_calm_"
    assert sanitize_filename_stem("../etc/passwd") == "___etc_passwd"
    assert sanitize_filename_stem("Čaj") == "_aj"
