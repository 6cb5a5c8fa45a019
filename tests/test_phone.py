from __future__ import annotations

import pytest

from services.phone import clean, format_for_display, is_likely_e164, normalise_to_e164


def test_clean_keeps_leading_plus():
    assert clean(" +44 (0)7700-900 123 ") == "+4407700900123"
    assert clean("07700 900123") == "07700900123"
    assert clean(None) == ""


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("07700 900123", "+447700900123"),
        ("+447700900123", "+447700900123"),
        ("7700900123", "+447700900123"),
        ("", ""),
    ],
)
def test_normalise_to_e164(raw, expected):
    assert normalise_to_e164(raw) == expected


def test_normalise_without_default_country_leaves_digits():
    assert normalise_to_e164("07700900123", None) == "07700900123"


def test_is_likely_e164():
    assert is_likely_e164("+447700900123")
    assert not is_likely_e164("12345")


def test_format_uk_mobile_and_landline():
    assert format_for_display("07700900123") == "+44 7700 900 123"
    assert format_for_display("020 7946 0000") == "+44 207 946 0000"
