"""Phone number clean-up and display formatting (UK default)."""

from __future__ import annotations

import re
from typing import Literal, Optional

DefaultCountry = Optional[Literal["GB"]]

_NON_DIGITS = re.compile(r"\D")
_E164_DIGITS = re.compile(r"^\d{10,15}$")
_BARE_DIGITS = re.compile(r"^\d{6,15}$")
_GENERIC_GROUPS = re.compile(r"(\d{3,4})(?=\d)")
_UK_MOBILE = re.compile(r"^(\d{4})(\d{3})(\d{3})$")
_UK_LANDLINE = re.compile(r"^(\d{3})(\d{3})(\d{4})$")


def clean(raw: Optional[str]) -> str:
    """Strip everything except digits, keeping a leading ``+``."""
    trimmed = (raw or "").strip()
    if not trimmed:
        return ""
    digits = _NON_DIGITS.sub("", trimmed)
    return f"+{digits}" if trimmed.startswith("+") else digits


def is_likely_e164(raw: Optional[str]) -> bool:
    cleaned = clean(raw)
    digits = cleaned[1:] if cleaned.startswith("+") else cleaned
    return bool(_E164_DIGITS.match(digits))


def normalise_to_e164(raw: Optional[str], default_country: DefaultCountry = "GB") -> str:
    value = clean(raw)
    if not value:
        return ""
    if value.startswith("+"):
        return value
    if default_country == "GB" and value.startswith("0"):
        return f"+44{value[1:]}"
    if default_country == "GB" and _BARE_DIGITS.match(value):
        return f"+44{value}"
    return value


def format_for_display(raw: Optional[str]) -> str:
    """``"07700900123"`` -> ``"+44 7700 900 123"``; other numbers get loose grouping."""
    number = normalise_to_e164(raw, "GB")
    if not number.startswith("+44"):
        body = number[1:] if number.startswith("+") else number
        return "+" + _GENERIC_GROUPS.sub(r"\1 ", body)
    body = number[3:]
    if body.startswith("7"):
        return "+44 " + _UK_MOBILE.sub(r"\1 \2 \3", body)
    return "+44 " + _UK_LANDLINE.sub(r"\1 \2 \3", body)


__all__ = ["clean", "format_for_display", "is_likely_e164", "normalise_to_e164"]
