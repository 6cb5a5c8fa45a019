"""Errors raised by the activation flow."""

from __future__ import annotations

from typing import Optional


class ActivationError(Exception):
    """Base error for checkout activation failures."""

    code = "activation_error"

    def __init__(self, message: str, *, code: Optional[str] = None) -> None:
        super().__init__(message)
        if code:
            self.code = code

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""


class LookupFailedError(ActivationError):
    code = "lookup_failed"


class NoEmailAvailableError(ActivationError):
    code = "no_email"


__all__ = ["ActivationError", "LookupFailedError", "NoEmailAvailableError"]
