"""Checkout redirect parameters: extraction and clean-up."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Optional, Sequence, Union
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

SESSION_PARAM_NAMES: Sequence[str] = ("cs", "session_id")
PENDING_PARAM = "pending"
REDIRECT_PARAMS = frozenset({*SESSION_PARAM_NAMES, PENDING_PARAM})

QueryLike = Union[str, Mapping[str, object], Iterable[tuple]]


@dataclass(frozen=True, slots=True)
class CheckoutRedirect:
    session_id: Optional[str]
    pending: bool

    @property
    def has_session(self) -> bool:
        return self.session_id is not None


NO_SESSION = CheckoutRedirect(session_id=None, pending=False)


def _query_pairs(query: QueryLike) -> list[tuple[str, str]]:
    if isinstance(query, str):
        text = query
        if "?" in text or "://" in text:
            text = urlsplit(text).query
        return parse_qsl(text.lstrip("?"), keep_blank_values=True)
    if isinstance(query, Mapping):
        pairs: list[tuple[str, str]] = []
        for key, value in query.items():
            if isinstance(value, (list, tuple)):
                pairs.extend((str(key), "" if item is None else str(item)) for item in value)
            else:
                pairs.append((str(key), "" if value is None else str(value)))
        return pairs
    return [(str(key), "" if value is None else str(value)) for key, value in query]


def _first_value(pairs: Sequence[tuple[str, str]], name: str) -> Optional[str]:
    for key, value in pairs:
        if key == name:
            return value
    return None


def extract_checkout_redirect(query: QueryLike) -> CheckoutRedirect:
    """Read the checkout session id and the pending marker from a redirect.

    ``cs`` and ``session_id`` are synonyms; the first non-empty one wins. The
    pending flag is only set by the literal ``pending=1``.
    """

    pairs = _query_pairs(query)
    session_id: Optional[str] = None
    for name in SESSION_PARAM_NAMES:
        candidate = (_first_value(pairs, name) or "").strip()
        if candidate:
            session_id = candidate
            break
    if session_id is None:
        return NO_SESSION
    return CheckoutRedirect(session_id=session_id, pending=_first_value(pairs, PENDING_PARAM) == "1")


def strip_redirect_params(url: str) -> str:
    """Return ``url`` without the one-time checkout redirect parameters."""

    parts = urlsplit(url)
    kept = [(key, value) for key, value in parse_qsl(parts.query, keep_blank_values=True) if key not in REDIRECT_PARAMS]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(kept), parts.fragment))


class RedirectLocation:
    """The visible page URL, rewritable without a reload (history.replaceState)."""

    def __init__(self, url: str, *, on_replace: Optional[Callable[[str], None]] = None) -> None:
        self._url = url
        self._on_replace = on_replace

    @property
    def url(self) -> str:
        return self._url

    def checkout_redirect(self) -> CheckoutRedirect:
        return extract_checkout_redirect(self._url)

    def clear_redirect_params(self) -> bool:
        """Drop the redirect parameters; returns False when nothing changed."""
        cleaned = strip_redirect_params(self._url)
        if cleaned == self._url:
            return False
        logger.debug("Clearing checkout redirect params from %s", self._url)
        self._url = cleaned
        if self._on_replace is not None:
            self._on_replace(cleaned)
        return True


__all__ = [
    "CheckoutRedirect",
    "NO_SESSION",
    "REDIRECT_PARAMS",
    "RedirectLocation",
    "extract_checkout_redirect",
    "strip_redirect_params",
]
