"""Wire API resolution and request URL construction.

OpenAI-compatible backends speak one of two request shapes: the legacy
``chat/completions`` surface or the newer ``responses`` surface.  The choice
is a hint stored on the auth record under :data:`WIRE_API_ATTRIBUTE`.  Both
helpers here are pure and never raise; anything unrecognised falls back to
:attr:`WireAPI.CHAT`.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .auth import Auth

_LOGGER = logging.getLogger(__name__)

WIRE_API_ATTRIBUTE = "wire_api"

CHAT_COMPLETIONS_PATH = "chat/completions"
RESPONSES_PATH = "responses"


class WireAPI(str, Enum):
    """Request/response shape expected by a backend."""

    CHAT = "chat"
    RESPONSES = "responses"

    @classmethod
    def default(cls) -> "WireAPI":
        return cls.CHAT


_SUFFIXES = {
    WireAPI.CHAT: CHAT_COMPLETIONS_PATH,
    WireAPI.RESPONSES: RESPONSES_PATH,
}


def suffix_for(variant: WireAPI) -> str:
    """Return the path appended to the base URL for ``variant``."""

    return _SUFFIXES[variant]


def resolve_wire_api(auth: Optional[Auth]) -> WireAPI:
    """Pick the wire API variant for ``auth``.

    ``auth`` may be ``None`` or any object exposing an ``attributes``
    mapping (normally :class:`compat_executor.auth.Auth`).  Absent records,
    absent mappings, a missing key and invalid values all yield
    :attr:`WireAPI.CHAT`.  Matching is case-sensitive after trimming
    surrounding whitespace.
    """

    if auth is None:
        return WireAPI.default()
    attributes = getattr(auth, "attributes", None)
    if attributes is None:
        return WireAPI.default()
    raw = attributes.get(WIRE_API_ATTRIBUTE)
    if raw is None:
        return WireAPI.default()
    if not isinstance(raw, str):
        _LOGGER.debug("ignoring non-string %s value %r", WIRE_API_ATTRIBUTE, raw)
        return WireAPI.default()

    value = raw.strip()
    if value == WireAPI.RESPONSES.value:
        return WireAPI.RESPONSES
    if value == WireAPI.CHAT.value:
        return WireAPI.CHAT
    _LOGGER.debug("unknown %s value %r, falling back to %s", WIRE_API_ATTRIBUTE, raw, WireAPI.default().value)
    return WireAPI.default()


def build_request_url(base_url: str, auth: Optional[Auth]) -> str:
    """Append the endpoint path for ``auth``'s wire API to ``base_url``.

    Exactly one ``/`` separates the base from the suffix.  The base URL is
    otherwise left untouched: no validation, no encoding, no trimming.

    >>> build_request_url("https://api.openai.com/v1", None)
    'https://api.openai.com/v1/chat/completions'
    """

    suffix = suffix_for(resolve_wire_api(auth))
    if base_url.endswith("/"):
        return f"{base_url}{suffix}"
    return f"{base_url}/{suffix}"


__all__ = [
    "CHAT_COMPLETIONS_PATH",
    "RESPONSES_PATH",
    "WIRE_API_ATTRIBUTE",
    "WireAPI",
    "build_request_url",
    "resolve_wire_api",
    "suffix_for",
]
