"""Request targeting for OpenAI-compatible backends.

OpenAI, Azure OpenAI, OpenRouter, Together AI, Fireworks AI and friends all
accept OpenAI-shaped requests, but not all of them expose the same surface.
An auth record's ``wire_api`` attribute selects between the legacy
``chat/completions`` endpoint and the ``responses`` endpoint; anything else
falls back to ``chat``.  :func:`build_request_url` turns a provider base URL
into the final endpoint, inserting exactly one ``/`` before the suffix.

:class:`OpenAICompatExecutor` composes the two with credentials from the
auth record and a small ``httpx`` transport.  See :mod:`compat_executor.config`
for the configuration file shape.
"""
from __future__ import annotations

from .auth import Auth, ConfigurationError, CredentialsError, ExecutorError
from .config import ExecutorConfig, load_configuration
from .executor import OpenAICompatExecutor, PreparedRequest
from .wire_api import WIRE_API_ATTRIBUTE, WireAPI, build_request_url, resolve_wire_api, suffix_for

__all__ = [
    "Auth",
    "ConfigurationError",
    "CredentialsError",
    "ExecutorConfig",
    "ExecutorError",
    "OpenAICompatExecutor",
    "PreparedRequest",
    "WIRE_API_ATTRIBUTE",
    "WireAPI",
    "build_request_url",
    "load_configuration",
    "resolve_wire_api",
    "suffix_for",
]
