"""Transport helpers for the OpenAI-compatible executor.

Provides safe JSON parsing, retry/backoff decorators and thin ``httpx``
wrappers for single JSON request/response exchanges.  Streaming is not
supported here.
"""
from __future__ import annotations

import asyncio
import json
import logging
import random
import re
import time
from dataclasses import dataclass
from functools import wraps
from typing import Any, Awaitable, Callable, Dict, FrozenSet, List, Optional, Tuple, TypeVar, Union

import httpx

_LOGGER = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def safe_json(data: Union[str, bytes, Dict[str, Any], List[Any], None]) -> Dict[str, Any]:
    """Parse JSON content without raising unexpected exceptions.

    Bodies wrapped in non-JSON noise (``while(1); {...}``) are retried once
    with the outermost object fragment.  If nothing can be recovered an empty
    dictionary is returned and the failure is logged.
    """

    if isinstance(data, dict):
        return data
    if isinstance(data, list):
        return {"values": data}
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")
    if not data:
        return {}
    try:
        return _as_dict(json.loads(data))
    except json.JSONDecodeError:
        match = _JSON_OBJECT.search(data)
        if match is None:
            _LOGGER.debug("failed to decode json payload", exc_info=True)
            return {}
    try:
        return _as_dict(json.loads(match.group(0)))
    except json.JSONDecodeError:
        _LOGGER.debug("failed to decode json fragment", exc_info=True)
        return {}


def _as_dict(value: Any) -> Dict[str, Any]:
    if isinstance(value, dict):
        return value
    if isinstance(value, list):
        return {"values": value}
    return {"value": value}


_T = TypeVar("_T")


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retrying transient failures.

    ``HTTPStatusError`` is only retried for statuses in ``retry_statuses`` or
    any 5xx; other client errors fail on the first attempt.
    """

    attempts: int = 3
    backoff_factor: float = 2.0
    min_backoff: float = 0.5
    max_backoff: float = 10.0
    jitter: float = 0.1
    retriable: Tuple[type, ...] = (httpx.TransportError, httpx.HTTPStatusError)
    retry_statuses: FrozenSet[int] = frozenset({408, 429})


def _sleep(duration: float) -> None:
    time.sleep(duration)


async def _asleep(duration: float) -> None:
    await asyncio.sleep(duration)


def _retry_delay(config: RetryConfig, attempt: int, error: BaseException) -> Optional[float]:
    """Return how long to wait before the next attempt, or ``None`` to give up."""

    if attempt >= config.attempts or not isinstance(error, config.retriable):
        return None
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status not in config.retry_statuses and status < 500:
            return None
        retry_after = _retry_after_seconds(error.response.headers)
        if retry_after is not None:
            return min(retry_after, config.max_backoff)
    return _compute_backoff(config, attempt)


def _retry_after_seconds(headers: httpx.Headers) -> Optional[float]:
    # Only the integer-seconds form of Retry-After is honoured.
    value = headers.get("Retry-After")
    if not value:
        return None
    try:
        seconds = int(value.strip())
    except ValueError:
        return None
    return float(seconds) if seconds > 0 else None


def with_retry(config: RetryConfig) -> Callable[[Callable[..., _T]], Callable[..., _T]]:
    """Decorator applying retry/backoff to a synchronous function."""

    def decorator(func: Callable[..., _T]) -> Callable[..., _T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> _T:
            attempt = 1
            while True:
                try:
                    return func(*args, **kwargs)
                except Exception as error:
                    delay = _retry_delay(config, attempt, error)
                    if delay is None:
                        raise
                    _LOGGER.debug("retrying %s in %.2fs (attempt %d)", func.__name__, delay, attempt, exc_info=error)
                    _sleep(delay)
                    attempt += 1

        return wrapper

    return decorator


def with_retry_async(config: RetryConfig) -> Callable[[Callable[..., Awaitable[_T]]], Callable[..., Awaitable[_T]]]:
    """Decorator applying retry/backoff to an async function."""

    def decorator(func: Callable[..., Awaitable[_T]]) -> Callable[..., Awaitable[_T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> _T:
            attempt = 1
            while True:
                try:
                    return await func(*args, **kwargs)
                except Exception as error:
                    delay = _retry_delay(config, attempt, error)
                    if delay is None:
                        raise
                    _LOGGER.debug("retrying %s in %.2fs (attempt %d)", func.__name__, delay, attempt, exc_info=error)
                    await _asleep(delay)
                    attempt += 1

        return wrapper

    return decorator


def _compute_backoff(config: RetryConfig, attempt: int) -> float:
    delay = config.min_backoff * config.backoff_factor ** (attempt - 1)
    if config.jitter:
        delay += random.uniform(0, config.jitter)
    return min(delay, config.max_backoff)


class SyncHttpClient:
    """Single-shot JSON client built on :mod:`httpx`.

    ``transport`` is handed to :class:`httpx.Client`; tests pass an
    :class:`httpx.MockTransport`.
    """

    def __init__(self, timeout: float = 30.0, *, transport: Optional[httpx.BaseTransport] = None) -> None:
        self._timeout = timeout
        self._transport = transport

    def request(self, method: str, url: str, *, headers: Optional[Dict[str, str]] = None,
                json_body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
            response = client.request(method, url, headers=headers, json=json_body)
            response.raise_for_status()
            return safe_json(response.text)


class AsyncHttpClient:
    """Asynchronous companion for :class:`SyncHttpClient`."""

    def __init__(self, timeout: float = 30.0, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._timeout = timeout
        self._transport = transport

    async def request(self, method: str, url: str, *, headers: Optional[Dict[str, str]] = None,
                      json_body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.request(method, url, headers=headers, json=json_body)
            response.raise_for_status()
            return safe_json(response.text)
