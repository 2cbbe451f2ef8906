"""Executor dispatching JSON requests to OpenAI-compatible backends."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .auth import API_KEY_ATTRIBUTE, BASE_URL_ATTRIBUTE, Auth, ConfigurationError, CredentialsError
from .config import ExecutorConfig
from .core import AsyncHttpClient, SyncHttpClient, with_retry, with_retry_async
from .wire_api import WireAPI, build_request_url, resolve_wire_api

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedRequest:
    """Everything the transport needs to issue one call."""

    url: str
    wire_api: WireAPI
    headers: Dict[str, str]
    body: Dict[str, Any]


class OpenAICompatExecutor:
    """Send requests to a backend that speaks an OpenAI-compatible protocol.

    The executor owns no request translation: callers pass a body already
    shaped for the backend's wire API, which is chosen from the auth record's
    ``wire_api`` attribute.
    """

    def __init__(
        self,
        provider: str,
        config: Optional[ExecutorConfig] = None,
        *,
        sync_client: Optional[SyncHttpClient] = None,
        async_client: Optional[AsyncHttpClient] = None,
    ) -> None:
        self._provider = provider
        self._config = config or ExecutorConfig()
        self._sync_client = sync_client or SyncHttpClient(timeout=self._config.timeout)
        self._async_client = async_client or AsyncHttpClient(timeout=self._config.timeout)

    def identifier(self) -> str:
        return self._provider

    def resolve_wire_api(self, auth: Optional[Auth]) -> WireAPI:
        return resolve_wire_api(auth)

    def build_request_url(self, base_url: str, auth: Optional[Auth]) -> str:
        return build_request_url(base_url, auth)

    def base_url_for(self, auth: Optional[Auth]) -> str:
        base_url = (auth.attribute(BASE_URL_ATTRIBUTE) if auth else None) or ""
        base_url = base_url.strip() or (self._config.base_url or "").strip()
        if not base_url:
            raise ConfigurationError(f"{self._provider} requires a base_url")
        return base_url

    def headers(self, auth: Optional[Auth]) -> Dict[str, str]:
        api_key = (auth.attribute(API_KEY_ATTRIBUTE) if auth else None) or self._config.api_key
        if not api_key or not api_key.strip():
            raise CredentialsError(f"{self._provider} requires an API key")
        headers = {
            "Authorization": f"Bearer {api_key.strip()}",
            "Content-Type": "application/json",
        }
        if self._config.extra_headers:
            headers.update(self._config.extra_headers)
        return headers

    def prepare(self, payload: Dict[str, Any], auth: Optional[Auth]) -> PreparedRequest:
        url = self.build_request_url(self.base_url_for(auth), auth)
        return PreparedRequest(
            url=url,
            wire_api=self.resolve_wire_api(auth),
            headers=self.headers(auth),
            body=dict(payload),
        )

    def execute(self, payload: Dict[str, Any], auth: Optional[Auth]) -> Dict[str, Any]:
        prepared = self.prepare(payload, auth)
        _LOGGER.debug("%s: POST %s (wire_api=%s)", self._provider, prepared.url, prepared.wire_api.value)
        call = with_retry(self._config.retry)(self._sync_client.request)
        return call("POST", prepared.url, headers=prepared.headers, json_body=prepared.body)

    async def aexecute(self, payload: Dict[str, Any], auth: Optional[Auth]) -> Dict[str, Any]:
        prepared = self.prepare(payload, auth)
        _LOGGER.debug("%s: POST %s (wire_api=%s)", self._provider, prepared.url, prepared.wire_api.value)
        call = with_retry_async(self._config.retry)(self._async_client.request)
        return await call("POST", prepared.url, headers=prepared.headers, json_body=prepared.body)
