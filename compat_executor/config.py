"""Configuration loading for OpenAI-compatible providers.

Configuration is resolved in the following order:

1. An explicit path passed to :func:`load_configuration`.
2. A YAML/JSON file referenced via the ``OPENAI_COMPAT_CONFIG`` environment variable.
3. Environment variables describing a single provider.

The YAML/JSON configuration supports the shape::

    default_provider: openrouter
    providers:
      openrouter:
        base_url: https://openrouter.ai/api/v1
        api_key: ${OPENROUTER_API_KEY}
        wire_api: chat
      fireworks:
        base_url: https://api.fireworks.ai/inference/v1/
        api_key: ${FIREWORKS_API_KEY}
        wire_api: responses
        timeout: 60
        retry:
          attempts: 5

Environment variable fallbacks:

``OPENAI_COMPAT_BASE_URL`` / ``OPENAI_COMPAT_API_KEY``
    Connection details for the provider.
``OPENAI_COMPAT_WIRE_API``
    ``chat`` (default) or ``responses``.
``OPENAI_COMPAT_PROVIDER``
    Name under which the provider is registered (``openai-compatible``).
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from .auth import Auth, ConfigurationError
from .core import RetryConfig

CONFIG_ENV_VAR = "OPENAI_COMPAT_CONFIG"
DEFAULT_PROVIDER_NAME = "openai-compatible"

# Settings consumed by the executor itself rather than stored on the auth record.
_EXECUTOR_SETTINGS = frozenset({"extra_headers", "retry", "timeout"})


@dataclass(frozen=True)
class ExecutorConfig:
    """Executor-level defaults used when the auth record carries no value."""

    base_url: Optional[str] = None
    api_key: Optional[str] = None
    extra_headers: Optional[Dict[str, str]] = None
    timeout: float = 30.0
    retry: RetryConfig = field(default_factory=RetryConfig)


def load_configuration(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    if path is None:
        env_path = os.getenv(CONFIG_ENV_VAR)
        if not env_path:
            return env_configuration()
        path = env_path
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    return read_config_file(path)


def read_config_file(path: Path) -> Dict[str, Any]:
    content = path.read_text(encoding="utf-8")
    if not content.strip():
        return {}
    # JSON is a subset of YAML, but json gives clearer errors for .json files.
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Failed to parse configuration {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration root must be a mapping")
    return expand_env(data)


def env_configuration() -> Dict[str, Any]:
    base_url = os.getenv("OPENAI_COMPAT_BASE_URL")
    if not base_url:
        return {"providers": {}}
    name = os.getenv("OPENAI_COMPAT_PROVIDER") or DEFAULT_PROVIDER_NAME
    settings: Dict[str, Any] = {
        "base_url": base_url,
        "api_key": os.getenv("OPENAI_COMPAT_API_KEY"),
        "wire_api": os.getenv("OPENAI_COMPAT_WIRE_API"),
    }
    return {"default_provider": name, "providers": {name: settings}}


def expand_env(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env(item) for item in value]
    if isinstance(value, str):
        return os.path.expandvars(value)
    return value


def select_provider(config: Dict[str, Any], name: Optional[str] = None) -> Tuple[str, Dict[str, Any]]:
    """Return ``(name, settings)`` for ``name`` or the default provider.

    Lookup is case-insensitive.  With no name and no ``default_provider`` a
    configuration holding exactly one provider selects that provider.
    """

    providers = {str(key).lower(): value for key, value in (config.get("providers") or {}).items()}
    if name is None:
        name = config.get("default_provider")
    if name is None:
        if len(providers) != 1:
            raise ConfigurationError("No provider selected and no default_provider configured")
        name = next(iter(providers))
    key = str(name).lower()
    settings = providers.get(key)
    if settings is None:
        raise ConfigurationError(f"No configuration for provider '{name}'")
    if not isinstance(settings, dict):
        raise ConfigurationError(f"Settings for provider '{name}' must be a mapping")
    return key, dict(settings)


def auth_from_settings(name: str, settings: Dict[str, Any]) -> Auth:
    """Build the auth record a credential store would hand to the executor."""

    attributes = {
        key: str(value)
        for key, value in settings.items()
        if key not in _EXECUTOR_SETTINGS and value is not None and not isinstance(value, (dict, list))
    }
    label = settings.get("label")
    return Auth(id=name, provider=name, label=str(label) if label is not None else None, attributes=attributes)


def executor_config_from_settings(settings: Dict[str, Any]) -> ExecutorConfig:
    retry_settings = settings.get("retry")
    if retry_settings is None:
        retry_settings = {}
    if not isinstance(retry_settings, dict):
        raise ConfigurationError(f"'retry' must be a mapping, got {type(retry_settings).__name__}")
    extra_headers = settings.get("extra_headers")
    if extra_headers is not None and not isinstance(extra_headers, dict):
        raise ConfigurationError(f"'extra_headers' must be a mapping, got {type(extra_headers).__name__}")
    try:
        retry = RetryConfig(
            attempts=int(retry_settings.get("attempts", 3)),
            backoff_factor=float(retry_settings.get("backoff_factor", 2.0)),
            min_backoff=float(retry_settings.get("min_backoff", 0.5)),
            max_backoff=float(retry_settings.get("max_backoff", 10.0)),
            jitter=float(retry_settings.get("jitter", 0.1)),
        )
        timeout = float(settings.get("timeout", 30.0))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid executor settings: {exc}") from exc
    return ExecutorConfig(
        base_url=settings.get("base_url"),
        api_key=settings.get("api_key"),
        extra_headers={str(key): str(value) for key, value in extra_headers.items()} if extra_headers else None,
        timeout=timeout,
        retry=retry,
    )
