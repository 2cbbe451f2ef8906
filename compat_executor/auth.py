"""Auth record and error types shared by the OpenAI-compatible executor.

An :class:`Auth` is owned by whatever credential store produced it.  The
executor only ever reads from it, so the model is frozen.
"""
from __future__ import annotations

from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict

BASE_URL_ATTRIBUTE = "base_url"
API_KEY_ATTRIBUTE = "api_key"


class ExecutorError(RuntimeError):
    """Base class for executor failures outside the targeting core."""


class ConfigurationError(ExecutorError):
    """Raised when provider configuration is missing or malformed."""


class CredentialsError(ExecutorError):
    """Raised when no API key can be found for a provider."""


class Auth(BaseModel):
    """Credential/configuration record for a single backend.

    ``attributes`` may be ``None`` (no mapping at all) or an empty mapping;
    both mean that no hints were provided.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    provider: Optional[str] = None
    label: Optional[str] = None
    attributes: Optional[Mapping[str, str]] = None

    def __hash__(self) -> int:
        # The attribute mapping is a plain dict after validation.
        attributes = frozenset(self.attributes.items()) if self.attributes is not None else None
        return hash((self.id, self.provider, self.label, attributes))

    def attribute(self, key: str) -> Optional[str]:
        if self.attributes is None:
            return None
        return self.attributes.get(key)
