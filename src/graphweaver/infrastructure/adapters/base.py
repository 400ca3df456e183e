"""Core adapter protocol and the wire strategy contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Protocol, runtime_checkable

from graphweaver.domain.config import PluginSettings
from graphweaver.domain.models import (
    GenerationOptions,
    GenerationRequest,
    GenerationResult,
    ProviderIdentity,
)

from .http_utils import HTTPRequest

Message = Dict[str, str]

DEFAULT_TEST_PROMPT = "Return the word 'OK'."


@runtime_checkable
class ProviderAdapter(Protocol):
    """Capability set every provider adapter exposes."""

    provider: ProviderIdentity

    async def generate_response(
        self,
        prompt: str,
        model_api_name: str,
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        """Generate a completion; never raises."""

    async def test_connection(self, prompt: str, model_api_name: str) -> bool:
        """Return True when the provider answers the test prompt with 'ok'."""

    async def validate_api_key(self) -> bool:
        """Validate the configured credentials against the first catalog model."""

    def get_available_models(self) -> List[str]:
        ...

    def set_api_key(self, api_key: str) -> None:
        ...

    def get_api_key(self) -> str:
        ...

    def is_ready(self) -> bool:
        ...

    def get_api_model_name(self, requested: str) -> str:
        ...

    def configure(self, config: Mapping[str, Any]) -> None:
        ...

    async def destroy(self) -> None:
        """Release held resources."""


@dataclass(frozen=True)
class ProviderStrategy(ABC):
    """Provider-specific request/response translation.

    ``requires_api_key`` and ``strict_model_lookup`` are declared per provider;
    everything else about a generation call is shared by :class:`LLMAdapter`.
    """

    provider: ProviderIdentity
    endpoint: str
    requires_api_key: bool = True
    strict_model_lookup: bool = False

    @property
    def label(self) -> str:
        return self.provider.label

    @abstractmethod
    def build_request(
        self,
        request: GenerationRequest,
        *,
        api_key: str,
        settings: PluginSettings,
    ) -> HTTPRequest:
        """Translate *request* into the provider's HTTP call."""

    @abstractmethod
    def extract_content(self, body: Any) -> str:
        """Return the completion text from a successful response body."""

    def is_configured(self, api_key: str, settings: PluginSettings) -> bool:
        return bool(api_key) if self.requires_api_key else True

    def not_ready_message(self) -> str:
        return f"{self.label} API key is not set"

    def resolve_model(self, requested: str, settings: PluginSettings) -> str | None:
        """Hook for providers whose model comes from settings rather than the catalog."""

        return None

    def connection_reply(self, content: str) -> str:
        """Text of a raw completion that the connection test inspects for 'ok'."""

        return content


def make_message(role: str, content: str) -> Message:
    return {"role": role, "content": content}


def bearer_headers(api_key: str) -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }


__all__ = [
    "Message",
    "DEFAULT_TEST_PROMPT",
    "ProviderAdapter",
    "ProviderStrategy",
    "make_message",
    "bearer_headers",
]
