"""Domain models describing providers, models, requests and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union


class ProviderIdentity(str, Enum):
    """Closed set of supported LLM providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    GROQ = "groq"
    MISTRAL = "mistral"
    PERPLEXITY = "perplexity"
    OPENROUTER = "openrouter"
    LOCAL_MODEL = "lmstudio"

    @property
    def label(self) -> str:
        return _PROVIDER_LABELS[self]

    @classmethod
    def parse(cls, value: str | ProviderIdentity) -> ProviderIdentity:
        """Return the identity for *value*, accepting member values or names."""

        if isinstance(value, ProviderIdentity):
            return value
        key = value.strip().lower()
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        raise ValueError(f"Unknown provider '{value}'.")


_PROVIDER_LABELS = {
    ProviderIdentity.OPENAI: "OpenAI",
    ProviderIdentity.ANTHROPIC: "Anthropic",
    ProviderIdentity.GOOGLE: "Gemini",
    ProviderIdentity.GROQ: "Groq",
    ProviderIdentity.MISTRAL: "Mistral",
    ProviderIdentity.PERPLEXITY: "Perplexity",
    ProviderIdentity.OPENROUTER: "OpenRouter",
    ProviderIdentity.LOCAL_MODEL: "LM Studio",
}


@dataclass(frozen=True, kw_only=True)
class ModelCapabilities:
    max_output_tokens: int | None = None
    supports_function_calls: bool = False
    supports_streaming: bool = False
    supports_vision: bool = False


@dataclass(frozen=True, kw_only=True)
class ModelDescriptor:
    """Static catalog entry for one model offered by a provider."""

    display_name: str
    api_identifier: str
    capabilities: ModelCapabilities = field(default_factory=ModelCapabilities)
    input_cost_per_1m: float | None = None
    output_cost_per_1m: float | None = None
    context_window_size: int | None = None


@dataclass(frozen=True, kw_only=True)
class GenerationOptions:
    """Per-call overrides accepted by ``generate_response``."""

    raw_response: bool = False
    max_tokens: int | None = None
    temperature: float | None = None
    timeout_s: float | None = None


@dataclass(frozen=True, kw_only=True)
class GenerationRequest:
    """Provider-agnostic request handed to a wire strategy."""

    prompt: str
    model_api_name: str
    temperature: float
    max_tokens: int
    raw_response: bool = False


@dataclass(frozen=True)
class Success:
    data: Any

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    error_message: str

    @property
    def success(self) -> bool:
        return False


GenerationResult = Union[Success, Failure]


@dataclass(frozen=True, kw_only=True)
class AdapterHealthStatus:
    """Per-provider health record maintained by the adapter registry."""

    is_initialized: bool = False
    is_connected: bool = False
    last_connected_at: datetime | None = None
    last_validated_at: datetime | None = None
    last_error: str | None = None

    @property
    def is_healthy(self) -> bool:
        return self.is_initialized and self.is_connected


__all__ = [
    "ProviderIdentity",
    "ModelCapabilities",
    "ModelDescriptor",
    "GenerationOptions",
    "GenerationRequest",
    "Success",
    "Failure",
    "GenerationResult",
    "AdapterHealthStatus",
]
