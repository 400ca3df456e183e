"""Shared fakes for adapter, registry and CLI tests."""

from __future__ import annotations

import asyncio
import io
import json
from types import SimpleNamespace
from typing import Any, Callable, Dict, List

import pytest
from rich.console import Console

from graphweaver.application.settings_service import SettingsService
from graphweaver.domain.config import LocalModelSettings, PluginSettings, ProviderSettings
from graphweaver.domain.models import GenerationOptions, ProviderIdentity, Success
from graphweaver.infrastructure.adapters import LLMAdapter, STRATEGIES
from graphweaver.infrastructure.config import API_KEY_ENV_VARS
from graphweaver.utils.notifications import Notifier


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self._body = body
        if text is None:
            text = json.dumps(body) if body is not None else ""
        self.text = text

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class FakeSession:
    """Stands in for ``requests.Session``; the last queued reply repeats."""

    def __init__(self, *responses: Any) -> None:
        self.responses: List[Any] = list(responses) or [FakeResponse(200, {})]
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def post(self, url: str, json: Any = None, headers: Any = None, timeout: Any = None) -> FakeResponse:
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.closed = True


class StubAdapter:
    """Minimal provider adapter with scripted validation and connection results."""

    def __init__(
        self,
        provider: ProviderIdentity,
        *,
        valid: bool = True,
        connected: bool = True,
        api_key: str = "key",
        delay: float = 0.0,
        destroy_error: Exception | None = None,
    ) -> None:
        self.provider = provider
        self.valid = valid
        self.connected = connected
        self.api_key = api_key
        self.delay = delay
        self.destroy_error = destroy_error
        self.validations = 0
        self.tested_models: List[str] = []
        self.destroyed = False

    async def generate_response(
        self, prompt: str, model_api_name: str, options: GenerationOptions | None = None
    ) -> Success:
        return Success({"provider": self.provider.value, "model": model_api_name, "prompt": prompt})

    async def test_connection(self, prompt: str, model_api_name: str) -> bool:
        self.tested_models.append(model_api_name)
        return self.connected

    async def validate_api_key(self) -> bool:
        if self.delay:
            await asyncio.sleep(self.delay)
        self.validations += 1
        return self.valid

    def get_available_models(self) -> List[str]:
        return []

    def set_api_key(self, api_key: str) -> None:
        self.api_key = api_key

    def get_api_key(self) -> str:
        return self.api_key

    def is_ready(self) -> bool:
        return bool(self.api_key)

    def get_api_model_name(self, requested: str) -> str:
        return requested

    def configure(self, config: Dict[str, Any]) -> None:
        self.api_key = str(config.get("api_key", self.api_key))

    async def destroy(self) -> None:
        self.destroyed = True
        if self.destroy_error is not None:
            raise self.destroy_error


def openai_reply(text: str) -> Dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


def anthropic_reply(text: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": text}]}


def gemini_reply(text: str) -> Dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for variable in API_KEY_ENV_VARS.values():
        monkeypatch.delenv(variable, raising=False)
    monkeypatch.delenv("LMSTUDIO_PORT", raising=False)
    monkeypatch.delenv("LMSTUDIO_MODEL", raising=False)


@pytest.fixture
def notifier() -> Notifier:
    return Notifier(Console(file=io.StringIO(), width=200))


@pytest.fixture
def make_settings() -> Callable[..., SettingsService]:
    def _make(
        *,
        selected: ProviderIdentity = ProviderIdentity.OPENAI,
        api_keys: Dict[ProviderIdentity, str] | None = None,
        local_model: LocalModelSettings | None = None,
    ) -> SettingsService:
        keys = {provider: f"test-key-{provider.value}" for provider in ProviderIdentity} if api_keys is None else api_keys
        return SettingsService(
            PluginSettings(
                ai_provider=ProviderSettings(selected=selected, api_keys=keys),
                local_model=local_model or LocalModelSettings(),
            )
        )

    return _make


@pytest.fixture
def make_adapter(make_settings: Callable[..., SettingsService], notifier: Notifier) -> Callable[..., LLMAdapter]:
    def _make(provider: ProviderIdentity, session: FakeSession, settings: SettingsService | None = None) -> LLMAdapter:
        return LLMAdapter(
            STRATEGIES[provider](),
            settings or make_settings(),
            notifier=notifier,
            session=session,  # type: ignore[arg-type]
        )

    return _make


@pytest.fixture
def fakes() -> SimpleNamespace:
    """Expose the fake classes and reply builders to test modules."""

    return SimpleNamespace(
        Response=FakeResponse,
        Session=FakeSession,
        Stub=StubAdapter,
        openai_reply=openai_reply,
        anthropic_reply=anthropic_reply,
        gemini_reply=gemini_reply,
    )
