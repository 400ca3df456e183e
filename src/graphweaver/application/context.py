"""Application-wide context for dependency resolution."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rich.console import Console

from graphweaver.domain.catalog import first_model
from graphweaver.domain.config import PluginSettings
from graphweaver.domain.errors import NotReadyError
from graphweaver.domain.models import GenerationOptions, GenerationResult, ProviderIdentity
from graphweaver.utils.notifications import Notifier
from graphweaver.utils.response_validator import ResponseValidator

from .adapter_registry import AdapterFactory, AdapterRegistry
from .settings_service import SettingsService
from .state import AIStateStore


@dataclass
class ApplicationContext:
    """Simple container that wires application services."""

    console: Console
    notifier: Notifier
    settings: SettingsService
    validator: ResponseValidator
    state_store: AIStateStore
    registry: AdapterRegistry

    @classmethod
    def create(
        cls,
        settings_path: Path | str | None = None,
        console: Optional[Console] = None,
        *,
        settings: PluginSettings | None = None,
        adapter_factory: AdapterFactory | None = None,
    ) -> ApplicationContext:
        console = console or Console()
        notifier = Notifier(console)
        settings_service = SettingsService(settings) if settings is not None else SettingsService.from_file(settings_path)
        validator = ResponseValidator()
        state_store = AIStateStore()
        registry = AdapterRegistry(
            settings_service,
            state_store=state_store,
            notifier=notifier,
            validator=validator,
            adapter_factory=adapter_factory,
        )
        return cls(
            console=console,
            notifier=notifier,
            settings=settings_service,
            validator=validator,
            state_store=state_store,
            registry=registry,
        )

    def selected_model(self, provider: ProviderIdentity) -> str:
        """Model configured for *provider*, else its first catalog entry."""

        configured = self.settings.get_settings().ai_provider.selected_models.get(provider)
        if configured:
            return configured
        default = first_model(provider)
        return default.api_identifier if default else ""

    async def generate(
        self,
        prompt: str,
        provider: ProviderIdentity | str | None = None,
        model: str | None = None,
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        if not self.registry.is_ready():
            await self.registry.initialize()

        if provider is None:
            adapter = self.registry.get_current_adapter()
        else:
            adapter = self.registry.get_adapter(provider)
            if adapter is None:
                raise NotReadyError(f"No adapter available for provider: {provider}")
        return await adapter.generate_response(prompt, model or self.selected_model(adapter.provider), options)

    async def close(self) -> None:
        await self.registry.destroy()


__all__ = ["ApplicationContext"]
