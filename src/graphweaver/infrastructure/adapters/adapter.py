"""Shared adapter implementation driven by a provider strategy."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Sequence

import requests

from graphweaver.domain.catalog import models_for_provider
from graphweaver.domain.config import SettingsProvider
from graphweaver.domain.errors import ConfigurationError, NotReadyError
from graphweaver.domain.models import (
    Failure,
    GenerationOptions,
    GenerationRequest,
    GenerationResult,
    ModelDescriptor,
    Success,
)
from graphweaver.utils import redact_possible_secrets
from graphweaver.utils.notifications import Notifier
from graphweaver.utils.response_validator import ResponseValidator

from .base import DEFAULT_TEST_PROMPT, ProviderStrategy
from .http_utils import raise_for_status, send_request
from .util import resolve_max_tokens, resolve_temperature

logger = logging.getLogger(__name__)


class LLMAdapter:
    """Provider adapter running the shared generation flow.

    Model resolution, readiness checks, temperature and max-token defaults,
    JSON cleaning and error reporting live here. The strategy only builds the
    HTTP request and digs the completion text out of the response body.
    """

    def __init__(
        self,
        strategy: ProviderStrategy,
        settings: SettingsProvider,
        *,
        validator: ResponseValidator | None = None,
        notifier: Notifier | None = None,
        session: requests.Session | None = None,
        models: Sequence[ModelDescriptor] | None = None,
    ) -> None:
        self.strategy = strategy
        self.provider = strategy.provider
        self._settings = settings
        self._validator = validator or ResponseValidator()
        self._notifier = notifier or Notifier()
        self._session = session if session is not None else requests.Session()
        self._models: tuple[ModelDescriptor, ...] = tuple(
            models if models is not None else models_for_provider(self.provider)
        )
        self._api_key = settings.get_settings().ai_provider.api_key_for(self.provider)
        self._closed = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(provider={self.provider.value!r})"

    @property
    def name(self) -> str:
        return self.provider.value

    @property
    def label(self) -> str:
        return self.strategy.label

    @property
    def models(self) -> tuple[ModelDescriptor, ...]:
        return self._models

    # ------------------------------------------------------------------
    async def generate_response(
        self,
        prompt: str,
        model_api_name: str,
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        options = options or GenerationOptions()
        try:
            if self._closed:
                raise NotReadyError(f"{self.label} adapter has been destroyed")

            api_model = self.get_api_model_name(model_api_name)
            if not api_model:
                raise ConfigurationError(f"No valid model found for {self.label}")

            settings = self._settings.get_settings()
            if not self.strategy.is_configured(self._api_key, settings):
                raise ConfigurationError(self.strategy.not_ready_message())

            request = GenerationRequest(
                prompt=prompt,
                model_api_name=api_model,
                temperature=resolve_temperature(settings.advanced.temperature, options.temperature),
                max_tokens=resolve_max_tokens(settings.advanced.max_tokens, options.max_tokens),
                raw_response=options.raw_response,
            )
            http_request = self.strategy.build_request(request, api_key=self._api_key, settings=settings)
            timeout_s = options.timeout_s or settings.advanced.request_timeout_s
            logger.debug("%s request to %s (model=%s, raw=%s)", self.label, http_request.url, api_model, request.raw_response)

            response = await send_request(self._session, http_request, timeout_s=timeout_s)
            raise_for_status(response)
            content = self.strategy.extract_content(response.body)
        except Exception as exc:
            return self._handle_error(exc)

        if options.raw_response:
            return Success(content)
        try:
            return Success(self._validator.clean(content))
        except Exception as exc:
            return self._handle_error(exc)

    async def test_connection(self, prompt: str, model_api_name: str) -> bool:
        if not self.is_ready():
            return False

        result = await self.generate_response(
            prompt or DEFAULT_TEST_PROMPT,
            model_api_name,
            GenerationOptions(raw_response=True),
        )
        if not isinstance(result, Success) or not isinstance(result.data, str):
            return False
        return "ok" in self.strategy.connection_reply(result.data).lower()

    async def validate_api_key(self) -> bool:
        try:
            if not self.is_ready():
                raise ConfigurationError(f"{self.label} is not properly configured")
            is_valid = await self.test_connection(DEFAULT_TEST_PROMPT, self._models[0].api_identifier)
            if not is_valid:
                raise ConfigurationError("Failed to validate API key")
        except Exception as exc:
            message = redact_possible_secrets(str(exc) or "Unknown error occurred")
            logger.warning("Error validating %s API key: %s", self.label, message)
            self._notifier.error(f"Failed to validate {self.label} API key: {message}")
            return False

        self._notifier.success(f"{self.label} API key validated successfully")
        return True

    # ------------------------------------------------------------------
    def get_available_models(self) -> List[str]:
        return [model.api_identifier for model in self._models]

    def set_api_key(self, api_key: str) -> None:
        self._api_key = api_key or ""

    def get_api_key(self) -> str:
        return self._api_key

    def configure(self, config: Mapping[str, Any]) -> None:
        if config.get("api_key"):
            self.set_api_key(str(config["api_key"]))

    def is_ready(self) -> bool:
        settings = self._settings.get_settings()
        return self.strategy.is_configured(self._api_key, settings) and bool(self._models)

    def get_api_model_name(self, requested: str) -> str:
        """Resolve *requested* against the catalog.

        Unknown names fall back to the first catalog model with a warning, unless
        the strategy declares ``strict_model_lookup``.
        """

        override = self.strategy.resolve_model(requested, self._settings.get_settings())
        if override:
            return override

        if any(model.api_identifier == requested for model in self._models):
            return requested
        if self.strategy.strict_model_lookup:
            raise ConfigurationError(f"Model {requested} is not supported by {self.label}")
        if not self._models:
            return requested

        fallback = self._models[0].api_identifier
        logger.warning(
            "Model %s not found for %s. Using first available model %s.",
            requested,
            self.label,
            fallback,
        )
        return fallback

    async def destroy(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._session.close()

    # ------------------------------------------------------------------
    def _handle_error(self, exc: Exception) -> Failure:
        message = redact_possible_secrets(str(exc) or "Unknown error occurred")
        logger.error("Error in %s API call: %s", self.label, message)
        self._notifier.error(f"{self.label} API Error: {message}")
        return Failure(message)


__all__ = ["LLMAdapter"]
