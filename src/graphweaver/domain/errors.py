"""Exception taxonomy shared by adapters, the registry and the settings layer."""

from __future__ import annotations


class GraphWeaverError(Exception):
    """Base class for all errors raised by GraphWeaver."""


class ConfigurationError(GraphWeaverError):
    """Raised when an API key, model selection or other setting is missing."""


class NetworkError(GraphWeaverError):
    """Raised when a provider cannot be reached or the request times out."""


class HTTPStatusError(NetworkError):
    """Raised when a provider answers with a non-200 status code."""

    def __init__(self, status_code: int, provider_message: str | None = None) -> None:
        self.status_code = status_code
        self.provider_message = provider_message
        detail = provider_message or "Unknown error"
        super().__init__(f"API request failed with status {status_code}: {detail}")


class AuthenticationError(HTTPStatusError):
    """Raised when the provider rejects the credentials."""


class RateLimitError(HTTPStatusError):
    """Raised when the provider rate limits the request."""


class ServerError(HTTPStatusError):
    """Raised when the provider encounters an internal error."""


class FormatError(GraphWeaverError):
    """Raised when a response body or completion text has an unexpected shape."""


class NotReadyError(GraphWeaverError):
    """Raised when the registry is used before initialisation or during teardown."""


__all__ = [
    "GraphWeaverError",
    "ConfigurationError",
    "NetworkError",
    "HTTPStatusError",
    "AuthenticationError",
    "RateLimitError",
    "ServerError",
    "FormatError",
    "NotReadyError",
]
