"""Shared HTTP helpers for adapter implementations."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict

import requests

from graphweaver.domain.errors import (
    AuthenticationError,
    HTTPStatusError,
    NetworkError,
    RateLimitError,
    ServerError,
)


@dataclass(frozen=True)
class HTTPRequest:
    url: str
    payload: Dict[str, Any]
    headers: Dict[str, str]


@dataclass(frozen=True)
class HTTPResponse:
    status_code: int
    body: Any
    text: str


def post_json(session: requests.Session, request: HTTPRequest, *, timeout_s: float = 60.0) -> HTTPResponse:
    try:
        response = session.post(
            request.url,
            json=request.payload,
            headers=request.headers,
            timeout=timeout_s,
        )
    except requests.exceptions.Timeout as exc:
        raise NetworkError(f"Request to {request.url} timed out after {timeout_s:g}s") from exc
    except requests.exceptions.RequestException as exc:
        raise NetworkError(str(exc)) from exc

    try:
        body = response.json()
    except ValueError:
        body = None
    return HTTPResponse(status_code=response.status_code, body=body, text=response.text or "")


async def send_request(session: requests.Session, request: HTTPRequest, *, timeout_s: float = 60.0) -> HTTPResponse:
    """Run :func:`post_json` off the event loop, bounded by *timeout_s*."""

    try:
        return await asyncio.wait_for(
            asyncio.to_thread(post_json, session, request, timeout_s=timeout_s),
            timeout=timeout_s,
        )
    except asyncio.TimeoutError as exc:
        raise NetworkError(f"Request to {request.url} timed out after {timeout_s:g}s") from exc


def extract_error_message(body: Any, text: str = "") -> str | None:
    """Pull the provider's structured error message out of an error body."""

    if isinstance(body, list) and body:
        body = body[0]
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        for key in ("message", "detail"):
            if body.get(key):
                return str(body[key])
    text = (text or "").strip()
    return text[:500] or None


def map_http_error(status: int, message: str | None) -> HTTPStatusError:
    if status == 401:
        return AuthenticationError(status, message)
    if status == 429:
        return RateLimitError(status, message)
    if 500 <= status < 600:
        return ServerError(status, message)
    return HTTPStatusError(status, message)


def raise_for_status(response: HTTPResponse) -> None:
    if response.status_code != 200:
        raise map_http_error(response.status_code, extract_error_message(response.body, response.text))


__all__ = [
    "HTTPRequest",
    "HTTPResponse",
    "post_json",
    "send_request",
    "extract_error_message",
    "map_http_error",
    "raise_for_status",
]
