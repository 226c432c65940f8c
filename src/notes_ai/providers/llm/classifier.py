import asyncio
import json
from collections.abc import Mapping
from typing import Any

import httpx

from notes_ai.providers.llm.errors import (
    ApiError,
    AuthenticationError,
    GenerationError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
    ServiceError,
    ValidationError,
)

PROVIDER_LABEL = "OpenRouter"


def classify_status(
    status_code: int,
    body: str | bytes | None = None,
    headers: Mapping[str, str] | None = None,
) -> GenerationError:
    """Map a non-2xx HTTP response onto the error taxonomy."""
    message = _extract_error_message(body) or f"{PROVIDER_LABEL} API error ({status_code})"

    if status_code in (401, 403):
        return AuthenticationError(f"Authentication failed: {message}")
    if status_code == 429:
        return RateLimitError(
            f"Rate limit exceeded: {message}",
            retry_after=_parse_retry_after((headers or {}).get("retry-after")),
        )
    if status_code == 400:
        return ValidationError(f"Invalid request: {message}")
    if status_code in (503, 504):
        return ServiceError(f"Service unavailable: {message}")
    if 500 <= status_code <= 599:
        return ServiceError(f"Server error: {message}")
    return ApiError(message, status_code=status_code)


def classify_exception(cause: object, timeout_ms: int) -> GenerationError:
    """Map anything raised by one attempt onto the error taxonomy."""
    if isinstance(cause, GenerationError):
        return cause
    if isinstance(cause, httpx.HTTPStatusError):
        response = cause.response
        return classify_status(response.status_code, response.content, response.headers)
    if isinstance(cause, (asyncio.TimeoutError, httpx.TimeoutException)):
        return RequestTimeoutError(f"Request timed out after {timeout_ms}ms")
    if isinstance(cause, httpx.TransportError):
        return NetworkError(f"Network error occurred while calling {PROVIDER_LABEL} API: {cause}")
    return ApiError(f"Unexpected error calling {PROVIDER_LABEL} API: {cause}")


def _extract_error_message(body: str | bytes | None) -> str | None:
    if not body:
        return None
    try:
        payload: Any = json.loads(body)
    except (ValueError, TypeError):
        return None
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return None


def _parse_retry_after(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        return max(int(float(raw.strip())), 0)
    except (ValueError, OverflowError):
        return None
