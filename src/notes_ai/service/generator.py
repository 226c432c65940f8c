import logging
from typing import Any

from notes_ai.config import Settings, get_settings
from notes_ai.providers.llm.errors import (
    ApiError,
    AuthenticationError,
    GenerationError,
    NetworkError,
    ParseError,
    RateLimitError,
    RequestTimeoutError,
    ServiceError,
    ValidationError,
)
from notes_ai.providers.llm.openrouter import OpenRouterClient
from notes_ai.providers.llm.types import GenerationRequest
from notes_ai.telemetry.sink import build_telemetry_sink

logger = logging.getLogger(__name__)

# taxonomy class -> (HTTP status, public error label, public message)
ERROR_RESPONSES: list[tuple[type[GenerationError], int, str, str]] = [
    (AuthenticationError, 503, "Service unavailable", "AI service is not configured"),
    (RequestTimeoutError, 504, "Gateway timeout", "AI generation exceeded time limit"),
    (RateLimitError, 429, "Too many requests", "AI provider rate limit exceeded"),
    (ServiceError, 503, "Service unavailable", "AI service temporarily unavailable"),
    (NetworkError, 503, "Service unavailable", "AI service temporarily unavailable"),
    (ValidationError, 400, "Bad request", "Invalid request to AI service"),
    (ParseError, 500, "Internal server error", "AI service returned an unusable response"),
    (ApiError, 503, "Service unavailable", "AI service encountered an error"),
]


class GenerateService:
    def __init__(self, client: OpenRouterClient | None = None, settings: Settings | None = None) -> None:
        self._client = client
        self._settings = settings

    def _get_client(self) -> OpenRouterClient:
        if self._client is None:
            settings = self._settings or get_settings()
            self._client = OpenRouterClient(settings, telemetry_sink=build_telemetry_sink(settings))
        return self._client

    async def generate(self, request: GenerationRequest) -> dict[str, Any]:
        try:
            result = await self._get_client().generate(request)
        except GenerationError as exc:
            logger.warning("generate.failed code=%s detail=%s", exc.code, exc.message)
            return self.error_payload(exc)
        except Exception as exc:
            logger.exception("generate.failed unexpected type=%s", exc.__class__.__name__)
            return {
                "status_code": 500,
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "Internal server error",
                    "detail": str(exc),
                },
            }
        return {"data": result.data, "metadata": result.metadata.as_meta()}

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    @staticmethod
    def error_payload(exc: GenerationError) -> dict[str, Any]:
        status_code, label, message = 503, "Service unavailable", "AI service encountered an error"
        for error_type, mapped_status, mapped_label, mapped_message in ERROR_RESPONSES:
            if isinstance(exc, error_type):
                status_code, label, message = mapped_status, mapped_label, mapped_message
                break
        payload: dict[str, Any] = {
            "status_code": status_code,
            "error": {
                "code": exc.code,
                "message": f"{label}: {message}",
                "detail": exc.message,
            },
        }
        if isinstance(exc, RateLimitError) and exc.retry_after is not None:
            payload["retry_after"] = exc.retry_after
        return payload
