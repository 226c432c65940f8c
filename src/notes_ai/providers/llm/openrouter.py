import logging
import time
from typing import Any

import httpx

from notes_ai.config import Settings, get_settings
from notes_ai.providers.llm.classifier import classify_exception
from notes_ai.providers.llm.errors import AuthenticationError
from notes_ai.providers.llm.parsing import build_metadata, parse_response
from notes_ai.providers.llm.retry import RetryCoordinator, SleepFn
from notes_ai.providers.llm.transport import ChatCompletionTransport
from notes_ai.providers.llm.types import (
    GenerationParameters,
    GenerationRequest,
    GenerationResult,
    SchemaDescriptor,
)
from notes_ai.providers.llm.validation import validate_request
from notes_ai.telemetry.recorder import GenerationRecord, TelemetryRecorder
from notes_ai.telemetry.sink import TelemetrySink

logger = logging.getLogger(__name__)


class OpenRouterClient:
    """Validated, retried and telemetered chat completions via OpenRouter.

    A single instance may serve concurrent ``generate`` calls; nothing
    call-specific is stored on it.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        telemetry_sink: TelemetrySink | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: SleepFn | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        if not self.settings.openrouter_api_key:
            raise AuthenticationError("OPENROUTER_API_KEY environment variable is required")
        self.default_model = self.settings.llm_default_model
        self.timeout_ms = self.settings.llm_timeout_ms
        self.transport = ChatCompletionTransport(
            api_key=self.settings.openrouter_api_key,
            url=self.settings.openrouter_api_url,
            timeout_ms=self.timeout_ms,
            app_url=self.settings.app_url,
            app_name=self.settings.app_name,
            transport=transport,
        )
        self.retry = RetryCoordinator(
            max_retries=self.settings.llm_retry_attempts,
            base_delay_ms=self.settings.llm_retry_delay_ms,
            sleep=sleep,
        )
        self.telemetry = TelemetryRecorder(telemetry_sink)

    async def generate(self, request: GenerationRequest) -> GenerationResult[Any]:
        start = time.perf_counter()
        model = request.model_name or self.default_model
        try:
            validate_request(request)
            payload = self.transport.build_payload(request, model)
            body = await self.retry.run(
                lambda: self.transport.post(payload),
                lambda exc: classify_exception(exc, self.timeout_ms),
            )
            data = parse_response(body, request.response_schema)
            metadata = build_metadata(body, model, self._elapsed_ms(start))
        except Exception as exc:
            error = classify_exception(exc, self.timeout_ms)
            logger.error(
                "llm.error model=%s code=%s detail=%s",
                model,
                error.code,
                error.message,
            )
            self.telemetry.record(
                GenerationRecord.failure(
                    model_name=model,
                    generation_time_ms=self._elapsed_ms(start),
                    error=error,
                    user_id=request.user_id,
                    note_id=request.note_id,
                )
            )
            if error is exc:
                raise
            raise error from exc

        logger.info(
            "llm.done model=%s tokens=%d elapsed_ms=%d",
            metadata.model_used,
            metadata.tokens_used,
            metadata.generation_time_ms,
        )
        self.telemetry.record(
            GenerationRecord.success(
                model_name=metadata.model_used,
                generation_time_ms=metadata.generation_time_ms,
                tokens_used=metadata.tokens_used,
                user_id=request.user_id,
                note_id=request.note_id,
            )
        )
        return GenerationResult(data=data, metadata=metadata)

    async def generate_with_schema(
        self,
        schema_name: str,
        schema: dict[str, Any],
        system_message: str,
        user_message: str,
        *,
        model_name: str | None = None,
        parameters: GenerationParameters | None = None,
        user_id: str | None = None,
        note_id: str | None = None,
    ) -> GenerationResult[dict[str, Any]]:
        """Shortcut for structured output from a plain JSON-schema dict."""
        descriptor = SchemaDescriptor(
            name=schema_name,
            type=schema.get("type", "object"),
            properties=schema.get("properties") or {},
            required=schema.get("required"),
            additional_properties=schema.get("additionalProperties"),
        )
        return await self.generate(
            GenerationRequest(
                system_message=system_message,
                user_message=user_message,
                model_name=model_name,
                response_schema=descriptor,
                parameters=parameters,
                user_id=user_id,
                note_id=note_id,
            )
        )

    async def aclose(self) -> None:
        await self.telemetry.drain()

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.perf_counter() - start) * 1000)
