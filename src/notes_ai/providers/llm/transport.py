import asyncio
import json
import logging
from typing import Any

import httpx

from notes_ai.providers.llm.types import GenerationRequest

logger = logging.getLogger(__name__)
PAYLOAD_LOG_LIMIT = 2000


class ChatCompletionTransport:
    """Single-shot POST to an OpenAI-compatible chat-completions endpoint."""

    def __init__(
        self,
        api_key: str,
        url: str,
        timeout_ms: int,
        app_url: str = "",
        app_name: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.url = url
        self.timeout_ms = timeout_ms
        self.app_url = app_url
        self.app_name = app_name
        self._transport = transport

    @staticmethod
    def build_payload(request: GenerationRequest, model: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": request.system_message},
                {"role": "user", "content": request.user_message},
            ],
        }
        schema = request.response_schema
        if schema is not None:
            payload["response_format"] = {
                "type": "json_schema",
                "json_schema": {
                    "name": schema.name,
                    "strict": True,
                    "schema": schema.as_json_schema(),
                },
            }
        if request.parameters is not None:
            payload.update(request.parameters.as_payload())
        return payload

    def build_headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self.app_url and self.app_name:
            headers["HTTP-Referer"] = self.app_url
            headers["X-Title"] = self.app_name
        return headers

    async def post(self, payload: dict[str, Any]) -> Any:
        """Issue one POST bound to the configured deadline.

        Raises whatever the attempt produced: ``httpx.HTTPStatusError`` for a
        non-2xx status, ``asyncio.TimeoutError`` once the deadline expires, or
        the transport's own exception.
        """
        timeout_s = self.timeout_ms / 1000
        logger.info(
            "llm.request model=%s messages=%d structured=%s",
            payload.get("model"),
            len(payload.get("messages", [])),
            "response_format" in payload,
        )
        logger.debug("llm.request.payload=%s", self._clip(self._to_json(payload), PAYLOAD_LOG_LIMIT))
        async with httpx.AsyncClient(timeout=timeout_s, transport=self._transport) as client:
            http_response = await asyncio.wait_for(
                client.post(self.url, json=payload, headers=self.build_headers()),
                timeout=timeout_s,
            )
            http_response.raise_for_status()
            response = http_response.json()
        logger.info(
            "llm.response status=%d model=%s",
            http_response.status_code,
            response.get("model") if isinstance(response, dict) else None,
        )
        logger.debug("llm.response.payload=%s", self._clip(self._to_json(response), PAYLOAD_LOG_LIMIT))
        return response

    @staticmethod
    def _clip(text: str, limit: int) -> str:
        normalized = " ".join(text.split()).strip()
        if len(normalized) <= limit:
            return normalized
        return f"{normalized[:limit]}...(truncated)"

    @staticmethod
    def _to_json(payload: Any) -> str:
        try:
            return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
        except (TypeError, ValueError):
            return str(payload)
