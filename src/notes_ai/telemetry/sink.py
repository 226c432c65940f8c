import logging
from typing import Any, Protocol

import httpx

from notes_ai.config import Settings

logger = logging.getLogger(__name__)


class TelemetrySink(Protocol):
    async def insert(self, row: dict[str, Any]) -> None:
        ...


class PostgrestTelemetrySink:
    """Append generation rows to a Supabase/PostgREST table."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = "llm_generations",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.insert_url = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self.api_key = api_key
        self._transport = transport

    async def insert(self, row: dict[str, Any]) -> None:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Prefer": "return=minimal",
        }
        async with httpx.AsyncClient(timeout=10.0, transport=self._transport) as client:
            http_response = await client.post(self.insert_url, json=row, headers=headers)
            http_response.raise_for_status()
        logger.debug("telemetry.insert status=%d table_url=%s", http_response.status_code, self.insert_url)


def build_telemetry_sink(settings: Settings) -> TelemetrySink | None:
    if not settings.telemetry_url or not settings.telemetry_api_key:
        return None
    return PostgrestTelemetrySink(
        base_url=settings.telemetry_url,
        api_key=settings.telemetry_api_key,
        table=settings.telemetry_table,
    )
