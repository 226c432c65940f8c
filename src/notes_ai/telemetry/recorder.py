import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from notes_ai.telemetry.sink import TelemetrySink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationRecord:
    """One row of the ``llm_generations`` usage log."""

    model_name: str
    status: str
    generation_time_ms: int
    user_id: str | None = None
    note_id: str | None = None
    tokens_used: int | None = None
    error_message: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def success(cls, model_name: str, generation_time_ms: int, tokens_used: int, **ids: str | None) -> "GenerationRecord":
        return cls(
            model_name=model_name,
            status="success",
            generation_time_ms=generation_time_ms,
            tokens_used=tokens_used,
            **ids,
        )

    @classmethod
    def failure(cls, model_name: str, generation_time_ms: int, error: object, **ids: str | None) -> "GenerationRecord":
        message = getattr(error, "message", None) or str(error)
        return cls(
            model_name=model_name,
            status="failure",
            generation_time_ms=generation_time_ms,
            error_message=message,
            **ids,
        )

    def as_row(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "note_id": self.note_id,
            "model_name": self.model_name,
            "status": self.status,
            "generation_time_ms": self.generation_time_ms,
            "tokens_used": self.tokens_used,
            "error_message": self.error_message,
            "created_at": self.created_at.isoformat(),
        }


class TelemetryRecorder:
    """Fire-and-forget writer for generation records.

    ``record`` returns immediately; the insert runs in a background task and
    any failure it hits is logged and dropped.
    """

    def __init__(self, sink: TelemetrySink | None = None) -> None:
        self.sink = sink
        self._pending: set[asyncio.Task] = set()

    def record(self, record: GenerationRecord) -> None:
        if self.sink is None:
            return
        task = asyncio.create_task(self._write(record))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _write(self, record: GenerationRecord) -> None:
        try:
            result = self.sink.insert(record.as_row())
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            logger.warning(
                "telemetry.insert_failed model=%s status=%s type=%s detail=%s",
                record.model_name,
                record.status,
                exc.__class__.__name__,
                str(exc),
            )
