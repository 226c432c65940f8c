from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class SchemaDescriptor:
    """Object-rooted JSON schema the model output must conform to."""

    name: str
    properties: dict[str, dict[str, Any]]
    type: str = "object"
    required: list[str] | None = None
    additional_properties: bool | None = None

    def as_json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {
            "type": self.type,
            "properties": self.properties,
        }
        if self.required is not None:
            schema["required"] = list(self.required)
        if self.additional_properties is not None:
            schema["additionalProperties"] = self.additional_properties
        return schema


@dataclass(frozen=True)
class GenerationParameters:
    temperature: float | None = None
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    max_tokens: int | None = None

    def as_payload(self) -> dict[str, Any]:
        values = {
            "temperature": self.temperature,
            "top_p": self.top_p,
            "frequency_penalty": self.frequency_penalty,
            "presence_penalty": self.presence_penalty,
            "max_tokens": self.max_tokens,
        }
        return {key: value for key, value in values.items() if value is not None}


@dataclass(frozen=True)
class GenerationRequest:
    system_message: str
    user_message: str
    model_name: str | None = None
    response_schema: SchemaDescriptor | None = None
    parameters: GenerationParameters | None = None
    user_id: str | None = None
    note_id: str | None = None


@dataclass(frozen=True)
class GenerationMetadata:
    model_used: str
    tokens_used: int
    generation_time_ms: int

    def as_meta(self) -> dict:
        return {
            "model_used": self.model_used,
            "tokens_used": self.tokens_used,
            "generation_time_ms": self.generation_time_ms,
        }


@dataclass(frozen=True)
class GenerationResult(Generic[T]):
    data: T
    metadata: GenerationMetadata
