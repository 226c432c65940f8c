import json
from typing import Any

from notes_ai.providers.llm.errors import ParseError
from notes_ai.providers.llm.types import GenerationMetadata, SchemaDescriptor

CONTENT_PREVIEW_LIMIT = 500


def parse_response(body: Any, schema: SchemaDescriptor | None = None) -> Any:
    """Extract the first choice's content from a chat-completion body.

    Without a schema the content is returned verbatim. With a schema it must
    be a JSON object whose declared fields have the declared types.
    """
    choices = body.get("choices") if isinstance(body, dict) else None
    if not isinstance(choices, list) or not choices:
        raise ParseError("API response missing choices array")

    choice = choices[0] if isinstance(choices[0], dict) else {}
    if choice.get("finish_reason") == "length":
        raise ParseError("Response truncated by max_tokens limit")

    message = choice.get("message")
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str):
        raise ParseError("API response missing message content")

    if schema is None:
        return content

    try:
        data = json.loads(content)
    except (ValueError, RecursionError) as exc:
        reason = getattr(exc, "msg", str(exc))
        raise ParseError(
            f"Failed to parse JSON response: {reason}. Content: {_preview(content)}"
        ) from exc
    if not isinstance(data, dict):
        raise ParseError("Response data must be an object")
    validate_against_schema(data, schema)
    return data


def validate_against_schema(data: dict[str, Any], schema: SchemaDescriptor) -> None:
    for name in schema.required or []:
        if name not in data:
            raise ParseError(f"Missing required field: {name}")

    for name, field_schema in (schema.properties or {}).items():
        if name not in data:
            continue
        expected = field_schema.get("type") if isinstance(field_schema, dict) else None
        if expected is None:
            continue
        value = data[name]
        if not matches_type(value, expected):
            raise ParseError(
                f'Field "{name}" has incorrect type. Expected: {_describe(expected)}, Got: {json_type(value)}'
            )


def matches_type(value: Any, expected: str | list[str]) -> bool:
    if isinstance(expected, list):
        return any(matches_type(value, item) for item in expected)
    if expected == "string":
        return isinstance(value, str)
    if expected in ("number", "integer"):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected == "boolean":
        return isinstance(value, bool)
    if expected == "array":
        return isinstance(value, list)
    if expected == "object":
        return isinstance(value, dict)
    if expected == "null":
        return value is None
    # unknown kinds pass
    return True


def json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def build_metadata(body: dict[str, Any], fallback_model: str, elapsed_ms: int) -> GenerationMetadata:
    usage = body.get("usage") or {}
    tokens = usage.get("total_tokens") if isinstance(usage, dict) else None
    return GenerationMetadata(
        model_used=str(body.get("model") or fallback_model),
        tokens_used=int(tokens or 0),
        generation_time_ms=elapsed_ms,
    )


def _preview(content: str) -> str:
    if len(content) <= CONTENT_PREVIEW_LIMIT:
        return content
    return f"{content[:CONTENT_PREVIEW_LIMIT]}..."


def _describe(expected: str | list[str]) -> str:
    if isinstance(expected, list):
        return " | ".join(str(item) for item in expected)
    return str(expected)
