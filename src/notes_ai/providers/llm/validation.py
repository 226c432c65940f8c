import math
import re

from notes_ai.providers.llm.errors import ValidationError
from notes_ai.providers.llm.types import GenerationParameters, GenerationRequest, SchemaDescriptor

MAX_MESSAGE_LENGTH = 50000
MODEL_NAME_PATTERN = re.compile(r"^[A-Za-z0-9-]+/[A-Za-z0-9._-]+$")

PARAMETER_BOUNDS: dict[str, tuple[float, float]] = {
    "temperature": (0, 2),
    "top_p": (0, 1),
    "frequency_penalty": (-2, 2),
    "presence_penalty": (-2, 2),
}


def validate_request(request: GenerationRequest) -> None:
    """Check a request locally before any network activity.

    Every field is inspected and all violations are reported together, so a
    caller fixing one problem does not discover the next one on a later call.
    """
    violations: list[str] = []
    violations.extend(_message_violations("systemMessage", request.system_message))
    violations.extend(_message_violations("userMessage", request.user_message))
    if request.model_name is not None and not (
        isinstance(request.model_name, str) and MODEL_NAME_PATTERN.match(request.model_name)
    ):
        violations.append("modelName must be in format: provider/model-name (e.g., openai/gpt-5-nano)")
    if request.response_schema is not None:
        violations.extend(_schema_violations(request.response_schema))
    if request.parameters is not None:
        violations.extend(_parameter_violations(request.parameters))
    if violations:
        raise ValidationError("; ".join(violations), violations=violations)


def _message_violations(field_name: str, value: str | None) -> list[str]:
    if not isinstance(value, str) or not value.strip():
        return [f"{field_name} is required and cannot be empty"]
    if len(value) > MAX_MESSAGE_LENGTH:
        return [f"{field_name} exceeds maximum length of {MAX_MESSAGE_LENGTH} characters"]
    return []


def _schema_violations(schema: SchemaDescriptor) -> list[str]:
    violations: list[str] = []
    if not isinstance(schema.name, str) or not schema.name.strip():
        violations.append("responseSchema.name is required")
    if schema.type != "object":
        violations.append('responseSchema.type must be "object"')
    if not schema.properties:
        violations.append("responseSchema.properties must be defined and non-empty")
    for name in schema.required or []:
        if name not in (schema.properties or {}):
            violations.append(f"responseSchema.required references unknown property: {name}")
    return violations


def _parameter_violations(parameters: GenerationParameters) -> list[str]:
    violations: list[str] = []
    for name, (low, high) in PARAMETER_BOUNDS.items():
        value = getattr(parameters, name)
        if value is None:
            continue
        if not _is_number(value) or not low <= value <= high:
            violations.append(f"{name} must be between {low} and {high}")
    max_tokens = parameters.max_tokens
    if max_tokens is not None and (
        isinstance(max_tokens, bool) or not isinstance(max_tokens, int) or max_tokens < 1
    ):
        violations.append("max_tokens must be at least 1")
    return violations


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)
