from typing import Any


class GenerationError(Exception):
    """Base error for chat-completion calls.

    Each subclass fixes its own ``code`` and ``retryable`` flag, so retry logic
    only needs to read ``error.retryable``.
    """

    code = "GENERATION_ERROR"
    retryable = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def as_payload(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
        }


class AuthenticationError(GenerationError):
    code = "AUTH_ERROR"


class ValidationError(GenerationError):
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, violations: list[str] | None = None) -> None:
        super().__init__(message)
        self.violations = violations or [message]


class RateLimitError(GenerationError):
    code = "RATE_LIMIT_ERROR"

    def __init__(self, message: str, retry_after: int | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class RequestTimeoutError(GenerationError):
    code = "TIMEOUT_ERROR"
    retryable = True


class NetworkError(GenerationError):
    code = "NETWORK_ERROR"
    retryable = True


class ServiceError(GenerationError):
    code = "SERVICE_ERROR"
    retryable = True


class ApiError(GenerationError):
    code = "API_ERROR"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(GenerationError):
    code = "PARSE_ERROR"
