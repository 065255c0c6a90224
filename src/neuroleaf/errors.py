"""Error hierarchy for neuroleaf AI services.

API failures surface as AIServiceError subclasses carrying a machine
readable code and an HTTP-like status. map_api_error() converts
Anthropic SDK exceptions into this hierarchy.
"""

from __future__ import annotations

import anthropic

AUTH_FAILED_MESSAGE = "Authentication failed. Please check your API key."


class AIServiceError(Exception):
    """Base error for AI service failures."""

    def __init__(
        self,
        message: str,
        code: str = "AI_SERVICE_ERROR",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class QuotaExceededError(AIServiceError):
    def __init__(self, message: str = "AI quota exceeded") -> None:
        super().__init__(message, "QUOTA_EXCEEDED", 429)


class InvalidRequestError(AIServiceError):
    def __init__(self, message: str = "Invalid request") -> None:
        super().__init__(message, "INVALID_REQUEST", 400)


class ModelUnavailableError(AIServiceError):
    def __init__(self, message: str = "AI model unavailable") -> None:
        super().__init__(message, "MODEL_UNAVAILABLE", 503)


def map_api_error(error: Exception) -> AIServiceError:
    """Convert an exception raised by the LLM SDK to an AIServiceError.

    Already-mapped errors pass through unchanged.
    """
    if isinstance(error, AIServiceError):
        return error

    if isinstance(error, (anthropic.AuthenticationError, anthropic.PermissionDeniedError)):
        return InvalidRequestError(AUTH_FAILED_MESSAGE)

    if isinstance(error, anthropic.NotFoundError):
        return ModelUnavailableError("Model not available")

    if isinstance(error, anthropic.RateLimitError):
        return QuotaExceededError("Rate limit exceeded. Please try again later.")

    if isinstance(error, anthropic.BadRequestError):
        return InvalidRequestError(f"Invalid request to LLM API: {error}")

    if isinstance(error, anthropic.InternalServerError):
        return ModelUnavailableError("LLM service temporarily unavailable")

    if isinstance(error, anthropic.APIConnectionError):
        return AIServiceError(
            "Network error connecting to LLM API", "NETWORK_ERROR"
        )

    status = getattr(error, "status_code", None)
    return AIServiceError(str(error) or "Unknown AI service error", "LLM_ERROR", status)
