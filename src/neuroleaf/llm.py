"""LLM client for neuroleaf.

Thin wrapper over the Anthropic Messages API with prompt validation,
exponential backoff retry for transient errors, token/cost accounting,
and mapping of SDK exceptions to the AIServiceError hierarchy.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

import anthropic
from anthropic.types import MessageParam

from neuroleaf.config import AppConfig
from neuroleaf.cost import estimate_cost, estimate_tokens
from neuroleaf.errors import (
    AUTH_FAILED_MESSAGE,
    AIServiceError,
    InvalidRequestError,
    map_api_error,
)

logger = logging.getLogger(__name__)

MAX_PROMPT_CHARS = 100_000

_AUTH_UNRESOLVED = "Could not resolve authentication method"

# Retryable API errors (network/rate-limit/server errors only)
_RETRYABLE_ERRORS = (
    anthropic.APIConnectionError,
    anthropic.RateLimitError,
    anthropic.InternalServerError,
)


@dataclass(frozen=True, slots=True)
class LLMResponse:
    """Text and usage returned by a single generation call. Immutable."""

    text: str
    model: str
    input_tokens: int
    output_tokens: int
    estimated_cost: float

    @property
    def tokens_used(self) -> int:
        return self.input_tokens + self.output_tokens


class LLMClient:
    """Generates text from prompts through the Anthropic Messages API.

    Args:
        config: Application configuration (model, limits, retry policy).
        client: Pre-built Anthropic client. Created lazily when omitted.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        client: anthropic.Anthropic | None = None,
    ) -> None:
        self.config = config if config is not None else AppConfig()
        self._client = client

    @property
    def model(self) -> str:
        return self.config.model

    def _get_client(self) -> anthropic.Anthropic:
        if self._client is None:
            self._client = anthropic.Anthropic()
        return self._client

    def generate(self, prompt: str, *, max_tokens: int | None = None) -> LLMResponse:
        """Generate a completion for a text prompt.

        Raises:
            InvalidRequestError: If the prompt is empty or too long.
            AIServiceError: If the API fails after retries or returns no text.
        """
        _validate_prompt(prompt)
        messages: list[MessageParam] = [{"role": "user", "content": prompt}]
        return self._generate(messages, prompt_text=prompt, max_tokens=max_tokens)

    def generate_with_image(
        self,
        prompt: str,
        image_data: str,
        *,
        media_type: str = "image/png",
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Generate a completion for a prompt plus one base64 image.

        The image block precedes the text block.
        """
        _validate_prompt(prompt)
        if not image_data:
            raise InvalidRequestError("Image data cannot be empty")

        content: list[dict[str, Any]] = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": media_type,
                    "data": image_data,
                },
            },
            {"type": "text", "text": prompt},
        ]
        messages: list[MessageParam] = [
            {"role": "user", "content": content}  # type: ignore[typeddict-item]
        ]
        return self._generate(messages, prompt_text=prompt, max_tokens=max_tokens)

    def health_check(self) -> bool:
        """Return True if a trivial prompt produces any text."""
        try:
            return len(self.generate("Test", max_tokens=16).text) > 0
        except AIServiceError as e:
            logger.warning("LLM health check failed: %s", e)
            return False

    def _generate(
        self,
        messages: list[MessageParam],
        *,
        prompt_text: str,
        max_tokens: int | None,
    ) -> LLMResponse:
        limit = max_tokens if max_tokens is not None else self.config.max_tokens
        response = self._call_with_retry(messages=messages, max_tokens=limit)

        text = "".join(
            block.text for block in response.content if hasattr(block, "text")
        )
        if not text.strip():
            raise AIServiceError("Empty response from LLM API", "EMPTY_RESPONSE")

        usage = getattr(response, "usage", None)
        input_tokens = getattr(usage, "input_tokens", None)
        output_tokens = getattr(usage, "output_tokens", None)
        if not isinstance(input_tokens, int) or not isinstance(output_tokens, int):
            input_tokens = estimate_tokens(prompt_text)
            output_tokens = estimate_tokens(text)

        model = response.model if isinstance(response.model, str) else self.model
        cost = estimate_cost(model, input_tokens, output_tokens)

        logger.debug(
            "Generated %d chars with max_tokens=%d (%d tokens)",
            len(text),
            limit,
            input_tokens + output_tokens,
        )

        return LLMResponse(
            text=text,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            estimated_cost=cost,
        )

    def _call_api(
        self,
        *,
        messages: list[MessageParam],
        max_tokens: int,
    ) -> anthropic.types.Message:
        return self._get_client().messages.create(
            model=self.config.model,
            max_tokens=max_tokens,
            messages=messages,
        )

    def _call_with_retry(
        self,
        *,
        messages: list[MessageParam],
        max_tokens: int,
    ) -> anthropic.types.Message:
        """Call the API with exponential backoff retry.

        Delays are base * 2**attempt seconds, capped at retry_max_delay.

        Raises:
            AIServiceError: Mapped from the last error.
        """
        max_retries = self.config.max_retries
        attempt = 0

        while True:
            try:
                return self._call_api(messages=messages, max_tokens=max_tokens)
            except _RETRYABLE_ERRORS as e:
                if attempt >= max_retries:
                    raise map_api_error(e) from e
                delay = min(
                    self.config.retry_base_delay * (2**attempt),
                    self.config.retry_max_delay,
                )
                logger.warning(
                    "API call attempt %d/%d failed, retrying in %.1fs: %s",
                    attempt + 1,
                    max_retries + 1,
                    delay,
                    e,
                )
                time.sleep(delay)
                attempt += 1
            except anthropic.AnthropicError as e:
                raise map_api_error(e) from e
            except TypeError as e:
                # raised by the SDK when neither an API key nor a token is set
                if _AUTH_UNRESOLVED not in str(e):
                    raise
                raise InvalidRequestError(AUTH_FAILED_MESSAGE) from e


def _validate_prompt(prompt: str) -> None:
    if not prompt or not prompt.strip():
        raise InvalidRequestError("Prompt cannot be empty")
    if len(prompt) > MAX_PROMPT_CHARS:
        raise InvalidRequestError(
            f"Prompt is too long. Maximum {MAX_PROMPT_CHARS:,} characters allowed."
        )
