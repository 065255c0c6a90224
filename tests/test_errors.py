"""Tests for neuroleaf.errors - SDK error mapping."""

from __future__ import annotations

from unittest.mock import MagicMock

import anthropic
import httpx
import pytest

from neuroleaf.errors import (
    AIServiceError,
    InvalidRequestError,
    ModelUnavailableError,
    QuotaExceededError,
    map_api_error,
)

_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _status_error(cls: type[anthropic.APIStatusError], status: int) -> anthropic.APIStatusError:
    return cls("boom", response=httpx.Response(status, request=_REQUEST), body=None)


class TestErrorHierarchy:
    def test_quota_exceeded_fields(self) -> None:
        err = QuotaExceededError()
        assert isinstance(err, AIServiceError)
        assert err.code == "QUOTA_EXCEEDED"
        assert err.status_code == 429

    def test_invalid_request_fields(self) -> None:
        err = InvalidRequestError("bad prompt")
        assert err.message == "bad prompt"
        assert err.code == "INVALID_REQUEST"
        assert err.status_code == 400

    def test_model_unavailable_fields(self) -> None:
        err = ModelUnavailableError()
        assert err.code == "MODEL_UNAVAILABLE"
        assert err.status_code == 503


class TestMapApiError:
    def test_passes_through_service_errors(self) -> None:
        err = QuotaExceededError()
        assert map_api_error(err) is err

    @pytest.mark.parametrize(
        ("cls", "status", "expected"),
        [
            (anthropic.AuthenticationError, 401, InvalidRequestError),
            (anthropic.PermissionDeniedError, 403, InvalidRequestError),
            (anthropic.NotFoundError, 404, ModelUnavailableError),
            (anthropic.RateLimitError, 429, QuotaExceededError),
            (anthropic.BadRequestError, 400, InvalidRequestError),
            (anthropic.InternalServerError, 500, ModelUnavailableError),
        ],
    )
    def test_maps_status_errors(
        self,
        cls: type[anthropic.APIStatusError],
        status: int,
        expected: type[AIServiceError],
    ) -> None:
        assert isinstance(map_api_error(_status_error(cls, status)), expected)

    def test_authentication_message(self) -> None:
        mapped = map_api_error(_status_error(anthropic.AuthenticationError, 401))
        assert "API key" in mapped.message

    def test_connection_error_is_network_error(self) -> None:
        mapped = map_api_error(anthropic.APIConnectionError(request=MagicMock()))
        assert type(mapped) is AIServiceError
        assert mapped.code == "NETWORK_ERROR"

    def test_unknown_error_keeps_message(self) -> None:
        mapped = map_api_error(RuntimeError("weird"))
        assert mapped.code == "LLM_ERROR"
        assert mapped.message == "weird"
