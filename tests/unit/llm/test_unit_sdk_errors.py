# tests/unit/llm/test_sdk_errors.py — v1
"""Tests for llm/sdk_errors.py — SDK exception translation."""

from __future__ import annotations

import anthropic
import httpx
import openai
import pytest

from salesintel.core.errors import TransientNetworkError, UpstreamApplicationError
from salesintel.llm.sdk_errors import translate_sdk_error

_REQUEST = httpx.Request("POST", "https://llm.invalid/v1")


def _status_error(sdk, cls_name: str, status: int):
    cls = getattr(sdk, cls_name)
    return cls("failed", response=httpx.Response(status, request=_REQUEST), body=None)


class TestTranslateSdkError:
    @pytest.mark.parametrize("sdk", [anthropic, openai])
    def test_connection_error(self, sdk):
        err = translate_sdk_error(sdk.APIConnectionError(request=_REQUEST), sdk, "p")
        assert isinstance(err, TransientNetworkError)
        assert err.source == "p"

    @pytest.mark.parametrize("sdk", [anthropic, openai])
    def test_timeout(self, sdk):
        err = translate_sdk_error(sdk.APITimeoutError(request=_REQUEST), sdk, "p")
        assert isinstance(err, TransientNetworkError)

    @pytest.mark.parametrize(
        "cls_name,status",
        [("RateLimitError", 429), ("InternalServerError", 500), ("InternalServerError", 529)],
    )
    def test_retryable_status(self, cls_name, status):
        err = translate_sdk_error(_status_error(anthropic, cls_name, status), anthropic, "anthropic")
        assert isinstance(err, TransientNetworkError)
        assert err.status_code == status

    @pytest.mark.parametrize(
        "cls_name,status",
        [("BadRequestError", 400), ("AuthenticationError", 401), ("NotFoundError", 404)],
    )
    def test_non_retryable_status(self, cls_name, status):
        err = translate_sdk_error(_status_error(openai, cls_name, status), openai, "openai")
        assert isinstance(err, UpstreamApplicationError)
        assert err.status_code == status
        assert str(err).startswith("openai: ")
