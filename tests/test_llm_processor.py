from unittest.mock import MagicMock, patch

import anthropic
import httpx
import requests

from multilingual_tutor.errors import (
    HTTP_STATUS_ERROR,
    INVALID_RESPONSE,
    TRANSPORT_ERROR,
    HTTPStatusError,
)
from multilingual_tutor.llm_processor import (
    BACKEND_SDK,
    DEFAULT_API_URL,
    LLMProcessor,
)


def _response(status_code: int, payload=None, json_error: bool = False) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = payload
    return response


def _processor(response=None, exc=None) -> LLMProcessor:
    processor = LLMProcessor(api_key="test-key", model_name="test-model", max_tokens=1500)
    processor.session = MagicMock()
    if exc is not None:
        processor.session.post.side_effect = exc
    else:
        processor.session.post.return_value = response
    return processor


def test_success_returns_first_content_text() -> None:
    processor = _processor(_response(200, {"content": [{"type": "text", "text": "PRIMARY TRANSLATION:\nHola"}]}))

    result = processor.complete("Translate hello")

    assert result.success is True
    assert result.text == "PRIMARY TRANSLATION:\nHola"
    assert result.error is None


def test_request_shape() -> None:
    processor = _processor(_response(200, {"content": [{"text": "ok"}]}))

    processor.complete("the prompt")

    args, kwargs = processor.session.post.call_args
    assert args[0] == DEFAULT_API_URL
    assert kwargs["json"] == {
        "model": "test-model",
        "max_tokens": 1500,
        "messages": [{"role": "user", "content": "the prompt"}],
    }
    assert kwargs["headers"]["x-api-key"] == "test-key"
    assert kwargs["headers"]["content-type"] == "application/json"
    assert "anthropic-version" in kwargs["headers"]
    assert "timeout" not in kwargs


def test_no_api_key_header_without_key() -> None:
    processor = LLMProcessor(api_key=None)
    processor.session = MagicMock()
    processor.session.post.return_value = _response(200, {"content": [{"text": "ok"}]})

    processor.complete("x")

    assert "x-api-key" not in processor.session.post.call_args.kwargs["headers"]
    assert processor.is_configured() is False


def test_transport_failure() -> None:
    processor = _processor(exc=requests.ConnectionError("connection refused"))

    result = processor.complete("x")

    assert result.success is False
    assert result.error.kind == TRANSPORT_ERROR
    assert "connection refused" in result.error_message
    assert result.error_message.startswith("Error: ")
    assert processor.session.post.call_count == 1


def test_status_error_carries_code_and_server_message() -> None:
    payload = {"type": "error", "error": {"type": "authentication_error", "message": "invalid x-api-key"}}
    processor = _processor(_response(401, payload))

    result = processor.complete("x")

    assert result.success is False
    assert isinstance(result.error, HTTPStatusError)
    assert result.error.kind == HTTP_STATUS_ERROR
    assert result.error.status_code == 401
    assert result.error.server_message == "invalid x-api-key"
    assert "401 - invalid x-api-key" in result.error_message


def test_status_error_without_json_body() -> None:
    processor = _processor(_response(503, json_error=True))

    result = processor.complete("x")

    assert result.error.status_code == 503
    assert result.error.server_message is None
    assert "503 - Unknown error" in result.error_message


def test_missing_content_is_invalid_response() -> None:
    for payload in ({}, {"content": []}, {"content": [{"type": "text"}]}, {"content": [{"text": ""}]}, ["x"]):
        result = _processor(_response(200, payload)).complete("x")
        assert result.success is False
        assert result.error.kind == INVALID_RESPONSE
        assert "Invalid response from API" in result.error_message


def test_non_json_success_is_invalid_response() -> None:
    result = _processor(_response(200, json_error=True)).complete("x")
    assert result.error.kind == INVALID_RESPONSE


def test_unknown_backend_falls_back_to_http() -> None:
    processor = LLMProcessor(api_key="k", backend="carrier-pigeon")
    assert processor.backend == "http"


@patch("multilingual_tutor.llm_processor.anthropic.Anthropic")
def test_sdk_backend_success(mock_anthropic: MagicMock) -> None:
    client = mock_anthropic.return_value
    client.messages.create.return_value = MagicMock(content=[MagicMock(text="Bonjour")])

    processor = LLMProcessor(api_key="k", model_name="m", max_tokens=10, backend=BACKEND_SDK)
    result = processor.complete("hi")

    assert result.success is True
    assert result.text == "Bonjour"
    mock_anthropic.assert_called_once_with(api_key="k", max_retries=0)
    client.messages.create.assert_called_once_with(
        model="m", max_tokens=10, messages=[{"role": "user", "content": "hi"}]
    )


@patch("multilingual_tutor.llm_processor.anthropic.Anthropic")
def test_sdk_backend_maps_errors(mock_anthropic: MagicMock) -> None:
    request = httpx.Request("POST", DEFAULT_API_URL)
    client = mock_anthropic.return_value
    processor = LLMProcessor(api_key="k", backend=BACKEND_SDK)

    client.messages.create.side_effect = anthropic.APIConnectionError(request=request)
    assert processor.complete("hi").error.kind == TRANSPORT_ERROR

    response = httpx.Response(429, request=request)
    client.messages.create.side_effect = anthropic.APIStatusError(
        "rate limited",
        response=response,
        body={"type": "error", "error": {"type": "rate_limit_error", "message": "slow down"}},
    )
    error = processor.complete("hi").error
    assert error.kind == HTTP_STATUS_ERROR
    assert error.status_code == 429
    assert error.server_message == "slow down"

    client.messages.create.side_effect = None
    client.messages.create.return_value = MagicMock(content=[])
    assert processor.complete("hi").error.kind == INVALID_RESPONSE
