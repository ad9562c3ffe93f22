"""
LLM Processor for Multilingual Tutor
Single request/response calls to the Anthropic Messages API
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import anthropic
import requests

from .errors import (
    HTTPStatusError,
    InferenceError,
    InvalidResponseError,
    TransportError,
    format_error_message,
)

DEFAULT_API_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 1500
ANTHROPIC_VERSION = "2023-06-01"

BACKEND_HTTP = "http"
BACKEND_SDK = "anthropic"


@dataclass
class InferenceResult:
    """Outcome of one inference attempt"""
    success: bool
    text: str = ""
    error: Optional[InferenceError] = None

    @property
    def error_message(self) -> str:
        return format_error_message(self.error) if self.error else ""


class LLMProcessor:
    """Sends a prompt to the remote model and normalizes the outcome"""

    def __init__(self,
                 api_key: Optional[str] = None,
                 api_url: str = DEFAULT_API_URL,
                 model_name: str = DEFAULT_MODEL,
                 max_tokens: int = DEFAULT_MAX_TOKENS,
                 backend: str = BACKEND_HTTP):
        self.logger = logging.getLogger(__name__)
        self.api_key = api_key
        self.api_url = api_url
        self.model_name = model_name
        self.max_tokens = max_tokens
        self.backend = (backend or BACKEND_HTTP).lower()
        self.session = requests.Session()
        self.anthropic_client = None

        if self.backend == BACKEND_SDK:
            self._init_sdk_client()
        elif self.backend != BACKEND_HTTP:
            self.logger.warning(f"Unknown LLM backend '{backend}', using plain HTTP")
            self.backend = BACKEND_HTTP

    def _init_sdk_client(self):
        """Initialize the Anthropic SDK client (no automatic retries)"""
        self.anthropic_client = anthropic.Anthropic(api_key=self.api_key, max_retries=0)
        self.logger.info("Anthropic SDK client initialized")

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model_name,
            "max_tokens": self.max_tokens,
            "messages": [
                {"role": "user", "content": prompt}
            ],
        }

    def complete(self, prompt: str) -> InferenceResult:
        """
        Run one inference round trip.

        Never raises for network or API failures: they are logged and
        returned as an unsuccessful result. No retry is attempted.
        """
        self.logger.info(f"Sending {len(prompt)} character prompt to {self.model_name} via {self.backend}")
        try:
            if self.backend == BACKEND_SDK:
                text = self._call_sdk(prompt)
            else:
                text = self._call_http(prompt)
        except InferenceError as e:
            self.logger.error(f"Inference failed ({e.kind}): {e}")
            return InferenceResult(success=False, error=e)

        self.logger.info(f"Received {len(text)} character reply")
        return InferenceResult(success=True, text=text)

    def _headers(self) -> Dict[str, str]:
        headers = {
            "content-type": "application/json",
            "anthropic-version": ANTHROPIC_VERSION,
        }
        if self.api_key:
            headers["x-api-key"] = self.api_key
        return headers

    def _call_http(self, prompt: str) -> str:
        """POST the prompt and return content[0].text"""
        try:
            response = self.session.post(
                self.api_url,
                json=self.build_payload(prompt),
                headers=self._headers(),
            )
        except requests.RequestException as e:
            raise TransportError(str(e)) from e

        if not 200 <= response.status_code < 300:
            raise HTTPStatusError(response.status_code, self._server_message(response))

        try:
            data = response.json()
        except ValueError as e:
            raise InvalidResponseError("response body is not JSON") from e
        return self._extract_text(data)

    def _server_message(self, response: requests.Response) -> Optional[str]:
        try:
            data = response.json()
        except ValueError:
            return None
        error = data.get("error") if isinstance(data, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return None

    @staticmethod
    def _extract_text(data: Any) -> str:
        content = data.get("content") if isinstance(data, dict) else None
        if not isinstance(content, list) or not content:
            raise InvalidResponseError("missing content array")
        first = content[0]
        text = first.get("text") if isinstance(first, dict) else None
        if not text:
            raise InvalidResponseError("missing content[0].text")
        return text

    def _call_sdk(self, prompt: str) -> str:
        """Same call through the Anthropic SDK, mapped onto our error kinds"""
        try:
            message = self.anthropic_client.messages.create(**self.build_payload(prompt))
        except anthropic.APIConnectionError as e:
            raise TransportError(str(e)) from e
        except anthropic.APIStatusError as e:
            body = e.body if isinstance(e.body, dict) else {}
            error = body.get("error") if isinstance(body.get("error"), dict) else body
            raise HTTPStatusError(e.status_code, error.get("message") or e.message) from e

        content = getattr(message, "content", None) or []
        text = getattr(content[0], "text", None) if content else None
        if not text:
            raise InvalidResponseError("missing content[0].text")
        return text

    def get_status(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "configured": self.is_configured(),
            "model_name": self.model_name,
            "endpoint": self.api_url if self.backend == BACKEND_HTTP else "anthropic-sdk",
        }

    def cleanup(self):
        """Release HTTP connections"""
        try:
            self.session.close()
            if self.anthropic_client is not None:
                self.anthropic_client.close()
            self.logger.info("LLM processor cleanup completed")
        except Exception as e:
            self.logger.error(f"Error during LLM processor cleanup: {e}")
