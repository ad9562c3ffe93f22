"""
Error taxonomy for Multilingual Tutor
Classified inference failures and their user-facing text
"""

from typing import Optional

TRANSPORT_ERROR = "TRANSPORT_ERROR"
HTTP_STATUS_ERROR = "HTTP_STATUS_ERROR"
INVALID_RESPONSE = "INVALID_RESPONSE"

ERROR_HINT = "Please check the application log for more details."


class InferenceError(Exception):
    """Base class for a failed inference attempt"""
    kind = ""


class TransportError(InferenceError):
    """The request never produced an HTTP response"""
    kind = TRANSPORT_ERROR

    def __init__(self, reason: str):
        super().__init__(f"Network request failed: {reason}")
        self.reason = reason


class HTTPStatusError(InferenceError):
    """The server answered with a non-success status code"""
    kind = HTTP_STATUS_ERROR

    def __init__(self, status_code: int, server_message: Optional[str] = None):
        super().__init__(
            f"API request failed: {status_code} - {server_message or 'Unknown error'}"
        )
        self.status_code = status_code
        self.server_message = server_message


class InvalidResponseError(InferenceError):
    """Success status, but the payload has no reply text"""
    kind = INVALID_RESPONSE

    def __init__(self, detail: str = ""):
        super().__init__("Invalid response from API")
        self.detail = detail


def format_error_message(error: Exception) -> str:
    """Inline text shown in place of the result"""
    return f"Error: {error}\n\n{ERROR_HINT}"
