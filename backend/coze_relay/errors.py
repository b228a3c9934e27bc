"""
Relay error taxonomy.

Every failure the handler can report maps to one of these, each carrying
the HTTP status and the short message returned to the caller.
"""
from typing import Optional

from coze_relay.models.chat import RelayResponse


class RelayError(Exception):
    """Base class for errors converted into an HTTP response by the handler."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> RelayResponse:
        return RelayResponse(status_code=self.status_code, body={"error": self.message})


class MethodNotAllowed(RelayError):
    status_code = 405
    default_message = "Method Not Allowed"


class InvalidRequest(RelayError):
    status_code = 400
    default_message = 'Missing "message" in request body'


class Misconfigured(RelayError):
    default_message = "Coze API token or Bot ID not configured in environment variables."


class UpstreamError(RelayError):
    """The chat service answered with a non-zero code or a bad HTTP status."""


class IncompleteChat(RelayError):
    def __init__(self, status: Optional[str]):
        self.status = status
        super().__init__(f"Chat did not complete (status: {status})")


class InternalError(RelayError):
    pass


class CozeAPIError(Exception):
    """Raised by the Coze client when a call does not return code 0."""

    def __init__(self, code: int, msg: Optional[str] = None, http_status: Optional[int] = None):
        self.code = code
        self.msg = msg
        self.http_status = http_status
        super().__init__(f"Coze API error {code}: {msg}")
