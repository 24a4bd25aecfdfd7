"""
Error taxonomy for the session and relay core.

Every error carries the HTTP status the API layer answers with, so the
boundary can map failures without inspecting messages.
"""

from typing import Any, Dict, Optional


class ChatRelayError(Exception):
    """Base application error."""

    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        """JSON body returned to the caller."""
        return {"error": self.message}


class InvalidInput(ChatRelayError):
    """Caller mistake: missing or empty input."""

    status_code = 400
    default_message = "Invalid input"


class Unauthenticated(ChatRelayError):
    """Missing or invalid bearer credential."""

    status_code = 401
    default_message = "Could not validate credentials"


class Forbidden(ChatRelayError):
    """Caller is authenticated but does not own the resource."""

    status_code = 403
    default_message = "Forbidden"


class NotFound(ChatRelayError):
    status_code = 404
    default_message = "Not found"


class Conflict(ChatRelayError):
    status_code = 409
    default_message = "Conflict"


class StorageUnavailable(ChatRelayError):
    """Repository outage. Callers may retry with backoff."""

    status_code = 503
    default_message = "Storage unavailable"


class UpstreamRequestError(ChatRelayError):
    """Provider answered with a non-success status or could not be reached."""

    status_code = 502
    default_message = "Upstream API error"

    def __init__(
        self,
        upstream_status: Optional[int],
        upstream_body: str = "",
        hint: Optional[str] = None,
    ):
        super().__init__()
        self.upstream_status = upstream_status
        self.upstream_body = upstream_body
        self.hint = hint

    def to_payload(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "upstream_status": self.upstream_status,
            "upstream_body": self.upstream_body,
            "hint": self.hint,
        }


class MalformedProviderResponse(ChatRelayError):
    """Provider succeeded but returned neither text nor a block reason."""

    status_code = 502
    default_message = "The model returned a response, but no text or reason for failure was found."

    def __init__(self, raw_body: str = ""):
        super().__init__()
        self.raw_body = raw_body

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message, "data": self.raw_body}
