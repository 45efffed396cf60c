"""
Bridge wire protocol.

One JSON object per WebSocket frame in each direction. Requests name an
operation through ``kind``; every response echoes that ``kind`` except the
untagged error reply sent for requests that could not be decoded.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union


class RequestError(ValueError):
    """Raised when a decoded message is not a usable request."""


class RequestKind(str, Enum):
    READ = "read"
    WRITE = "write"
    LIST = "list"
    CREATE = "create"
    DELETE = "delete"
    GIT_STATUS = "git-status"
    GIT_DIFF = "git-diff"
    GIT_COMMIT = "git-commit"
    GIT_PUSH = "git-push"

    @property
    def is_git(self) -> bool:
        return self.value.startswith("git-")

    @property
    def is_file(self) -> bool:
        return not self.is_git


@dataclass(frozen=True)
class Request:
    """A decoded bridge request."""

    kind: RequestKind
    path: Optional[str] = None
    content: Optional[str] = None
    file: Optional[str] = None
    message: Optional[str] = None


def _optional_str(data, field_name):
    # type: (Dict[str, Any], str) -> Optional[str]
    value = data.get(field_name)
    if value is None or isinstance(value, str):
        return value
    raise RequestError("{} must be a string".format(field_name))


def parse_request(raw: Union[str, bytes]) -> Request:
    """
    Decode a raw WebSocket message into a Request.

    Raises:
        json.JSONDecodeError: message is not valid JSON
        RequestError: message is JSON but not a request object
    """
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise RequestError("Request must be a JSON object")

    kind = data.get("kind")
    if not kind:
        raise RequestError("kind required")
    try:
        kind = RequestKind(kind)
    except ValueError:
        raise RequestError("Unknown request kind: {}".format(kind)) from None

    return Request(
        kind=kind,
        path=_optional_str(data, "path"),
        content=_optional_str(data, "content"),
        file=_optional_str(data, "file"),
        message=_optional_str(data, "message"),
    )


def require_field(request, field_name):
    # type: (Request, str) -> str
    """
    Return a required request field, raising if it is missing or empty.

    The error propagates to the message-level handler, which turns it into
    an untagged error response.
    """
    value = getattr(request, field_name)
    if not value:
        raise RequestError("{} required".format(field_name))
    return value


def build_success(kind: RequestKind, **payload: Any) -> Dict[str, Any]:
    """Build a tagged success response."""
    return {"kind": kind.value, **payload, "success": True}


def build_failure(kind: RequestKind, error: str, **payload: Any) -> Dict[str, Any]:
    """Build a tagged failure response for handlers that catch their own errors."""
    return {"kind": kind.value, **payload, "error": error, "success": False}


def build_error(error: str) -> Dict[str, Any]:
    """Build the untagged error response for undecodable requests or handler crashes."""
    return {"error": error, "success": False}
