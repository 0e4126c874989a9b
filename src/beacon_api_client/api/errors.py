"""
Error taxonomy of the Beacon API client.

Every failure surfaces as one of these exceptions, either raised from a
REST call or delivered as an `Err` item on an event subscription:

- NetworkError: the transport failed (connection refused, reset, timeout).
  Likely transient; callers may retry.
- HttpStatusError: the node answered with a non-2xx status.
- DecodeError: the node answered, but the body did not match the shape.
- UnrecognizedEventKind: an event stream carried a tag this client does
  not know. Usually not fatal.
- StreamClosed: terminal state of a subscription.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import IndexedError

MAX_FRAGMENT_LENGTH = 512
"""Raw payloads kept on errors are truncated beyond this many characters."""


def truncate(raw: Any, limit: int = MAX_FRAGMENT_LENGTH) -> str:
    """Render a raw payload for diagnosis, truncated to `limit` characters."""
    if isinstance(raw, (bytes, bytearray)):
        text = bytes(raw).decode("utf-8", errors="replace")
    else:
        text = raw if isinstance(raw, str) else repr(raw)
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


class ApiError(Exception):
    """
    Base class for all Beacon API client errors.

    Attributes:
        message: Human-readable error description.
        endpoint: Name of the endpoint involved, if any.
    """

    def __init__(self, message: str, *, endpoint: str | None = None) -> None:
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"{endpoint}: {message}" if endpoint else message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class NetworkError(ApiError):
    """
    The transport failed before a complete response was received.

    Attributes:
        url: The URL that was being requested.
    """

    def __init__(self, message: str, *, url: str, endpoint: str | None = None) -> None:
        self.url = url
        super().__init__(f"{message} ({url})", endpoint=endpoint)


class RequestTimeout(NetworkError):
    """A connect, read or write timeout expired."""


class HttpStatusError(ApiError):
    """
    The node rejected the request with a non-2xx status.

    The raw body is always kept. When the body is the structured error of
    the Beacon API (`{"code": ..., "message": ...}`), its message and any
    per-item failures are exposed as well.

    Attributes:
        code: The HTTP status code.
        body: The raw response body text.
        server_message: The `message` of a structured error body, if any.
        failures: Per-item failures of a batch submission, if any.
    """

    def __init__(
        self,
        code: int,
        body: str,
        *,
        server_message: str | None = None,
        failures: Sequence[IndexedError] = (),
        endpoint: str | None = None,
    ) -> None:
        self.code = code
        self.body = body
        self.server_message = server_message
        self.failures = tuple(failures)

        detail = server_message if server_message is not None else truncate(body)
        super().__init__(f"HTTP {code}: {detail}", endpoint=endpoint)


class DecodeError(ApiError):
    """
    A response or event payload did not match the expected shape.

    Attributes:
        context: What was being decoded (type or event name).
        raw_fragment: The offending payload, truncated for display.
    """

    def __init__(
        self,
        context: str,
        detail: str,
        *,
        raw_fragment: Any = None,
        endpoint: str | None = None,
    ) -> None:
        self.context = context
        self.detail = detail
        self.raw_fragment = None if raw_fragment is None else truncate(raw_fragment)
        super().__init__(f"Failed to decode {context}: {detail}", endpoint=endpoint)


class UnrecognizedEventKind(ApiError):
    """
    An event stream delivered a tag that is not a known event kind.

    Attributes:
        tag: The raw event tag.
        raw_payload: The raw event data, untouched.
    """

    def __init__(self, tag: str, raw_payload: str) -> None:
        self.tag = tag
        self.raw_payload = raw_payload
        super().__init__(f"Unrecognized event kind {tag!r}")


class StreamClosed(ApiError):
    """
    A subscription reached its terminal state.

    Attributes:
        reason: Why the stream closed.
        cause: The error that made the stream unrecoverable, if any.
    """

    def __init__(self, reason: str, *, cause: ApiError | None = None) -> None:
        self.reason = reason
        self.cause = cause
        super().__init__(f"Stream closed: {reason}")
