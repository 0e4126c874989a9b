"""
Streaming transport for the event stream.

`Subscription` depends only on the `EventStreamTransport` protocol: open a
stream, iterate its frames, close it. `HttpxEventStreamTransport` is the
production implementation; tests substitute scripted transports.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from typing import Protocol

import httpx

from beacon_api_client.api.errors import NetworkError, RequestTimeout
from beacon_api_client.api.mapper import status_error

from .sse import EventEnvelope, SseComment, SseParser

logger = logging.getLogger(__name__)

EVENTS_ENDPOINT = "get_events"


class FrameStream(Protocol):
    """An open event stream."""

    @property
    def reconnection_time(self) -> int | None:
        """The latest SSE `retry` value in milliseconds, including data-less frames."""
        ...

    def __aiter__(self) -> AsyncIterator[EventEnvelope | SseComment]:
        """
        Iterate frames in wire order until the stream ends.

        Raises:
            NetworkError: If the connection fails mid-stream.
        """
        ...

    async def aclose(self) -> None:
        """Release the connection. Idempotent."""
        ...


class EventStreamTransport(Protocol):
    """Opens event streams."""

    async def open(
        self,
        url: str,
        *,
        params: Sequence[tuple[str, str]],
        headers: Mapping[str, str],
    ) -> FrameStream:
        """
        Open a stream.

        Raises:
            NetworkError: If the connection cannot be established.
            HttpStatusError: If the node answers with a non-2xx status.
        """
        ...


class HttpxFrameStream:
    """Frames of one streaming httpx response."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response
        self._parser = SseParser()

    @property
    def reconnection_time(self) -> int | None:
        return self._parser.reconnection_time

    async def __aiter__(self) -> AsyncIterator[EventEnvelope | SseComment]:
        url = str(self._response.request.url)
        try:
            async for chunk in self._response.aiter_text():
                for item in self._parser.feed(chunk):
                    yield item
        except httpx.TimeoutException as exc:
            raise RequestTimeout(f"Event stream timed out: {exc}", url=url) from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"Event stream failed: {exc}", url=url) from exc

    async def aclose(self) -> None:
        await self._response.aclose()


class HttpxEventStreamTransport:
    """
    Event streams over a shared `httpx.AsyncClient`.

    Only connection establishment is bounded by a timeout. Silence on an open
    stream is handled by the subscription's inactivity timeout.
    """

    def __init__(self, client: httpx.AsyncClient, *, connect_timeout: float = 10.0) -> None:
        self._client = client
        self._timeout = httpx.Timeout(None, connect=connect_timeout)

    async def open(
        self,
        url: str,
        *,
        params: Sequence[tuple[str, str]],
        headers: Mapping[str, str],
    ) -> HttpxFrameStream:
        request = self._client.build_request(
            "GET", url, params=list(params), headers=dict(headers), timeout=self._timeout
        )
        logger.debug(f"Opening event stream {request.url}")

        try:
            response = await self._client.send(request, stream=True)
        except httpx.TimeoutException as exc:
            raise RequestTimeout(
                f"Timed out opening event stream: {exc}", url=url, endpoint=EVENTS_ENDPOINT
            ) from exc
        except httpx.TransportError as exc:
            raise NetworkError(
                f"Cannot open event stream: {exc}", url=url, endpoint=EVENTS_ENDPOINT
            ) from exc

        if not response.is_success:
            try:
                body = await response.aread()
            except httpx.TransportError as exc:
                raise NetworkError(
                    f"Cannot read event stream error: {exc}", url=url, endpoint=EVENTS_ENDPOINT
                ) from exc
            finally:
                await response.aclose()
            raise status_error(response.status_code, body, endpoint=EVENTS_ENDPOINT)

        return HttpxFrameStream(response)
