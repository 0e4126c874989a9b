"""
Subscription manager: the lifecycle of one event stream.

A `Subscription` is a lazy, single-consumer async iterator over
`Ok(DomainEvent | StreamGap)` and `Err(ApiError)` items. The connection is
opened on first iteration and driven by an explicit state machine:

    IDLE -> CONNECTING -> STREAMING -> RECONNECTING -> CONNECTING -> ...
                                  \\-> CLOSING -> CLOSED

Reconnection
------------
A transport disconnection (network error, end of stream, inactivity
timeout) moves the subscription to RECONNECTING. The `ReconnectPolicy`
bounds the attempts and spaces them with exponential backoff. Once a new
connection is up, exactly one `StreamGap` is yielded for the disconnection
so that missed events are never silently assumed away.

Whether the new connection resumes from the last event id is a required
choice of the caller (`ResumeMode`); nodes are free to ignore the resume
request, which is why the gap is reported either way.

Termination
-----------
Exhausting the policy, a 4xx answer to the stream request, an unknown event
under `UnknownEventPolicy.FAIL` or a decode error under strict decoding
yields one final `Err(StreamClosed)` and ends the iteration. `cancel()` and
`aclose()` end it without any further item.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any, TypeVar

from beacon_api_client import metrics
from beacon_api_client.api.errors import (
    ApiError,
    DecodeError,
    HttpStatusError,
    NetworkError,
    StreamClosed,
)
from beacon_api_client.api.result import Err, Ok, Result
from beacon_api_client.consensus import ForkName, ForkSchedule

from .demux import EventDemultiplexer, UnknownEventPolicy
from .models import DomainEvent, StreamGap
from .sse import EventEnvelope, SseComment
from .transport import EventStreamTransport, FrameStream

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SubscriptionState(Enum):
    IDLE = auto()
    CONNECTING = auto()
    STREAMING = auto()
    RECONNECTING = auto()
    CLOSING = auto()
    CLOSED = auto()


_TRANSITIONS: dict[SubscriptionState, frozenset[SubscriptionState]] = {
    SubscriptionState.IDLE: frozenset({SubscriptionState.CONNECTING, SubscriptionState.CLOSING}),
    SubscriptionState.CONNECTING: frozenset(
        {SubscriptionState.STREAMING, SubscriptionState.RECONNECTING, SubscriptionState.CLOSING}
    ),
    SubscriptionState.STREAMING: frozenset(
        {SubscriptionState.RECONNECTING, SubscriptionState.CLOSING}
    ),
    SubscriptionState.RECONNECTING: frozenset(
        {SubscriptionState.CONNECTING, SubscriptionState.CLOSING}
    ),
    SubscriptionState.CLOSING: frozenset({SubscriptionState.CLOSED}),
    SubscriptionState.CLOSED: frozenset(),
}
"""Legal transitions. Anything else is a programming error."""


class InvalidTransition(RuntimeError):
    """Raised on a state change the state machine does not allow."""

    def __init__(self, current: SubscriptionState, target: SubscriptionState) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Invalid subscription transition {current.name} -> {target.name}")


class ResumeMode(Enum):
    """How a reconnected stream relates to the previous connection."""

    LAST_EVENT_ID = auto()
    """Send `Last-Event-ID` so the node may replay missed events."""

    FRESH = auto()
    """Start from the node's current events."""


@dataclass(frozen=True, slots=True)
class ReconnectPolicy:
    """Bounds and backoff of reconnection attempts."""

    max_attempts: int | None = 10
    """Consecutive attempts before giving up; None for no limit."""

    max_elapsed: float | None = None
    """Seconds since the disconnection before giving up; None for no limit."""

    initial_delay: float = 0.5
    """Delay before the first attempt, in seconds."""

    max_delay: float = 30.0
    """Upper bound of the delay between attempts, in seconds."""

    multiplier: float = 2.0
    """Growth factor of the delay between consecutive attempts."""

    def __post_init__(self) -> None:
        if self.max_attempts is not None and self.max_attempts < 0:
            raise ValueError("max_attempts must not be negative")
        if self.max_elapsed is not None and self.max_elapsed < 0:
            raise ValueError("max_elapsed must not be negative")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("Delays must not be negative")
        if self.multiplier < 1:
            raise ValueError("multiplier must be at least 1")

    @classmethod
    def never(cls) -> ReconnectPolicy:
        """A policy that gives up on the first disconnection."""
        return cls(max_attempts=0)

    def allows(self, attempt: int, elapsed: float) -> bool:
        """Whether attempt number `attempt` (1-based) may start after `elapsed` seconds."""
        if self.max_attempts is not None and attempt > self.max_attempts:
            return False
        return self.max_elapsed is None or elapsed < self.max_elapsed

    def delay(self, attempt: int, initial: float | None = None) -> float:
        """
        Delay before attempt number `attempt` (1-based).

        Args:
            attempt: The attempt about to start.
            initial: Initial delay requested by the node (SSE `retry`),
                replacing `initial_delay`.
        """
        base = self.initial_delay if initial is None else initial
        return min(self.max_delay, base * self.multiplier ** (attempt - 1))


@dataclass(frozen=True, slots=True)
class SubscriptionConfig:
    """Behaviour of one subscription."""

    resume: ResumeMode
    """Whether reconnects resume from the last event id. Must be chosen."""

    reconnect: ReconnectPolicy = field(default_factory=ReconnectPolicy)
    """Bounds and backoff of reconnection."""

    idle_timeout: float | None = None
    """Seconds without any frame or heartbeat before reconnecting."""

    notify_gaps: bool = True
    """Whether to yield a `StreamGap` after each reconnection."""

    strict_decoding: bool = False
    """Whether a payload that fails to decode ends the stream."""

    unknown_events: UnknownEventPolicy = UnknownEventPolicy.REPORT
    """What to do with unknown event tags."""

    fork_schedule: ForkSchedule | None = None
    """Schedule used to decode attestations and attester slashings."""

    fork: ForkName | None = None
    """Fixed fork for attestations and attester slashings."""

    slots_per_epoch: int | None = None
    """Overrides the slots per epoch of `fork_schedule`."""

    def __post_init__(self) -> None:
        if not isinstance(self.resume, ResumeMode):
            raise TypeError("resume must be a ResumeMode")
        if self.idle_timeout is not None and self.idle_timeout <= 0:
            raise ValueError("idle_timeout must be positive")

    def demultiplexer(self) -> EventDemultiplexer:
        """Build the demultiplexer this configuration describes."""
        schedule = self.fork_schedule
        if schedule is not None and self.slots_per_epoch is not None:
            schedule = replace(schedule, slots_per_epoch=self.slots_per_epoch)
        return EventDemultiplexer(
            unknown_events=self.unknown_events, fork_schedule=schedule, fork=self.fork
        )


class _Cancelled(Exception):
    pass


class _IdleTimeout(Exception):
    pass


SubscriptionItem = Result[DomainEvent | StreamGap]


class Subscription:
    """
    A cancellable, ordered stream of typed events.

    Items are yielded strictly in wire order. Each subscription has a single
    consumer; a concurrent `__anext__` raises `RuntimeError`.
    """

    def __init__(
        self,
        transport: EventStreamTransport,
        url: str,
        *,
        topics: Sequence[str],
        config: SubscriptionConfig,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        if not topics:
            raise ValueError("At least one topic is required")
        self._transport = transport
        self._url = url
        self._params = [("topics", ",".join(topics))]
        self._headers = dict(headers or {})
        self.config = config
        self.topics = tuple(topics)

        self._demux = config.demultiplexer()
        self._state = SubscriptionState.IDLE
        self._stream: FrameStream | None = None
        self._frames: Any = None
        self._pending: deque[SubscriptionItem] = deque()
        self._cancel_event = asyncio.Event()
        self._reading = False
        self._close_task: asyncio.Task[None] | None = None

        self._last_event_id: str | None = None
        self._server_retry: float | None = None
        self._last_error: ApiError | None = None
        self._gap_reason: str | None = None
        self._ever_connected = False
        self._attempt = 0
        self._outage_started: float | None = None

    @property
    def state(self) -> SubscriptionState:
        return self._state

    @property
    def last_event_id(self) -> str | None:
        """Id of the last event received, if the node sends ids."""
        return self._last_event_id

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    # -------------------------------------------------------------------------
    # Iteration
    # -------------------------------------------------------------------------

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> SubscriptionItem:
        if self._reading:
            raise RuntimeError("Subscription already has an active consumer")
        self._reading = True
        try:
            return await self._next_item()
        finally:
            self._reading = False

    async def __aenter__(self) -> Subscription:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _next_item(self) -> SubscriptionItem:
        while True:
            if self.cancelled:
                self._pending.clear()
                await self._shutdown("cancelled")
                raise StopAsyncIteration
            if self._pending:
                return self._pending.popleft()
            if self._state is SubscriptionState.CLOSED:
                raise StopAsyncIteration

            if self._state is SubscriptionState.IDLE:
                logger.info(f"Subscribing to {','.join(self.topics)} at {self._url}")
                await self._connect()
            elif self._state is SubscriptionState.RECONNECTING:
                await self._reconnect()
            elif self._state is SubscriptionState.STREAMING:
                await self._read()
            else:
                # CLOSING: a concurrent aclose() is finishing.
                await self._shutdown("closed")

    # -------------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------------

    def cancel(self) -> None:
        """
        Stop the subscription.

        No item is delivered afterwards. A pending read is interrupted and the
        connection is released.
        """
        if self.cancelled:
            return
        self._cancel_event.set()
        self._pending.clear()
        if not self._reading and self._state is not SubscriptionState.CLOSED:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                return
            self._close_task = loop.create_task(self._shutdown("cancelled"))
            self._close_task.add_done_callback(self._close_finished)

    def _close_finished(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Failed to release event stream after cancel: {exc!r}")

    async def aclose(self) -> None:
        """Cancel the subscription and wait until the connection is released."""
        self.cancel()
        if self._close_task is not None:
            await self._close_task
        else:
            await self._shutdown("cancelled")

    # -------------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------------

    def _transition(self, target: SubscriptionState) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise InvalidTransition(self._state, target)
        logger.debug(f"Subscription {self._state.name} -> {target.name}")
        self._state = target

    async def _connect(self) -> None:
        self._transition(SubscriptionState.CONNECTING)

        headers = {"Accept": "text/event-stream", "Cache-Control": "no-cache", **self._headers}
        resumed = (
            self.config.resume is ResumeMode.LAST_EVENT_ID and self._last_event_id is not None
        )
        if resumed:
            headers["Last-Event-ID"] = self._last_event_id  # type: ignore[assignment]

        try:
            stream = await self._race(
                self._transport.open(self._url, params=self._params, headers=headers)
            )
        except _Cancelled:
            await self._shutdown("cancelled")
            return
        except HttpStatusError as exc:
            if 400 <= exc.code < 500:
                await self._fail(f"stream request rejected with HTTP {exc.code}", exc)
            else:
                await self._disconnected(str(exc), exc)
            return
        except NetworkError as exc:
            await self._disconnected(str(exc), exc)
            return

        self._stream = stream
        if self.cancelled or self._state is not SubscriptionState.CONNECTING:
            # Opened in the same tick as a cancel, or closed by a concurrent aclose().
            await self._close_stream()
            await self._shutdown("cancelled")
            return
        self._frames = stream.__aiter__()
        self._transition(SubscriptionState.STREAMING)
        self._attempt = 0
        self._outage_started = None

        if self._gap_reason is not None:
            logger.info(f"Event stream reconnected after: {self._gap_reason}")
            if self.config.notify_gaps:
                self._pending.append(
                    Ok(
                        StreamGap(
                            reason=self._gap_reason,
                            last_event_id=self._last_event_id,
                            resumed=resumed,
                        )
                    )
                )
            self._gap_reason = None
        self._ever_connected = True

    async def _read(self) -> None:
        try:
            frame = await self._race(self._next_frame(), timeout=self.config.idle_timeout)
        except _Cancelled:
            await self._shutdown("cancelled")
            return
        except _IdleTimeout:
            await self._disconnected(f"no data for {self.config.idle_timeout}s", None)
            return
        except NetworkError as exc:
            await self._disconnected(str(exc), exc)
            return

        if self.cancelled:
            await self._shutdown("cancelled")
            return

        # A `retry` field takes effect even in a frame that carries no data.
        retry = self._stream.reconnection_time if self._stream is not None else None
        if retry is not None:
            self._server_retry = retry / 1000

        if frame is None:
            await self._disconnected("stream ended by the node", None)
        elif isinstance(frame, SseComment):
            logger.debug("Event stream heartbeat")
        else:
            await self._handle_envelope(frame)

    async def _next_frame(self) -> EventEnvelope | SseComment | None:
        try:
            return await self._frames.__anext__()
        except StopAsyncIteration:
            return None

    async def _handle_envelope(self, envelope: EventEnvelope) -> None:
        if envelope.id is not None:
            # An empty id clears the resume point.
            self._last_event_id = envelope.id or None

        result = self._demux.decode(envelope)
        if isinstance(result, Ok):
            metrics.events_received.labels(kind=result.value.KIND.value).inc()
            self._pending.append(result)
            return

        error = result.error
        metrics.event_errors.labels(error=type(error).__name__).inc()
        if self._demux.is_fatal(error):
            await self._fail(f"unrecognized event kind {envelope.event!r}", error)
        elif self.config.strict_decoding and isinstance(error, DecodeError):
            await self._fail(f"failed to decode {envelope.event!r} event", error)
        else:
            self._pending.append(result)

    async def _disconnected(self, reason: str, cause: ApiError | None) -> None:
        await self._close_stream()
        if self.cancelled or self._state in (SubscriptionState.CLOSING, SubscriptionState.CLOSED):
            await self._shutdown("cancelled")
            return
        if self._state is SubscriptionState.STREAMING:
            logger.warning(f"Event stream disconnected: {reason}")
            self._gap_reason = reason
        else:
            logger.warning(f"Cannot connect event stream: {reason}")
        self._last_error = cause
        if self._outage_started is None:
            self._outage_started = asyncio.get_running_loop().time()
        self._transition(SubscriptionState.RECONNECTING)

    async def _reconnect(self) -> None:
        policy = self.config.reconnect
        self._attempt += 1
        now = asyncio.get_running_loop().time()
        if self._outage_started is None:
            self._outage_started = now
        elapsed = now - self._outage_started

        if not policy.allows(self._attempt, elapsed):
            await self._fail(
                f"reconnect policy exhausted after {self._attempt - 1} attempts",
                self._last_error,
            )
            return

        delay = policy.delay(self._attempt, self._server_retry)
        metrics.reconnects_total.inc()
        logger.warning(f"Reconnecting event stream in {delay:.2f}s (attempt {self._attempt})")

        try:
            await self._race(asyncio.sleep(delay))
        except _Cancelled:
            await self._shutdown("cancelled")
            return
        if self.cancelled or self._state is not SubscriptionState.RECONNECTING:
            await self._shutdown("cancelled")
            return
        await self._connect()

    async def _fail(self, reason: str, cause: ApiError | None) -> None:
        logger.warning(f"Event stream closing: {reason}")
        self._pending.append(Err(StreamClosed(reason, cause=cause)))
        await self._shutdown(reason)

    async def _shutdown(self, reason: str) -> None:
        if self._state in (SubscriptionState.CLOSING, SubscriptionState.CLOSED):
            return
        self._transition(SubscriptionState.CLOSING)
        try:
            await self._close_stream()
        finally:
            self._transition(SubscriptionState.CLOSED)
            logger.info(f"Subscription to {','.join(self.topics)} closed: {reason}")

    async def _close_stream(self) -> None:
        stream, self._stream, self._frames = self._stream, None, None
        if stream is not None:
            await stream.aclose()

    async def _race(self, awaitable: Awaitable[T], timeout: float | None = None) -> T:
        """
        Await `awaitable` unless cancellation or `timeout` comes first.

        Raises:
            _Cancelled: If the subscription was cancelled first.
            _IdleTimeout: If `timeout` expired first.
        """
        work = asyncio.ensure_future(awaitable)
        stop = asyncio.create_task(self._cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                [work, stop], timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            work.cancel()
            raise
        finally:
            stop.cancel()

        if work in done:
            return work.result()

        work.cancel()
        try:
            await work
        except asyncio.CancelledError:
            pass
        except ApiError as exc:
            logger.debug(f"Discarded error of an interrupted read: {exc}")

        if self.cancelled:
            raise _Cancelled
        raise _IdleTimeout
