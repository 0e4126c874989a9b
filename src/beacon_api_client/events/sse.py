"""
Server-Sent Events framing.

The event stream is UTF-8 text split into lines (CRLF, LF or a lone CR). A
blank line dispatches the frame accumulated so far. Within a frame:

- Lines starting with `:` are comments, used by nodes as heartbeats.
- `event:` sets the event type (default `message`).
- `data:` lines are joined with `\\n`.
- `id:` sets the last event id, unless it contains NUL. An empty value resets
  it to `""`, which consumers read as "no resume point".
- `retry:` sets the reconnection delay in milliseconds, if all digits.

A single space after the colon is part of the syntax and is dropped. A frame
without any `data` line is not dispatched.

The parser is incremental: text arrives in arbitrary chunks and frames are
returned as soon as they are complete.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_EVENT_TYPE = "message"


@dataclass(frozen=True, slots=True)
class EventEnvelope:
    """One dispatched SSE frame. Immutable once produced."""

    event: str
    """The event type tag."""

    data: str
    """The raw payload, data lines joined with newlines."""

    id: str | None = None
    """Last event id in effect when the frame was dispatched."""

    retry: int | None = None
    """Reconnection delay in milliseconds carried by this frame, if any."""


@dataclass(frozen=True, slots=True)
class SseComment:
    """A comment line. Nodes send these as keep-alive heartbeats."""

    text: str


class SseParser:
    """
    Incremental parser turning text chunks into envelopes and comments.

    Not thread-safe; one parser per connection.
    """

    def __init__(self) -> None:
        self._buffer = ""
        self._pending_cr = False
        self._event = ""
        self._data: list[str] = []
        self._retry: int | None = None
        self.last_event_id: str | None = None
        """The id of the most recent frame that carried one."""
        self.reconnection_time: int | None = None
        """The most recent `retry` value in milliseconds, dispatched or not."""

    def feed(self, text: str) -> list[EventEnvelope | SseComment]:
        """Consume a chunk of text and return everything it completes."""
        items: list[EventEnvelope | SseComment] = []
        if not text:
            return items

        # A CR at the end of the previous chunk may be the first half of CRLF.
        if self._pending_cr and text.startswith("\n"):
            text = text[1:]
        self._pending_cr = False

        self._buffer += text
        start = 0
        length = len(self._buffer)
        while start < length:
            cr = self._buffer.find("\r", start)
            lf = self._buffer.find("\n", start)
            ends = [pos for pos in (cr, lf) if pos != -1]
            if not ends:
                break
            end = min(ends)
            line = self._buffer[start:end]

            if self._buffer[end] == "\r":
                if end + 1 == length:
                    self._pending_cr = True
                    start = end + 1
                elif self._buffer[end + 1] == "\n":
                    start = end + 2
                else:
                    start = end + 1
            else:
                start = end + 1

            item = self._process_line(line)
            if item is not None:
                items.append(item)

        self._buffer = self._buffer[start:]
        return items

    def _process_line(self, line: str) -> EventEnvelope | SseComment | None:
        if not line:
            return self._dispatch()

        if line.startswith(":"):
            return SseComment(line[1:].removeprefix(" "))

        field, sep, value = line.partition(":")
        if sep:
            value = value.removeprefix(" ")

        if field == "event":
            self._event = value
        elif field == "data":
            self._data.append(value)
        elif field == "id":
            if "\0" not in value:
                self.last_event_id = value
        elif field == "retry":
            if value.isascii() and value.isdigit():
                self._retry = int(value)
                self.reconnection_time = self._retry
        # Unknown fields are ignored.
        return None

    def _dispatch(self) -> EventEnvelope | None:
        event, data, retry = self._event, self._data, self._retry
        self._event, self._data, self._retry = "", [], None

        if not data:
            return None
        return EventEnvelope(
            event=event or DEFAULT_EVENT_TYPE,
            data="\n".join(data),
            id=self.last_event_id,
            retry=retry,
        )
