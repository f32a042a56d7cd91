"""Incremental parser for the ``text/event-stream`` push format.

Events are blocks of lines separated by a blank line (``"\\n\\n"``).
Inside a block, ``event: <type>`` names the event and every
``data: <payload>`` line is appended to the payload. Other lines are
ignored.
"""

from __future__ import annotations

import codecs
import logging
from collections.abc import AsyncIterable, AsyncIterator

from gqlive._constants import DATA_PREFIX, DEFAULT_EVENT_TYPE, EVENT_PREFIX, EVENT_SEPARATOR
from gqlive.models.stream import StreamEvent

_logger = logging.getLogger(__name__)


def parse_event_block(block: str) -> StreamEvent | None:
    """Decode one event block, or ``None`` when it carries no data."""
    if not block.strip():
        return None

    event_type = DEFAULT_EVENT_TYPE
    data = ""
    for line in block.split("\n"):
        if line.startswith(EVENT_PREFIX):
            event_type = line[len(EVENT_PREFIX) :].strip()
        elif line.startswith(DATA_PREFIX):
            data += line[len(DATA_PREFIX) :]

    if not data:
        return None
    return StreamEvent(type=event_type, data=data)


class StreamFramer:
    """Turn raw chunks from one connection into :class:`StreamEvent` objects.

    Chunks may split multi-byte characters or event blocks anywhere; the
    framer keeps the undecoded bytes and the trailing partial block until
    the following chunks complete them. A framer belongs to a single
    connection and is not reusable.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Decoded text not yet terminated by a separator."""
        return self._buffer

    def feed(self, chunk: bytes | str) -> list[StreamEvent]:
        """Append *chunk* and return the events it completed, in order."""
        if isinstance(chunk, bytes):
            self._buffer += self._decoder.decode(chunk)
        else:
            self._buffer += chunk

        events: list[StreamEvent] = []
        while (idx := self._buffer.find(EVENT_SEPARATOR)) != -1:
            block = self._buffer[:idx]
            self._buffer = self._buffer[idx + len(EVENT_SEPARATOR) :]
            event = parse_event_block(block)
            if event is not None:
                events.append(event)
        return events


async def aiter_events(chunks: AsyncIterable[bytes | str]) -> AsyncIterator[StreamEvent]:
    """Lazily decode events from an async chunk source with a fresh framer."""
    framer = StreamFramer()
    async for chunk in chunks:
        for event in framer.feed(chunk):
            yield event
    if framer.pending.strip():
        _logger.debug("Stream ended with %d unterminated chars discarded", len(framer.pending))
