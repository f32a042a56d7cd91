from __future__ import annotations

import pytest

from gqlive.models.stream import StreamEvent
from gqlive.stream.framer import StreamFramer, aiter_events, parse_event_block

STREAM = (
    'event: update\ndata: {"id":"b1","price":12}\n\n'
    ": keep-alive comment\n\n"
    'data: {"id":"b2",\ndata: "title":"Émile ☕"}\n\n'
    "event: ping\n\n"
    "   \n\n"
    'event: first\nevent: second\ndata: {"id":"b3"}\n\n'
)


def _feed_all(chunks: list[bytes] | list[str]) -> list[StreamEvent]:
    framer = StreamFramer()
    events: list[StreamEvent] = []
    for chunk in chunks:
        events.extend(framer.feed(chunk))
    return events


def test_literal_update_event() -> None:
    events = _feed_all(['event: update\ndata: {"id":"b1","price":12}\n\n'])
    assert events == [StreamEvent(type="update", data='{"id":"b1","price":12}')]


def test_default_event_type_is_message() -> None:
    events = _feed_all(['data: {"id":"b1"}\n\n'])
    assert len(events) == 1
    assert events[0].type == "message"


def test_multiple_data_lines_concatenate_without_separator() -> None:
    events = _feed_all(["data: foo\ndata: bar\n\n"])
    assert [e.data for e in events] == ["foobar"]


def test_blocks_without_data_are_discarded() -> None:
    events = _feed_all(["event: ping\n\n", "   \n\n", ": comment\n\n"])
    assert events == []


def test_later_event_line_wins() -> None:
    event = parse_event_block('event: first\nevent: second\ndata: {"id":"b3"}')
    assert event is not None
    assert event.type == "second"


def test_partial_block_is_kept_until_separator_arrives() -> None:
    framer = StreamFramer()
    assert framer.feed("data: hel") == []
    assert framer.pending == "data: hel"
    assert framer.feed("lo\n") == []
    events = framer.feed("\n")
    assert [e.data for e in events] == ["hello"]
    assert framer.pending == ""


def test_whole_stream_decodes_in_order() -> None:
    events = _feed_all([STREAM.encode()])
    assert [(e.type, e.data) for e in events] == [
        ("update", '{"id":"b1","price":12}'),
        ("message", '{"id":"b2","title":"Émile ☕"}'),
        ("second", '{"id":"b3"}'),
    ]


@pytest.mark.parametrize("size", [1, 2, 3, 5, 7, 16])
def test_chunk_boundaries_do_not_change_events(size: int) -> None:
    raw = STREAM.encode()
    expected = _feed_all([raw])
    chunks = [raw[i : i + size] for i in range(0, len(raw), size)]
    assert _feed_all(chunks) == expected


def test_multibyte_character_split_across_chunks() -> None:
    raw = 'data: {"title":"☕"}\n\n'.encode()
    cut = raw.index("☕".encode()) + 1
    framer = StreamFramer()
    assert framer.feed(raw[:cut]) == []
    events = framer.feed(raw[cut:])
    assert events[0].data == '{"title":"☕"}'


@pytest.mark.asyncio
async def test_aiter_events_is_lazy_over_async_chunks() -> None:
    async def chunks():
        yield b"data: a\n"
        yield b"\ndata: b"
        yield b"\n\ndata: unterminated"

    events = [event async for event in aiter_events(chunks())]
    assert [e.data for e in events] == ["a", "b"]
