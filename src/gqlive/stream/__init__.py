"""Push-stream framing."""

from gqlive.stream.framer import StreamFramer, aiter_events, parse_event_block

__all__ = ["StreamFramer", "aiter_events", "parse_event_block"]
