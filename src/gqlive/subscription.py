"""Live subscription lifecycle.

Owns:
- seeding the result cache with a one-shot fetch of the query
- deriving the subscription topic and opening the push stream
- the read loop that frames pushed chunks and merges their records
- cooperative cancellation
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from gqlive._constants import RECORD_ID_FIELD
from gqlive._transport import EventStream, Transport
from gqlive.config import GqlConfig
from gqlive.exceptions import (
    GqlError,
    GqlMalformedEventError,
    GqlSubscriptionActiveError,
    GqlTransportError,
)
from gqlive.models._base import ResultTree
from gqlive.models.stream import StreamEvent
from gqlive.state.store import ResultCache
from gqlive.stream.framer import StreamFramer
from gqlive.topic import build_subscription_query, derive_topic

_logger = logging.getLogger(__name__)

EventCallback = Callable[[StreamEvent, ResultTree | None], None]
ErrorCallback = Callable[[GqlError], None]


class SubscriptionState(StrEnum):
    IDLE = "idle"
    ACTIVE = "active"


def parse_event_record(event: StreamEvent) -> dict[str, Any]:
    """Decode an event's data into a record.

    Raises
    ------
    GqlMalformedEventError
        When the data is not JSON or not a JSON object.
    """
    try:
        record = json.loads(event.data)
    except json.JSONDecodeError as exc:
        raise GqlMalformedEventError(f"Event data is not JSON: {exc}") from exc
    if not isinstance(record, dict):
        raise GqlMalformedEventError(f"Event data is a {type(record).__name__}, expected an object")
    return record


class SubscriptionHandle:
    """Caller-owned handle of one live subscription."""

    def __init__(self, *, topic: str, query: str, stream: EventStream) -> None:
        self.topic = topic
        self.query = query
        self.error: GqlError | None = None
        self.events_applied = 0
        self._stream = stream
        self._cancelled = False
        self._task: asyncio.Task[None] | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def active(self) -> bool:
        if self._cancelled:
            return False
        return self._task is None or not self._task.done()

    def cancel(self) -> None:
        """Stop reading; data arriving from now on is discarded."""
        if self._cancelled:
            return
        self._cancelled = True
        self._stream.close()
        task = self._task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def wait_closed(self) -> None:
        """Wait until the read loop has finished."""
        if self._task is not None:
            await asyncio.wait({self._task})


class SubscriptionController:
    """Keeps a `ResultCache` in sync with one push stream at a time.

    Usage::

        controller = SubscriptionController(transport, on_event=render)
        handle = await controller.start("{ Book { id title price } }")
        ...
        controller.stop()
    """

    def __init__(
        self,
        transport: Transport,
        *,
        config: GqlConfig | None = None,
        cache: ResultCache | None = None,
        on_event: EventCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self._transport = transport
        self._config = config or GqlConfig()
        self._cache = cache if cache is not None else ResultCache()
        self._on_event = on_event
        self._on_error = on_error
        self._handle: SubscriptionHandle | None = None
        self._starting = False

    @property
    def cache(self) -> ResultCache:
        return self._cache

    @property
    def handle(self) -> SubscriptionHandle | None:
        return self._handle

    @property
    def state(self) -> SubscriptionState:
        if self._handle is not None and self._handle.active:
            return SubscriptionState.ACTIVE
        return SubscriptionState.IDLE

    async def start(self, query_text: str) -> SubscriptionHandle:
        """Seed the cache from *query_text* and follow its root field.

        Raises
        ------
        GqlSubscriptionActiveError
            A subscription is already active (call :meth:`stop` first).
        GqlTransportError
            The fetch or the stream request failed.
        GqlProtocolError
            The fetch returned GraphQL errors.
        GqlTopicDerivationError
            The query's single root field could not be identified.
        """
        if self._starting or self.state is SubscriptionState.ACTIVE:
            raise GqlSubscriptionActiveError("A subscription is already active; stop it first")

        self._starting = True
        try:
            response = await self._transport.execute(query_text)
            response.raise_for_errors()
            self._cache.seed(response.data)

            topic = derive_topic(query_text)
            subscription_query = build_subscription_query(topic, self._config.subscription_fields)
            stream = await self._transport.open_stream(subscription_query)
        finally:
            self._starting = False

        handle = SubscriptionHandle(topic=topic, query=subscription_query, stream=stream)
        self._handle = handle
        handle._task = asyncio.create_task(self._read_loop(handle), name=f"gqlive-subscription-{topic}")
        _logger.debug("Subscription started topic=%s", topic)
        return handle

    def stop(self) -> None:
        """Cancel the active subscription, if any. Safe to call repeatedly."""
        handle = self._handle
        self._handle = None
        if handle is None:
            return
        _logger.debug("Subscription stop requested topic=%s", handle.topic)
        handle.cancel()

    async def _read_chunk(self, stream: EventStream) -> bytes:
        timeout = self._config.read_timeout
        if timeout is None:
            return await stream.read_chunk()
        try:
            return await asyncio.wait_for(stream.read_chunk(), timeout)
        except TimeoutError as exc:
            raise GqlTransportError(f"No stream data for {timeout}s") from exc

    async def _read_loop(self, handle: SubscriptionHandle) -> None:
        framer = StreamFramer()
        stream = handle._stream
        try:
            while not handle.cancelled:
                chunk = await self._read_chunk(stream)
                if handle.cancelled:
                    break
                if not chunk:
                    _logger.debug("Stream ended topic=%s", handle.topic)
                    break
                for event in framer.feed(chunk):
                    if handle.cancelled:
                        break
                    self._dispatch(handle, event)
        except GqlTransportError as exc:
            if not handle.cancelled:
                _logger.warning("Subscription stream failed topic=%s: %s", handle.topic, exc)
                handle.error = exc
                self._report_error(exc)
        except Exception as exc:
            if not handle.cancelled:
                _logger.warning("Subscription read loop crashed topic=%s", handle.topic, exc_info=True)
                error = GqlError(f"Subscription to {handle.topic} stopped: {exc!r}")
                error.__cause__ = exc
                handle.error = error
                self._report_error(error)
        finally:
            stream.close()
            if self._handle is handle:
                self._handle = None

    def _dispatch(self, handle: SubscriptionHandle, event: StreamEvent) -> None:
        try:
            record = parse_event_record(event)
        except GqlMalformedEventError as exc:
            _logger.warning("Skipping malformed %r event: %s", event.type, exc)
            return

        if isinstance(self._cache.root_value, list) and RECORD_ID_FIELD not in record:
            _logger.warning("Skipping %r event without %r for list root %r", event.type, RECORD_ID_FIELD, self._cache.root_key)
            return

        snapshot = self._cache.apply(record)
        handle.events_applied += 1
        if self._on_event is not None:
            try:
                self._on_event(event, snapshot)
            except Exception:
                _logger.debug("on_event callback failed", exc_info=True)

    def _report_error(self, exc: GqlError) -> None:
        if self._on_error is None:
            return
        try:
            self._on_error(exc)
        except Exception:
            _logger.debug("on_error callback failed", exc_info=True)
