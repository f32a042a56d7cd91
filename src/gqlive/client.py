"""High-level async client: queries, mutations and a live query view."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from gqlive._constants import STATUS_ERROR, STATUS_LIVE_PREFIX, STATUS_READY, STATUS_SUCCESS
from gqlive._transport import HttpTransport, Transport
from gqlive.config import GqlConfig
from gqlive.exceptions import GqlError, GqlSubscriptionActiveError, GqlTopicDerivationError
from gqlive.models._base import ResultTree
from gqlive.models.response import GraphQLResponse
from gqlive.models.stream import StreamEvent
from gqlive.state.store import ResultCache
from gqlive.status import StatusIndicator
from gqlive.subscription import (
    ErrorCallback,
    EventCallback,
    SubscriptionController,
    SubscriptionHandle,
    SubscriptionState,
)

_logger = logging.getLogger(__name__)


class GqlClient:
    """Async client for a GraphQL endpoint with live subscriptions.

    Usage::

        async with GqlClient(config, on_event=render) as client:
            result = await client.query("{ Book { id title } }")
            await client.subscribe("{ Book { id title } }")
    """

    def __init__(
        self,
        config: GqlConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        on_event: EventCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self._config = config or GqlConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._on_event = on_event
        self._on_error = on_error

        self.query_cache = ResultCache()
        self.query_result: GraphQLResponse | None = None
        self.mutation_result: GraphQLResponse | None = None
        self.query_status = StatusIndicator(reset_delay=self._config.status_reset_delay)
        self.mutation_status = StatusIndicator(reset_delay=self._config.status_reset_delay)
        self._controller: SubscriptionController | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> GqlClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        self._controller = SubscriptionController(
            self._transport,
            config=self._config,
            cache=self.query_cache,
            on_event=self._handle_stream_event,
            on_error=self._handle_stream_error,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        handle = self._controller.handle if self._controller is not None else None
        self.unsubscribe()
        if handle is not None:
            await handle.wait_closed()
        self.query_status.close()
        self.mutation_status.close()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._controller = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise GqlError("Client not initialized. Use 'async with GqlClient(...) as client:'")
        return self._transport

    def _require_controller(self) -> SubscriptionController:
        if self._controller is None:
            raise GqlError("Client not initialized. Use 'async with GqlClient(...) as client:'")
        return self._controller

    async def _execute(self, text: str) -> GraphQLResponse:
        """Run a document, folding transport failures into an error response."""
        transport = self._require_transport()
        try:
            return await transport.execute(text)
        except GqlError as exc:
            _logger.debug("Request failed", exc_info=True)
            return GraphQLResponse.from_error(str(exc))

    def _handle_stream_event(self, event: StreamEvent, snapshot: ResultTree | None) -> None:
        if snapshot is not None:
            self.query_result = GraphQLResponse(data=snapshot)
        self.query_status.flash(f"{STATUS_LIVE_PREFIX}{event.type}")
        if self._on_event is not None:
            self._on_event(event, snapshot)

    def _handle_stream_error(self, exc: GqlError) -> None:
        self.query_status.set(STATUS_ERROR)
        if self._on_error is not None:
            self._on_error(exc)

    # ------------------------------------------------------------------
    # Queries and mutations
    # ------------------------------------------------------------------

    async def query(self, text: str) -> GraphQLResponse:
        """Run a read query and seed the live view with its data."""
        response = await self._execute(text)
        self.query_result = response
        if response.has_errors:
            self.query_status.set(STATUS_ERROR)
        else:
            self.query_cache.seed(response.data)
            self.query_status.set(STATUS_READY)
        return response

    async def mutate(self, text: str) -> GraphQLResponse:
        """Run a mutation; success shows briefly before resetting to ``Ready``."""
        response = await self._execute(text)
        self.mutation_result = response
        if response.has_errors:
            self.mutation_status.set(STATUS_ERROR)
        else:
            self.mutation_status.flash(STATUS_SUCCESS)
        return response

    # ------------------------------------------------------------------
    # Live subscription
    # ------------------------------------------------------------------

    @property
    def is_subscribed(self) -> bool:
        return self._controller is not None and self._controller.state is SubscriptionState.ACTIVE

    async def subscribe(self, text: str) -> SubscriptionHandle:
        """Run *text* and keep its result updated from the push stream.

        Errors from the initial fetch or from opening the stream propagate;
        the query panel shows ``Error`` in that case.
        """
        controller = self._require_controller()
        try:
            handle = await controller.start(text)
        except GqlSubscriptionActiveError:
            # The running subscription still owns the result panel.
            raise
        except GqlTopicDerivationError:
            # The fetch already seeded the cache; keep showing its data.
            self.query_result = GraphQLResponse(data=controller.cache.snapshot())
            self.query_status.set(STATUS_ERROR)
            raise
        except GqlError as exc:
            self.query_result = GraphQLResponse.from_error(str(exc))
            self.query_status.set(STATUS_ERROR)
            raise
        self.query_result = GraphQLResponse(data=controller.cache.snapshot())
        self.query_status.set(STATUS_READY)
        return handle

    def unsubscribe(self) -> None:
        if self._controller is not None:
            self._controller.stop()

    async def toggle_subscription(self, text: str) -> SubscriptionHandle | None:
        """Stop the live view when active, otherwise start it for *text*."""
        if self.is_subscribed:
            self.unsubscribe()
            return None
        return await self.subscribe(text)

    async def wait_subscription_closed(self) -> None:
        """Block until the current subscription ends (or return at once)."""
        controller = self._require_controller()
        handle = controller.handle
        if handle is not None:
            await handle.wait_closed()
