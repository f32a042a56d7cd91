"""HTTP transport for one-shot GraphQL requests and push streams."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp
from pydantic import ValidationError

from gqlive._constants import EVENT_STREAM_CONTENT_TYPE, JSON_CONTENT_TYPE, USER_AGENT
from gqlive._redact import redact_for_log, redact_headers, truncate_for_log
from gqlive.config import GqlConfig
from gqlive.exceptions import GqlTransportError
from gqlive.models.response import GraphQLResponse

_logger = logging.getLogger(__name__)


class EventStream(Protocol):
    """An open push-stream connection."""

    async def read_chunk(self) -> bytes:
        """Next chunk of the body, ``b""`` once the stream has ended."""
        ...

    def close(self) -> None:
        """Abort the connection; pending and future reads end the stream."""
        ...


class Transport(Protocol):
    """Structural transport interface used by the client and controller.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def execute(self, query: str) -> GraphQLResponse: ...

    async def open_stream(self, query: str) -> EventStream: ...


class HttpEventStream:
    """`EventStream` over an open ``aiohttp`` response."""

    def __init__(self, response: aiohttp.ClientResponse, *, endpoint: str = "") -> None:
        self._response = response
        self._endpoint = endpoint
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def read_chunk(self) -> bytes:
        if self._closed:
            return b""
        try:
            return await self._response.content.readany()
        except aiohttp.ClientError as exc:
            if self._closed:
                return b""
            raise GqlTransportError(f"Stream read from {self._endpoint} failed: {exc}", endpoint=self._endpoint) from exc

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._response.close()


class HttpTransport:
    """POSTs GraphQL documents to the configured endpoint."""

    def __init__(self, config: GqlConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session

    def _headers(self, accept: str) -> dict[str, str]:
        headers: dict[str, str] = {
            "accept": accept,
            "content-type": JSON_CONTENT_TYPE,
            "user-agent": USER_AGENT,
        }
        if self._config.auth_token:
            headers["authorization"] = f"Bearer {self._config.auth_token}"
        headers.update(self._config.headers)
        return headers

    async def execute(self, query: str) -> GraphQLResponse:
        """Send a query or mutation and parse the JSON response.

        GraphQL servers commonly answer invalid documents with a 4xx status
        and an ``errors`` body; such bodies are returned as responses.
        Anything that is not a GraphQL response body raises
        `GqlTransportError`.
        """
        url = self._config.endpoint_url
        headers = self._headers(JSON_CONTENT_TYPE)
        body = json.dumps({"query": query})

        _logger.debug("POST %s headers=%s query=%s", url, redact_headers(headers), truncate_for_log(query))

        try:
            async with self._http.post(
                url,
                data=body,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self._config.request_timeout),
            ) as resp:
                text = await resp.text(errors="replace")
                status = resp.status
        except aiohttp.ClientError as exc:
            raise GqlTransportError(f"Request to {url} failed: {exc}", endpoint=url) from exc
        except TimeoutError as exc:
            raise GqlTransportError(f"Request to {url} timed out", endpoint=url) from exc

        try:
            payload: Any = json.loads(text)
        except json.JSONDecodeError as exc:
            _logger.debug("Response %s from %s: %s", status, url, truncate_for_log(text))
            raise GqlTransportError(
                f"HTTP {status} from {url}: invalid JSON {text[:200]!r}",
                status_code=status,
                endpoint=url,
            ) from exc

        _logger.debug("Response %s from %s: %s", status, url, redact_for_log(payload))

        if not isinstance(payload, Mapping) or not ({"data", "errors"} & payload.keys()):
            raise GqlTransportError(
                f"HTTP {status} from {url}: not a GraphQL response",
                status_code=status,
                endpoint=url,
            )

        try:
            return GraphQLResponse.model_validate(payload)
        except ValidationError as exc:
            raise GqlTransportError(
                f"Malformed GraphQL response from {url}: {exc.error_count()} validation errors",
                status_code=status,
                endpoint=url,
            ) from exc

    async def open_stream(self, query: str) -> HttpEventStream:
        """Open the push stream for a subscription document.

        Only connecting is bounded by ``request_timeout``; reads on the
        returned stream are governed by the caller.
        """
        url = self._config.endpoint_url
        headers = self._headers(EVENT_STREAM_CONTENT_TYPE)
        body = json.dumps({"query": query})

        _logger.debug("POST %s (stream) headers=%s query=%s", url, redact_headers(headers), query)

        try:
            resp = await self._http.post(
                url,
                data=body,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=None, sock_connect=self._config.request_timeout),
            )
        except aiohttp.ClientError as exc:
            raise GqlTransportError(f"Stream request to {url} failed: {exc}", endpoint=url) from exc
        except TimeoutError as exc:
            raise GqlTransportError(f"Stream request to {url} timed out", endpoint=url) from exc

        if not 200 <= resp.status < 300:
            detail = await resp.text(errors="replace")
            raise GqlTransportError(
                f"HTTP {resp.status} from {url}: {detail[:200]}",
                status_code=resp.status,
                endpoint=url,
            )
        if resp.status == 204 or resp.content_length == 0:
            resp.close()
            raise GqlTransportError("No response body", status_code=resp.status, endpoint=url)

        _logger.debug("Stream opened %s content-type=%s", url, resp.headers.get("Content-Type"))
        return HttpEventStream(resp, endpoint=url)
