from __future__ import annotations

import json
import logging
from typing import Any

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from gqlive._transport import HttpTransport
from gqlive.client import GqlClient
from gqlive.config import GqlConfig
from gqlive.exceptions import GqlTransportError
from gqlive.stream.framer import StreamFramer

BOOKS = {"Book": [{"id": "b1", "title": "A", "price": 9}]}


def _make_app(seen: list[dict[str, Any]]) -> web.Application:
    async def graphql(request: web.Request) -> web.StreamResponse:
        body = await request.json()
        query = body["query"]
        seen.append({"query": query, "accept": request.headers.get("Accept"), "auth": request.headers.get("Authorization")})

        if "Garbled" in query:
            return web.Response(status=502, body=b"\xff\xfe bad", content_type="text/plain")

        if request.headers.get("Accept") == "text/event-stream":
            if "Missing" in query:
                return web.Response(status=503, text="no subscriptions today")
            resp = web.StreamResponse(headers={"Content-Type": "text/event-stream"})
            await resp.prepare(request)
            await resp.write(b'event: update\ndata: {"id":"b1",')
            await resp.write(b'"price":12}\n\n')
            await resp.write_eof()
            return resp

        if query.startswith("{ Broken"):
            return web.json_response({"errors": [{"message": "Cannot query field 'Broken'"}]}, status=400)
        if query.startswith("{ Viewer"):
            return web.json_response({"data": {"Viewer": {"id": "u1", "token": "abc123"}}})
        if query.startswith("{ Html"):
            return web.Response(status=502, text="<html>bad gateway</html>", content_type="text/html")
        return web.json_response({"data": BOOKS})

    app = web.Application()
    app.router.add_post("/graphql", graphql)
    return app


def _config(server: TestServer, **kwargs: Any) -> GqlConfig:
    return GqlConfig(base_url=str(server.make_url("/")), **kwargs)


@pytest.mark.asyncio
async def test_execute_posts_query_json() -> None:
    seen: list[dict[str, Any]] = []
    async with TestServer(_make_app(seen)) as server, aiohttp.ClientSession() as session:
        transport = HttpTransport(_config(server, auth_token="s3cret"), session)
        response = await transport.execute("{ Book { id } }")

    assert response.data == BOOKS
    assert seen == [{"query": "{ Book { id } }", "accept": "application/json", "auth": "Bearer s3cret"}]


@pytest.mark.asyncio
async def test_execute_returns_error_bodies_from_4xx() -> None:
    async with TestServer(_make_app([])) as server, aiohttp.ClientSession() as session:
        response = await HttpTransport(_config(server), session).execute("{ Broken }")

    assert response.has_errors
    assert response.error_messages() == ["Cannot query field 'Broken'"]


@pytest.mark.asyncio
async def test_execute_rejects_non_graphql_body() -> None:
    async with TestServer(_make_app([])) as server, aiohttp.ClientSession() as session:
        with pytest.raises(GqlTransportError) as exc_info:
            await HttpTransport(_config(server), session).execute("{ Html }")

    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_execute_wraps_connection_errors() -> None:
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(GqlConfig(base_url="http://127.0.0.1:1", request_timeout=2.0), session)
        with pytest.raises(GqlTransportError):
            await transport.execute("{ Book { id } }")


@pytest.mark.asyncio
async def test_open_stream_reads_chunks() -> None:
    seen: list[dict[str, Any]] = []
    async with TestServer(_make_app(seen)) as server, aiohttp.ClientSession() as session:
        stream = await HttpTransport(_config(server), session).open_stream("subscription { Book { id name } }")
        framer = StreamFramer()
        events = []
        while chunk := await stream.read_chunk():
            events.extend(framer.feed(chunk))
        stream.close()

    assert seen[0]["accept"] == "text/event-stream"
    assert [(e.type, json.loads(e.data)) for e in events] == [("update", {"id": "b1", "price": 12})]
    assert await stream.read_chunk() == b""


@pytest.mark.asyncio
async def test_open_stream_non_success_status() -> None:
    async with TestServer(_make_app([])) as server, aiohttp.ClientSession() as session:
        with pytest.raises(GqlTransportError) as exc_info:
            await HttpTransport(_config(server), session).open_stream("subscription { Missing { id name } }")

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_client_live_view_end_to_end() -> None:
    seen: list[dict[str, Any]] = []
    async with TestServer(_make_app(seen)) as server:
        async with GqlClient(_config(server)) as client:
            handle = await client.subscribe("{ Book { id title price } }")
            await client.wait_subscription_closed()

            assert handle.error is None
            assert client.query_cache.snapshot() == {"Book": [{"id": "b1", "title": "A", "price": 12}]}
            assert client.query_status.status.label == "Live: update"

    assert [entry["query"] for entry in seen] == [
        "{ Book { id title price } }",
        "subscription { Book { id name } }",
    ]


@pytest.mark.asyncio
async def test_undecodable_error_body_is_a_transport_error() -> None:
    async with TestServer(_make_app([])) as server, aiohttp.ClientSession() as session:
        transport = HttpTransport(_config(server), session)
        with pytest.raises(GqlTransportError) as exc_info:
            await transport.execute("{ Garbled { id } }")
        assert exc_info.value.status_code == 502

        with pytest.raises(GqlTransportError) as exc_info:
            await transport.open_stream("subscription { Garbled { id name } }")
        assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_client_query_folds_undecodable_body_into_error_response() -> None:
    async with TestServer(_make_app([])) as server:
        async with GqlClient(_config(server)) as client:
            result = await client.query("{ Garbled { id } }")

    assert result.has_errors
    assert "HTTP 502" in result.error_messages()[0]
    assert client.query_status.status.label == "Error"


@pytest.mark.asyncio
async def test_response_payload_is_redacted_in_debug_log(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="gqlive._transport")
    async with TestServer(_make_app([])) as server, aiohttp.ClientSession() as session:
        response = await HttpTransport(_config(server, auth_token="s3cret"), session).execute("{ Viewer { id token } }")

    assert response.data == {"Viewer": {"id": "u1", "token": "abc123"}}
    assert "abc123" not in caplog.text
    assert "s3cret" not in caplog.text
    assert "<redacted>" in caplog.text
