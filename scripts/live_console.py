#!/usr/bin/env python3
"""Command-line console for a GraphQL endpoint with live query updates.

Examples::

    python scripts/live_console.py --query '{ Book { id title price } }'
    python scripts/live_console.py --mutation 'mutation { updateBook(id: "b1", data: {price: 12}) { id price } }'
    python scripts/live_console.py --query-file author.graphql --subscribe

Configuration comes from ``GQLIVE_*`` environment variables; ``--base-url``
overrides ``GQLIVE_BASE_URL``. With ``--subscribe`` the query result is
printed again after every pushed update until Ctrl-C.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Any

from gqlive import GqlClient, GqlConfig, GqlError, StreamEvent

DEFAULT_QUERY = """{
  Author(id: "author-1") {
    id
    name
    bio
    books {
      id
      title
      publishedYear
    }
  }
}"""


def _print_json(title: str, payload: Any) -> None:
    print(f"--- {title}")
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _on_event(event: StreamEvent, snapshot: dict[str, Any] | None) -> None:
    _print_json(f"Live: {event.type}", {"data": snapshot})


def _on_error(exc: GqlError) -> None:
    print(f"--- Stream error: {exc}", file=sys.stderr)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--query", help="Query text (defaults to a sample Author query)")
    source.add_argument("--query-file", type=Path, help="Read the query text from a file")
    parser.add_argument("--mutation", help="Mutation to run before the query")
    parser.add_argument("--subscribe", action="store_true", help="Keep the query result live")
    parser.add_argument("--base-url", help="API base URL")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    config = GqlConfig.from_env(**overrides)

    query_text = args.query_file.read_text(encoding="utf-8") if args.query_file else args.query or DEFAULT_QUERY

    async with GqlClient(config, on_event=_on_event, on_error=_on_error) as client:
        if args.mutation:
            mutation = await client.mutate(args.mutation)
            _print_json(f"Mutation ({client.mutation_status.status.label})", mutation.to_display())

        if not args.subscribe:
            result = await client.query(query_text)
            _print_json(f"Query ({client.query_status.status.label})", result.to_display())
            return 1 if result.has_errors else 0

        try:
            handle = await client.subscribe(query_text)
        except GqlError as exc:
            if client.query_result is not None:
                _print_json("Query (Error)", client.query_result.to_display())
            print(f"Could not subscribe: {exc}", file=sys.stderr)
            return 1

        _print_json("Query (Ready)", client.query_result.to_display() if client.query_result else None)
        print(f"--- Subscribed to {handle.topic}; Ctrl-C to stop", file=sys.stderr)

        loop = asyncio.get_running_loop()
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(signal.SIGINT, client.unsubscribe)
        try:
            await client.wait_subscription_closed()
        finally:
            with contextlib.suppress(NotImplementedError):
                loop.remove_signal_handler(signal.SIGINT)
        return 1 if handle.error is not None else 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
