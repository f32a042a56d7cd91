"""Subscription topic derivation.

A live subscription follows exactly one root field of the query it was
started from. This module reads the query's opening selection with a
minimal lexer and names that field, failing loudly rather than guessing
when the query does not have exactly one root field.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from gqlive.exceptions import GqlTopicDerivationError

_TOKEN_RE = re.compile(
    r"""
    (?P<ignored>[\s,\ufeff]+|\#[^\n\r]*)
  | (?P<block_string>\"\"\"(?:\\\"\"\"|(?!\"\"\").)*\"\"\")
  | (?P<string>"(?:\\.|[^"\\\n\r])*")
  | (?P<spread>\.\.\.)
  | (?P<name>[_A-Za-z][_0-9A-Za-z]*)
  | (?P<number>-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)
  | (?P<punct>[!$&()\:=@\[\]{}|])
    """,
    re.VERBOSE | re.DOTALL,
)

_PAIRS = {"(": ")", "{": "}", "[": "]"}


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    pos: int


def tokenize(text: str) -> Iterator[Token]:
    """Yield the significant tokens of a GraphQL document."""
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise GqlTopicDerivationError(f"Unexpected character {text[pos]!r} at offset {pos}")
        kind = match.lastgroup or ""
        if kind != "ignored":
            yield Token(kind=kind, value=match.group(), pos=pos)
        pos = match.end()


class _Cursor:
    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._index = 0

    def peek(self) -> Token | None:
        if self._index < len(self._tokens):
            return self._tokens[self._index]
        return None

    def next(self) -> Token:
        token = self.peek()
        if token is None:
            raise GqlTopicDerivationError("Query ended before its root selection was complete")
        self._index += 1
        return token

    def at(self, value: str) -> bool:
        token = self.peek()
        return token is not None and token.kind in {"punct", "spread"} and token.value == value

    def skip_group(self) -> None:
        """Skip a balanced ``(...)``, ``{...}`` or ``[...]`` starting at the cursor."""
        opener = self.next().value
        closers = [_PAIRS[opener]]
        while closers:
            token = self.next()
            if token.kind != "punct":
                continue
            if token.value in _PAIRS:
                closers.append(_PAIRS[token.value])
            elif token.value == closers[-1]:
                closers.pop()
            elif token.value in _PAIRS.values():
                raise GqlTopicDerivationError(f"Unbalanced {token.value!r} at offset {token.pos}")

    def skip_directives(self) -> None:
        while self.at("@"):
            self.next()
            self.next()
            if self.at("("):
                self.skip_group()


def _skip_operation_header(cursor: _Cursor) -> None:
    token = cursor.peek()
    if token is None:
        raise GqlTopicDerivationError("Query is empty")
    if token.kind != "name":
        return
    if token.value != "query":
        raise GqlTopicDerivationError(f"Cannot subscribe to a {token.value!r} operation")
    cursor.next()
    nxt = cursor.peek()
    if nxt is not None and nxt.kind == "name":
        cursor.next()
    if cursor.at("("):
        cursor.skip_group()
    cursor.skip_directives()


def _read_root_field(cursor: _Cursor) -> str:
    token = cursor.next()
    if token.kind == "spread":
        raise GqlTopicDerivationError("Fragment spreads are not supported in the root selection")
    if token.kind != "name":
        raise GqlTopicDerivationError(f"Expected a root field name at offset {token.pos}, got {token.value!r}")
    field = token.value
    if cursor.at(":"):
        cursor.next()
        aliased = cursor.next()
        if aliased.kind != "name":
            raise GqlTopicDerivationError(f"Expected a field name after alias {field!r}")
        field = aliased.value
    if cursor.at("("):
        cursor.skip_group()
    cursor.skip_directives()
    if cursor.at("{"):
        cursor.skip_group()
    return field


def derive_topic(query_text: str) -> str:
    """Return the single root field selected by *query_text*.

    Raises
    ------
    GqlTopicDerivationError
        When the text is not a query, selects nothing, or selects more
        than one root field.
    """
    cursor = _Cursor(list(tokenize(query_text)))
    _skip_operation_header(cursor)
    if not cursor.at("{"):
        raise GqlTopicDerivationError("Could not find the opening '{' of the root selection")
    cursor.next()
    if cursor.at("}"):
        raise GqlTopicDerivationError("Root selection is empty")

    topic = _read_root_field(cursor)

    extra = cursor.next()
    if extra.value != "}":
        raise GqlTopicDerivationError(f"Only a single root field can be subscribed to (found {extra.value!r})")
    return topic


def build_subscription_query(topic: str, fields: Iterable[str]) -> str:
    """Minimal subscription document requesting *fields* of *topic*."""
    projection = " ".join(fields)
    return f"subscription {{ {topic} {{ {projection} }} }}"
