"""One-shot query/mutation response models."""

from __future__ import annotations

from typing import Any

from pydantic import Field, JsonValue

from gqlive.exceptions import GqlProtocolError
from gqlive.models._base import GqlBaseModel, ResultTree


class GraphQLError(GqlBaseModel):
    """A single entry of a response's ``errors`` array."""

    message: str
    path: list[str | int] | None = None
    locations: list[dict[str, int]] | None = None
    extensions: dict[str, JsonValue] | None = None


class GraphQLResponse(GqlBaseModel):
    """Response body ``{"data"?: {...}, "errors"?: [...]}``."""

    data: ResultTree | None = None
    errors: list[GraphQLError] | None = Field(default=None)

    @classmethod
    def from_error(cls, message: str) -> GraphQLResponse:
        """Build a response describing a client-side failure."""
        return cls(errors=[GraphQLError(message=message)])

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def root_key(self) -> str | None:
        """First top-level key of ``data``, if any."""
        if not self.data:
            return None
        return next(iter(self.data))

    def error_messages(self) -> list[str]:
        return [err.message for err in self.errors or []]

    def raise_for_errors(self) -> None:
        """Raise :class:`GqlProtocolError` when the response carries errors."""
        if not self.errors:
            return
        messages = self.error_messages()
        raise GqlProtocolError("; ".join(messages) or "GraphQL request failed", errors=messages)

    def to_display(self) -> dict[str, Any]:
        """The part of the response a console shows: errors if any, else data."""
        if self.errors:
            return {"errors": [err.model_dump(exclude_none=True) for err in self.errors]}
        return {"data": self.data}
