"""Push-stream event model."""

from __future__ import annotations

from pydantic import Field

from gqlive._constants import DEFAULT_EVENT_TYPE
from gqlive.models._base import GqlBaseModel


class StreamEvent(GqlBaseModel):
    """One decoded event-stream block.

    ``data`` is the concatenation of every ``data:`` line of the block,
    in line order, with no separator inserted.
    """

    type: str = Field(default=DEFAULT_EVENT_TYPE)
    data: str
