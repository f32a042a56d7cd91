"""Base model for GraphQL wire payloads.

Every gqlive model inherits from :class:`GqlBaseModel`, which is frozen
and ignores unknown keys so that servers adding extra response members
do not break parsing.
"""

from __future__ import annotations

from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, JsonValue

ResultTree: TypeAlias = dict[str, JsonValue]
"""A query result mapping keyed by its (single) root selection field."""

Record: TypeAlias = dict[str, Any]
"""A pushed partial record, usually carrying an ``id``."""


class GqlBaseModel(BaseModel):
    """Base for GraphQL payload models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )
