"""Data models for GraphQL responses and push-stream events."""

from gqlive.models._base import GqlBaseModel, Record, ResultTree
from gqlive.models.response import GraphQLError, GraphQLResponse
from gqlive.models.stream import StreamEvent

__all__ = [
    "GqlBaseModel",
    "GraphQLError",
    "GraphQLResponse",
    "Record",
    "ResultTree",
    "StreamEvent",
]
