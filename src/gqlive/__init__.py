"""gqlive - Async GraphQL client with live, push-updated query results."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("gqlive")
except PackageNotFoundError:
    __version__ = "0+local"

from gqlive.client import GqlClient
from gqlive.config import GqlConfig
from gqlive.exceptions import (
    GqlConfigError,
    GqlError,
    GqlMalformedEventError,
    GqlProtocolError,
    GqlSubscriptionActiveError,
    GqlTopicDerivationError,
    GqlTransportError,
)
from gqlive.models import GraphQLError, GraphQLResponse, StreamEvent
from gqlive.state import MergeTarget, ResultCache, apply_record
from gqlive.status import Status, StatusIndicator
from gqlive.stream import StreamFramer
from gqlive.subscription import SubscriptionController, SubscriptionHandle, SubscriptionState
from gqlive.topic import build_subscription_query, derive_topic

__all__ = [
    "__version__",
    "GqlClient",
    "GqlConfig",
    "GqlConfigError",
    "GqlError",
    "GqlMalformedEventError",
    "GqlProtocolError",
    "GqlSubscriptionActiveError",
    "GqlTopicDerivationError",
    "GqlTransportError",
    "GraphQLError",
    "GraphQLResponse",
    "MergeTarget",
    "ResultCache",
    "Status",
    "StatusIndicator",
    "StreamEvent",
    "StreamFramer",
    "SubscriptionController",
    "SubscriptionHandle",
    "SubscriptionState",
    "apply_record",
    "build_subscription_query",
    "derive_topic",
]
