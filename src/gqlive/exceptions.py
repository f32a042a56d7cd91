"""Custom exception hierarchy for gqlive."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class GqlError(Exception):
    """Base exception for all gqlive errors."""


class GqlConfigError(GqlError):
    """Invalid or missing configuration."""


class GqlTransportError(GqlError):
    """HTTP-level failure (network, non-2xx, invalid JSON, missing stream body)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class GqlProtocolError(GqlError):
    """The one-shot response carried an ``errors`` array."""

    def __init__(self, message: str, *, errors: Sequence[Any] = ()) -> None:
        self.errors = list(errors)
        super().__init__(message)


class GqlTopicDerivationError(GqlError):
    """The root selection field of a query could not be identified.

    Also raised when the selection names more than one root field, since
    a subscription can only follow a single root.
    """


class GqlMalformedEventError(GqlError):
    """A pushed event's data cannot be used as a record.

    Never escapes the subscription read loop: the event is logged and
    skipped.
    """


class GqlSubscriptionActiveError(GqlError):
    """``start`` was called while a subscription is already active."""
