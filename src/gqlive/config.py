"""Client configuration for gqlive."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from gqlive._constants import (
    BASE_URL,
    DEFAULT_STATUS_RESET_DELAY,
    DEFAULT_SUBSCRIPTION_FIELDS,
    GRAPHQL_PATH,
)
from gqlive.exceptions import GqlConfigError


def _env_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise GqlConfigError(f"{name} must be a number, got {value!r}") from exc


def _env_optional_float(name: str, value: str) -> float | None:
    normalized = value.strip().lower()
    if normalized in {"", "none", "off", "0"}:
        return None
    return _env_float(name, value)


def _split_fields(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.replace(",", " ").split() if part.strip())


@dataclasses.dataclass(frozen=True)
class GqlConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        API base URL, without the GraphQL path.
    graphql_path : str
        Path of the GraphQL endpoint. Queries, mutations and push
        subscriptions are all posted here.
    auth_token : str or None
        Optional bearer token sent as ``Authorization`` header.
    headers : Mapping[str, str]
        Extra headers sent with every request.
    request_timeout : float
        Total timeout in seconds for one-shot query/mutation requests and
        for opening the push stream.
    read_timeout : float or None
        Seconds to wait for the next chunk of an open push stream.
        ``None`` disables the timeout (streams may idle indefinitely).
    subscription_fields : tuple[str, ...]
        Projection requested by the derived subscription query.
    status_reset_delay : float
        Seconds a transient status (``Success``, ``Live: <type>``) stays
        visible before resetting to ``Ready``.
    """

    base_url: str = BASE_URL
    graphql_path: str = GRAPHQL_PATH
    auth_token: str | None = None
    headers: Mapping[str, str] = dataclasses.field(default_factory=dict)
    request_timeout: float = 30.0
    read_timeout: float | None = None
    subscription_fields: tuple[str, ...] = DEFAULT_SUBSCRIPTION_FIELDS
    status_reset_delay: float = DEFAULT_STATUS_RESET_DELAY

    def __post_init__(self) -> None:
        if not self.subscription_fields:
            raise GqlConfigError("subscription_fields must name at least one field")
        if self.request_timeout <= 0:
            raise GqlConfigError("request_timeout must be positive")
        if self.read_timeout is not None and self.read_timeout <= 0:
            raise GqlConfigError("read_timeout must be positive or None")
        if self.status_reset_delay < 0:
            raise GqlConfigError("status_reset_delay must not be negative")

    @property
    def endpoint_url(self) -> str:
        """Full URL of the GraphQL endpoint."""
        return f"{self.base_url.rstrip('/')}/{self.graphql_path.lstrip('/')}"

    @classmethod
    def from_env(cls, **overrides: Any) -> GqlConfig:
        """Create configuration from environment variables.

        Reads ``GQLIVE_BASE_URL``, ``GQLIVE_GRAPHQL_PATH``,
        ``GQLIVE_AUTH_TOKEN``, ``GQLIVE_REQUEST_TIMEOUT``,
        ``GQLIVE_READ_TIMEOUT``, ``GQLIVE_SUBSCRIPTION_FIELDS`` and
        ``GQLIVE_STATUS_RESET_DELAY``. Explicit keyword arguments override
        environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "GQLIVE_BASE_URL": "base_url",
            "GQLIVE_GRAPHQL_PATH": "graphql_path",
            "GQLIVE_AUTH_TOKEN": "auth_token",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        timeout_env = env.get("GQLIVE_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = _env_float("GQLIVE_REQUEST_TIMEOUT", timeout_env)

        read_timeout_env = env.get("GQLIVE_READ_TIMEOUT")
        if read_timeout_env is not None and "read_timeout" not in overrides:
            config_kwargs["read_timeout"] = _env_optional_float("GQLIVE_READ_TIMEOUT", read_timeout_env)

        delay_env = env.get("GQLIVE_STATUS_RESET_DELAY")
        if delay_env is not None and "status_reset_delay" not in overrides:
            config_kwargs["status_reset_delay"] = _env_float("GQLIVE_STATUS_RESET_DELAY", delay_env)

        fields_env = env.get("GQLIVE_SUBSCRIPTION_FIELDS")
        if fields_env is not None and "subscription_fields" not in overrides:
            config_kwargs["subscription_fields"] = _split_fields(fields_env)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
