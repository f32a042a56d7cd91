"""Helpers for safe debug logging.

Requests may carry bearer tokens or cookies in headers, and query texts,
results and pushed chunks can be arbitrarily large. Everything logged at
DEBUG level by gqlive goes through these helpers first.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "authorization",
        "proxy-authorization",
        "cookie",
        "set-cookie",
        "password",
        "token",
        "accesstoken",
        "refreshtoken",
    }
)

REDACTED = "<redacted>"


def truncate_for_log(value: str | bytes, *, max_len: int = 256) -> str:
    """Shorten *value* for a log line, decoding bytes leniently."""
    text = value.decode("utf-8", errors="replace") if isinstance(value, bytes) else value
    if len(text) > max_len:
        return f"{text[:max_len]}…<truncated {len(text) - max_len} chars>"
    return text


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Copy of *headers* with credential-bearing values replaced."""
    return {key: REDACTED if key.lower() in _SENSITIVE_KEYS else value for key, value in headers.items()}


def redact_for_log(value: Any, *, max_string: int = 256, _depth: int = 0) -> Any:
    """Return a redacted copy of a JSON-like *value* suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"
    if isinstance(value, (str, bytes)):
        return truncate_for_log(value, max_len=max_string)
    if isinstance(value, Mapping):
        return {
            str(k): REDACTED
            if str(k).lower() in _SENSITIVE_KEYS
            else redact_for_log(v, max_string=max_string, _depth=_depth + 1)
            for k, v in value.items()
        }
    if isinstance(value, Sequence):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]
    return value
