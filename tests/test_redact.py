from __future__ import annotations

from gqlive._redact import redact_for_log, redact_headers, truncate_for_log


def test_redact_headers_hides_credentials() -> None:
    headers = {"Authorization": "Bearer abc", "accept": "text/event-stream", "Cookie": "sid=1"}
    assert redact_headers(headers) == {
        "Authorization": "<redacted>",
        "accept": "text/event-stream",
        "Cookie": "<redacted>",
    }


def test_redact_for_log_redacts_nested_keys() -> None:
    payload = {"data": {"login": {"token": "T", "user": {"id": "u1", "password": "pw"}}}, "items": [{"token": 1}]}
    redacted = redact_for_log(payload)
    assert redacted["data"]["login"]["token"] == "<redacted>"
    assert redacted["data"]["login"]["user"] == {"id": "u1", "password": "<redacted>"}
    assert redacted["items"] == [{"token": "<redacted>"}]


def test_truncate_for_log() -> None:
    assert truncate_for_log("short") == "short"
    long_value = truncate_for_log("x" * 600, max_len=10)
    assert long_value.startswith("x" * 10)
    assert "<truncated 590 chars>" in long_value
    assert truncate_for_log(b"data: caf\xc3") == "data: caf�"
