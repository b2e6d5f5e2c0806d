from __future__ import annotations

from pydocrepo._redact import redact_for_log


def test_redact_for_log_masks_credentials() -> None:
    payload = {
        "url": "https://example.test/v1/x:runQuery",
        "headers": {"Authorization": "Bearer secret", "user-agent": "pydocrepo"},
        "body": {"access_token": "abc", "structuredQuery": {"limit": 10}},
    }

    redacted = redact_for_log(payload)
    assert redacted["headers"]["Authorization"] == "<redacted>"
    assert redacted["headers"]["user-agent"] == "pydocrepo"
    assert redacted["body"]["access_token"] == "<redacted>"
    assert redacted["body"]["structuredQuery"] == {"limit": 10}


def test_redact_for_log_summarizes_binary_fields() -> None:
    redacted = redact_for_log({"avatar": {"bytesValue": "QUJD" * 10}, "blob": b"\x00\x01"})
    assert redacted["avatar"]["bytesValue"] == "<base64:40c>"
    assert redacted["blob"] == "<bytes:2b>"


def test_redact_for_log_truncates_long_strings_and_lists() -> None:
    redacted = redact_for_log({"value": "x" * 600, "items": list(range(5))}, max_string=10, max_items=3)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]
    assert redacted["items"] == [0, 1, 2, "<+2 more>"]
