from __future__ import annotations

from fleetlog._redact import redact_for_log


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "typeName": "Device",
        "credentials": {"database": "demo", "userName": "ops@example.com", "sessionId": "SID"},
        "password": "pw",
        "nested": {"sessionId": "SID-2", "keep": 1},
    }

    redacted = redact_for_log(payload)
    assert redacted["typeName"] == "Device"
    assert redacted["credentials"] == "<redacted>"
    assert redacted["password"] == "<redacted>"
    assert redacted["nested"]["sessionId"] == "<redacted>"
    assert redacted["nested"]["keep"] == 1


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_walks_lists() -> None:
    redacted = redact_for_log([{"password": "a"}, "b"])
    assert redacted == [{"password": "<redacted>"}, "b"]
