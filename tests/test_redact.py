from __future__ import annotations

from pystorefront._redact import redact_for_log


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "identity": "ada@example.com",
        "password": "pw",
        "token": "jwt.payload.sig",
        "record": {"id": "u1", "email": "ada@example.com"},
        "nested": {"codeVerifier": "verifier", "Authorization": "Bearer x"},
        "items": [{"_csrf": "abc"}],
    }

    redacted = redact_for_log(payload)
    assert redacted["identity"] == "ada@example.com"
    assert redacted["password"] == "<redacted>"
    assert redacted["token"] == "<redacted>"
    assert redacted["record"]["id"] == "u1"
    assert redacted["nested"]["codeVerifier"] == "<redacted>"
    assert redacted["nested"]["Authorization"] == "<redacted>"
    assert redacted["items"][0]["_csrf"] == "<redacted>"


def test_redact_for_log_keeps_numeric_code_fields() -> None:
    # Health responses carry a numeric "code"; only string secrets are hidden.
    assert redact_for_log({"code": 200})["code"] == 200


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]
