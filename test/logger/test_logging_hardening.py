"""Tests for logging hardening controls.

Covers redaction and truncation in StructuredLogger.
"""

import json

from kubepair.logger import StructuredLogger, sanitize_fields


def _first_json_line(output: str) -> dict:
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        return json.loads(line)
    raise AssertionError("No JSON log line found")


def test_structured_logger_redacts_secret_fields(capsys):
    logger = StructuredLogger(name="test-hardening-redact", json_format=True)

    logger.info(
        "Sensitive payload",
        auth_token="Bearer top-secret-token",
        api_key="super-secret-key",
        password="very-secret",
        client_credentials={"user": "x"},
    )

    captured = capsys.readouterr()
    log_data = _first_json_line(captured.out)

    assert log_data["auth_token"] == "[REDACTED]"
    assert log_data["api_key"] == "[REDACTED]"
    assert log_data["password"] == "[REDACTED]"
    assert log_data["client_credentials"] == "[REDACTED]"


def test_structured_logger_truncates_oversized_text(capsys):
    logger = StructuredLogger(name="test-hardening-truncate", json_format=True)

    huge_text = "payload-block " * 300
    logger.info("Large payload", body=huge_text)

    captured = capsys.readouterr()
    log_data = _first_json_line(captured.out)

    assert len(log_data["body"]) < len(huge_text)
    assert log_data["body"].endswith("...[truncated]")


def test_sanitize_keeps_none_secrets_and_plain_fields():
    clean = sanitize_fields({"token": None, "name": "p-0001", "count": 3})
    assert clean == {"token": None, "name": "p-0001", "count": 3}


def test_sanitize_custom_limit():
    clean = sanitize_fields({"error": "x" * 20}, max_length=5)
    assert clean["error"] == "xxxxx...[truncated]"
