"""
Name: Structured Logger Tests

Responsibilities:
  - JSON formatting with request context
  - Redaction of secrets (passwords, tokens) in extra fields
"""

import json
import logging

import pytest

from usermgmt.context import clear_context, set_request_context
from usermgmt.crosscutting.logger import REDACTED, JSONFormatter, _Redactor

pytestmark = pytest.mark.unit


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="usermgmt",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_json_with_extras():
    payload = json.loads(JSONFormatter().format(_record(user_id=3)))

    assert payload["message"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["user_id"] == 3


def test_formatter_includes_request_context():
    set_request_context(request_id="req-1", method="GET", path="/api/users")
    try:
        payload = json.loads(JSONFormatter().format(_record()))
    finally:
        clear_context()

    assert payload["request_id"] == "req-1"
    assert payload["path"] == "/api/users"


def test_formatter_redacts_sensitive_extras():
    payload = json.loads(
        JSONFormatter().format(
            _record(password="secret1", metadata={"token": "abc", "fields": ["name"]})
        )
    )

    assert payload["password"] == REDACTED
    assert payload["metadata"]["token"] == REDACTED
    assert payload["metadata"]["fields"] == ["name"]


@pytest.mark.parametrize("key", ["Password", "password_hash", "Authorization", "jwt_secret"])
def test_redactor_keys_are_case_insensitive(key):
    assert _Redactor().sanitize("value", key=key) == REDACTED


def test_redactor_truncates_long_strings_and_bytes():
    redactor = _Redactor(max_str=5)

    assert redactor.sanitize("abcdefgh") == "abcde...(truncated)"
    assert redactor.sanitize(b"1234") == "<bytes 4B>"


def test_formatter_attaches_exception():
    try:
        raise ValueError("bad")
    except ValueError:
        import sys

        record = _record()
        record.exc_info = sys.exc_info()

    payload = json.loads(JSONFormatter().format(record))

    assert payload["exception"]["type"] == "ValueError"
    assert payload["exception"]["message"] == "bad"
