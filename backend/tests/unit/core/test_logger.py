"""Unit tests for the logging utilities."""

from __future__ import annotations

import json
import logging

from apihub.core.logger import JSONFormatter, configure_logging, token_prefix


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""
    configure_logging("DEBUG")
    try:
        assert logging.getLogger().level == logging.DEBUG
    finally:
        configure_logging("WARNING")


def test_json_formatter_includes_extras() -> None:
    record = logging.LogRecord("apihub.test", logging.INFO, __file__, 1, "hello %s", ("x",), None)
    record.event = "token.issued"
    record.request_id = "rid-1"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "hello x"
    assert payload["event"] == "token.issued"
    assert payload["request_id"] == "rid-1"


def test_token_prefix_never_leaks_full_token() -> None:
    assert token_prefix(None) is None
    assert token_prefix("abcdefghijklmnopqrstuvwxyz") == "abcdefghijkl..."


def test_request_id_is_echoed_or_generated(client) -> None:
    echoed = client.get("/api/v1/health", headers={"X-Request-ID": "fixed-id"})
    assert echoed.headers["X-Request-ID"] == "fixed-id"

    generated = client.get("/api/v1/health")
    assert generated.headers["X-Request-ID"]
    assert generated.headers["X-Request-ID"] != "fixed-id"
