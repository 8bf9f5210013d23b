# tests/unit/test_errors.py
"""Tests for the error taxonomy and the JSON log formatter."""

import json
import logging

import httpx

from dialect_bridge.errors import BridgeError, ConnectivityError, ProtocolError
from dialect_bridge.logging_config import JsonFormatter


class TestConnectivityErrorHint:
    def _error(self, **kwargs):
        values = dict(
            server_url="http://localhost:11434", model="llama3.1:latest", operation="chat", attempts=4
        )
        values.update(kwargs)
        return ConnectivityError(**values)

    def test_model_not_found(self):
        err = self._error(status_code=404)
        assert "ollama pull llama3.1:latest" in err.hint

    def test_timeout(self):
        err = self._error(cause=httpx.ReadTimeout("timed out"))
        assert "timeout_ms" in err.hint

    def test_server_down(self):
        err = self._error(cause=httpx.ConnectError("Connection refused"))
        assert "http://localhost:11434" in err.hint

    def test_message_and_details(self):
        err = self._error(status_code=500)
        assert "failed after 4 attempt(s)" in str(err)
        assert err.details["status_code"] == 500
        assert isinstance(err, BridgeError)


class TestProtocolError:
    def test_raw_truncated_in_details(self):
        err = ProtocolError("bad body", raw="x" * 1000)
        assert len(err.details["raw"]) == 200
        assert len(err.raw) == 1000


class TestJsonFormatter:
    def test_format(self):
        record = logging.LogRecord("dialect_bridge.x", logging.WARNING, __file__, 1, "hello %s", ("you",), None)
        data = json.loads(JsonFormatter().format(record))
        assert data["level"] == "WARNING"
        assert data["logger"] == "dialect_bridge.x"
        assert data["msg"] == "hello you"
