"""
Tests for structured logging.
Covers PII masking, the JSON formatter and request logging.
"""

import json
import logging
import sys

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from core.middleware.logging import (
    StructuredFormatter,
    StructuredLoggingMiddleware,
    is_sensitive_field,
    mask_headers,
    mask_pii_text,
    mask_sensitive_data,
    setup_logging,
)


class TestSensitiveFieldDetection:

    @pytest.mark.parametrize("field_name,expected", [
        ("password", True),
        ("access_token", True),
        ("api_key", True),
        ("apiKey", True),
        ("api_secret", True),
        ("Authorization", True),
        ("cookie", True),
        ("session_id", True),
        ("candidate_status", False),
        ("response_id", False),
        ("email", False),
    ])
    def test_detection(self, field_name, expected):
        assert is_sensitive_field(field_name) is expected


class TestMasking:

    def test_pii_in_text(self):
        masked = mask_pii_text("Contact ada@example.com or +44 20 7946 0958")
        assert "ada@example.com" not in masked
        assert "[EMAIL]" in masked
        assert "[PHONE]" in masked

    def test_nested_structures(self):
        data = {
            "api_key": "sk_live_123",
            "candidate": {"email": "ada@example.com", "status": "in_review"},
            "notes": ["call 555-123-4567"],
            "score": 88,
        }
        masked = mask_sensitive_data(data)
        assert masked["api_key"] == "[REDACTED]"
        assert masked["candidate"]["email"] == "[EMAIL]"
        assert masked["candidate"]["status"] == "in_review"
        assert masked["notes"] == ["call [PHONE]"]
        assert masked["score"] == 88

    def test_depth_limit(self):
        data = current = {}
        for _ in range(15):
            current["next"] = {}
            current = current["next"]
        masked = mask_sensitive_data(data)
        for _ in range(11):
            masked = masked["next"]
        assert masked == "[MAX_DEPTH_EXCEEDED]"

    def test_authorization_keeps_scheme(self):
        masked = mask_headers({"authorization": "Bearer abc.def", "accept": "*/*"})
        assert masked == {"authorization": "Bearer [REDACTED]", "accept": "*/*"}


class TestStructuredFormatter:

    def _record(self, **extra):
        record = logging.LogRecord(
            "api.services.ats", logging.WARNING, __file__, 1, "sync failed", None, None
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_line_with_context(self):
        line = StructuredFormatter().format(
            self._record(response_id=5, event_id=9, unrelated="x")
        )
        data = json.loads(line)
        assert data["level"] == "WARNING"
        assert data["logger"] == "api.services.ats"
        assert data["message"] == "sync failed"
        assert data["response_id"] == 5
        assert data["event_id"] == 9
        assert "unrelated" not in data

    def test_exception_info(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = self._record()
            record.exc_info = sys.exc_info()
        data = json.loads(StructuredFormatter().format(record))
        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "bad"


class TestSetupLogging:

    def test_installs_json_formatter(self):
        setup_logging("DEBUG", json_logs=True)
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)

    def test_plain_text(self):
        setup_logging("INFO", json_logs=False)
        assert not isinstance(logging.getLogger().handlers[0].formatter, StructuredFormatter)


@pytest.fixture
def client():
    app = FastAPI()
    app.add_middleware(StructuredLoggingMiddleware, log_request_body=True)

    @app.post("/items")
    async def create_item(payload: dict):
        return {"ok": True}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return TestClient(app)


class TestStructuredLoggingMiddleware:

    def test_request_id_propagated(self, client):
        response = client.post("/items", json={}, headers={"x-request-id": "req-1"})
        assert response.headers["x-request-id"] == "req-1"

    def test_request_id_generated(self, client):
        response = client.post("/items", json={})
        assert response.headers["x-request-id"]

    def test_logs_masked_request(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="core.middleware.logging"):
            client.post(
                "/items",
                json={"email": "ada@example.com", "api_key": "sk_live"},
                headers={"Authorization": "Bearer secret-token"},
            )
        events = [
            json.loads(r.getMessage())
            for r in caplog.records
            if r.name == "core.middleware.logging"
        ]
        started = next(e for e in events if e["event"] == "request_started")
        completed = next(e for e in events if e["event"] == "request_completed")

        assert started["body"] == {"email": "[EMAIL]", "api_key": "[REDACTED]"}
        assert started["headers"]["authorization"] == "Bearer [REDACTED]"
        assert completed["status_code"] == 200
        assert "duration_ms" in completed

    def test_health_checks_not_logged(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="core.middleware.logging"):
            client.get("/health")
        assert [r for r in caplog.records if r.name == "core.middleware.logging"] == []
