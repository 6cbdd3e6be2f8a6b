"""
Tests for error handling middleware.
Covers the error envelope, exception classification and message sanitisation.
"""

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError

from core.exceptions import (
    DuplicateAssessmentError,
    InvalidTransitionError,
    NotFoundError,
    StaleStatusError,
    http_status_for,
)
from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    classify_exception,
    error_envelope,
    sanitize_error_message,
    setup_error_handlers,
)


class TestSanitization:

    @pytest.mark.parametrize("message", [
        'password="secret123"',
        "api_key=sk_live_12345",
        "api-secret: hunter2",
        "token:abc.def.ghi",
        "Authorization: Bearer eyJhbGciOi",
        "client secret=confidential",
    ])
    def test_credentials_redacted(self, message):
        sanitized = sanitize_error_message(message)
        assert "[REDACTED]" in sanitized

    @pytest.mark.parametrize("message", [
        "Candidate response not found",
        "Invalid status transition from pending to selected",
        "count=12345",
    ])
    def test_plain_messages_untouched(self, message):
        assert sanitize_error_message(message) == message


class TestClassification:

    @pytest.mark.parametrize("exc,status,code", [
        (NotFoundError("Candidate response", 1), 404, "NOT_FOUND"),
        (InvalidTransitionError("pending", "selected"), 400, "INVALID_TRANSITION"),
        (StaleStatusError(1, "pending"), 409, "STALE_STATUS"),
        (DuplicateAssessmentError(1, 2), 409, "DUPLICATE_ASSESSMENT"),
        (IntegrityError("INSERT", {}, Exception("unique")), 409, "INTEGRITY_ERROR"),
        (OperationalError("SELECT", {}, Exception("down")), 503, "DATABASE_ERROR"),
        (ProgrammingError("SELECT", {}, Exception("syntax")), 500, "DATABASE_ERROR"),
        (ValueError("bad page"), 400, "INVALID_INPUT"),
        (RuntimeError("boom"), 500, "INTERNAL_SERVER_ERROR"),
    ])
    def test_status_and_code(self, exc, status, code):
        status_code, error_code, _, _ = classify_exception(exc)
        assert status_code == status
        assert error_code == code

    def test_invalid_transition_details_name_both_statuses(self):
        _, _, message, details = classify_exception(
            InvalidTransitionError("pending", "selected")
        )
        assert "pending" in message and "selected" in message
        assert details == {"from_status": "pending", "to_status": "selected"}

    def test_debug_adds_details_for_unexpected_errors(self):
        _, _, message, details = classify_exception(RuntimeError("boom"), debug=True)
        assert message == "An unexpected error occurred"
        assert details["type"] == "RuntimeError"

    def test_unknown_code_maps_to_500(self):
        assert http_status_for("SOMETHING_ELSE") == 500
        assert http_status_for(None) == 500


class TestEnvelope:

    def test_optional_fields_omitted(self):
        assert error_envelope("NOT_FOUND", "gone", "/x", "GET") == {
            "error": {"code": "NOT_FOUND", "message": "gone", "path": "/x", "method": "GET"}
        }

    def test_optional_fields_included(self):
        body = error_envelope("E", "m", "/x", "POST", details={"a": 1}, request_id="r1")
        assert body["error"]["details"] == {"a": 1}
        assert body["error"]["request_id"] == "r1"


class Payload(BaseModel):
    count: int


@pytest.fixture
def client():
    app = FastAPI()
    setup_error_handlers(app)
    app.add_middleware(ErrorHandlingMiddleware)

    @app.get("/missing")
    async def missing():
        raise NotFoundError("Candidate response", 7)

    @app.get("/http")
    async def http_error():
        raise HTTPException(status_code=403, detail="Forbidden")

    @app.post("/validate")
    async def validate(payload: Payload):
        return payload

    @app.get("/crash")
    async def crash():
        raise RuntimeError("api_key=sk_live_secret leaked")

    return TestClient(app, raise_server_exceptions=False)


class TestHandlers:

    def test_workflow_error(self, client):
        response = client.get("/missing")
        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "NOT_FOUND"
        assert error["path"] == "/missing"
        assert error["method"] == "GET"
        assert error["details"] == {"resource": "Candidate response", "id": 7}

    def test_http_exception(self, client):
        response = client.get("/http")
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "HTTP_EXCEPTION"

    def test_validation_error(self, client):
        response = client.post("/validate", json={"count": "many"})
        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"][0]["field"] == "body.count"

    def test_unexpected_error_hides_message(self, client):
        response = client.get("/crash")
        assert response.status_code == 500
        body = response.text
        assert "sk_live_secret" not in body
        assert response.json()["error"]["code"] == "INTERNAL_SERVER_ERROR"
