"""
Domain exceptions for the candidate workflow.

Each error carries a machine readable ``code``. The HTTP layer maps codes to
status codes through ``HTTP_STATUS_BY_CODE``.
"""

from typing import Any, Dict, Optional


class WorkflowError(Exception):
    """Base class for candidate workflow errors."""

    code = "WORKFLOW_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(WorkflowError):
    """Referenced candidate, assessment, request or integration does not exist."""

    code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            f"{resource} not found",
            {"resource": resource, "id": identifier},
        )


class InvalidTransitionError(WorkflowError):
    """No transition rule exists between the two statuses."""

    code = "INVALID_TRANSITION"

    def __init__(self, from_status: str, to_status: str):
        super().__init__(
            f"Invalid status transition from {from_status} to {to_status}",
            {"from_status": from_status, "to_status": to_status},
        )


class StaleStatusError(WorkflowError):
    """The candidate's status changed between read and write."""

    code = "STALE_STATUS"

    def __init__(self, response_id: int, expected_status: str):
        super().__init__(
            f"Status of response {response_id} changed concurrently; "
            f"expected {expected_status}",
            {"response_id": response_id, "expected_status": expected_status},
        )


class RequestNotPendingError(WorkflowError):
    """Approval or rejection attempted on a request that was already reviewed."""

    code = "REQUEST_NOT_PENDING"

    def __init__(self, request_id: int, current_state: str):
        super().__init__(
            f"Status change request {request_id} is already {current_state}",
            {"request_id": request_id, "state": current_state},
        )


class DuplicateAssessmentError(WorkflowError):
    """The candidate already has an attempt for this skill assessment."""

    code = "DUPLICATE_ASSESSMENT"

    def __init__(self, skill_assessment_id: int, response_id: int):
        super().__init__(
            "Assessment already started for this candidate",
            {"skill_assessment_id": skill_assessment_id, "response_id": response_id},
        )


class AssessmentAlreadyCompletedError(WorkflowError):
    """Completing an attempt twice."""

    code = "ASSESSMENT_COMPLETED"

    def __init__(self, candidate_assessment_id: int):
        super().__init__(
            "Assessment already completed",
            {"candidate_assessment_id": candidate_assessment_id},
        )


class ExternalServiceError(WorkflowError):
    """The AI service or an ATS provider failed or returned garbage."""

    code = "EXTERNAL_SERVICE_ERROR"

    def __init__(self, service: str, message: str):
        super().__init__(f"{service}: {message}", {"service": service})
        self.service = service


class UnsupportedExportFormatError(WorkflowError):
    """Export requested in a format that is not produced."""

    code = "UNSUPPORTED_FORMAT"

    def __init__(self, export_format: str):
        super().__init__(
            f"Unsupported export format: {export_format}",
            {"format": export_format},
        )


HTTP_STATUS_BY_CODE: Dict[str, int] = {
    NotFoundError.code: 404,
    InvalidTransitionError.code: 400,
    UnsupportedExportFormatError.code: 400,
    StaleStatusError.code: 409,
    RequestNotPendingError.code: 409,
    DuplicateAssessmentError.code: 409,
    AssessmentAlreadyCompletedError.code: 409,
    ExternalServiceError.code: 502,
    WorkflowError.code: 500,
}


def http_status_for(code: Optional[str]) -> int:
    """Map a workflow error code to an HTTP status, defaulting to 500."""
    return HTTP_STATUS_BY_CODE.get(code or "", 500)
