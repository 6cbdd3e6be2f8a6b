"""
Security utilities for the candidate workflow API.

Provides bearer token verification for tokens issued by the external identity
provider, PII masking and audit logging for endpoints that change candidate
state.
"""

import functools
import logging
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Set
from enum import Enum

import jwt

logger = logging.getLogger("security.audit")


class AuditAction(str, Enum):
    """Audit log action types."""
    VIEW = "VIEW"
    EXPORT = "EXPORT"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    # Workflow
    STATUS_CHANGE = "STATUS_CHANGE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    ATS_SYNC = "ATS_SYNC"


class ResourceType(str, Enum):
    """Resource types for audit logging."""
    CANDIDATE = "CANDIDATE"
    STATUS_CHANGE_REQUEST = "STATUS_CHANGE_REQUEST"
    ASSESSMENT = "ASSESSMENT"
    ATS_INTEGRATION = "ATS_INTEGRATION"


# PII fields that should be masked in logs
PII_FIELDS: Set[str] = {
    "email", "phone", "name", "full_name", "first_name", "last_name",
    "location", "expected_salary", "api_key", "api_secret",
}


@dataclass(frozen=True)
class CurrentUser:
    """Identity of the caller, taken from a verified bearer token."""

    user_id: str
    organization_id: Optional[str] = None
    email: Optional[str] = None


def verify_jwt_token(
    token: str,
    secret: str,
    algorithm: str = "HS256",
    audience: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Decode and verify a bearer token.

    Args:
        token: Encoded JWT
        secret: Verification key
        algorithm: Expected signing algorithm
        audience: Expected ``aud`` claim, skipped when None

    Returns:
        The token claims

    Raises:
        jwt.InvalidTokenError: signature, expiry or audience check failed
    """
    options = {"require": ["sub", "exp"], "verify_aud": audience is not None}
    return jwt.decode(
        token,
        secret,
        algorithms=[algorithm],
        audience=audience,
        options=options,
    )


def user_from_claims(claims: Dict[str, Any]) -> CurrentUser:
    """Build the caller identity from verified claims."""
    return CurrentUser(
        user_id=str(claims["sub"]),
        organization_id=claims.get("org_id"),
        email=claims.get("email"),
    )


def mask_pii(data: Any, depth: int = 0) -> Any:
    """
    Recursively mask PII fields in data structures.

    Args:
        data: Data to mask (dict, list, or primitive)
        depth: Current recursion depth (max 10)

    Returns:
        Data with PII fields masked
    """
    if depth > 10:
        return "[MAX_DEPTH]"

    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            if key.lower() in PII_FIELDS:
                if isinstance(value, str) and len(value) > 0:
                    masked[key] = f"{value[0]}***[{len(value)}]"
                else:
                    masked[key] = "[MASKED]"
            else:
                masked[key] = mask_pii(value, depth + 1)
        return masked
    elif isinstance(data, list):
        return [mask_pii(item, depth + 1) for item in data[:5]]
    else:
        return data


def log_audit_event(
    action: AuditAction,
    resource_type: ResourceType,
    resource_id: Optional[str] = None,
    user_id: Optional[str] = None,
    organization_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    contains_pii: bool = False,
) -> Dict[str, Any]:
    """
    Log an audit event as a single JSON line suitable for SIEM ingestion.
    """
    event = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": "AUDIT",
        "action": action.value,
        "resource_type": resource_type.value,
        "resource_id": str(resource_id) if resource_id is not None else None,
        "user_id": user_id,
        "organization_id": organization_id,
        "contains_pii": contains_pii,
        "details": mask_pii(details) if details and contains_pii else details,
    }
    logger.info(json.dumps(event, default=str))
    return event


def audit_log(
    action: AuditAction,
    resource_type: ResourceType,
    resource_id_param: Optional[str] = None,
    contains_pii: bool = False,
):
    """
    Decorator for audit logging API endpoints.

    Usage:
        @router.post("/{response_id}")
        @audit_log(AuditAction.STATUS_CHANGE, ResourceType.CANDIDATE, "response_id")
        async def update_status(response_id: int, current_user: CurrentUser = ...):
            ...
    """
    def decorator(func: Callable):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            current_user = kwargs.get("current_user")
            resource_id = kwargs.get(resource_id_param) if resource_id_param else None
            user_id = getattr(current_user, "user_id", None)
            org_id = getattr(current_user, "organization_id", None)

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                log_audit_event(
                    action=action,
                    resource_type=resource_type,
                    resource_id=resource_id,
                    user_id=user_id,
                    organization_id=org_id,
                    contains_pii=contains_pii,
                    details={"status": "error", "error": str(e)[:200]},
                )
                raise

            details: Dict[str, Any] = {"status": "success"}
            # Endpoints that build their own error response still failed
            status_code = getattr(result, "status_code", None)
            if isinstance(status_code, int):
                details["status_code"] = status_code
                if status_code >= 400:
                    details["status"] = "failure"

            log_audit_event(
                action=action,
                resource_type=resource_type,
                resource_id=resource_id,
                user_id=user_id,
                organization_id=org_id,
                contains_pii=contains_pii,
                details=details,
            )
            return result
        return wrapper
    return decorator
