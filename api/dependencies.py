"""FastAPI dependencies for dependency injection."""

import logging

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.services.candidate_status import StatusWorkflowEngine
from core.config import settings
from core.security import CurrentUser, user_from_claims, verify_jwt_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> CurrentUser:
    """
    Identity of the caller from the identity provider's bearer token.

    Raises:
        HTTPException: 401 when the token is missing or does not verify
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        claims = verify_jwt_token(
            credentials.credentials,
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            audience=settings.jwt_audience,
        )
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = user_from_claims(claims)
    request.state.user_id = user.user_id
    return user


async def require_organization(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Require the caller to belong to an organization."""
    if not current_user.organization_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User not part of an organization",
        )
    return current_user


def get_workflow_engine(request: Request) -> StatusWorkflowEngine:
    """The engine built at startup around the immutable transition table."""
    return request.app.state.workflow_engine
