"""ATS integration schemas."""

from typing import Any, Optional
from pydantic import BaseModel, Field

from database.models.integrations import ATSProvider, SyncType
from database.models.responses import CandidateStatus


class ATSIntegrationCreate(BaseModel):
    """Credentials are encrypted at rest and never returned."""

    provider: ATSProvider
    api_key: str = Field(min_length=1)
    api_secret: Optional[str] = None
    api_url: Optional[str] = Field(None, max_length=1024)
    webhook_url: Optional[str] = Field(None, max_length=1024)
    configuration: dict[str, Any] = Field(default_factory=dict)


class ATSIntegrationOut(BaseModel):
    id: int
    organization_id: str
    provider: ATSProvider
    api_url: Optional[str] = None
    webhook_url: Optional[str] = None
    configuration: dict[str, Any] = Field(default_factory=dict)
    is_active: bool
    has_credentials: bool
    created_at: Optional[str] = None


class SyncToATSRequest(BaseModel):
    """One manual sync call against an integration."""

    integration_id: int = Field(ge=1)
    response_id: int = Field(ge=1)
    type: SyncType
    provider_candidate_id: Optional[str] = Field(
        None, description="Required for status updates"
    )
    status: Optional[CandidateStatus] = Field(
        None, description="Required for status updates"
    )


class ATSSyncResult(BaseModel):
    success: bool
    data: Any = None
    error: Optional[str] = None
    provider_candidate_id: Optional[str] = None
