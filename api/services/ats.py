"""ATS integration service functions.

Every sync attempt against a configured integration is written to the
append-only sync log, whatever its outcome. Provider failures come back as
``ATSResponse`` values and never raise to the caller.
"""

from dataclasses import asdict
from typing import Any, Awaitable, Callable, Dict, List, Optional
import logging

import httpx
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from core.config import settings
from core.exceptions import NotFoundError
from core.integrations.ats import (
    ATSResponse,
    BaseATSProvider,
    CandidatePayload,
    UnsupportedProviderError,
    build_provider,
)
from core.scoring import summarize_assessments
from database.engine import AsyncSessionLocal
from database.models.integrations import (
    ATSIntegration,
    ATSProvider,
    ATSSyncLog,
    SyncLogStatus,
    SyncType,
)
from database.models.responses import Response
from database.security import CryptoUtils

logger = logging.getLogger(__name__)

ProviderCall = Callable[[BaseATSProvider], Awaitable[ATSResponse]]


def _serialize_integration(integration: ATSIntegration) -> Dict[str, Any]:
    # Credentials never leave the service
    return {
        "id": integration.id,
        "organization_id": integration.organization_id,
        "provider": integration.provider.value,
        "api_url": integration.api_url,
        "webhook_url": integration.webhook_url,
        "configuration": integration.configuration or {},
        "is_active": integration.is_active,
        "has_credentials": bool(integration.api_key),
        "created_at": integration.created_at.isoformat() if integration.created_at else None,
    }


def _serialize_log(log: ATSSyncLog) -> Dict[str, Any]:
    return {
        "id": log.id,
        "ats_integration_id": log.ats_integration_id,
        "response_id": log.response_id,
        "sync_type": log.sync_type.value,
        "status": log.status.value,
        "request_data": log.request_data,
        "response_data": log.response_data,
        "error_message": log.error_message,
        "created_at": log.created_at.isoformat() if log.created_at else None,
    }


def _provider_for(
    integration: ATSIntegration,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BaseATSProvider:
    """
    Raises:
        UnsupportedProviderError: the integration's provider has no implementation
    """
    key = settings.credentials_encryption_key
    return build_provider(
        integration.provider,
        api_key=CryptoUtils.decrypt(integration.api_key, key),
        api_secret=CryptoUtils.decrypt(integration.api_secret, key),
        api_url=integration.api_url,
        configuration=integration.configuration,
        timeout=settings.ats_request_timeout,
        transport=transport,
    )


def _candidate_payload(response: Response) -> CandidatePayload:
    profile = response.profile
    if profile is None:
        return CandidatePayload(name=response.name, email=response.email)
    return CandidatePayload(
        name=response.name,
        email=response.email,
        phone=profile.phone,
        location=profile.location,
        skills=list(profile.skills or []),
        education=list(profile.education or []),
        work_experience=list(profile.work_experience or []),
        linkedin_url=profile.linkedin_url,
        github_url=profile.github_url,
        portfolio_url=profile.portfolio_url,
        resume_url=profile.resume_url,
    )


async def _run_sync(
    integration_id: int,
    response_id: int,
    sync_type: SyncType,
    request_data: Dict[str, Any],
    call: ProviderCall,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ATSResponse:
    """Run one provider call against an integration and log the attempt."""
    async with AsyncSessionLocal() as session:
        integration = await session.get(ATSIntegration, integration_id)
        if integration is None:
            # Nothing to attach a log row to
            logger.warning(f"ATS integration {integration_id} not found")
            return ATSResponse(success=False, error="ATS integration not found")

        if not integration.is_active:
            result = ATSResponse(success=False, error="ATS integration is inactive")
        else:
            try:
                provider = _provider_for(integration, transport)
                result = await call(provider)
            except UnsupportedProviderError as e:
                result = ATSResponse(success=False, error=str(e))
            except Exception as e:
                logger.error(
                    f"{sync_type.value} sync to integration {integration_id} raised: {e}",
                    exc_info=True,
                )
                result = ATSResponse(success=False, error=str(e) or e.__class__.__name__)

        session.add(
            ATSSyncLog(
                ats_integration_id=integration_id,
                response_id=response_id,
                sync_type=sync_type,
                status=SyncLogStatus.SUCCESS if result.success else SyncLogStatus.FAILED,
                request_data=request_data,
                response_data=result.to_dict(),
                error_message=result.error,
            )
        )
        await session.commit()

    if result.success:
        logger.info(
            f"{sync_type.value} sync of response {response_id} to integration "
            f"{integration_id} succeeded"
        )
    else:
        logger.warning(
            f"{sync_type.value} sync of response {response_id} to integration "
            f"{integration_id} failed: {result.error}"
        )
    return result


async def _synced_candidate_id(integration_id: int, response_id: int) -> Optional[str]:
    """Provider candidate id recorded by the latest successful create."""
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(ATSSyncLog)
            .where(
                ATSSyncLog.ats_integration_id == integration_id,
                ATSSyncLog.response_id == response_id,
                ATSSyncLog.sync_type == SyncType.CANDIDATE_CREATE,
                ATSSyncLog.status == SyncLogStatus.SUCCESS,
            )
            .order_by(ATSSyncLog.created_at.desc(), ATSSyncLog.id.desc())
            .limit(1)
        )
        log = result.scalar_one_or_none()
    if log is None or not log.response_data:
        return None
    return log.response_data.get("provider_candidate_id")


# ==================== Integrations ===================== #

async def create_integration(
    organization_id: str,
    provider: ATSProvider,
    api_key: Optional[str] = None,
    api_secret: Optional[str] = None,
    api_url: Optional[str] = None,
    webhook_url: Optional[str] = None,
    configuration: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Store a new integration with its credentials encrypted."""
    key = settings.credentials_encryption_key
    async with AsyncSessionLocal() as session:
        integration = ATSIntegration(
            organization_id=organization_id,
            provider=ATSProvider(provider),
            api_key=CryptoUtils.encrypt(api_key, key),
            api_secret=CryptoUtils.encrypt(api_secret, key),
            api_url=api_url,
            webhook_url=webhook_url,
            configuration=configuration or {},
            is_active=True,
        )
        session.add(integration)
        await session.commit()
        await session.refresh(integration)

        logger.info(
            f"Created {integration.provider.value} integration {integration.id}",
            extra={"integration": integration.to_dict_masked()},
        )
        return _serialize_integration(integration)


async def list_integrations(organization_id: str) -> List[Dict[str, Any]]:
    """Active integrations of an organization, newest first."""
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(ATSIntegration)
            .where(
                ATSIntegration.organization_id == organization_id,
                ATSIntegration.is_active.is_(True),
            )
            .order_by(ATSIntegration.created_at.desc(), ATSIntegration.id.desc())
        )
        return [_serialize_integration(i) for i in result.scalars().all()]


async def get_integration(integration_id: int) -> Optional[Dict[str, Any]]:
    async with AsyncSessionLocal() as session:
        integration = await session.get(ATSIntegration, integration_id)
        return _serialize_integration(integration) if integration else None


async def validate_integration(
    integration_id: int,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, Any]:
    """
    Check that the stored credentials reach the provider.

    Raises:
        NotFoundError: no such integration
    """
    async with AsyncSessionLocal() as session:
        integration = await session.get(ATSIntegration, integration_id)
        if integration is None:
            raise NotFoundError("ATS integration", integration_id)

        try:
            provider = _provider_for(integration, transport)
        except UnsupportedProviderError as e:
            return {"integration_id": integration_id, "valid": False, "error": str(e)}

    valid = await provider.validate_connection()
    return {"integration_id": integration_id, "valid": valid}


# ==================== Sync operations ===================== #

async def sync_candidate_to_ats(
    integration_id: int,
    response_id: int,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ATSResponse:
    """Create the candidate in the provider's system."""
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(Response)
            .options(selectinload(Response.profile))
            .where(Response.id == response_id)
        )
        response = result.scalar_one_or_none()
        if response is None:
            return ATSResponse(success=False, error="Candidate response not found")
        candidate = _candidate_payload(response)

    return await _run_sync(
        integration_id,
        response_id,
        SyncType.CANDIDATE_CREATE,
        request_data=asdict(candidate),
        call=lambda provider: provider.create_candidate(candidate),
        transport=transport,
    )


async def update_candidate_status_in_ats(
    integration_id: int,
    response_id: int,
    provider_candidate_id: str,
    status: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ATSResponse:
    """Push a status to a candidate already known to the provider."""
    return await _run_sync(
        integration_id,
        response_id,
        SyncType.STATUS_UPDATE,
        request_data={"provider_candidate_id": provider_candidate_id, "status": status},
        call=lambda provider: provider.update_candidate_status(
            provider_candidate_id, status
        ),
        transport=transport,
    )


async def sync_assessment_results_to_ats(
    integration_id: int,
    response_id: int,
    provider_candidate_id: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ATSResponse:
    """
    Attach assessment results to the provider's candidate. Without an explicit
    id, the one recorded by the last successful create is used.
    """
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(Response)
            .options(selectinload(Response.assessments))
            .where(Response.id == response_id)
        )
        response = result.scalar_one_or_none()
        if response is None:
            return ATSResponse(success=False, error="Candidate response not found")
        assessments = [
            {
                "skill_assessment_id": a.skill_assessment_id,
                "score": a.score,
                "max_score": a.max_score,
                "passed": a.passed,
                "completed_at": a.completed_at.isoformat() if a.completed_at else None,
            }
            for a in sorted(response.assessments, key=lambda a: a.id)
        ]

    candidate_id = provider_candidate_id or await _synced_candidate_id(
        integration_id, response_id
    )
    summary = summarize_assessments(assessments)
    assessment_data = {
        "overall_score": summary["overall_score"],
        "passed": summary["passed"],
        "assessments": assessments,
    }

    async def call(provider: BaseATSProvider) -> ATSResponse:
        if candidate_id is None:
            return ATSResponse(
                success=False, error="Candidate has not been synced to this ATS"
            )
        return await provider.sync_assessment_results(candidate_id, assessment_data)

    return await _run_sync(
        integration_id,
        response_id,
        SyncType.ASSESSMENT_RESULT,
        request_data={"provider_candidate_id": candidate_id, **assessment_data},
        call=call,
        transport=transport,
    )


async def sync_status_change(
    response_id: int,
    to_status: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[ATSResponse]:
    """
    Push a status change to every active integration that already holds the
    candidate, using the provider id from its successful create log.
    """
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(ATSSyncLog)
            .join(ATSIntegration, ATSSyncLog.ats_integration_id == ATSIntegration.id)
            .where(
                ATSSyncLog.response_id == response_id,
                ATSSyncLog.sync_type == SyncType.CANDIDATE_CREATE,
                ATSSyncLog.status == SyncLogStatus.SUCCESS,
                ATSIntegration.is_active.is_(True),
            )
            .order_by(ATSSyncLog.created_at.desc(), ATSSyncLog.id.desc())
        )
        targets: Dict[int, str] = {}
        for log in result.scalars().all():
            provider_id = (log.response_data or {}).get("provider_candidate_id")
            if provider_id and log.ats_integration_id not in targets:
                targets[log.ats_integration_id] = provider_id

    results = []
    for integration_id, provider_id in targets.items():
        results.append(
            await update_candidate_status_in_ats(
                integration_id, response_id, provider_id, to_status, transport=transport
            )
        )
    return results


async def get_sync_logs(
    integration_id: Optional[int] = None,
    response_id: Optional[int] = None,
    limit: int = 50,
) -> List[Dict[str, Any]]:
    """Sync attempts, newest first."""
    async with AsyncSessionLocal() as session:
        query = select(ATSSyncLog)
        if integration_id is not None:
            query = query.where(ATSSyncLog.ats_integration_id == integration_id)
        if response_id is not None:
            query = query.where(ATSSyncLog.response_id == response_id)
        query = query.order_by(ATSSyncLog.created_at.desc(), ATSSyncLog.id.desc()).limit(limit)

        result = await session.execute(query)
        return [_serialize_log(log) for log in result.scalars().all()]
