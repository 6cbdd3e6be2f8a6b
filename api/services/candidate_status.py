"""
Candidate status workflow engine.

Validates requested status changes against the transition table, files
approval requests for gated transitions and applies the rest with a
compare-and-swap update. Every applied transition writes its history row and
its outbox event in the same transaction; side effects run after commit.
"""

import logging
from collections import Counter, defaultdict
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from agents.registry import registry
from core.events import STATUS_CHANGED, EventPublisher
from core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    RequestNotPendingError,
    StaleStatusError,
    WorkflowError,
)
from core.scoring import calculate_overall_score
from core.workflow.transitions import (
    ASSESSMENT_COMPLETED,
    TransitionRule,
    TransitionTable,
)
from database.engine import AsyncSessionLocal
from database.models.responses import CandidateStatus, Interview, Response
from database.models.workflow import (
    CandidateStatusHistory,
    DomainEvent,
    StatusChangeApproval,
    StatusChangeRequest,
    StatusChangeRequestStatus,
)

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"

# Predicates behind the named auto transition conditions of a rule
AUTO_CONDITIONS: Dict[str, Callable[[Response], bool]] = {
    ASSESSMENT_COMPLETED: lambda response: bool(
        response.is_analysed and response.analytics
    ),
}


@dataclass
class StatusChangeResult:
    """Outcome of a status change, approval or rejection."""

    success: bool
    message: Optional[str] = None
    requires_approval: bool = False
    request_id: Optional[int] = None
    error_code: Optional[str] = None
    event_id: Optional[int] = None

    @classmethod
    def failure(cls, error: WorkflowError) -> "StatusChangeResult":
        return cls(success=False, message=error.message, error_code=error.code)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.requires_approval:
            data["requires_approval"] = True
            data["request_id"] = self.request_id
        if self.error_code:
            data["error_code"] = self.error_code
        return data


def _hours_between(start, end) -> float:
    if start is None or end is None:
        return 0.0
    # SQLite hands back naive datetimes; compare like with like
    if (start.tzinfo is None) != (end.tzinfo is None):
        start = start.replace(tzinfo=None)
        end = end.replace(tzinfo=None)
    return max((end - start).total_seconds(), 0.0) / 3600


def _history_to_dict(row: CandidateStatusHistory) -> Dict[str, Any]:
    return {
        "id": row.id,
        "response_id": row.response_id,
        "previous_status": row.previous_status.value if row.previous_status else None,
        "new_status": row.new_status.value,
        "changed_by": row.changed_by,
        "reason": row.reason,
        "is_automatic": row.is_automatic,
        "changed_at": row.changed_at.isoformat() if row.changed_at else None,
    }


def _in_organization(response: Optional[Response], organization_id: str) -> bool:
    interview = response.interview if response is not None else None
    return interview is not None and interview.organization_id == organization_id


def _request_to_dict(request: StatusChangeRequest) -> Dict[str, Any]:
    response = request.response
    return {
        "id": request.id,
        "response_id": request.response_id,
        "from_status": request.from_status.value,
        "to_status": request.to_status.value,
        "requested_by": request.requested_by,
        "reason": request.reason,
        "status": request.status.value,
        "created_at": request.created_at.isoformat() if request.created_at else None,
        "candidate": {
            "name": response.name,
            "email": response.email,
            "interview_id": response.interview_id,
            "interview_name": response.interview.name if response.interview else None,
        }
        if response
        else None,
    }


class StatusWorkflowEngine:
    """
    Applies candidate status transitions.

    Args:
        transitions: The immutable rule table built at startup
        session_factory: Session maker for the store of record
        publisher: Receives the id of every committed status event. Without
            one, events stay pending in the outbox.
    """

    def __init__(
        self,
        transitions: TransitionTable,
        session_factory: async_sessionmaker = AsyncSessionLocal,
        publisher: Optional[EventPublisher] = None,
    ):
        self.transitions = transitions
        self.session_factory = session_factory
        self.publisher = publisher

    # ==================== Transitions ===================== #

    async def update_candidate_status(
        self,
        response_id: int,
        new_status: CandidateStatus | str,
        changed_by: str,
        reason: Optional[str] = None,
        is_automatic: bool = False,
    ) -> StatusChangeResult:
        """
        Move a candidate to ``new_status``.

        Gated transitions file a pending approval request and leave the
        candidate untouched. Validation failures come back as a failed result.
        """
        new_status = CandidateStatus(new_status)

        async with self.session_factory() as session:
            response = await self._load_response(session, response_id)
            if response is None:
                return StatusChangeResult.failure(
                    NotFoundError("Candidate response", response_id)
                )

            current = response.candidate_status
            rule = self.transitions.lookup(current, new_status)
            if rule is None:
                return StatusChangeResult.failure(
                    InvalidTransitionError(current.value, new_status.value)
                )

            if rule.requires_approval:
                request = StatusChangeRequest(
                    response_id=response_id,
                    from_status=current,
                    to_status=new_status,
                    requested_by=changed_by,
                    reason=reason,
                    status=StatusChangeRequestStatus.PENDING,
                )
                session.add(request)
                await session.commit()
                logger.info(
                    f"Status change {current.value} -> {new_status.value} for "
                    f"response {response_id} awaits approval (request {request.id})"
                )
                return StatusChangeResult(
                    success=True,
                    message="Status change request submitted for approval",
                    requires_approval=True,
                    request_id=request.id,
                )

            try:
                event_id = await self._apply(
                    session, response, rule, changed_by, reason, is_automatic
                )
                await session.commit()
            except StaleStatusError as e:
                await session.rollback()
                logger.warning(e.message)
                return StatusChangeResult.failure(e)

        await self._publish(event_id)
        return StatusChangeResult(
            success=True,
            message=f"Status updated to {new_status.value}",
            event_id=event_id,
        )

    async def approve_status_change(
        self,
        request_id: int,
        approved_by: str,
        comments: Optional[str] = None,
        organization_id: Optional[str] = None,
    ) -> StatusChangeResult:
        """
        Approve a pending request and apply its transition.

        The rule is looked up again from the candidate's current status. When
        it no longer exists the approval fails and the request stays pending.
        With ``organization_id``, requests of other organizations are reported
        as not found.
        """
        async with self.session_factory() as session:
            request = await session.get(StatusChangeRequest, request_id)
            if request is None:
                return StatusChangeResult.failure(
                    NotFoundError("Status change request", request_id)
                )

            response = await self._load_response(session, request.response_id)
            if organization_id is not None and not _in_organization(
                response, organization_id
            ):
                return StatusChangeResult.failure(
                    NotFoundError("Status change request", request_id)
                )
            if request.status != StatusChangeRequestStatus.PENDING:
                return StatusChangeResult.failure(
                    RequestNotPendingError(request_id, request.status.value)
                )
            if response is None:
                return StatusChangeResult.failure(
                    NotFoundError("Candidate response", request.response_id)
                )

            rule = self.transitions.lookup(response.candidate_status, request.to_status)
            if rule is None:
                return StatusChangeResult.failure(
                    InvalidTransitionError(
                        response.candidate_status.value, request.to_status.value
                    )
                )

            try:
                event_id = await self._apply(
                    session, response, rule, approved_by, request.reason, False
                )
                claimed = await session.execute(
                    update(StatusChangeRequest)
                    .where(
                        StatusChangeRequest.id == request_id,
                        StatusChangeRequest.status == StatusChangeRequestStatus.PENDING,
                    )
                    .values(
                        status=StatusChangeRequestStatus.APPROVED,
                        reviewed_by=approved_by,
                        reviewed_at=func.now(),
                        review_comments=comments,
                    )
                    .execution_options(synchronize_session=False)
                )
                if claimed.rowcount != 1:
                    raise RequestNotPendingError(request_id, "reviewed")
                session.add(
                    StatusChangeApproval(
                        request_id=request_id,
                        approved_by=approved_by,
                        comments=comments,
                    )
                )
                await session.commit()
            except (StaleStatusError, RequestNotPendingError) as e:
                await session.rollback()
                logger.warning(e.message)
                return StatusChangeResult.failure(e)

        logger.info(f"Status change request {request_id} approved by {approved_by}")
        await self._publish(event_id)
        return StatusChangeResult(
            success=True, message="Status change approved", event_id=event_id
        )

    async def reject_status_change(
        self,
        request_id: int,
        rejected_by: str,
        reason: Optional[str] = None,
        organization_id: Optional[str] = None,
    ) -> StatusChangeResult:
        """Close a pending request as rejected. The candidate is not touched."""
        conditions = [
            StatusChangeRequest.id == request_id,
            StatusChangeRequest.status == StatusChangeRequestStatus.PENDING,
        ]
        if organization_id is not None:
            conditions.append(
                StatusChangeRequest.response_id.in_(
                    select(Response.id)
                    .join(Interview, Response.interview_id == Interview.id)
                    .where(Interview.organization_id == organization_id)
                )
            )

        async with self.session_factory() as session:
            result = await session.execute(
                update(StatusChangeRequest)
                .where(*conditions)
                .values(
                    status=StatusChangeRequestStatus.REJECTED,
                    reviewed_by=rejected_by,
                    reviewed_at=func.now(),
                    review_comments=reason,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                await session.rollback()
                request = await session.get(StatusChangeRequest, request_id)
                if request is not None and organization_id is not None:
                    response = await self._load_response(session, request.response_id)
                    if not _in_organization(response, organization_id):
                        request = None
                if request is None:
                    return StatusChangeResult.failure(
                        NotFoundError("Status change request", request_id)
                    )
                return StatusChangeResult.failure(
                    RequestNotPendingError(request_id, request.status.value)
                )
            await session.commit()

        logger.info(f"Status change request {request_id} rejected by {rejected_by}")
        return StatusChangeResult(success=True, message="Status change request rejected")

    async def _load_response(
        self, session: AsyncSession, response_id: int
    ) -> Optional[Response]:
        result = await session.execute(
            select(Response)
            .options(selectinload(Response.interview))
            .where(Response.id == response_id)
        )
        return result.scalar_one_or_none()

    async def _apply(
        self,
        session: AsyncSession,
        response: Response,
        rule: TransitionRule,
        changed_by: str,
        reason: Optional[str],
        is_automatic: bool,
    ) -> int:
        """
        Write the transition, its history row and its outbox event. The
        caller commits.

        Raises:
            StaleStatusError: the status or version moved since ``response``
                was read
        """
        result = await session.execute(
            update(Response)
            .where(
                Response.id == response.id,
                Response.candidate_status == rule.from_status,
                Response.status_version == response.status_version,
            )
            .values(
                candidate_status=rule.to_status,
                status_version=Response.status_version + 1,
                is_viewed=True,
                updated_at=func.now(),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise StaleStatusError(response.id, rule.from_status.value)

        session.add(
            CandidateStatusHistory(
                response_id=response.id,
                previous_status=rule.from_status,
                new_status=rule.to_status,
                changed_by=changed_by,
                reason=reason,
                is_automatic=is_automatic,
            )
        )
        event = DomainEvent(
            event_type=STATUS_CHANGED,
            aggregate_id=response.id,
            payload=self._event_payload(response, rule, changed_by, reason, is_automatic),
        )
        session.add(event)
        await session.flush()

        logger.info(
            f"Response {response.id} moved {rule.from_status.value} -> "
            f"{rule.to_status.value}",
            extra={"response_id": response.id, "event_id": event.id},
        )
        return event.id

    @staticmethod
    def _event_payload(
        response: Response,
        rule: TransitionRule,
        changed_by: str,
        reason: Optional[str],
        is_automatic: bool,
    ) -> Dict[str, Any]:
        # Consumers read only the payload, never the live rows
        interview = response.interview
        return {
            "response_id": response.id,
            "interview_id": response.interview_id,
            "interview_name": interview.name if interview else None,
            "hiring_manager_id": interview.user_id if interview else None,
            "candidate_name": response.name,
            "candidate_email": response.email,
            "from_status": rule.from_status.value,
            "to_status": rule.to_status.value,
            "changed_by": changed_by,
            "reason": reason,
            "is_automatic": is_automatic,
            "notification_settings": asdict(rule.notification_settings),
        }

    async def _publish(self, event_id: int) -> None:
        if self.publisher is None:
            return
        await self.publisher.publish(event_id)

    # ==================== Queries ===================== #

    async def get_status_history(self, response_id: int) -> List[Dict[str, Any]]:
        """Applied transitions for a response, newest first."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(CandidateStatusHistory)
                .where(CandidateStatusHistory.response_id == response_id)
                .order_by(
                    CandidateStatusHistory.changed_at.desc(),
                    CandidateStatusHistory.id.desc(),
                )
            )
            return [_history_to_dict(row) for row in result.scalars().all()]

    async def get_pending_status_changes(
        self, organization_id: str
    ) -> List[Dict[str, Any]]:
        """Approval queue of one organization, oldest request first."""
        async with self.session_factory() as session:
            query = (
                select(StatusChangeRequest)
                .join(Response, StatusChangeRequest.response_id == Response.id)
                .join(Interview, Response.interview_id == Interview.id)
                .options(
                    selectinload(StatusChangeRequest.response).selectinload(
                        Response.interview
                    )
                )
                .where(
                    StatusChangeRequest.status == StatusChangeRequestStatus.PENDING,
                    Interview.organization_id == organization_id,
                )
                .order_by(StatusChangeRequest.created_at, StatusChangeRequest.id)
            )

            result = await session.execute(query)
            return [_request_to_dict(r) for r in result.scalars().all()]

    async def get_status_metrics(
        self, interview_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Pipeline metrics over the responses of one interview, or all of them.

        ``average_time_in_status`` is in hours: for every history row, the time
        between entering the previous status (response creation for the first
        row) and leaving it. ``conversion_rates`` maps a status to the share of
        transitions out of it that went to each target.
        """
        async with self.session_factory() as session:
            response_query = select(
                Response.id, Response.candidate_status, Response.created_at
            )
            if interview_id is not None:
                response_query = response_query.where(
                    Response.interview_id == interview_id
                )
            responses = (await session.execute(response_query)).all()

            response_ids = [r.id for r in responses]
            history_rows: List[CandidateStatusHistory] = []
            if response_ids:
                history_result = await session.execute(
                    select(CandidateStatusHistory)
                    .where(CandidateStatusHistory.response_id.in_(response_ids))
                    .order_by(
                        CandidateStatusHistory.response_id,
                        CandidateStatusHistory.changed_at,
                        CandidateStatusHistory.id,
                    )
                )
                history_rows = list(history_result.scalars().all())

        total = len(responses)
        distribution = {status.value: 0 for status in CandidateStatus}
        distribution.update(Counter(r.candidate_status.value for r in responses))

        created_at = {r.id: r.created_at for r in responses}
        entered_at: Dict[int, Any] = {}
        durations: Dict[str, List[float]] = defaultdict(list)
        moves: Dict[str, Counter] = defaultdict(Counter)
        for row in history_rows:
            start = entered_at.get(row.response_id, created_at.get(row.response_id))
            if row.previous_status is not None:
                left = row.previous_status.value
                durations[left].append(_hours_between(start, row.changed_at))
                moves[left][row.new_status.value] += 1
            entered_at[row.response_id] = row.changed_at

        average_time_in_status = {
            status.value: round(
                sum(durations[status.value]) / len(durations[status.value]), 2
            )
            if durations[status.value]
            else 0.0
            for status in CandidateStatus
        }
        conversion_rates = {
            source: {
                target: round(count / sum(targets.values()) * 100, 2)
                for target, count in targets.items()
            }
            for source, targets in moves.items()
        }
        dropoff_points = [
            {
                "status": status,
                "count": count,
                "percentage": round(count / total * 100, 2),
            }
            for status, count in distribution.items()
            if count > 0
        ]

        return {
            "total_candidates": total,
            "status_distribution": distribution,
            "average_time_in_status": average_time_in_status,
            "conversion_rates": conversion_rates,
            "dropoff_points": dropoff_points,
        }

    # ==================== Automation ===================== #

    async def auto_update_candidate_statuses(self) -> Dict[str, int]:
        """
        Apply every automatic rule whose conditions hold.

        Only rules that name auto transition conditions and need no approval
        qualify; each move goes through ``update_candidate_status``.
        """
        rules_by_status: Dict[CandidateStatus, List[TransitionRule]] = {}
        for status in CandidateStatus:
            rules = self.transitions.auto_rules_from(status)
            if rules:
                rules_by_status[status] = rules

        summary = {"checked": 0, "updated": 0, "failed": 0}
        if not rules_by_status:
            return summary

        async with self.session_factory() as session:
            result = await session.execute(
                select(Response)
                .where(Response.candidate_status.in_(list(rules_by_status)))
                .order_by(Response.id)
            )
            candidates = list(result.scalars().all())

        for response in candidates:
            summary["checked"] += 1
            for rule in rules_by_status[response.candidate_status]:
                conditions = rule.auto_transition_conditions
                if not all(
                    AUTO_CONDITIONS.get(name, lambda _: False)(response)
                    for name in conditions
                ):
                    continue
                outcome = await self.update_candidate_status(
                    response.id,
                    rule.to_status,
                    changed_by=SYSTEM_ACTOR,
                    reason=f"Automatic transition: {', '.join(conditions)}",
                    is_automatic=True,
                )
                if outcome.success:
                    summary["updated"] += 1
                else:
                    summary["failed"] += 1
                    logger.warning(
                        f"Automatic update of response {response.id} failed: "
                        f"{outcome.message}"
                    )
                break

        logger.info(
            f"Automatic status update checked {summary['checked']} responses, "
            f"updated {summary['updated']}"
        )
        return summary

    async def get_recommended_status(self, response_id: int) -> Dict[str, Any]:
        """
        Ask the status agent for the next status of a candidate.

        Raises:
            NotFoundError: the response does not exist
        """
        async with self.session_factory() as session:
            result = await session.execute(
                select(Response)
                .options(
                    selectinload(Response.profile),
                    selectinload(Response.assessments),
                )
                .where(Response.id == response_id)
            )
            response = result.scalar_one_or_none()
            if response is None:
                raise NotFoundError("Candidate response", response_id)

            profile = response.profile
            context = {
                "current_status": response.candidate_status.value,
                "duration_seconds": response.duration,
                "tab_switches": response.tab_switch_count,
                "overall_score": calculate_overall_score(response.assessments),
                "assessments": [
                    {
                        "score": a.score,
                        "max_score": a.max_score,
                        "passed": a.passed,
                    }
                    for a in sorted(response.assessments, key=lambda a: a.id)
                ],
                "analytics": response.analytics or {},
                "experience_years": profile.experience_years if profile else None,
                "skills": (profile.skills or []) if profile else [],
            }

        agent = registry.get("status_recommendation")
        return await agent.process(context)
