from database.models.responses import (
    CandidateStatus,
    Interview,
    Response,
    CandidateProfile,
)
from database.models.assessments import (
    AssessmentType,
    DifficultyLevel,
    SkillAssessment,
    CandidateAssessment,
)
from database.models.workflow import (
    StatusChangeRequestStatus,
    DomainEventStatus,
    CandidateStatusHistory,
    StatusChangeRequest,
    StatusChangeApproval,
    DomainEvent,
)
from database.models.integrations import (
    ATSProvider,
    SyncType,
    SyncLogStatus,
    ATSIntegration,
    ATSSyncLog,
)

__all__ = [
    "CandidateStatus",
    "Interview",
    "Response",
    "CandidateProfile",
    "AssessmentType",
    "DifficultyLevel",
    "SkillAssessment",
    "CandidateAssessment",
    "StatusChangeRequestStatus",
    "DomainEventStatus",
    "CandidateStatusHistory",
    "StatusChangeRequest",
    "StatusChangeApproval",
    "DomainEvent",
    "ATSProvider",
    "SyncType",
    "SyncLogStatus",
    "ATSIntegration",
    "ATSSyncLog",
]
