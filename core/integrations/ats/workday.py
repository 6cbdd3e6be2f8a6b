"""Workday placeholder provider.

Workday needs a tenant specific enterprise setup, so every operation reports
that it is unsupported without touching the network.
"""

from typing import Any, Dict

from core.integrations.ats.base import ATSResponse, BaseATSProvider, CandidatePayload

ENTERPRISE_SETUP_REQUIRED = "Workday integration requires enterprise setup"


class WorkdayProvider(BaseATSProvider):

    async def create_candidate(self, candidate: CandidatePayload) -> ATSResponse:
        return ATSResponse(success=False, error=ENTERPRISE_SETUP_REQUIRED)

    async def update_candidate_status(
        self, candidate_id: str, status: str
    ) -> ATSResponse:
        return ATSResponse(success=False, error=ENTERPRISE_SETUP_REQUIRED)

    async def sync_assessment_results(
        self, candidate_id: str, assessment_data: Dict[str, Any]
    ) -> ATSResponse:
        return ATSResponse(success=False, error=ENTERPRISE_SETUP_REQUIRED)

    async def validate_connection(self) -> bool:
        return False
