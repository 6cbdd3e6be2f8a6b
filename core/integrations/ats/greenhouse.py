"""Greenhouse Harvest API provider."""

import json
from typing import Any, Dict, Optional

import httpx

from core.integrations.ats.base import ATSResponse, BaseATSProvider, CandidatePayload


class GreenhouseProvider(BaseATSProvider):
    """Harvest API with HTTP Basic auth (API key as username, empty password)."""

    base_url = "https://harvest.greenhouse.io/v1"
    status_map = {
        "pending": "active",
        "in_review": "review",
        "selected": "hired",
        "rejected": "rejected",
        "on_hold": "on_hold",
        "withdrawn": "withdrawn",
    }
    default_status = "active"

    def _auth(self) -> Optional[httpx.Auth]:
        return httpx.BasicAuth(self.api_key or "", "")

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        # Harvest attributes writes to a Greenhouse user
        if self.config.get("on_behalf_of"):
            headers["On-Behalf-Of"] = str(self.config["on_behalf_of"])
        return headers

    def map_candidate(self, candidate: CandidatePayload) -> Dict[str, Any]:
        work = candidate.work_experience[0] if candidate.work_experience else {}
        return {
            "first_name": candidate.first_name,
            "last_name": candidate.last_name,
            "company": work.get("company"),
            "title": work.get("position"),
            "phone_numbers": (
                [{"value": candidate.phone, "type": "mobile"}] if candidate.phone else []
            ),
            "email_addresses": (
                [{"value": candidate.email, "type": "personal"}] if candidate.email else []
            ),
            "addresses": (
                [{"value": candidate.location, "type": "home"}]
                if candidate.location
                else []
            ),
            "website_addresses": [
                {"value": url, "type": "portfolio"}
                for url in (candidate.portfolio_url, candidate.github_url)
                if url
            ],
            "social_media_addresses": (
                [{"value": candidate.linkedin_url}] if candidate.linkedin_url else []
            ),
            "educations": [
                {
                    "school_name": edu.get("institution"),
                    "degree": edu.get("degree"),
                    "discipline": edu.get("field"),
                    "start_date": edu.get("start_date"),
                    "end_date": edu.get("end_date"),
                }
                for edu in candidate.education
            ],
            "tags": candidate.skills,
            "applications": [
                {"job_id": self.config.get("default_job_id"), "status": "active"}
            ],
        }

    async def create_candidate(self, candidate: CandidatePayload) -> ATSResponse:
        return await self._send(
            "POST", "/candidates", self.map_candidate(candidate), id_field="id"
        )

    async def update_candidate_status(
        self, candidate_id: str, status: str
    ) -> ATSResponse:
        payload = {
            "job_id": self.config.get("default_job_id"),
            "status": self.map_status(status),
        }
        return await self._send(
            "POST", f"/candidates/{candidate_id}/applications", payload
        )

    async def sync_assessment_results(
        self, candidate_id: str, assessment_data: Dict[str, Any]
    ) -> ATSResponse:
        note = {
            "user_id": self.config.get("default_user_id"),
            "body": "AI Assessment Results:\n"
            + json.dumps(assessment_data, indent=2, default=str),
            "visibility": "admin_only",
        }
        return await self._send("POST", f"/candidates/{candidate_id}/activity_feed/notes", note)
