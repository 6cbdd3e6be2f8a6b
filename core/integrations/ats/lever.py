"""Lever API provider."""

import json
from typing import Any, Dict

from core.integrations.ats.base import ATSResponse, BaseATSProvider, CandidatePayload


class LeverProvider(BaseATSProvider):
    """Lever REST API with a bearer API key."""

    base_url = "https://api.lever.co/v1"
    status_map = {
        "pending": "new",
        "in_review": "screening",
        "selected": "offer",
        "rejected": "rejected",
        "on_hold": "on_hold",
        "withdrawn": "withdrawn",
    }
    default_status = "new"

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        headers["Authorization"] = f"Bearer {self.api_key or ''}"
        return headers

    def map_candidate(self, candidate: CandidatePayload) -> Dict[str, Any]:
        urls = [
            {"url": url, "type": kind}
            for url, kind in (
                (candidate.linkedin_url, "linkedin"),
                (candidate.github_url, "github"),
                (candidate.portfolio_url, "portfolio"),
            )
            if url
        ]
        return {
            "name": candidate.name or "Unknown Candidate",
            "emails": [candidate.email] if candidate.email else [],
            "phones": [{"value": candidate.phone}] if candidate.phone else [],
            "location": candidate.location,
            "tags": candidate.skills,
            "links": [u["url"] for u in urls],
            "urls": urls,
            "resume": candidate.resume_url,
            "education": [
                {
                    "school": edu.get("institution"),
                    "degree": edu.get("degree"),
                    "discipline": edu.get("field"),
                    "start": edu.get("start_date"),
                    "end": edu.get("end_date"),
                }
                for edu in candidate.education
            ],
            "experience": [
                {
                    "company": exp.get("company"),
                    "title": exp.get("position"),
                    "start": exp.get("start_date"),
                    "end": exp.get("end_date"),
                    "description": exp.get("description"),
                }
                for exp in candidate.work_experience
            ],
        }

    async def create_candidate(self, candidate: CandidatePayload) -> ATSResponse:
        return await self._send(
            "POST", "/candidates", self.map_candidate(candidate), id_field="id"
        )

    async def update_candidate_status(
        self, candidate_id: str, status: str
    ) -> ATSResponse:
        return await self._send(
            "PUT",
            f"/candidates/{candidate_id}/stage",
            {"stage": self.map_status(status)},
        )

    async def sync_assessment_results(
        self, candidate_id: str, assessment_data: Dict[str, Any]
    ) -> ATSResponse:
        note = {
            "value": "AI Assessment Results:\n"
            + json.dumps(assessment_data, indent=2, default=str),
        }
        return await self._send("POST", f"/candidates/{candidate_id}/notes", note)
