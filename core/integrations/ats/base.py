"""Common contract for applicant tracking system providers."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


@dataclass
class ATSResponse:
    """Outcome of one provider call. Failures are values, never raised."""

    success: bool
    data: Any = None
    error: Optional[str] = None
    provider_candidate_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class CandidatePayload:
    """Provider-neutral candidate shape handed to ``create_candidate``."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    skills: List[str] = field(default_factory=list)
    education: List[Dict[str, Any]] = field(default_factory=list)
    work_experience: List[Dict[str, Any]] = field(default_factory=list)
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    resume_url: Optional[str] = None

    @property
    def first_name(self) -> str:
        parts = (self.name or "").split()
        return parts[0] if parts else "Unknown"

    @property
    def last_name(self) -> str:
        parts = (self.name or "").split()
        return " ".join(parts[1:]) if len(parts) > 1 else "Candidate"


def _error_message(exc: Exception) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return f"HTTP {exc.response.status_code}: {exc.response.text[:200]}"
    return str(exc) or exc.__class__.__name__


class BaseATSProvider(ABC):
    """
    One ATS vendor. Subclasses own authentication and field mapping.

    Args:
        api_key: Decrypted API key
        api_secret: Decrypted API secret, if the vendor uses one
        api_url: Override of the vendor base URL
        configuration: Vendor specific settings (default job id, user ids...)
        timeout: Request timeout in seconds
        transport: Optional httpx transport, used by tests
    """

    base_url: str = ""
    status_map: Dict[str, str] = {}
    default_status: str = ""

    def __init__(
        self,
        api_key: Optional[str],
        api_secret: Optional[str] = None,
        api_url: Optional[str] = None,
        configuration: Optional[Dict[str, Any]] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_secret = api_secret
        self.api_url = (api_url or self.base_url).rstrip("/")
        self.config = configuration or {}
        self.timeout = timeout
        self.transport = transport

    def _auth(self) -> Optional[httpx.Auth]:
        return None

    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.api_url,
            headers=self._headers(),
            auth=self._auth(),
            timeout=self.timeout,
            transport=self.transport,
        )

    async def _request(
        self, method: str, path: str, payload: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        async with self._client() as client:
            response = await client.request(method, path, json=payload)
            response.raise_for_status()
            return response

    async def _send(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        id_field: Optional[str] = None,
    ) -> ATSResponse:
        """Perform a call and fold every failure into an ``ATSResponse``."""
        try:
            response = await self._request(method, path, payload)
            data = response.json() if response.content else None
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"{self.__class__.__name__} {method} {path} failed: {e}")
            return ATSResponse(success=False, error=_error_message(e))

        provider_id = None
        if id_field and isinstance(data, dict) and data.get(id_field) is not None:
            provider_id = str(data[id_field])
        return ATSResponse(success=True, data=data, provider_candidate_id=provider_id)

    def map_status(self, status: str) -> str:
        """Translate an internal candidate status into the vendor's vocabulary."""
        return self.status_map.get(status, self.default_status)

    @abstractmethod
    async def create_candidate(self, candidate: CandidatePayload) -> ATSResponse:
        ...

    @abstractmethod
    async def update_candidate_status(
        self, candidate_id: str, status: str
    ) -> ATSResponse:
        ...

    @abstractmethod
    async def sync_assessment_results(
        self, candidate_id: str, assessment_data: Dict[str, Any]
    ) -> ATSResponse:
        ...

    async def validate_connection(self) -> bool:
        try:
            await self._request("GET", "/users")
        except httpx.HTTPError as e:
            logger.info(f"{self.__class__.__name__} connection check failed: {e}")
            return False
        return True
