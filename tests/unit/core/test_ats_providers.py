"""Tests for ATS providers over a mocked HTTP transport."""

import base64
import json

import httpx
import pytest

from core.integrations.ats import (
    CandidatePayload,
    UnsupportedProviderError,
    build_provider,
    get_provider_class,
)
from core.integrations.ats.greenhouse import GreenhouseProvider
from core.integrations.ats.lever import LeverProvider
from core.integrations.ats.workday import ENTERPRISE_SETUP_REQUIRED, WorkdayProvider
from database.models.integrations import ATSProvider


class Recorder:
    """MockTransport handler that records requests and replies with a fixed response."""

    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self.body = body if body is not None else {}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_json(self):
        return json.loads(self.requests[-1].content)


CANDIDATE = CandidatePayload(
    name="Ada King Lovelace",
    email="ada@example.com",
    phone="+44 20 7946 0958",
    location="London",
    skills=["python", "math"],
    education=[{"institution": "Home", "degree": "None", "field": "Mathematics"}],
    work_experience=[{"company": "Analytical Engines", "position": "Programmer"}],
    linkedin_url="https://linkedin.com/in/ada",
)


class TestRegistry:

    @pytest.mark.parametrize("provider,cls", [
        (ATSProvider.GREENHOUSE, GreenhouseProvider),
        ("lever", LeverProvider),
        ("workday", WorkdayProvider),
    ])
    def test_lookup(self, provider, cls):
        assert get_provider_class(provider) is cls

    @pytest.mark.parametrize("provider", [ATSProvider.CUSTOM, "bamboo"])
    def test_unsupported(self, provider):
        with pytest.raises(UnsupportedProviderError, match="Unsupported ATS provider"):
            get_provider_class(provider)

    def test_custom_message(self):
        with pytest.raises(UnsupportedProviderError) as exc:
            build_provider(ATSProvider.CUSTOM, api_key="k")
        assert str(exc.value) == "Unsupported ATS provider: custom"


class TestGreenhouse:

    def _provider(self, recorder, **config):
        return GreenhouseProvider(
            api_key="gh_key",
            configuration={"default_job_id": 55, "default_user_id": 9, **config},
            transport=httpx.MockTransport(recorder),
        )

    async def test_create_candidate(self):
        recorder = Recorder(body={"id": 123})
        result = await self._provider(recorder).create_candidate(CANDIDATE)

        assert result.success
        assert result.provider_candidate_id == "123"
        request = recorder.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/v1/candidates"
        expected_auth = base64.b64encode(b"gh_key:").decode()
        assert request.headers["authorization"] == f"Basic {expected_auth}"

        body = recorder.last_json
        assert body["first_name"] == "Ada"
        assert body["last_name"] == "King Lovelace"
        assert body["email_addresses"] == [{"value": "ada@example.com", "type": "personal"}]
        assert body["company"] == "Analytical Engines"
        assert body["educations"][0]["discipline"] == "Mathematics"
        assert body["applications"] == [{"job_id": 55, "status": "active"}]

    async def test_unnamed_candidate(self):
        recorder = Recorder(body={"id": 1})
        await self._provider(recorder).create_candidate(CandidatePayload())
        assert recorder.last_json["first_name"] == "Unknown"
        assert recorder.last_json["last_name"] == "Candidate"

    async def test_status_update_mapped(self):
        recorder = Recorder()
        result = await self._provider(recorder).update_candidate_status("123", "selected")
        assert result.success
        assert recorder.requests[0].url.path == "/v1/candidates/123/applications"
        assert recorder.last_json == {"job_id": 55, "status": "hired"}

    async def test_on_behalf_of_header(self):
        recorder = Recorder()
        await self._provider(recorder, on_behalf_of=77).update_candidate_status("1", "pending")
        assert recorder.requests[0].headers["on-behalf-of"] == "77"

    async def test_assessment_note(self):
        recorder = Recorder()
        await self._provider(recorder).sync_assessment_results("123", {"overall_score": 88})
        assert recorder.requests[0].url.path == "/v1/candidates/123/activity_feed/notes"
        note = recorder.last_json
        assert note["visibility"] == "admin_only"
        assert '"overall_score": 88' in note["body"]

    async def test_http_error_is_a_value(self):
        recorder = Recorder(status_code=422, body={"message": "Invalid job"})
        result = await self._provider(recorder).create_candidate(CANDIDATE)
        assert not result.success
        assert result.error == "Invalid job"
        assert result.provider_candidate_id is None

    async def test_network_error_is_a_value(self):
        def fail(request):
            raise httpx.ConnectError("connection refused")

        provider = GreenhouseProvider(api_key="k", transport=httpx.MockTransport(fail))
        result = await provider.create_candidate(CANDIDATE)
        assert not result.success
        assert "connection refused" in result.error

    async def test_validate_connection(self):
        assert await self._provider(Recorder()).validate_connection() is True
        assert await self._provider(Recorder(status_code=401)).validate_connection() is False


class TestLever:

    def _provider(self, recorder):
        return LeverProvider(api_key="lv_key", transport=httpx.MockTransport(recorder))

    async def test_create_candidate(self):
        recorder = Recorder(body={"id": "abc"})
        result = await self._provider(recorder).create_candidate(CANDIDATE)

        assert result.provider_candidate_id == "abc"
        request = recorder.requests[0]
        assert request.headers["authorization"] == "Bearer lv_key"
        body = recorder.last_json
        assert body["name"] == "Ada King Lovelace"
        assert body["emails"] == ["ada@example.com"]
        assert body["links"] == ["https://linkedin.com/in/ada"]
        assert body["experience"][0]["title"] == "Programmer"

    @pytest.mark.parametrize("status,stage", [
        ("pending", "new"),
        ("in_review", "screening"),
        ("selected", "offer"),
        ("rejected", "rejected"),
        ("unknown", "new"),
    ])
    async def test_stage_mapping(self, status, stage):
        recorder = Recorder()
        await self._provider(recorder).update_candidate_status("abc", status)
        request = recorder.requests[0]
        assert request.method == "PUT"
        assert request.url.path == "/v1/candidates/abc/stage"
        assert recorder.last_json == {"stage": stage}

    async def test_custom_base_url(self):
        recorder = Recorder()
        provider = LeverProvider(
            api_key="k",
            api_url="https://sandbox.lever.example/v1/",
            transport=httpx.MockTransport(recorder),
        )
        await provider.sync_assessment_results("abc", {"passed": True})
        assert str(recorder.requests[0].url) == "https://sandbox.lever.example/v1/candidates/abc/notes"


class TestWorkday:

    async def test_every_operation_unsupported(self):
        def never(request):
            raise AssertionError("Workday must not call the network")

        provider = WorkdayProvider(api_key="k", transport=httpx.MockTransport(never))
        results = [
            await provider.create_candidate(CANDIDATE),
            await provider.update_candidate_status("1", "selected"),
            await provider.sync_assessment_results("1", {}),
        ]
        assert all(not r.success for r in results)
        assert {r.error for r in results} == {ENTERPRISE_SETUP_REQUIRED}
        assert await provider.validate_connection() is False
