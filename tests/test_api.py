# =============================================================================
# Integration Tests — HTTP Endpoints
# =============================================================================
#
# Each test builds its own app through create_app() with a fake provider and
# zero pacing, then drives it with FastAPI's TestClient. The lifespan (and
# with it the serialized worker) runs inside the `with TestClient(...)` block.
#
# CV parsing is patched at the route module so no PDF is ever converted.
# =============================================================================

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from interview_prep.config import Settings
from interview_prep.main import create_app
from interview_prep.services.llm import Fatal, RateLimited, Success

CV_TEXT = "Senior engineer. Java, Spring Boot, Docker and a bit of React."
PDF = ("cv.pdf", b"%PDF-1.4 fake", "application/pdf")


class FakeProvider:
    """Answers every prompt with a fixed outcome and records the prompts."""

    def __init__(self, outcome=None, block: bool = False):
        self.outcome = outcome or Success("1. What is a JVM?")
        self.block = block
        self.prompts: list[str] = []
        self.closed = False

    async def generate(self, prompt, placeholder="No questions generated."):
        self.prompts.append(prompt)
        if self.block:
            await asyncio.Event().wait()
        return self.outcome

    async def aclose(self):
        self.closed = True


def _settings(**overrides) -> Settings:
    values = {
        "worker_pacing_delay_ms": 0,
        "result_timeout_seconds": 5.0,
        "analysis_gate_capacity": 2,
        "generation_gate_capacity": 2,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def app(provider):
    return create_app(config=_settings(), provider=provider)


@pytest.fixture
def patched_cv():
    with patch(
        "interview_prep.api.questions.extract_cv_text",
        return_value=CV_TEXT,
    ) as parse:
        yield parse


# ---------------------------------------------------------------------------
# Test: /health
# ---------------------------------------------------------------------------


class TestHealth:
    def test_reports_worker_and_gates(self, app):
        with TestClient(app) as client:
            response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["worker_running"] is True
        assert data["queue_depth"] == 0
        assert data["gates"] == {
            "analysis": {"capacity": 2, "in_use": 0},
            "generation": {"capacity": 2, "in_use": 0},
        }

    def test_injected_provider_not_closed(self, app, provider):
        with TestClient(app):
            pass
        assert provider.closed is False


# ---------------------------------------------------------------------------
# Test: /analyze-code
# ---------------------------------------------------------------------------


class TestAnalyzeCode:
    def test_returns_review_text(self, app, provider):
        provider.outcome = Success("O(n) time, O(1) space.")

        with TestClient(app) as client:
            response = client.post(
                "/analyze-code",
                content="for i in range(n): print(i)",
                headers={"Content-Type": "text/plain"},
            )

        assert response.status_code == 200
        assert response.text == "O(n) time, O(1) space."
        assert "for i in range(n): print(i)" in provider.prompts[0]
        assert app.state.gates["analysis"].in_use == 0

    def test_gate_full_returns_429(self, app, provider):
        gate = app.state.gates["analysis"]
        permits = [gate.try_enter() for _ in range(gate.capacity)]

        try:
            with TestClient(app) as client:
                response = client.post("/analyze-code", content="x = 1")
        finally:
            for permit in permits:
                gate.exit(permit)

        assert response.status_code == 429
        assert response.json()["detail"] == (
            "Server limit reached. Please try again later."
        )
        assert provider.prompts == []

    def test_generation_gate_does_not_block_analysis(self, app):
        gate = app.state.gates["generation"]
        permits = [gate.try_enter() for _ in range(gate.capacity)]

        try:
            with TestClient(app) as client:
                response = client.post("/analyze-code", content="x = 1")
        finally:
            for permit in permits:
                gate.exit(permit)

        assert response.status_code == 200

    def test_timeout_returns_408_and_releases_permit(self):
        app = create_app(
            config=_settings(result_timeout_seconds=0.2),
            provider=FakeProvider(block=True),
        )

        with TestClient(app) as client:
            response = client.post("/analyze-code", content="while True: pass")

        assert response.status_code == 408
        assert response.json()["detail"] == "Request timed out."
        assert app.state.gates["analysis"].in_use == 0

    def test_exhausted_retries_is_200_with_error_text(self):
        app = create_app(
            config=_settings(max_retry_attempts=1),
            provider=FakeProvider(RateLimited("429 Too Many Requests")),
        )

        with TestClient(app) as client:
            response = client.post("/analyze-code", content="x = 1")

        assert response.status_code == 200
        assert response.text == (
            "Error: Failed to analyze code after retries due to rate limits."
        )


# ---------------------------------------------------------------------------
# Test: /generate and /upload
# ---------------------------------------------------------------------------


class TestGenerate:
    def test_returns_questions(self, app, provider, patched_cv):
        with TestClient(app) as client:
            response = client.post(
                "/generate",
                files={"file": PDF},
                data={
                    "experienceLevel": "Senior",
                    "questionType": "programming",
                    "selectedSkills": ["Java", "Docker"],
                    "jobDescription": "Build payment services.",
                },
            )

        assert response.status_code == 200
        assert response.text == "1. What is a JVM?"
        assert response.headers["content-type"].startswith("text/plain")

        prompt = provider.prompts[0]
        assert "for a Senior candidate" in prompt
        assert "Focus ONLY on the following technical skills: Java, Docker." in prompt
        assert "Generate ONLY practical coding/programming questions." in prompt
        assert "Build payment services." in prompt
        assert CV_TEXT in prompt

        patched_cv.assert_called_once()
        assert patched_cv.call_args.args[1] == "cv.pdf"
        assert app.state.gates["generation"].in_use == 0

    def test_defaults_to_mixed_without_skills(self, app, provider, patched_cv):
        with TestClient(app) as client:
            response = client.post(
                "/generate",
                files={"file": PDF},
                data={"experienceLevel": "Junior"},
            )

        assert response.status_code == 200
        prompt = provider.prompts[0]
        assert "Focus on the skills mentioned in the CV." in prompt
        assert "Generate a mix" in prompt
        assert "job description" not in prompt

    def test_missing_experience_level_is_422(self, app, patched_cv):
        with TestClient(app) as client:
            response = client.post("/generate", files={"file": PDF})
        assert response.status_code == 422

    def test_gate_full_returns_429_without_parsing(self, app, patched_cv):
        gate = app.state.gates["generation"]
        permits = [gate.try_enter() for _ in range(gate.capacity)]

        try:
            with TestClient(app) as client:
                response = client.post(
                    "/generate",
                    files={"file": PDF},
                    data={"experienceLevel": "Mid"},
                )
        finally:
            for permit in permits:
                gate.exit(permit)

        assert response.status_code == 429
        assert response.json()["detail"] == (
            "Server limit reached (2 active requests). "
            "Please try again in a minute."
        )
        patched_cv.assert_not_called()

    def test_timeout_returns_408(self, patched_cv):
        app = create_app(
            config=_settings(result_timeout_seconds=0.2),
            provider=FakeProvider(block=True),
        )

        with TestClient(app) as client:
            response = client.post(
                "/generate",
                files={"file": PDF},
                data={"experienceLevel": "Mid"},
            )

        assert response.status_code == 408
        assert response.json()["detail"] == (
            "Request timed out. The server is under heavy load."
        )
        assert app.state.gates["generation"].in_use == 0

    def test_upstream_failure_is_200_with_error_text(self, patched_cv):
        app = create_app(
            config=_settings(),
            provider=FakeProvider(Fatal("401 Unauthorized: bad key")),
        )

        with TestClient(app) as client:
            response = client.post(
                "/generate",
                files={"file": PDF},
                data={"experienceLevel": "Mid"},
            )

        assert response.status_code == 200
        assert response.text == (
            "Error generating questions: 401 Unauthorized: bad key"
        )

    def test_empty_file_is_400(self, app, provider):
        with TestClient(app) as client:
            response = client.post(
                "/generate",
                files={"file": ("cv.pdf", b"", "application/pdf")},
                data={"experienceLevel": "Mid"},
            )

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Error processing file")
        assert provider.prompts == []
        assert app.state.gates["generation"].in_use == 0

    def test_unparseable_file_is_500(self, app):
        with patch(
            "interview_prep.api.questions.extract_cv_text",
            side_effect=RuntimeError("Could not parse 'cv.pdf': broken"),
        ):
            with TestClient(app) as client:
                response = client.post(
                    "/generate",
                    files={"file": PDF},
                    data={"experienceLevel": "Mid"},
                )

        assert response.status_code == 500
        assert "broken" in response.json()["detail"]


class TestUpload:
    def test_legacy_upload_generates_mixed_questions(
        self, app, provider, patched_cv,
    ):
        with TestClient(app) as client:
            response = client.post(
                "/upload",
                files={"file": PDF},
                data={"experienceLevel": "Senior"},
            )

        assert response.status_code == 200
        assert response.text == "1. What is a JVM?"
        assert "Generate a mix" in provider.prompts[0]

    def test_shares_generation_gate(self, app, patched_cv):
        gate = app.state.gates["generation"]
        permits = [gate.try_enter() for _ in range(gate.capacity)]

        try:
            with TestClient(app) as client:
                response = client.post(
                    "/upload",
                    files={"file": PDF},
                    data={"experienceLevel": "Senior"},
                )
        finally:
            for permit in permits:
                gate.exit(permit)

        assert response.status_code == 429


# ---------------------------------------------------------------------------
# Test: /analyze
# ---------------------------------------------------------------------------


class TestAnalyze:
    def test_returns_skill_list(self, app, provider, patched_cv):
        with TestClient(app) as client:
            response = client.post("/analyze", files={"file": PDF})

        assert response.status_code == 200
        assert response.json() == ["Java", "Spring Boot", "Docker", "React"]
        assert provider.prompts == []

    def test_not_gated(self, app, patched_cv):
        gate = app.state.gates["generation"]
        permits = [gate.try_enter() for _ in range(gate.capacity)]

        try:
            with TestClient(app) as client:
                response = client.post("/analyze", files={"file": PDF})
        finally:
            for permit in permits:
                gate.exit(permit)

        assert response.status_code == 200

    def test_empty_file_is_400(self, app):
        with TestClient(app) as client:
            response = client.post(
                "/analyze", files={"file": ("cv.pdf", b"", "application/pdf")},
            )
        assert response.status_code == 400
