# =============================================================================
# Unit Tests — Settings
# =============================================================================

from interview_prep.config import Settings


class TestSettings:
    def test_production_defaults(self, monkeypatch):
        for name in (
            "WORKER_PACING_DELAY_MS",
            "MAX_RETRY_ATTEMPTS",
            "RESULT_TIMEOUT_SECONDS",
            "ANALYSIS_GATE_CAPACITY",
            "GENERATION_GATE_CAPACITY",
            "CV_CHAR_LIMIT",
            "JOB_DESCRIPTION_CHAR_LIMIT",
            "LLM_PROVIDER",
        ):
            monkeypatch.delenv(name, raising=False)

        config = Settings(_env_file=None)

        assert config.worker_pacing_delay_ms == 10_000
        assert config.max_retry_attempts == 5
        assert config.result_timeout_seconds == 60.0
        assert config.analysis_gate_capacity == 5
        assert config.generation_gate_capacity == 10
        assert config.cv_char_limit == 4000
        assert config.job_description_char_limit == 3000
        assert config.llm_provider == "gemini"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("WORKER_PACING_DELAY_MS", "250")
        monkeypatch.setenv("GENERATION_GATE_CAPACITY", "3")
        monkeypatch.setenv("LLM_PROVIDER", "openai_compatible")
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")

        config = Settings(_env_file=None)

        assert config.worker_pacing_delay_ms == 250
        assert config.generation_gate_capacity == 3
        assert config.llm_provider == "openai_compatible"
        assert config.gemini_api_key == "from-env"
