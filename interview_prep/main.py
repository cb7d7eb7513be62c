# =============================================================================
# FastAPI Application — Wiring and Lifespan
# =============================================================================
#
# create_app() builds one independent service instance:
#   - an LLM provider (Gemini by default, see services/llm.py)
#   - a GenerationPipeline (queue + serialized worker) around it
#   - two AdmissionGates (analysis: 5 permits, generation: 10 permits)
#
# The worker starts when the app starts and is cancelled on shutdown.
# Anything still queued at shutdown is dropped.
#
# RUN:
#   uvicorn interview_prep.main:app --port 8080
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from interview_prep.api import code_analysis, questions
from interview_prep.api.deps import (
    ANALYSIS_GATE,
    GENERATION_GATE,
    get_app_settings,
    get_gates,
    get_pipeline,
)
from interview_prep.config import Settings, get_settings
from interview_prep.models.responses import GateStatus, HealthResponse
from interview_prep.services.admission import AdmissionGate
from interview_prep.services.llm import LLMProvider, get_llm_provider
from interview_prep.workers.pipeline import GenerationPipeline

logger = logging.getLogger(__name__)


def configure_logging(config: Settings) -> None:
    """Root logging setup; a no-op if the server already configured it."""
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(
    config: Settings | None = None,
    provider: LLMProvider | None = None,
    pipeline: GenerationPipeline | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Settings to use (default: cached environment settings).
        provider: LLM provider override. Built from `config` at startup
            when omitted.
        pipeline: Fully built pipeline override (tests inject one with a
            virtual sleep). Takes precedence over `provider`.

    Raises (at startup):
        ValueError: If no provider is injected and the configured one
            has no API key.
    """
    config = config or get_settings()
    configure_logging(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owns_provider = pipeline is None and provider is None
        active = pipeline
        if active is None:
            active = GenerationPipeline.from_settings(
                provider or get_llm_provider(config), config,
            )

        app.state.pipeline = active
        active.start()
        logger.info(
            "%s %s started (gates: analysis=%d, generation=%d)",
            config.app_name,
            config.app_version,
            config.analysis_gate_capacity,
            config.generation_gate_capacity,
        )
        try:
            yield
        finally:
            await active.stop()
            if owns_provider:
                await active.provider.aclose()

    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        debug=config.debug,
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.gates = {
        ANALYSIS_GATE: AdmissionGate(ANALYSIS_GATE, config.analysis_gate_capacity),
        GENERATION_GATE: AdmissionGate(
            GENERATION_GATE, config.generation_gate_capacity,
        ),
    }

    app.include_router(questions.router)
    app.include_router(code_analysis.router)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health(
        settings: Settings = Depends(get_app_settings),
        active: GenerationPipeline = Depends(get_pipeline),
        gates: dict[str, AdmissionGate] = Depends(get_gates),
    ) -> HealthResponse:
        return HealthResponse(
            status="ok" if active.running else "degraded",
            version=settings.app_version,
            service=settings.app_name,
            worker_running=active.running,
            queue_depth=active.queue_depth,
            gates={
                name: GateStatus(capacity=gate.capacity, in_use=gate.in_use)
                for name, gate in gates.items()
            },
        )

    return app


app = create_app()
