# =============================================================================
# API Dependencies — Pipeline, Gates and Settings From Application State
# =============================================================================
#
# main.py builds one GenerationPipeline and two AdmissionGates per
# application and stores them on `app.state`. Route handlers receive them
# through these dependencies, so tests can run several independent apps
# side by side and override any of them via dependency_overrides.
# =============================================================================

from __future__ import annotations

from fastapi import Request

from interview_prep.config import Settings
from interview_prep.services.admission import AdmissionGate
from interview_prep.workers.pipeline import GenerationPipeline

ANALYSIS_GATE = "analysis"
GENERATION_GATE = "generation"


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_pipeline(request: Request) -> GenerationPipeline:
    return request.app.state.pipeline


def get_gates(request: Request) -> dict[str, AdmissionGate]:
    return request.app.state.gates


def get_generation_gate(request: Request) -> AdmissionGate:
    """Gate in front of /generate and /upload."""
    return request.app.state.gates[GENERATION_GATE]


def get_analysis_gate(request: Request) -> AdmissionGate:
    """Gate in front of /analyze-code."""
    return request.app.state.gates[ANALYSIS_GATE]
