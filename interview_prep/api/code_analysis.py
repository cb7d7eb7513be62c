# =============================================================================
# Code Analysis API — Snippet Review
# =============================================================================
#
# POST /analyze-code takes the snippet as the raw request body
# (Content-Type: text/plain) and returns the review as plain text.
#
# Guarded by its own admission gate (5 permits by default), independent of
# the generation gate, but served by the same serialized worker.
# =============================================================================

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse

from interview_prep.api.deps import get_analysis_gate, get_app_settings, get_pipeline
from interview_prep.config import Settings
from interview_prep.services.admission import AdmissionGate, AdmissionRefused
from interview_prep.workers.pipeline import GenerationPipeline

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Code Analysis"])


@router.post(
    "/analyze-code",
    response_class=PlainTextResponse,
    summary="Review a code snippet",
    responses={
        408: {"description": "Result not ready within the wait limit"},
        429: {"description": "Too many concurrent analysis requests"},
    },
)
async def analyze_code(
    request: Request,
    pipeline: GenerationPipeline = Depends(get_pipeline),
    gate: AdmissionGate = Depends(get_analysis_gate),
    config: Settings = Depends(get_app_settings),
) -> PlainTextResponse:
    """
    Queue a code-analysis task and wait for the review.

    Error handling:
    - Gate saturated → 429
    - No result within result_timeout_seconds → 408
    - Worker fault → 500
    Upstream errors and retry exhaustion come back as 200 with an
    error text, like any other result.
    """
    try:
        with gate.admit():
            code = (await request.body()).decode("utf-8", errors="replace")
            logger.info("Analyze-code request: %d chars", len(code))

            handle = pipeline.queue_code_analysis(code)
            try:
                analysis = await handle.wait(config.result_timeout_seconds)
            except TimeoutError as e:
                raise HTTPException(
                    status_code=408,
                    detail="Request timed out.",
                ) from e
            except Exception as e:
                raise HTTPException(
                    status_code=500,
                    detail=f"Error analyzing code: {e}",
                ) from e
    except AdmissionRefused as e:
        raise HTTPException(
            status_code=429,
            detail="Server limit reached. Please try again later.",
        ) from e

    return PlainTextResponse(analysis)
