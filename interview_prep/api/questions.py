# =============================================================================
# Questions API — CV Analysis and Interview Question Generation
# =============================================================================
#
# POST /analyze   → extract CV text, return detected skills (no LLM call)
# POST /generate  → extract CV text, queue a question-generation task,
#                   wait for the result
# POST /upload    → legacy alias of /generate (Mixed questions, no skills)
#
# FLOW for /generate:
#   1. Take a permit from the generation gate, or answer 429 at once
#   2. Extract CV text (Docling, in a worker thread)
#   3. Submit the task to the serialized pipeline
#   4. Wait on the result handle, bounded by result_timeout_seconds
#   5. Release the permit, whatever happened
#
# A timed-out request gets 408 while its task stays queued; the worker
# will still run it later.
# =============================================================================

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import PlainTextResponse

from interview_prep.api.deps import (
    get_app_settings,
    get_generation_gate,
    get_pipeline,
)
from interview_prep.config import Settings
from interview_prep.models.requests import QuestionType
from interview_prep.services.admission import AdmissionGate
from interview_prep.services.parser import extract_cv_text
from interview_prep.services.skills import extract_tech_stack
from interview_prep.workers.pipeline import GenerationPipeline

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Interview Questions"])


async def _read_cv(file: UploadFile) -> str:
    """Read an upload and extract its text, mapping failures to HTTP errors."""
    filename = file.filename or "cv.pdf"
    data = await file.read()
    try:
        return await asyncio.to_thread(extract_cv_text, data, filename)
    except ValueError as e:
        raise HTTPException(
            status_code=400,
            detail=f"Error processing file: {e}",
        ) from e
    except RuntimeError as e:
        logger.error("CV parsing failed for '%s': %s", filename, e)
        raise HTTPException(
            status_code=500,
            detail=f"Error processing file: {e}",
        ) from e


# ---------------------------------------------------------------------------
# POST /analyze — Detect skills in a CV
# ---------------------------------------------------------------------------


@router.post(
    "/analyze",
    response_model=list[str],
    summary="Detect known technologies in an uploaded CV",
)
async def analyze_cv(file: UploadFile = File(...)) -> list[str]:
    """
    Extract the CV text and scan it against the skill vocabulary.

    Not gated: it never calls the LLM.

    Error handling:
    - Empty upload → 400
    - Unparseable document → 500
    """
    cv_text = await _read_cv(file)
    skills = extract_tech_stack(cv_text)
    logger.info("Extracted skills from '%s': %s", file.filename, skills)
    return skills


# ---------------------------------------------------------------------------
# POST /generate — Generate interview questions
# ---------------------------------------------------------------------------


async def _generate(
    file: UploadFile,
    experience_level: str,
    question_type: QuestionType,
    selected_skills: list[str] | None,
    job_description: str | None,
    pipeline: GenerationPipeline,
    gate: AdmissionGate,
    config: Settings,
) -> PlainTextResponse:
    permit = gate.try_enter()
    if permit is None:
        raise HTTPException(
            status_code=429,
            detail=(
                f"Server limit reached ({gate.capacity} active requests). "
                "Please try again in a minute."
            ),
        )

    try:
        cv_text = await _read_cv(file)

        handle = pipeline.queue_question_generation(
            cv_text=cv_text,
            experience_level=experience_level,
            question_type=question_type,
            selected_skills=selected_skills,
            job_description=job_description,
        )

        try:
            questions = await handle.wait(config.result_timeout_seconds)
        except TimeoutError as e:
            logger.warning(
                "Question generation timed out after %.0fs (queue depth %d)",
                config.result_timeout_seconds, pipeline.queue_depth,
            )
            raise HTTPException(
                status_code=408,
                detail="Request timed out. The server is under heavy load.",
            ) from e
        except Exception as e:
            raise HTTPException(
                status_code=500,
                detail=f"Error generating questions: {e}",
            ) from e
    finally:
        gate.exit(permit)

    return PlainTextResponse(questions)


@router.post(
    "/generate",
    response_class=PlainTextResponse,
    summary="Generate interview questions from a CV",
    responses={
        408: {"description": "Result not ready within the wait limit"},
        429: {"description": "Too many concurrent generation requests"},
    },
)
async def generate_questions(
    file: UploadFile = File(...),
    experience_level: str = Form(..., alias="experienceLevel"),
    question_type: str = Form("Mixed", alias="questionType"),
    selected_skills: list[str] | None = Form(None, alias="selectedSkills"),
    job_description: str | None = Form(None, alias="jobDescription"),
    pipeline: GenerationPipeline = Depends(get_pipeline),
    gate: AdmissionGate = Depends(get_generation_gate),
    config: Settings = Depends(get_app_settings),
) -> PlainTextResponse:
    """
    Queue a question-generation task and wait for its text.

    questionType is one of Programming / Theoretical / Mixed (case
    insensitive, anything else means Mixed). selectedSkills may repeat.
    """
    logger.info(
        "Generate request: file=%s, level=%s, type=%s, skills=%s, jd=%s",
        file.filename,
        experience_level,
        question_type,
        selected_skills,
        bool(job_description),
    )
    return await _generate(
        file,
        experience_level,
        QuestionType.from_label(question_type),
        selected_skills,
        job_description,
        pipeline,
        gate,
        config,
    )


@router.post(
    "/upload",
    response_class=PlainTextResponse,
    summary="Legacy alias of /generate",
)
async def upload_cv(
    file: UploadFile = File(...),
    experience_level: str = Form(..., alias="experienceLevel"),
    pipeline: GenerationPipeline = Depends(get_pipeline),
    gate: AdmissionGate = Depends(get_generation_gate),
    config: Settings = Depends(get_app_settings),
) -> PlainTextResponse:
    return await _generate(
        file,
        experience_level,
        QuestionType.MIXED,
        None,
        None,
        pipeline,
        gate,
        config,
    )
