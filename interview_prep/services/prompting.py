# =============================================================================
# Prompt Construction & Response Text Extraction
# =============================================================================
#
# Stateless transformations around the upstream call:
#   - build_question_prompt(): task fields → one prompt string
#   - build_code_analysis_prompt(): snippet → one prompt string
#   - extract_text(): Gemini JSON response → first generated text fragment
#
# Free-text inputs are truncated to a character budget so a long CV or job
# description cannot blow the upstream token limit.
# =============================================================================

from __future__ import annotations

from typing import Any

from interview_prep.models.requests import QuestionType
from interview_prep.workers.tasks import CodeAnalysisTask, QuestionGenerationTask

TRUNCATION_MARKER = "... [truncated]"

QUESTION_COUNT = 10

DEFAULT_CV_CHAR_LIMIT = 4000
DEFAULT_JOB_DESCRIPTION_CHAR_LIMIT = 3000

QUESTION_PLACEHOLDER = "No questions generated."
ANALYSIS_PLACEHOLDER = "No analysis generated."
EMPTY_RESPONSE = "Empty response from API"

_TYPE_INSTRUCTIONS = {
    QuestionType.PROGRAMMING: "Generate ONLY practical coding/programming questions. ",
    QuestionType.THEORETICAL: "Generate ONLY theoretical/conceptual questions. ",
    QuestionType.MIXED: "Generate a mix of theoretical and practical questions. ",
}


def truncate(text: str | None, limit: int) -> str:
    """Cut `text` to `limit` characters, appending the truncation marker."""
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


def build_question_prompt(
    task: QuestionGenerationTask,
    cv_char_limit: int = DEFAULT_CV_CHAR_LIMIT,
    job_description_char_limit: int = DEFAULT_JOB_DESCRIPTION_CHAR_LIMIT,
) -> str:
    """
    Build the interview-question prompt for a QuestionGenerationTask.

    Args:
        task: The task to render.
        cv_char_limit: CV budget in characters.
        job_description_char_limit: Job description budget in characters.

    Returns:
        The prompt string sent as the single user message.
    """
    if task.selected_skills:
        skills_prompt = (
            "Focus ONLY on the following technical skills: "
            + ", ".join(task.selected_skills)
            + ". "
        )
    else:
        skills_prompt = "Focus on the skills mentioned in the CV. "

    job_prompt = ""
    if task.job_description and task.job_description.strip():
        job_prompt = (
            "Tailor the questions to the following job description: "
            + truncate(task.job_description, job_description_char_limit)
            + " "
        )

    return (
        f"Generate {QUESTION_COUNT} technical interview questions for a "
        f"{task.experience_level} candidate. "
        + skills_prompt
        + _TYPE_INSTRUCTIONS[task.question_type]
        + job_prompt
        + "Use the candidate's CV context where relevant: "
        + truncate(task.cv_text, cv_char_limit)
    )


def build_code_analysis_prompt(task: CodeAnalysisTask) -> str:
    """Build the code-review prompt for a CodeAnalysisTask."""
    return (
        "Analyze the following code as a senior engineer conducting a "
        "technical interview. Explain what it does, point out bugs and "
        "edge cases, state its time and space complexity, and suggest "
        "concrete improvements. Finish with two follow-up interview "
        "questions about this code.\n\n"
        f"```\n{task.code}\n```"
    )


def extract_text(
    payload: dict[str, Any] | None,
    placeholder: str = QUESTION_PLACEHOLDER,
) -> str:
    """
    Return the first text fragment of the first candidate.

    Expected shape:
        {"candidates": [{"content": {"parts": [{"text": "..."}]}}]}

    Returns `placeholder` when that structure is absent.
    """
    if not payload:
        return EMPTY_RESPONSE

    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return placeholder

    candidate = candidates[0]
    content = candidate.get("content") if isinstance(candidate, dict) else None
    if not isinstance(content, dict):
        return placeholder

    parts = content.get("parts")
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        return placeholder

    text = parts[0].get("text")
    return text if isinstance(text, str) else placeholder
