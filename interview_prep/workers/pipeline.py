# =============================================================================
# Generation Pipeline — Submission API and Worker Lifecycle
# =============================================================================
#
# Owns the TaskQueue and the SerializedWorker. Created once per application
# lifespan (see main.py) and handed to route handlers through FastAPI
# dependencies. Tests build their own instance.
#
#   handle = pipeline.queue_code_analysis(code)
#   text = await handle.wait(timeout=60)
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from interview_prep.config import Settings
from interview_prep.models.requests import QuestionType
from interview_prep.services.llm import LLMProvider
from interview_prep.services.prompting import (
    DEFAULT_CV_CHAR_LIMIT,
    DEFAULT_JOB_DESCRIPTION_CHAR_LIMIT,
)
from interview_prep.workers.queue import TaskQueue
from interview_prep.workers.serial_worker import SerializedWorker, SleepFn
from interview_prep.workers.tasks import (
    CodeAnalysisTask,
    QuestionGenerationTask,
    ResultHandle,
    Task,
)

logger = logging.getLogger(__name__)


class GenerationPipeline:
    """Queue + single worker behind a non-blocking submit()."""

    def __init__(
        self,
        provider: LLMProvider,
        pacing_delay: float,
        max_attempts: int,
        cv_char_limit: int = DEFAULT_CV_CHAR_LIMIT,
        job_description_char_limit: int = DEFAULT_JOB_DESCRIPTION_CHAR_LIMIT,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._provider = provider
        self._queue = TaskQueue()
        self._worker = SerializedWorker(
            self._queue,
            provider,
            pacing_delay=pacing_delay,
            max_attempts=max_attempts,
            cv_char_limit=cv_char_limit,
            job_description_char_limit=job_description_char_limit,
            sleep=sleep,
        )

    @classmethod
    def from_settings(
        cls, provider: LLMProvider, config: Settings,
    ) -> GenerationPipeline:
        return cls(
            provider,
            pacing_delay=config.worker_pacing_delay_ms / 1000,
            max_attempts=config.max_retry_attempts,
            cv_char_limit=config.cv_char_limit,
            job_description_char_limit=config.job_description_char_limit,
        )

    @property
    def provider(self) -> LLMProvider:
        return self._provider

    @property
    def queue_depth(self) -> int:
        return len(self._queue)

    @property
    def running(self) -> bool:
        return self._worker.running

    def start(self) -> None:
        self._worker.start()

    async def stop(self) -> None:
        await self._worker.stop()

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, task: Task) -> ResultHandle:
        """Enqueue a task and return its handle. Never blocks."""
        self._queue.enqueue(task)
        logger.debug(
            "Queued %s (queue depth %d)", type(task).__name__, len(self._queue),
        )
        return task.handle

    def queue_question_generation(
        self,
        cv_text: str,
        experience_level: str,
        question_type: QuestionType = QuestionType.MIXED,
        selected_skills: Iterable[str] | None = None,
        job_description: str | None = None,
    ) -> ResultHandle:
        return self.submit(QuestionGenerationTask(
            cv_text=cv_text,
            experience_level=experience_level,
            question_type=question_type,
            selected_skills=tuple(selected_skills or ()),
            job_description=job_description,
        ))

    def queue_code_analysis(self, code: str) -> ResultHandle:
        return self.submit(CodeAnalysisTask(code=code))
