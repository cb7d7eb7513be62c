# =============================================================================
# Serialized Worker — The Only Caller of the Upstream LLM
# =============================================================================
#
# One long-lived asyncio task drains the TaskQueue, one task at a time:
#
#   ┌──────────────┐   ┌───────────┐   ┌──────────────────┐   ┌───────────┐
#   │ dequeue()    │──▶│ execute() │──▶│ complete handle  │──▶│ pace      │──┐
#   │ (blocks)     │   │ (retries) │   │ (or fail on bug) │   │ (sleep)   │  │
#   └──────────────┘   └───────────┘   └──────────────────┘   └───────────┘  │
#          ▲                                                                 │
#          └─────────────────────────────────────────────────────────────────┘
#
# RETRY POLICY (per task):
#   - RateLimited → wait parse_retry_delay(message) ms, call again; give up
#     after `max_attempts` calls with a fixed error text
#   - Fatal       → no retry, error text embedding the detail
#   - Success     → generated text
# Retry exhaustion and fatal errors are ordinary completions: the caller
# receives the error text as the response body.
#
# PACING: after every task, success or failure, sleep `pacing_delay`
# seconds. Together with the single consumer this keeps at most one call
# in flight and a steady gap between calls.
#
# SHUTDOWN: stop() cancels the loop wherever it is suspended (dequeue,
# retry sleep, pacing sleep). Queued and in-progress tasks are abandoned;
# their callers run into their own wait timeout.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import assert_never

from interview_prep.services.backoff import parse_retry_delay
from interview_prep.services.llm import Fatal, LLMProvider, RateLimited, Success
from interview_prep.services.prompting import (
    ANALYSIS_PLACEHOLDER,
    DEFAULT_CV_CHAR_LIMIT,
    DEFAULT_JOB_DESCRIPTION_CHAR_LIMIT,
    QUESTION_PLACEHOLDER,
    build_code_analysis_prompt,
    build_question_prompt,
)
from interview_prep.workers.queue import TaskQueue
from interview_prep.workers.tasks import CodeAnalysisTask, QuestionGenerationTask, Task

logger = logging.getLogger(__name__)

DEFAULT_PACING_DELAY_SECONDS = 10.0
DEFAULT_MAX_ATTEMPTS = 5

SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class _Job:
    """What the worker needs to run one task upstream."""

    kind: str                # for logs
    prompt: str
    placeholder: str         # text when the response has no content
    error_prefix: str        # "Error generating questions"
    exhausted_message: str   # returned after the last rate-limited attempt


def _prepare(
    task: Task,
    cv_char_limit: int = DEFAULT_CV_CHAR_LIMIT,
    job_description_char_limit: int = DEFAULT_JOB_DESCRIPTION_CHAR_LIMIT,
) -> _Job:
    """Turn a task variant into a prompt plus its error wording."""
    match task:
        case QuestionGenerationTask():
            return _Job(
                kind="question_generation",
                prompt=build_question_prompt(
                    task,
                    cv_char_limit=cv_char_limit,
                    job_description_char_limit=job_description_char_limit,
                ),
                placeholder=QUESTION_PLACEHOLDER,
                error_prefix="Error generating questions",
                exhausted_message=(
                    "Error: Failed to generate questions after retries "
                    "due to rate limits."
                ),
            )
        case CodeAnalysisTask():
            return _Job(
                kind="code_analysis",
                prompt=build_code_analysis_prompt(task),
                placeholder=ANALYSIS_PLACEHOLDER,
                error_prefix="Error analyzing code",
                exhausted_message=(
                    "Error: Failed to analyze code after retries "
                    "due to rate limits."
                ),
            )
        case _:
            assert_never(task)


class SerializedWorker:
    """
    Single consumer of the TaskQueue.

    Args:
        queue: Queue to drain.
        provider: Upstream LLM wrapper returning classified outcomes.
        pacing_delay: Seconds to sleep after every task.
        max_attempts: Upstream calls per task before giving up on
            rate limits.
        cv_char_limit: CV budget for question prompts, in characters.
        job_description_char_limit: Job description budget, in characters.
        sleep: Awaitable sleep, injectable for tests.
    """

    def __init__(
        self,
        queue: TaskQueue,
        provider: LLMProvider,
        pacing_delay: float = DEFAULT_PACING_DELAY_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        cv_char_limit: int = DEFAULT_CV_CHAR_LIMIT,
        job_description_char_limit: int = DEFAULT_JOB_DESCRIPTION_CHAR_LIMIT,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self._queue = queue
        self._provider = provider
        self._pacing_delay = pacing_delay
        self._max_attempts = max_attempts
        self._cv_char_limit = cv_char_limit
        self._job_description_char_limit = job_description_char_limit
        self._sleep = sleep
        self._loop_task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    def start(self) -> None:
        """Start the processing loop on the running event loop."""
        if self.running:
            raise RuntimeError("Serialized worker is already running")
        self._loop_task = asyncio.create_task(
            self.run(), name="serialized-worker",
        )

    async def stop(self) -> None:
        """Cancel the processing loop and wait for it to unwind."""
        if self._loop_task is None:
            return
        self._loop_task.cancel()
        try:
            await self._loop_task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Serialized worker had already crashed")
        finally:
            self._loop_task = None
        logger.info(
            "Serialized worker stopped (%d task(s) abandoned in queue)",
            len(self._queue),
        )

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Process tasks until cancelled."""
        logger.info(
            "Serialized worker started (pacing=%.1fs, max_attempts=%d)",
            self._pacing_delay, self._max_attempts,
        )
        while True:
            task = await self._queue.dequeue()
            await self.process(task)
            await self._sleep(self._pacing_delay)

    async def process(self, task: Task) -> None:
        """
        Execute one task and complete its handle.

        An unexpected exception fails the handle instead of leaving it
        pending; the loop keeps going.
        """
        try:
            result = await self.execute(task)
        except Exception as exc:
            logger.exception("Unexpected failure while executing task: %s", exc)
            task.handle.fail(exc)
        else:
            task.handle.complete(result)

    async def execute(self, task: Task) -> str:
        """
        Run a task against the upstream API with rate-limit retries.

        Returns:
            Generated text, or an error text for fatal failures and
            retry exhaustion.
        """
        job = _prepare(
            task, self._cv_char_limit, self._job_description_char_limit,
        )
        start = time.monotonic()
        attempt = 0

        logger.info(
            "Executing %s task (%d queued behind it)", job.kind, len(self._queue),
        )

        while attempt < self._max_attempts:
            outcome = await self._provider.generate(
                job.prompt, placeholder=job.placeholder,
            )

            match outcome:
                case Success(text=text):
                    logger.info(
                        "%s task succeeded after %d attempt(s) in %.1fs",
                        job.kind, attempt + 1, time.monotonic() - start,
                    )
                    return text

                case Fatal(message=message):
                    logger.error("%s task failed: %s", job.kind, message)
                    return f"{job.error_prefix}: {message}"

                case RateLimited(message=message):
                    attempt += 1
                    if attempt >= self._max_attempts:
                        break
                    delay_ms = parse_retry_delay(message)
                    logger.warning(
                        "Rate limit hit (429). Waiting %dms before retry %d/%d",
                        delay_ms, attempt, self._max_attempts,
                    )
                    await self._sleep(delay_ms / 1000)

                case _:
                    assert_never(outcome)

        logger.error(
            "%s task gave up after %d rate-limited attempts",
            job.kind, self._max_attempts,
        )
        return job.exhausted_message
