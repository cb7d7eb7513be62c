# =============================================================================
# Task Types & Result Handle
# =============================================================================
#
# A Task is one unit of work for the serialized worker. There are two
# variants, dispatched with `match` inside the worker:
#   - QuestionGenerationTask: CV excerpt + labels → interview questions
#   - CodeAnalysisTask: code snippet → review text
#
# Each task owns exactly one ResultHandle, created together with the task.
# The worker is the only writer; the submitting request is the reader.
#
# ResultHandle lifecycle:
#   created → (worker) complete()/fail() → (caller) wait() → discarded
#
# A caller that times out simply stops reading. The worker still completes
# the handle later, which is harmless.
# =============================================================================

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Union

from interview_prep.models.requests import QuestionType


class HandleAlreadyCompleted(Exception):
    """Raised when a ResultHandle is completed a second time."""


class HandleNotCompleted(Exception):
    """Raised by ResultHandle.result() while the handle is still pending."""


class ResultHandle:
    """
    Single-assignment outcome of a task: a string or an exception.

    Built on asyncio.Event so it can be created outside a running loop
    (the event binds to a loop on first wait).
    """

    __slots__ = ("_done", "_text", "_error")

    def __init__(self) -> None:
        self._done = asyncio.Event()
        self._text: str | None = None
        self._error: BaseException | None = None

    def done(self) -> bool:
        return self._done.is_set()

    def complete(self, text: str) -> None:
        """Store the outcome text and wake all waiters."""
        if self._done.is_set():
            raise HandleAlreadyCompleted("Result handle already completed")
        self._text = text
        self._done.set()

    def fail(self, error: BaseException) -> None:
        """Store an exception; waiters re-raise it."""
        if self._done.is_set():
            raise HandleAlreadyCompleted("Result handle already completed")
        self._error = error
        self._done.set()

    def result(self) -> str:
        """
        Non-blocking read of a completed handle.

        Raises:
            HandleNotCompleted: If the worker has not completed it yet.
            Exception: The stored error, if the handle was failed.
        """
        if not self._done.is_set():
            raise HandleNotCompleted("Result handle is still pending")
        if self._error is not None:
            raise self._error
        return self._text  # type: ignore[return-value]

    async def wait(self, timeout: float | None = None) -> str:
        """
        Wait for the outcome, at most `timeout` seconds.

        Raises:
            TimeoutError: If the handle is still pending after `timeout`.
                Only this wait is cancelled; the task keeps running.
        """
        await asyncio.wait_for(self._done.wait(), timeout)
        return self.result()


# ---------------------------------------------------------------------------
# Task Variants
# ---------------------------------------------------------------------------
# eq=False: two tasks with identical fields are still distinct work items.
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class QuestionGenerationTask:
    """Generate interview questions for a candidate."""

    cv_text: str
    experience_level: str
    question_type: QuestionType = QuestionType.MIXED
    selected_skills: tuple[str, ...] = ()
    job_description: str | None = None
    handle: ResultHandle = field(default_factory=ResultHandle, repr=False)


@dataclass(frozen=True, eq=False)
class CodeAnalysisTask:
    """Review a raw code snippet."""

    code: str
    handle: ResultHandle = field(default_factory=ResultHandle, repr=False)


Task = Union[QuestionGenerationTask, CodeAnalysisTask]
