# =============================================================================
# Task Queue — Unbounded FIFO Between Requests and the Worker
# =============================================================================
#
# Many producers (request handlers, after passing an admission gate) and
# exactly one consumer (the serialized worker).
#
# enqueue() never blocks and never rejects: the admission gates are the
# only backpressure callers see. There is no peek and no removal by id.
# =============================================================================

from __future__ import annotations

import asyncio

from interview_prep.workers.tasks import Task


class TaskQueue:
    """FIFO holding area for submitted tasks."""

    def __init__(self) -> None:
        # maxsize=0 → unbounded
        self._queue: asyncio.Queue[Task] = asyncio.Queue()

    def enqueue(self, task: Task) -> None:
        """Append a task. Always succeeds."""
        self._queue.put_nowait(task)

    async def dequeue(self) -> Task:
        """Suspend until a task is available, then return the oldest one."""
        return await self._queue.get()

    def __len__(self) -> int:
        return self._queue.qsize()
