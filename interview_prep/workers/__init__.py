# =============================================================================
# Workers Package — Serialized Generation Queue
# =============================================================================
# Every upstream LLM call in the process goes through here:
#   - tasks.py: Task variants and the one-shot ResultHandle
#   - queue.py: Unbounded FIFO between request handlers and the worker
#   - serial_worker.py: Single consumer with pacing and rate-limit retries
#   - pipeline.py: Submission API and worker start/stop
# =============================================================================
