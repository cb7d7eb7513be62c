# =============================================================================
# API Response Models — Pydantic V2 Schemas
# =============================================================================
#
# The generation endpoints answer with plain text (the generated questions
# or review). /analyze returns a bare JSON list of skill names.
# =============================================================================

from pydantic import BaseModel, Field


class GateStatus(BaseModel):
    """Usage of one admission gate."""

    capacity: int = Field(description="Maximum concurrent requests")
    in_use: int = Field(description="Requests currently holding a permit")


class HealthResponse(BaseModel):
    """Response for GET /health: confirms the API and worker are running."""

    status: str = "ok"
    version: str
    service: str
    worker_running: bool = Field(
        description="Whether the serialized worker loop is alive",
    )
    queue_depth: int = Field(
        description="Tasks waiting for the worker (excludes the one running)",
    )
    gates: dict[str, GateStatus] = Field(
        default_factory=dict,
        description="Admission gate usage keyed by gate name",
    )

