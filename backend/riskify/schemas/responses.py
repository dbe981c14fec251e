from typing import Literal

from pydantic import BaseModel, Field

from riskify.risk import RiskLevel

RenderStatus = Literal["idle", "loading", "success", "error"]


class RiskScoreResponse(BaseModel):
    initial_score: int
    initial_level: RiskLevel
    residual_score: int
    residual_level: RiskLevel
    control_measure_count: int


class TierErrorDetail(BaseModel):
    backend: str
    kind: str = Field(description="Failure kind: unavailable or timeout")
    error: str


class RenderErrorResponse(BaseModel):
    """Body returned when a document cannot be produced."""
    status: RenderStatus = "error"
    message: str
    section: str | None = Field(default=None, description="Malformed section, for assembly errors")
    expected: str | None = Field(default=None, description="Expected shape of the malformed section")
    errors: list[TierErrorDetail] = Field(default_factory=list, description="One entry per failed renderer tier")
