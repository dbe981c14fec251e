"""Standalone risk scoring endpoint used by the activity editor."""

from fastapi import APIRouter, Depends

from riskify.schemas import RiskScoreRequest, RiskScoreResponse
from riskify.services import DependencyContainer, get_container

router = APIRouter()


@router.post("/risk/score", response_model=RiskScoreResponse)
async def score_risk(
    request: RiskScoreRequest,
    container: DependencyContainer = Depends(get_container),
) -> RiskScoreResponse:
    """Score a task and derive its residual for the given number of controls."""
    initial = container.scorer.score(request.task_name, request.trade_type, request.hazard_category)
    assessment = container.residual_calculator.assess(initial, request.control_measure_count)
    return RiskScoreResponse(
        initial_score=assessment.initial.value,
        initial_level=assessment.initial.level,
        residual_score=assessment.residual.value,
        residual_level=assessment.residual.level,
        control_measure_count=assessment.control_measure_count,
    )
