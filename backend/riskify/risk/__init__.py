"""
Risk Engine

Task risk scoring for SWMS activities.
Converts qualitative task, trade and hazard descriptions into numeric risk
levels with a guaranteed reduction once controls are applied.
"""

from .definition import (
    RESIDUAL_FLOOR,
    SCORE_MAX,
    SCORE_MIN,
    HazardCategory,
    InvalidScoreError,
    RandomSource,
    RiskAssessment,
    RiskEngineError,
    RiskLevel,
    RiskScore,
    ScoringTables,
)

from .impl import (
    ResidualRiskCalculator,
    RiskClassifier,
    RiskScorer,
    classify_risk,
    score_task,
)

__all__ = [
    # Classes
    "ResidualRiskCalculator",
    "RiskClassifier",
    "RiskScorer",
    # Models
    "HazardCategory",
    "RandomSource",
    "RiskAssessment",
    "RiskLevel",
    "RiskScore",
    "ScoringTables",
    # Exceptions
    "InvalidScoreError",
    "RiskEngineError",
    # Functions
    "classify_risk",
    "score_task",
    # Constants
    "RESIDUAL_FLOOR",
    "SCORE_MAX",
    "SCORE_MIN",
]
