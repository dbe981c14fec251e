"""
Risk Engine - Data Definitions

Pydantic models and scoring tables for SWMS activity risk scoring.
Scores combine likelihood and consequence into a single integer; the
risk level is always derived from the score, never stored on its own.
"""

from enum import Enum
from typing import Dict, FrozenSet, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


# Closed range produced by the scorer
SCORE_MIN = 3
SCORE_MAX = 16

# Residual scores may fall below SCORE_MIN but never below this floor
RESIDUAL_FLOOR = 1


class RiskLevel(str, Enum):
    """
    Named risk bands.

    - LOW: score <= 4
    - MEDIUM: 5 to 9
    - HIGH: 10 to 16
    - EXTREME: above 16
    """
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    EXTREME = "Extreme"


class HazardCategory(str, Enum):
    """Hazard categories recognised by the scorer."""
    ELECTRICAL = "Electrical"
    CHEMICAL = "Chemical"
    PHYSICAL = "Physical"
    BIOLOGICAL = "Biological"
    ERGONOMIC = "Ergonomic"
    PSYCHOLOGICAL = "Psychological"
    GENERAL = "General"

    @classmethod
    def parse(cls, value: "str | HazardCategory | None") -> "HazardCategory":
        """Case-insensitive lookup; unknown or empty values map to GENERAL."""
        if isinstance(value, HazardCategory):
            return value
        if not value:
            return cls.GENERAL
        normalized = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        return cls.GENERAL


class RiskScore(BaseModel):
    """
    Integer risk score with its derived level.

    The level is computed from the value on every access so the two
    can never drift apart.
    """

    model_config = ConfigDict(frozen=True)

    value: int = Field(
        ...,
        ge=RESIDUAL_FLOOR,
        le=SCORE_MAX,
        description="Risk score; initial scores are in [3, 16], residual scores may drop to 1.",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def level(self) -> RiskLevel:
        from .impl import classify_risk
        return classify_risk(self.value)

    def __int__(self) -> int:
        return self.value


@runtime_checkable
class RandomSource(Protocol):
    """
    Source of jitter for the scorer.

    Satisfied by random.Random; tests inject a seeded instance or a stub.
    """

    def randint(self, a: int, b: int) -> int:
        ...


class ScoringTables(BaseModel):
    """
    Static lookup tables used by RiskScorer.

    Passed in at construction so tests and future table updates do not
    require code changes.
    """

    model_config = ConfigDict(frozen=True)

    base_score: float = Field(default=6.0, gt=0)

    trade_multipliers: Dict[str, float] = Field(
        default_factory=lambda: {
            "electrical": 2.0,
            "scaffolding": 1.8,
            "demolition": 1.7,
            "excavation": 1.6,
            "roofing": 1.6,
            "welding": 1.5,
            "steel fixing": 1.4,
            "concrete": 1.3,
            "plumbing": 1.3,
            "carpentry": 1.2,
            "general construction": 1.0,
            "tiling & waterproofing": 0.9,
            "painting & decorating": 0.8,
            "landscaping": 0.8,
        }
    )

    high_risk_keywords: FrozenSet[str] = Field(
        default_factory=lambda: frozenset({
            "electrical", "voltage", "live", "energised", "switchboard",
            "height", "fall", "scaffold", "roof", "ladder", "elevated",
            "confined space", "excavation", "trench",
            "crane", "heavy machinery", "demolition",
            "chemical", "toxic", "asbestos", "solvent",
            "hot work", "welding", "explosive",
        })
    )

    medium_risk_keywords: FrozenSet[str] = Field(
        default_factory=lambda: frozenset({
            "install", "testing", "test", "assembly", "assemble",
            "commissioning", "fitting", "mounting", "cutting",
            "grinding", "drilling", "lifting", "connection",
        })
    )

    high_risk_bonus: float = Field(default=0.5, ge=0)
    medium_risk_bonus: float = Field(default=0.2, ge=0)

    hazard_bonuses: Dict[HazardCategory, float] = Field(
        default_factory=lambda: {
            HazardCategory.ELECTRICAL: 0.3,
            HazardCategory.CHEMICAL: 0.25,
            HazardCategory.PHYSICAL: 0.2,
            HazardCategory.BIOLOGICAL: 0.15,
            HazardCategory.ERGONOMIC: 0.1,
            HazardCategory.GENERAL: 0.05,
            HazardCategory.PSYCHOLOGICAL: 0.0,
        }
    )

    @field_validator("trade_multipliers")
    @classmethod
    def normalize_trades(cls, v: Dict[str, float]) -> Dict[str, float]:
        """Trade keys are matched case-insensitively."""
        return {k.strip().lower(): m for k, m in v.items()}

    def trade_multiplier(self, trade_type: str | None) -> float:
        """Multiplier for a trade; unknown trades default to 1.0."""
        if not trade_type:
            return 1.0
        return self.trade_multipliers.get(trade_type.strip().lower(), 1.0)


class RiskAssessment(BaseModel):
    """Initial and residual score pair for a single task."""

    model_config = ConfigDict(frozen=True)

    initial: RiskScore
    residual: RiskScore
    control_measure_count: int = Field(ge=0)

    @property
    def reduction(self) -> int:
        return self.initial.value - self.residual.value


# Custom Exceptions

class RiskEngineError(Exception):
    """Base exception for risk engine errors."""
    pass


class InvalidScoreError(RiskEngineError):
    """The score is outside the accepted range."""
    def __init__(self, value: int, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid risk score {value}: {reason}")
