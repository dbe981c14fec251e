"""
Risk Engine - Implementation

Deterministic-but-parameterized SWMS risk scoring:
- Initial score from task name, trade and optional hazard category
- Residual score after control measures, with a guaranteed reduction
- Fixed-threshold classification into Low / Medium / High / Extreme
"""

import logging
import random
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .definition import (
    RESIDUAL_FLOOR,
    SCORE_MAX,
    SCORE_MIN,
    HazardCategory,
    InvalidScoreError,
    RandomSource,
    RiskAssessment,
    RiskLevel,
    RiskScore,
    ScoringTables,
)

logger = logging.getLogger(__name__)


# Classification thresholds (inclusive upper bounds)
LOW_MAX = 4
MEDIUM_MAX = 9
HIGH_MAX = 16

# Residual reduction coefficients
BASE_REDUCTION = 0.4
REDUCTION_PER_CONTROL = 0.05


def _round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up, not banker's rounding."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def classify_risk(score: int) -> RiskLevel:
    """Map a numeric score to its risk band."""
    if score <= LOW_MAX:
        return RiskLevel.LOW
    if score <= MEDIUM_MAX:
        return RiskLevel.MEDIUM
    if score <= HIGH_MAX:
        return RiskLevel.HIGH
    return RiskLevel.EXTREME


class RiskClassifier:
    """Pure mapping from score to RiskLevel using fixed thresholds."""

    def classify(self, score: int) -> RiskLevel:
        return classify_risk(score)


class RiskScorer:
    """
    Converts qualitative task descriptors into an initial RiskScore.

    Usage:
        scorer = RiskScorer(rng=random.Random(42))
        score = scorer.score(
            "High voltage connection work",
            "Electrical",
        )
        print(score.value, score.level)

    The only non-determinism is the jitter drawn from the injected random
    source, so a seeded source gives reproducible scores.
    """

    JITTER = 1

    def __init__(
        self,
        tables: Optional[ScoringTables] = None,
        rng: Optional[RandomSource] = None,
    ):
        """
        Initialize the scorer.

        Args:
            tables: Trade, keyword and hazard tables (defaults to ScoringTables()).
            rng: Random source used for jitter (defaults to an unseeded random.Random).
        """
        self.tables = tables or ScoringTables()
        self._rng: RandomSource = rng if rng is not None else random.Random()

    def keyword_multiplier(
        self,
        task_name: str,
        hazard_category: Optional[HazardCategory] = None,
    ) -> float:
        """
        Multiplier from keyword hits and hazard category.

        Keyword hits are existence checks: any number of high-risk
        keywords adds the high-risk bonus exactly once.
        """
        text = (task_name or "").lower()
        multiplier = 1.0

        if any(keyword in text for keyword in self.tables.high_risk_keywords):
            multiplier += self.tables.high_risk_bonus
        if any(keyword in text for keyword in self.tables.medium_risk_keywords):
            multiplier += self.tables.medium_risk_bonus

        if hazard_category is not None:
            category = HazardCategory.parse(hazard_category)
            multiplier += self.tables.hazard_bonuses.get(category, 0.0)

        return multiplier

    def raw_score(
        self,
        task_name: str,
        trade_type: Optional[str],
        hazard_category: Optional[HazardCategory] = None,
    ) -> int:
        """Rounded score before jitter and clamping."""
        trade_multiplier = self.tables.trade_multiplier(trade_type)
        keyword_multiplier = self.keyword_multiplier(task_name, hazard_category)
        return _round_half_up(self.tables.base_score * trade_multiplier * keyword_multiplier)

    def score(
        self,
        task_name: str,
        trade_type: Optional[str],
        hazard_category: Optional[HazardCategory] = None,
    ) -> RiskScore:
        """
        Compute the initial risk score for a task.

        Args:
            task_name: Free-text task or activity name.
            trade_type: Trade performing the task (unknown trades use 1.0).
            hazard_category: Optional hazard category for a category bonus.

        Returns:
            RiskScore clamped to [3, 16].
        """
        raw = self.raw_score(task_name, trade_type, hazard_category)
        jitter = self._rng.randint(-self.JITTER, self.JITTER)
        final = _clamp(raw + jitter, SCORE_MIN, SCORE_MAX)

        logger.debug(
            f"Risk score '{task_name[:60]}' [{trade_type}] → {final} "
            f"(raw: {raw}, jitter: {jitter:+d})"
        )
        return RiskScore(value=final)


class ResidualRiskCalculator:
    """
    Derives the residual score once control measures are applied.

    Reduction starts at 40% and grows by 5% per control measure. The result
    is clamped so it is at least 1 and at least one point below the initial
    score.
    """

    def residual(self, initial_score: int | RiskScore, control_measure_count: int) -> RiskScore:
        """
        Compute the residual score.

        Args:
            initial_score: Initial score (int or RiskScore).
            control_measure_count: Number of control measures applied.

        Returns:
            Residual RiskScore.

        Raises:
            InvalidScoreError: If the initial score is below 1.
        """
        initial = int(initial_score)
        if initial < RESIDUAL_FLOOR:
            raise InvalidScoreError(initial, f"must be >= {RESIDUAL_FLOOR}")

        count = max(0, control_measure_count)
        reduction = BASE_REDUCTION + count * REDUCTION_PER_CONTROL
        residual = _round_half_up(initial * (1 - reduction))

        # Lower bound wins when the initial score is 1
        residual = max(RESIDUAL_FLOOR, min(residual, initial - 1))
        return RiskScore(value=min(residual, SCORE_MAX))

    def assess(self, initial: RiskScore, control_measure_count: int) -> RiskAssessment:
        """Pair an initial score with its residual."""
        return RiskAssessment(
            initial=initial,
            residual=self.residual(initial, control_measure_count),
            control_measure_count=max(0, control_measure_count),
        )


def score_task(
    task_name: str,
    trade_type: Optional[str],
    control_measure_count: int,
    hazard_category: Optional[HazardCategory] = None,
    rng: Optional[RandomSource] = None,
) -> RiskAssessment:
    """
    Score a task with default tables.

    Convenience function for simple use cases.
    """
    scorer = RiskScorer(rng=rng)
    initial = scorer.score(task_name, trade_type, hazard_category)
    return ResidualRiskCalculator().assess(initial, control_measure_count)
