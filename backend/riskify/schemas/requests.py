from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from riskify.risk import HazardCategory


class RiskScoreRequest(BaseModel):
    task_name: str = Field(
        ...,
        min_length=1,
        max_length=500,
        validation_alias=AliasChoices("task_name", "taskName"),
    )
    trade_type: str | None = Field(
        default=None,
        max_length=120,
        validation_alias=AliasChoices("trade_type", "tradeType"),
    )
    hazard_category: HazardCategory | None = Field(
        default=None,
        validation_alias=AliasChoices("hazard_category", "hazardCategory"),
    )
    control_measure_count: int = Field(
        default=0,
        ge=0,
        le=100,
        validation_alias=AliasChoices("control_measure_count", "controlMeasureCount"),
    )

    @field_validator("hazard_category", mode="before")
    @classmethod
    def parse_category(cls, value: Any) -> Any:
        # Case-insensitive; unknown labels fall back to General
        if isinstance(value, str):
            return HazardCategory.parse(value) if value.strip() else None
        return value
