"""
Input shapes for the independently submitted SWMS form sections.

The form wizard posts camelCase keys while internal callers use
snake_case, so every field accepts both. Values are only shape-checked
here; defaults are applied later by the DocumentAssembler.
"""

from datetime import date, datetime
from typing import Annotated, Any, Optional

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from riskify.risk import RESIDUAL_FLOOR, SCORE_MAX, SCORE_MIN, RiskLevel

_TRUE_STRINGS = {"yes", "y", "true", "1", "required"}


def _as_text_list(value: Any) -> Any:
    """Accept a single string where a list of strings is expected."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    return value


TextList = Annotated[list[str], BeforeValidator(_as_text_list)]


class SectionModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )


class ProjectInfoSection(SectionModel):
    company_name: Optional[str] = None
    project_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("project_name", "projectName", "jobName", "job_name"),
    )
    job_number: Optional[str] = None
    project_address: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("project_address", "projectAddress", "projectLocation"),
    )
    project_manager: Optional[str] = None
    site_supervisor: Optional[str] = None
    principal_contractor: Optional[str] = None
    swms_creator_name: Optional[str] = None
    swms_creator_position: Optional[str] = None
    start_date: Optional[str] = None
    duration: Optional[str] = None
    trade_type: Optional[str] = None
    work_description: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("work_description", "workDescription", "projectDescription"),
    )
    authorising_person: Optional[str] = None
    authorising_position: Optional[str] = None
    authorising_signature: Optional[str] = None


class HazardInput(SectionModel):
    category: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("category", "type", "hazardType"),
    )
    description: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("description", "hazard", "name"),
    )
    control_measures: TextList = Field(
        default_factory=list,
        validation_alias=AliasChoices("control_measures", "controlMeasures", "controls"),
    )
    initial_risk_score: Optional[int] = Field(default=None, ge=SCORE_MIN, le=SCORE_MAX)
    residual_risk_score: Optional[int] = Field(default=None, ge=RESIDUAL_FLOOR, le=SCORE_MAX)


class ActivityInput(SectionModel):
    activity_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("activity_id", "activityId", "id"),
    )
    name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("name", "activity", "task", "title"),
    )
    description: Optional[str] = None
    trade: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("trade", "tradeType", "trade_type"),
    )
    hazards: list[HazardInput] = Field(default_factory=list)
    control_measures: TextList = Field(
        default_factory=list,
        validation_alias=AliasChoices("control_measures", "controlMeasures", "controls"),
    )
    legislation: TextList = Field(default_factory=list)
    initial_risk_score: Optional[int] = Field(default=None, ge=SCORE_MIN, le=SCORE_MAX)
    residual_risk_score: Optional[int] = Field(default=None, ge=RESIDUAL_FLOOR, le=SCORE_MAX)

    @field_validator("activity_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        # Numeric ids from the client are kept as text
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("hazards", mode="before")
    @classmethod
    def wrap_hazards(cls, v: Any) -> Any:
        """Plain strings are hazards with only a description."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if isinstance(v, list):
            return [{"description": h} if isinstance(h, str) else h for h in v]
        return v


class EmergencyContactInput(SectionModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)


class EmergencySection(SectionModel):
    contacts: list[EmergencyContactInput] = Field(
        default_factory=list,
        validation_alias=AliasChoices("contacts", "emergencyContacts", "emergency_contacts"),
    )
    procedures: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("procedures", "emergencyProcedures", "emergency_procedures"),
    )
    monitoring: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("monitoring", "emergencyMonitoring", "emergency_monitoring"),
    )
    assembly_point: Optional[str] = None
    nearest_hospital: Optional[str] = None
    hospital_phone: Optional[str] = None

    @field_validator("procedures", mode="before")
    @classmethod
    def join_procedures(cls, v: Any) -> Any:
        """Procedure lists ({procedure, details} records or strings) become one text block."""
        if not isinstance(v, list):
            return v
        lines = []
        for item in v:
            if isinstance(item, str):
                lines.append(item)
            elif isinstance(item, dict):
                title = item.get("procedure") or item.get("type") or "Emergency Procedure"
                details = item.get("details") or item.get("description") or ""
                lines.append(f"{title}: {details}" if details else title)
            else:
                raise ValueError("procedure entries must be strings or objects")
        return "\n".join(lines)


class EquipmentInput(SectionModel):
    name: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("name", "equipment"),
    )
    model: Optional[str] = None
    serial_number: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("serial_number", "serialNumber", "serial"),
    )
    category: Optional[str] = None
    certification_required: bool = False
    risk_level: RiskLevel = RiskLevel.LOW
    next_inspection: Optional[date] = None

    @field_validator("certification_required", mode="before")
    @classmethod
    def parse_flag(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower() in _TRUE_STRINGS
        if v is None:
            return False
        return v

    @field_validator("risk_level", mode="before")
    @classmethod
    def parse_level(cls, v: Any) -> Any:
        if v is None or v == "":
            return RiskLevel.LOW
        if isinstance(v, str):
            for level in RiskLevel:
                if level.value.lower() == v.strip().lower():
                    return level
        return v

    @field_validator("next_inspection", mode="before")
    @classmethod
    def parse_inspection(cls, v: Any) -> Any:
        """Accept ISO dates, dd/mm/yyyy, or 'TBD' / empty for no date."""
        if v is None or isinstance(v, date):
            return v
        if isinstance(v, str):
            text = v.strip()
            if not text or text.upper() in {"TBD", "N/A"}:
                return None
            if "/" in text:
                return datetime.strptime(text, "%d/%m/%Y").date()
        return v


class SignInEntryInput(SectionModel):
    name: str = Field(..., min_length=1)
    company: Optional[str] = None
    position: Optional[str] = None
    entry_date: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("entry_date", "entryDate", "date"),
    )
    time_in: Optional[str] = None
    time_out: Optional[str] = None
    signature: Optional[str] = None
    induction_complete: bool = False

    @field_validator("induction_complete", mode="before")
    @classmethod
    def parse_flag(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower() in _TRUE_STRINGS
        if v is None:
            return False
        return v


class RenderRequest(BaseModel):
    """
    Body of a render request.

    Each section is kept loosely typed so that the assembler can report
    exactly which section is malformed.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    project_info: Any = Field(
        default=None,
        validation_alias=AliasChoices("project_info", "projectInfo", "project"),
    )
    activities: Any = Field(
        default=None,
        validation_alias=AliasChoices("activities", "workActivities", "work_activities"),
    )
    emergency: Any = Field(
        default=None,
        validation_alias=AliasChoices("emergency", "emergencyInfo", "emergency_info"),
    )
    equipment: Any = Field(
        default=None,
        validation_alias=AliasChoices("equipment", "plantEquipment", "plant_equipment"),
    )
    ppe: Any = Field(
        default=None,
        validation_alias=AliasChoices("ppe", "ppeRequirements", "ppe_requirements"),
    )
    hrcw_categories: Any = Field(
        default=None,
        validation_alias=AliasChoices("hrcw_categories", "hrcwCategories"),
    )
    sign_in_entries: Any = Field(
        default=None,
        validation_alias=AliasChoices("sign_in_entries", "signInEntries", "signIn"),
    )
    document_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("document_id", "documentId"),
    )

    def sections(self) -> dict[str, Any]:
        return {
            "project_info": self.project_info,
            "activities": self.activities,
            "emergency": self.emergency,
            "equipment": self.equipment,
            "ppe": self.ppe,
            "hrcw_categories": self.hrcw_categories,
            "sign_in_entries": self.sign_in_entries,
        }
