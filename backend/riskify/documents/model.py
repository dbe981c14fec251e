"""
Canonical in-memory SWMS document.

Every model here is frozen: a DocumentModel is assembled once per render
request and consumed exactly once by the renderer chain.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from riskify.risk import HazardCategory, RiskLevel, RiskScore


# PPE catalog: identifier -> (display name, description)
PPE_CATALOG: dict[str, tuple[str, str]] = {
    "hard-hat": ("Hard Hat", "Impact protection for head"),
    "hi-vis-vest": ("Hi-Vis Vest", "High visibility clothing"),
    "steel-cap-boots": ("Steel Cap Boots", "Foot protection"),
    "safety-glasses": ("Safety Glasses", "Eye protection"),
    "gloves": ("Work Gloves", "Hand protection"),
    "hearing-protection": ("Hearing Protection", "Noise reduction"),
    "dust-mask": ("Dust Mask", "Respiratory protection"),
    "cut-resistant-gloves": ("Cut Resistant Gloves", "Cut protection"),
    "fall-arrest-harness": ("Fall Arrest Harness", "Fall protection"),
    "safety-harness-lanyard": ("Safety Lanyard", "Fall restraint"),
    "welding-helmet-gloves": ("Welding Protection", "Arc flash protection"),
    "fire-retardant-clothing": ("Fire Retardant Clothing", "Heat protection"),
}


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


def _check_reduction(item, label: str) -> None:
    """With at least one control the residual must sit below the initial score."""
    if item.control_measures and item.residual_risk.value > item.initial_risk.value - 1:
        raise ValueError(
            f"{label}: residual {item.residual_risk.value} "
            f"must be below initial {item.initial_risk.value}"
        )


class ProjectInfo(_Frozen):
    """Company, project and personnel identification. No computed fields."""

    company_name: str
    project_name: str
    job_number: str
    project_address: str
    project_manager: str
    site_supervisor: str
    principal_contractor: str
    swms_creator_name: str
    swms_creator_position: str
    start_date: str
    duration: str
    trade_type: str
    work_description: str
    authorising_person: str
    authorising_position: str
    authorising_signature: str


class Hazard(_Frozen):
    category: HazardCategory
    description: str
    initial_risk: RiskScore
    control_measures: tuple[str, ...] = ()
    residual_risk: RiskScore

    @model_validator(mode="after")
    def check_reduction(self) -> "Hazard":
        _check_reduction(self, f"Hazard '{self.description[:40]}'")
        return self


class WorkActivity(_Frozen):
    """
    A single work activity with its hazards and controls.

    Invariant: with at least one control measure the residual score is at
    least one point below the initial score.
    """

    activity_id: str = Field(..., min_length=1)
    name: str
    description: str
    trade: str
    initial_risk: RiskScore
    hazards: tuple[Hazard, ...] = ()
    control_measures: tuple[str, ...] = ()
    residual_risk: RiskScore
    legislation: tuple[str, ...] = ()

    @model_validator(mode="after")
    def check_reduction(self) -> "WorkActivity":
        _check_reduction(self, f"Activity '{self.activity_id}'")
        return self

    @property
    def highest_hazard_level(self) -> Optional[RiskLevel]:
        if not self.hazards:
            return None
        return max(self.hazards, key=lambda h: h.initial_risk.value).initial_risk.level


class EmergencyContact(_Frozen):
    name: str
    phone: str


class EmergencyInfo(_Frozen):
    contacts: tuple[EmergencyContact, ...] = ()
    procedures: str
    monitoring: str
    assembly_point: str
    nearest_hospital: str
    hospital_phone: str


class SignInEntry(_Frozen):
    """One row of the site personnel sign in register."""

    name: str
    company: str = ""
    position: str = ""
    entry_date: str = ""
    time_in: str = ""
    time_out: str = ""
    signature: str = ""
    induction_complete: bool = False


class PlantEquipment(_Frozen):
    name: str
    model: str
    serial_number: str
    category: str
    certification_required: bool = False
    risk_level: RiskLevel = RiskLevel.LOW
    next_inspection: Optional[date] = None

    @property
    def next_inspection_label(self) -> str:
        if self.next_inspection is None:
            return "TBD"
        return self.next_inspection.strftime("%d/%m/%Y")


class PPEItem(_Frozen):
    """Display form of a selected PPE identifier."""

    identifier: str
    name: str
    description: str

    @classmethod
    def from_identifier(cls, identifier: str) -> "PPEItem":
        name, description = PPE_CATALOG.get(
            identifier,
            (identifier.replace("-", " ").replace("_", " ").title(), ""),
        )
        return cls(identifier=identifier, name=name, description=description)


class DocumentModel(_Frozen):
    """
    Aggregate root of a SWMS document.

    Invariant: every activity id is non-empty and unique within the document.
    """

    document_id: str
    prepared_on: date
    project: ProjectInfo
    activities: tuple[WorkActivity, ...] = ()
    emergency: EmergencyInfo
    equipment: tuple[PlantEquipment, ...] = ()
    ppe: tuple[str, ...] = ()
    hrcw_categories: tuple[str, ...] = ()
    sign_in_entries: tuple[SignInEntry, ...] = ()

    @model_validator(mode="after")
    def check_activity_ids(self) -> "DocumentModel":
        seen: set[str] = set()
        for activity in self.activities:
            if activity.activity_id in seen:
                raise ValueError(f"Duplicate activity id '{activity.activity_id}'")
            seen.add(activity.activity_id)
        return self

    @property
    def ppe_items(self) -> list[PPEItem]:
        return [PPEItem.from_identifier(identifier) for identifier in self.ppe]

    @property
    def highest_residual_level(self) -> Optional[RiskLevel]:
        if not self.activities:
            return None
        return max(self.activities, key=lambda a: a.residual_risk.value).residual_risk.level

    @property
    def filename(self) -> str:
        """File name for downloads, derived from the project name."""
        safe = "".join(c if c.isascii() and c.isalnum() else "_" for c in self.project.project_name).strip("_")
        return f"SWMS_{safe or 'document'}_{self.document_id}.pdf"
