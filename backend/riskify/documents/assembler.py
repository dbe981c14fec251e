"""
Document assembler.

Merges the independently submitted form sections (project info, activities,
emergency info, equipment, PPE, sign in register) into one immutable
DocumentModel:

- substitutes textual defaults for every absent optional field,
- scores activities and hazards that arrive without precomputed scores,
- guarantees unique, non-empty activity ids,
- preserves caller ordering of every sequence.

A section with the wrong shape aborts assembly with MalformedSection.
"""

from datetime import date
from typing import Any, Callable, Mapping, Optional, TypeVar
from uuid import uuid4

from pydantic import BaseModel, TypeAdapter, ValidationError

from riskify.core.exceptions import MalformedSection
from riskify.core.logging import get_logger
from riskify.documents.model import (
    DocumentModel,
    EmergencyContact,
    EmergencyInfo,
    Hazard,
    PlantEquipment,
    ProjectInfo,
    SignInEntry,
    WorkActivity,
)
from riskify.risk import (
    HazardCategory,
    ResidualRiskCalculator,
    RiskScore,
    RiskScorer,
)
from riskify.schemas.sections import (
    ActivityInput,
    EmergencySection,
    EquipmentInput,
    HazardInput,
    ProjectInfoSection,
    RenderRequest,
    SignInEntryInput,
)

logger = get_logger(__name__)
T = TypeVar("T")

PROJECT_DEFAULTS: dict[str, str] = {
    "company_name": "Company Name",
    "project_name": "Untitled Project",
    "job_number": "TBD",
    "project_address": "Project Location",
    "project_manager": "TBD",
    "site_supervisor": "TBD",
    "principal_contractor": "TBD",
    "swms_creator_name": "TBD",
    "swms_creator_position": "TBD",
    "start_date": "TBD",
    "duration": "TBD",
    "trade_type": "General Construction",
    "work_description": "Not specified",
    "authorising_person": "TBD",
    "authorising_position": "TBD",
    "authorising_signature": "Not signed",
}

EMERGENCY_DEFAULTS: dict[str, str] = {
    "procedures": "Follow site emergency procedures. Evacuate to the assembly point and call 000.",
    "monitoring": "Controls reviewed daily by the site supervisor and whenever conditions change.",
    "assembly_point": "Main Entrance",
    "nearest_hospital": "Nearest Hospital",
    "hospital_phone": "TBD",
}

ACTIVITY_NAME_DEFAULT = "Work Activity"
ACTIVITY_DESCRIPTION_DEFAULT = "No description provided"
EQUIPMENT_FIELD_DEFAULT = "N/A"

# Expected shapes reported by MalformedSection
_EXPECTED = {
    "project_info": "an object of project fields (strings)",
    "activities": "a list of activity objects (name, trade, hazards, controlMeasures, legislation)",
    "emergency": "an object with contacts [{name, phone}] and free-text procedures/monitoring",
    "equipment": "a list of equipment objects (name, category, certificationRequired, riskLevel, nextInspection)",
    "ppe": "a list or set of PPE identifiers (strings)",
    "hrcw_categories": "a list or set of high-risk construction work labels (strings)",
    "sign_in_entries": "a list of sign in objects (name, company, position, date, timeIn, timeOut, signature, inductionComplete)",
}

_activities_adapter = TypeAdapter(list[ActivityInput])
_equipment_adapter = TypeAdapter(list[EquipmentInput])
_sign_in_adapter = TypeAdapter(list[SignInEntryInput])
_text_list_adapter = TypeAdapter(list[str])


def _text(value: Optional[str], default: str) -> str:
    """Default for None and blank strings."""
    if value is None or not str(value).strip():
        return default
    return str(value).strip()


def _dedupe(values: list[str]) -> tuple[str, ...]:
    """Drop blanks and duplicates, keeping first-seen order."""
    seen: dict[str, None] = {}
    for value in values:
        value = value.strip()
        if value:
            seen.setdefault(value, None)
    return tuple(seen)


class DocumentAssembler:
    """
    Builds a DocumentModel from raw form sections.

    Usage:
        assembler = DocumentAssembler(scorer=RiskScorer(rng=random.Random(7)))
        document = assembler.assemble({
            "project_info": {"projectName": "Level 3 fit-out"},
            "activities": [{"name": "Install switchboard", "trade": "Electrical"}],
        })

    Raises:
        MalformedSection: If any section does not have the expected shape.
    """

    def __init__(
        self,
        scorer: Optional[RiskScorer] = None,
        residual_calculator: Optional[ResidualRiskCalculator] = None,
        today: Callable[[], date] = date.today,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        """
        Initialize the assembler.

        Args:
            scorer: Scorer for activities and hazards without scores.
            residual_calculator: Residual calculator (defaults to ResidualRiskCalculator()).
            today: Clock used for the preparation date.
            id_factory: Document id generator (defaults to SWMS-<8 hex>).
        """
        self._scorer = scorer or RiskScorer()
        self._residual = residual_calculator or ResidualRiskCalculator()
        self._today = today
        self._id_factory = id_factory or (lambda: f"SWMS-{uuid4().hex[:8].upper()}")

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def assemble(self, sections: Mapping[str, Any] | RenderRequest) -> DocumentModel:
        """
        Assemble a complete DocumentModel.

        Args:
            sections: Mapping of section name to raw section data, or a RenderRequest.

        Returns:
            Immutable DocumentModel with defaults, scores and ids filled in.

        Raises:
            MalformedSection: If a section is not of the expected shape.
        """
        document_id: Optional[str] = None
        if isinstance(sections, RenderRequest):
            document_id = sections.document_id
            sections = sections.sections()
        elif not isinstance(sections, Mapping):
            raise MalformedSection("request", "an object keyed by section name")

        project_section = self._parse_model("project_info", sections.get("project_info"), ProjectInfoSection)
        project = self._build_project(project_section)
        activities = self._build_activities(
            self._parse_list("activities", sections.get("activities"), _activities_adapter),
            default_trade=project.trade_type,
        )
        emergency = self._build_emergency(
            self._parse_model("emergency", sections.get("emergency"), EmergencySection)
        )
        equipment = tuple(
            self._build_equipment(item)
            for item in self._parse_list("equipment", sections.get("equipment"), _equipment_adapter)
        )
        ppe = _dedupe(self._parse_list("ppe", sections.get("ppe"), _text_list_adapter))
        hrcw = _dedupe(self._parse_list("hrcw_categories", sections.get("hrcw_categories"), _text_list_adapter))
        sign_in = tuple(
            self._build_sign_in(item)
            for item in self._parse_list("sign_in_entries", sections.get("sign_in_entries"), _sign_in_adapter)
        )

        document = DocumentModel(
            document_id=_text(document_id, "") or self._id_factory(),
            prepared_on=self._today(),
            project=project,
            activities=activities,
            emergency=emergency,
            equipment=equipment,
            ppe=ppe,
            hrcw_categories=hrcw,
            sign_in_entries=sign_in,
        )
        logger.info(
            f"Assembled {document.document_id}: {len(activities)} activities, "
            f"{len(equipment)} equipment, {len(ppe)} PPE items, {len(sign_in)} sign ins"
        )
        return document

    # -------------------------------------------------------------------------
    # Section parsing
    # -------------------------------------------------------------------------

    def _parse_model(self, section: str, raw: Any, model: type[BaseModel]) -> BaseModel:
        """Validate an object section; absent sections become all-defaults."""
        if raw is None:
            return model()
        if not isinstance(raw, Mapping):
            raise MalformedSection(section, _EXPECTED[section], details=f"got {type(raw).__name__}")
        try:
            return model.model_validate(dict(raw))
        except ValidationError as e:
            raise MalformedSection(section, _EXPECTED[section], details=str(e)[:500]) from e

    def _parse_list(self, section: str, raw: Any, adapter: TypeAdapter) -> list:
        """Validate a list section; absent sections become empty lists."""
        if raw is None:
            return []
        if isinstance(raw, (set, frozenset)):
            # Unordered input gets a stable order
            raw = sorted(raw, key=str)
        if not isinstance(raw, (list, tuple)):
            raise MalformedSection(section, _EXPECTED[section], details=f"got {type(raw).__name__}")
        try:
            return adapter.validate_python(list(raw))
        except ValidationError as e:
            raise MalformedSection(section, _EXPECTED[section], details=str(e)[:500]) from e

    # -------------------------------------------------------------------------
    # Builders
    # -------------------------------------------------------------------------

    def _build_project(self, section: ProjectInfoSection) -> ProjectInfo:
        values = {
            field: _text(getattr(section, field), default)
            for field, default in PROJECT_DEFAULTS.items()
        }
        return ProjectInfo(**values)

    def _build_activities(
        self,
        items: list[ActivityInput],
        default_trade: str,
    ) -> tuple[WorkActivity, ...]:
        used_ids: set[str] = set()
        activities = []
        for index, item in enumerate(items, start=1):
            activity_id = self._unique_id(item.activity_id, index, used_ids)
            activities.append(self._build_activity(item, activity_id, default_trade))
        return tuple(activities)

    @staticmethod
    def _unique_id(candidate: Optional[str], index: int, used: set[str]) -> str:
        """Keep caller ids, fall back to activity-<n>, suffix on collision."""
        base = _text(candidate, f"activity-{index}")
        activity_id = base
        suffix = 2
        while activity_id in used:
            activity_id = f"{base}-{suffix}"
            suffix += 1
        used.add(activity_id)
        return activity_id

    def _build_activity(
        self,
        item: ActivityInput,
        activity_id: str,
        default_trade: str,
    ) -> WorkActivity:
        name = _text(item.name, ACTIVITY_NAME_DEFAULT)
        trade = _text(item.trade, default_trade)
        controls = _dedupe(item.control_measures)

        hazards = tuple(self._build_hazard(h, name, trade) for h in item.hazards)
        initial, residual = self._scores(
            name,
            trade,
            None,
            len(controls),
            item.initial_risk_score,
            item.residual_risk_score,
        )

        return WorkActivity(
            activity_id=activity_id,
            name=name,
            description=_text(item.description, ACTIVITY_DESCRIPTION_DEFAULT),
            trade=trade,
            initial_risk=initial,
            hazards=hazards,
            control_measures=controls,
            residual_risk=residual,
            legislation=_dedupe(item.legislation),
        )

    def _build_hazard(self, item: HazardInput, activity_name: str, trade: str) -> Hazard:
        category = HazardCategory.parse(item.category)
        controls = _dedupe(item.control_measures)
        initial, residual = self._scores(
            activity_name,
            trade,
            category,
            len(controls),
            item.initial_risk_score,
            item.residual_risk_score,
        )
        return Hazard(
            category=category,
            description=_text(item.description, category.value),
            initial_risk=initial,
            control_measures=controls,
            residual_risk=residual,
        )

    def _scores(
        self,
        task_name: str,
        trade: str,
        category: Optional[HazardCategory],
        control_count: int,
        initial_value: Optional[int],
        residual_value: Optional[int],
    ) -> tuple[RiskScore, RiskScore]:
        """
        Fill in missing scores.

        Supplied scores are kept, except that a residual violating the
        reduction rule is pulled down to one point below the initial score.
        """
        if initial_value is None:
            initial = self._scorer.score(task_name, trade, category)
        else:
            initial = RiskScore(value=initial_value)

        if residual_value is None:
            return initial, self._residual.residual(initial, control_count)

        if control_count and residual_value > initial.value - 1:
            clamped = max(1, initial.value - 1)
            logger.warning(
                f"Residual {residual_value} for '{task_name[:60]}' not below "
                f"initial {initial.value}; clamped to {clamped}"
            )
            residual_value = clamped
        return initial, RiskScore(value=residual_value)

    def _build_emergency(self, section: EmergencySection) -> EmergencyInfo:
        return EmergencyInfo(
            contacts=tuple(EmergencyContact(name=c.name, phone=c.phone) for c in section.contacts),
            **{field: _text(getattr(section, field), default) for field, default in EMERGENCY_DEFAULTS.items()},
        )

    @staticmethod
    def _build_sign_in(item: SignInEntryInput) -> SignInEntry:
        return SignInEntry(
            name=item.name,
            company=item.company or "",
            position=item.position or "",
            entry_date=item.entry_date or "",
            time_in=item.time_in or "",
            time_out=item.time_out or "",
            signature=item.signature or "",
            induction_complete=item.induction_complete,
        )

    @staticmethod
    def _build_equipment(item: EquipmentInput) -> PlantEquipment:
        return PlantEquipment(
            name=item.name,
            model=_text(item.model, EQUIPMENT_FIELD_DEFAULT),
            serial_number=_text(item.serial_number, EQUIPMENT_FIELD_DEFAULT),
            category=_text(item.category, "General"),
            certification_required=item.certification_required,
            risk_level=item.risk_level,
            next_inspection=item.next_inspection,
        )
