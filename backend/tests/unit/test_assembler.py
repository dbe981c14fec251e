"""
Unit tests for DocumentAssembler.

Tests default substitution, scoring of unscored entries, activity id
uniqueness and fail-fast handling of malformed sections.
"""

from datetime import date

import pytest
from pydantic import ValidationError

from riskify.core.exceptions import MalformedSection
from riskify.documents import DocumentModel, Hazard, WorkActivity
from riskify.risk import HazardCategory, RiskLevel, RiskScore
from riskify.schemas import RenderRequest


class TestAssemblyDefaults:
    """Tests for default substitution."""

    def test_empty_request_gets_all_defaults(self, assembler):
        """Every section is optional; absent fields get textual defaults."""
        document = assembler.assemble({})

        assert isinstance(document, DocumentModel)
        assert document.document_id == "SWMS-TEST0001"
        assert document.prepared_on == date(2024, 3, 18)
        assert document.project.project_name == "Untitled Project"
        assert document.project.company_name == "Company Name"
        assert document.project.trade_type == "General Construction"
        assert document.emergency.assembly_point == "Main Entrance"
        assert document.emergency.procedures
        assert document.activities == ()
        assert document.equipment == ()
        assert document.ppe == ()

    def test_blank_strings_are_defaulted(self, assembler):
        document = assembler.assemble({"project_info": {"projectName": "   ", "jobNumber": ""}})

        assert document.project.project_name == "Untitled Project"
        assert document.project.job_number == "TBD"

    def test_supplied_project_fields_are_kept(self, sample_model):
        assert sample_model.project.company_name == "Acme Electrical Pty Ltd"
        assert sample_model.project.project_name == "Level 3 Fit-out"
        assert sample_model.project.swms_creator_position == "Leading Hand"
        assert sample_model.project.project_manager == "TBD"

    def test_activity_trade_defaults_to_project_trade(self, sample_model):
        assert sample_model.activities[0].trade == "Electrical"

    def test_activity_name_and_description_defaults(self, assembler):
        document = assembler.assemble({"activities": [{}]})
        activity = document.activities[0]

        assert activity.name == "Work Activity"
        assert activity.description == "No description provided"

    def test_blank_hazard_description_defaults_to_category(self, assembler):
        document = assembler.assemble({
            "activities": [
                {
                    "name": "Strip formwork",
                    "hazards": [{"type": "Physical", "description": "  "}, {"category": "Chemical"}, ""],
                }
            ]
        })
        hazards = document.activities[0].hazards

        assert [h.description for h in hazards] == ["Physical", "Chemical", "General"]

    def test_equipment_fields_are_parsed(self, sample_model):
        item = sample_model.equipment[0]

        assert item.name == "Elevated work platform"
        assert item.serial_number == "GS30-1234"
        assert item.certification_required is True
        assert item.risk_level == RiskLevel.HIGH
        assert item.next_inspection == date(2024, 6, 30)
        assert item.next_inspection_label == "30/06/2024"

    def test_equipment_without_inspection_date(self, assembler):
        document = assembler.assemble({"equipment": [{"name": "Drop saw", "nextInspection": "TBD"}]})
        item = document.equipment[0]

        assert item.next_inspection is None
        assert item.next_inspection_label == "TBD"
        assert item.model == "N/A"

    def test_ppe_is_deduplicated_in_order(self, sample_model):
        assert sample_model.ppe == ("hard-hat", "hi-vis-vest", "arc-flash-suit")
        names = [item.name for item in sample_model.ppe_items]
        assert names == ["Hard Hat", "Hi-Vis Vest", "Arc Flash Suit"]

    def test_ppe_set_is_sorted(self, assembler):
        document = assembler.assemble({
            "ppe": {"steel-cap-boots", "hard-hat", "gloves"},
            "hrcw_categories": frozenset({"Work in a trench", "Work at height"}),
        })

        assert document.ppe == ("gloves", "hard-hat", "steel-cap-boots")
        assert document.hrcw_categories == ("Work at height", "Work in a trench")

    def test_authorisation_and_hospital_fields(self, assembler):
        document = assembler.assemble({
            "project_info": {
                "authorisingPerson": "Sarah Williams",
                "authorisingPosition": "Project Manager",
                "authorisingSignature": "S. Williams",
            },
            "emergency": {"nearestHospital": "Sydney Hospital", "hospitalPhone": "(02) 9382 7111"},
        })

        assert document.project.authorising_person == "Sarah Williams"
        assert document.project.authorising_position == "Project Manager"
        assert document.project.authorising_signature == "S. Williams"
        assert document.emergency.nearest_hospital == "Sydney Hospital"
        assert document.emergency.hospital_phone == "(02) 9382 7111"

    def test_authorisation_and_hospital_defaults(self, assembler):
        document = assembler.assemble({})

        assert document.project.authorising_person == "TBD"
        assert document.project.authorising_signature == "Not signed"
        assert document.emergency.hospital_phone == "TBD"

    def test_emergency_procedure_list_is_joined(self, assembler):
        document = assembler.assemble({
            "emergency": {
                "emergencyProcedures": [
                    {"procedure": "Fire", "details": "Use nearest extinguisher"},
                    "Call 000",
                ]
            }
        })
        assert document.emergency.procedures == "Fire: Use nearest extinguisher\nCall 000"

    def test_filename_is_derived_from_project_name(self, sample_model):
        assert sample_model.filename == "SWMS_Level_3_Fit_out_SWMS-TEST0001.pdf"


class TestAssemblyScoring:
    """Tests for scoring of activities and hazards."""

    def test_unscored_activity_is_scored(self, sample_model):
        """16 initial, 3 controls -> round(16 * 0.45) = 7."""
        activity = sample_model.activities[0]

        assert activity.initial_risk.value == 16
        assert activity.initial_risk.level == RiskLevel.HIGH
        assert activity.residual_risk.value == 7
        assert activity.residual_risk.level == RiskLevel.MEDIUM

    def test_hazards_are_scored_and_categorised(self, sample_model):
        first, second = sample_model.activities[0].hazards

        assert first.category == HazardCategory.ELECTRICAL
        assert second.category == HazardCategory.GENERAL
        assert second.description == "Arc flash"
        assert first.initial_risk.value == 16
        assert first.residual_risk.value == 10

    def test_supplied_scores_are_kept(self, assembler):
        document = assembler.assemble({
            "activities": [
                {"name": "Paint walls", "initialRiskScore": 12, "residualRiskScore": 4, "controls": ["Ventilate"]}
            ]
        })
        activity = document.activities[0]

        assert activity.initial_risk.value == 12
        assert activity.residual_risk.value == 4

    def test_residual_not_below_initial_is_clamped(self, assembler):
        document = assembler.assemble({
            "activities": [
                {"name": "Paint walls", "initialRiskScore": 6, "residualRiskScore": 9, "controls": ["Ventilate"]}
            ]
        })
        activity = document.activities[0]

        assert activity.residual_risk.value == 5

    def test_residual_below_initial_whenever_controls_exist(self, sample_model):
        for activity in sample_model.activities:
            if activity.control_measures:
                assert activity.residual_risk.value <= activity.initial_risk.value - 1


class TestActivityIds:
    """Tests for activity id assignment."""

    def test_missing_ids_are_generated(self, sample_model):
        ids = [a.activity_id for a in sample_model.activities]
        assert ids == ["act-1", "activity-2"]

    def test_duplicate_ids_get_suffixes(self, assembler):
        document = assembler.assemble({
            "activities": [{"id": "a"}, {"id": "a"}, {}, {"id": "activity-3"}, {"id": 7}]
        })
        ids = [a.activity_id for a in document.activities]

        assert ids == ["a", "a-2", "activity-3", "activity-3-2", "7"]
        assert len(set(ids)) == len(ids)

    def test_order_is_preserved(self, assembler):
        names = ["Set out", "Excavate trench", "Pour footing", "Backfill"]
        document = assembler.assemble({"activities": [{"name": n} for n in names]})

        assert [a.name for a in document.activities] == names


class TestMalformedSections:
    """Tests for fail-fast section validation."""

    @pytest.mark.parametrize(
        "sections, section",
        [
            ({"activities": "dig a hole"}, "activities"),
            ({"activities": [42]}, "activities"),
            ({"activities": [{"name": "Dig", "initialRiskScore": 40}]}, "activities"),
            ({"project_info": ["Acme"]}, "project_info"),
            ({"emergency": {"contacts": [{"name": "Boss"}]}}, "emergency"),
            ({"equipment": [{"name": "EWP", "nextInspection": "31/02/2024"}]}, "equipment"),
            ({"equipment": {"name": "EWP"}}, "equipment"),
            ({"ppe": "hard-hat"}, "ppe"),
            ({"sign_in_entries": [{"company": "Acme"}]}, "sign_in_entries"),
            ({"sign_in_entries": {"name": "Alex"}}, "sign_in_entries"),
        ],
    )
    def test_malformed_section_raises(self, assembler, sections, section):
        with pytest.raises(MalformedSection) as exc_info:
            assembler.assemble(sections)

        assert exc_info.value.section == section
        assert exc_info.value.expected
        assert f"[Section: {section}]" in str(exc_info.value)

    def test_non_mapping_request_raises(self, assembler):
        with pytest.raises(MalformedSection) as exc_info:
            assembler.assemble(["not", "a", "mapping"])

        assert exc_info.value.section == "request"


class TestSignInRegister:
    """Tests for the site personnel sign in section."""

    def test_entries_are_parsed_in_order(self, assembler):
        document = assembler.assemble({
            "sign_in_entries": [
                {
                    "name": "Alex Chen",
                    "company": "Acme Electrical",
                    "position": "Apprentice",
                    "date": "18/03/2024",
                    "timeIn": "07:00",
                    "timeOut": "15:30",
                    "signature": "A. Chen",
                    "inductionComplete": "yes",
                },
                {"name": "Jo Smith"},
            ]
        })
        first, second = document.sign_in_entries

        assert first.name == "Alex Chen"
        assert first.entry_date == "18/03/2024"
        assert first.time_in == "07:00"
        assert first.time_out == "15:30"
        assert first.induction_complete is True
        assert second.name == "Jo Smith"
        assert second.company == ""
        assert second.induction_complete is False

    def test_absent_register_is_empty(self, sample_model):
        assert sample_model.sign_in_entries == ()


class TestRenderRequestInput:
    """Tests for assembling from the API request model."""

    def test_assembles_from_camel_case_request(self, assembler, sample_sections):
        request = RenderRequest.model_validate({
            "projectInfo": sample_sections["project_info"],
            "workActivities": sample_sections["activities"],
            "emergencyInfo": sample_sections["emergency"],
            "plantEquipment": sample_sections["equipment"],
            "ppeRequirements": sample_sections["ppe"],
            "hrcwCategories": sample_sections["hrcw_categories"],
            "signInEntries": [{"name": "Alex Chen", "timeIn": "07:00"}],
            "documentId": "SWMS-CUSTOM",
        })
        document = assembler.assemble(request)

        assert document.sign_in_entries[0].time_in == "07:00"

        assert document.document_id == "SWMS-CUSTOM"
        assert len(document.activities) == 2
        assert document.hrcw_categories == ("Work on energised electrical installations",)


class TestModelInvariants:
    """Tests for invariants enforced by the document models themselves."""

    def test_activity_residual_must_be_reduced(self):
        with pytest.raises(ValidationError):
            WorkActivity(
                activity_id="a",
                name="Dig",
                description="-",
                trade="Excavation",
                initial_risk=RiskScore(value=8),
                control_measures=("Shoring",),
                residual_risk=RiskScore(value=8),
            )

    def test_hazard_residual_must_be_reduced(self):
        with pytest.raises(ValidationError):
            Hazard(
                category=HazardCategory.PHYSICAL,
                description="Trench collapse",
                initial_risk=RiskScore(value=10),
                control_measures=("Benching",),
                residual_risk=RiskScore(value=12),
            )

    def test_duplicate_activity_ids_are_rejected(self, sample_model):
        activity = sample_model.activities[0]
        with pytest.raises(ValidationError) as exc_info:
            DocumentModel(
                document_id="SWMS-DUP",
                prepared_on=sample_model.prepared_on,
                project=sample_model.project,
                activities=(activity, activity),
                emergency=sample_model.emergency,
            )

        assert "Duplicate activity id" in str(exc_info.value)
