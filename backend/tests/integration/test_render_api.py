"""
Integration tests for the HTTP API.

The FastAPI app runs in-process through TestClient. The container is
swapped for a test container whose renderer chain is scripted per test;
the primitive tier used here is the real reportlab renderer.
"""

import pytest
from fastapi.testclient import TestClient

from riskify.core.exceptions import RendererTimeout, RendererUnavailable
from riskify.main import app
from riskify.rendering import PDF_MAGIC, PrimitiveRenderer
from riskify.services import get_container

pytestmark = pytest.mark.integration


@pytest.fixture
def client(test_container):
    app.dependency_overrides[get_container] = lambda: test_container
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def render_body(sample_sections):
    """Render request body as the form wizard posts it."""
    return {
        "projectInfo": sample_sections["project_info"],
        "activities": sample_sections["activities"],
        "emergencyInfo": sample_sections["emergency"],
        "plantEquipment": sample_sections["equipment"],
        "ppeRequirements": sample_sections["ppe"],
        "hrcwCategories": sample_sections["hrcw_categories"],
        "documentId": "SWMS-API00001",
    }


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestRenderPdf:
    """Tests for POST /api/swms/pdf."""

    def test_external_down_falls_back_to_browser(self, client, test_container, fake_renderer, render_body):
        test_container.override_renderers([
            fake_renderer("external", error=RendererUnavailable("external", "HTTP 502")),
            fake_renderer("headless_browser", payload=b"%PDF-1.7 from browser"),
            fake_renderer("primitive"),
        ])

        response = client.post("/api/swms/pdf", json=render_body)

        assert response.status_code == 200
        assert response.content == b"%PDF-1.7 from browser"
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["x-render-backend"] == "headless_browser"
        assert response.headers["x-document-id"] == "SWMS-API00001"
        assert 'filename="SWMS_Level_3_Fit_out_SWMS-API00001.pdf"' in response.headers["content-disposition"]

    def test_primitive_tier_renders_real_pdf(self, client, test_container, fake_renderer, render_body):
        test_container.override_renderers([
            fake_renderer("external", error=RendererUnavailable("external", "not configured")),
            fake_renderer("headless_browser", error=RendererTimeout("headless_browser", 45.0)),
            PrimitiveRenderer(),
        ])

        response = client.post("/api/swms/pdf", json=render_body)

        assert response.status_code == 200
        assert response.content.startswith(PDF_MAGIC)
        assert response.headers["x-render-backend"] == "primitive"

    def test_all_tiers_failing_returns_502(self, client, test_container, fake_renderer, render_body):
        test_container.override_renderers([
            fake_renderer("external", error=RendererUnavailable("external", "not configured")),
            fake_renderer("headless_browser", error=RendererTimeout("headless_browser", 45.0)),
            fake_renderer("primitive", payload=b"garbage"),
        ])

        response = client.post("/api/swms/pdf", json=render_body)

        assert response.status_code == 502
        body = response.json()
        assert body["status"] == "error"
        assert [e["backend"] for e in body["errors"]] == ["external", "headless_browser", "primitive"]
        assert [e["kind"] for e in body["errors"]] == ["unavailable", "timeout", "unavailable"]

    def test_malformed_section_returns_422(self, client, test_container, fake_renderer, render_body):
        renderer = fake_renderer("primitive")
        test_container.override_renderers([renderer])
        render_body["activities"] = "excavate and backfill"

        response = client.post("/api/swms/pdf", json=render_body)

        assert response.status_code == 422
        body = response.json()
        assert body["status"] == "error"
        assert body["section"] == "activities"
        assert "list of activity objects" in body["expected"]
        assert renderer.calls == 0


class TestPreview:
    """Tests for POST /api/swms/preview."""

    def test_preview_returns_assembled_document(self, client, render_body):
        response = client.post("/api/swms/preview", json=render_body)

        assert response.status_code == 200
        body = response.json()
        assert body["document_id"] == "SWMS-API00001"
        assert body["project"]["project_name"] == "Level 3 Fit-out"
        activity = body["activities"][0]
        assert activity["initial_risk"] == {"value": 16, "level": "High"}
        assert activity["residual_risk"]["value"] < activity["initial_risk"]["value"]
        assert [a["activity_id"] for a in body["activities"]] == ["act-1", "activity-2"]

    def test_preview_accepts_sign_in_register(self, client, render_body):
        render_body["signInEntries"] = [{"name": "Alex Chen", "timeIn": "07:00", "inductionComplete": True}]

        response = client.post("/api/swms/preview", json=render_body)

        assert response.status_code == 200
        entry = response.json()["sign_in_entries"][0]
        assert entry["name"] == "Alex Chen"
        assert entry["time_in"] == "07:00"
        assert entry["induction_complete"] is True

    def test_preview_rejects_malformed_equipment(self, client, render_body):
        render_body["plantEquipment"] = [{"name": "EWP", "nextInspection": "not a date"}]

        response = client.post("/api/swms/preview", json=render_body)

        assert response.status_code == 422
        assert response.json()["section"] == "equipment"


class TestRiskScore:
    """Tests for POST /api/risk/score."""

    def test_score_with_controls(self, client):
        response = client.post(
            "/api/risk/score",
            json={"taskName": "Install cable tray", "tradeType": "Electrical", "controlMeasureCount": 1},
        )

        assert response.status_code == 200
        assert response.json() == {
            "initial_score": 14,
            "initial_level": "High",
            "residual_score": 8,
            "residual_level": "Medium",
            "control_measure_count": 1,
        }

    def test_hazard_category_is_case_insensitive(self, client):
        response = client.post(
            "/api/risk/score",
            json={"task_name": "Hang doors", "trade_type": "Carpentry", "hazard_category": "electrical"},
        )

        # round(6 * 1.2 * 1.3) = 9
        assert response.status_code == 200
        assert response.json()["initial_score"] == 9

    def test_missing_task_name_is_rejected(self, client):
        response = client.post("/api/risk/score", json={"tradeType": "Electrical"})

        assert response.status_code == 422
