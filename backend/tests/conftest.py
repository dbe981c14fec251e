"""
Pytest configuration and shared fixtures.

This module provides common fixtures for testing the Riskify SWMS backend.
Renderer tiers are replaced by in-process fakes so no test needs network
access or a Chromium binary; the primitive tier is the only real renderer
used (reportlab runs fully in-process).

Usage:
    async def test_example(fake_renderer, sample_model):
        renderer = fake_renderer("external", error=RendererUnavailable("external", "down"))
        with pytest.raises(RendererUnavailable):
            await renderer.render(sample_model)
"""

import asyncio
import random
from datetime import date
from typing import Optional
from unittest.mock import MagicMock

import pytest

from riskify.rendering.base import BaseRenderer

FAKE_PDF = b"%PDF-1.4\n% fake\n%%EOF\n"


# =============================================================================
# RANDOM SOURCE FIXTURES
# =============================================================================


class StubRandom:
    """Random source whose randint always returns the same value."""

    def __init__(self, value: int = 0):
        self.value = value
        self.calls: list[tuple[int, int]] = []

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        return self.value


@pytest.fixture
def stub_rng():
    """
    Factory fixture for deterministic jitter.

    Usage:
        def test_example(stub_rng):
            scorer = RiskScorer(rng=stub_rng(1))
    """
    return StubRandom


@pytest.fixture
def zero_rng():
    """Random source with no jitter."""
    return StubRandom(0)


@pytest.fixture
def seeded_rng():
    """Seeded random.Random for reproducible, still-jittered runs."""
    return random.Random(1234)


# =============================================================================
# RISK ENGINE FIXTURES
# =============================================================================


@pytest.fixture
def scorer(zero_rng):
    """RiskScorer with default tables and no jitter."""
    from riskify.risk import RiskScorer

    return RiskScorer(rng=zero_rng)


@pytest.fixture
def residual_calculator():
    from riskify.risk import ResidualRiskCalculator

    return ResidualRiskCalculator()


# =============================================================================
# DOCUMENT FIXTURES
# =============================================================================


@pytest.fixture
def assembler(scorer, residual_calculator):
    """
    DocumentAssembler with a fixed clock and document id.

    Usage:
        def test_example(assembler, sample_sections):
            document = assembler.assemble(sample_sections)
    """
    from riskify.documents import DocumentAssembler

    return DocumentAssembler(
        scorer=scorer,
        residual_calculator=residual_calculator,
        today=lambda: date(2024, 3, 18),
        id_factory=lambda: "SWMS-TEST0001",
    )


@pytest.fixture
def sample_sections():
    """Raw form sections as the frontend submits them (camelCase keys)."""
    return {
        "project_info": {
            "companyName": "Acme Electrical Pty Ltd",
            "projectName": "Level 3 Fit-out",
            "jobNumber": "J-1042",
            "projectAddress": "12 George St, Sydney NSW",
            "principalContractor": "BuildCo",
            "swmsCreatorName": "Sam Taylor",
            "swmsCreatorPosition": "Leading Hand",
            "tradeType": "Electrical",
        },
        "activities": [
            {
                "id": "act-1",
                "activity": "Electrical - high voltage connection work",
                "description": "Terminate mains cabling at the main switchboard",
                "hazards": [
                    {"type": "Electrical", "description": "Contact with live conductors"},
                    "Arc flash",
                ],
                "controlMeasures": [
                    "Isolate and lock out supply",
                    "Test before touch",
                    "Arc-rated PPE",
                ],
                "legislation": ["AS/NZS 3000:2018", "WHS Regulation 2017 Part 4.7"],
            },
            {
                "activity": "Install cable tray",
                "trade": "Electrical",
                "controlMeasures": ["Use EWP with harness"],
            },
        ],
        "emergency": {
            "contacts": [{"name": "Site Supervisor", "phone": "0400 000 000"}],
            "assemblyPoint": "Car park B",
        },
        "equipment": [
            {
                "equipment": "Elevated work platform",
                "model": "Genie GS-1930",
                "serial": "GS30-1234",
                "category": "Access",
                "certificationRequired": "Yes",
                "riskLevel": "high",
                "nextInspection": "30/06/2024",
            }
        ],
        "ppe": ["hard-hat", "hi-vis-vest", "hard-hat", "arc-flash-suit"],
        "hrcw_categories": ["Work on energised electrical installations"],
    }


@pytest.fixture
def sample_model(assembler, sample_sections):
    """Assembled DocumentModel built from sample_sections."""
    return assembler.assemble(sample_sections)


# =============================================================================
# RENDERER FIXTURES
# =============================================================================


class FakeRenderer(BaseRenderer):
    """
    In-process renderer tier with scripted behavior.

    Attributes:
        calls: Number of render() invocations.
    """

    def __init__(
        self,
        name: str,
        payload: bytes = FAKE_PDF,
        error: Optional[Exception] = None,
        delay: float = 0.0,
        timeout: float = 1.0,
    ):
        super().__init__(timeout=timeout)
        self.NAME = name
        self._payload = payload
        self._error = error
        self._delay = delay
        self.calls = 0

    async def render(self, document) -> bytes:
        self.calls += 1
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return self._payload


@pytest.fixture
def fake_pdf():
    """Minimal payload that passes the PDF header check."""
    return FAKE_PDF


@pytest.fixture
def fake_renderer():
    """
    Factory fixture for scripted renderer tiers.

    Usage:
        def test_example(fake_renderer):
            slow = fake_renderer("external", delay=1.0, timeout=0.05)
            broken = fake_renderer("headless_browser", error=RuntimeError("boom"))
    """
    return FakeRenderer


# =============================================================================
# CONTAINER FIXTURES
# =============================================================================


@pytest.fixture
def test_settings():
    """Settings with no external URL and a fixed scoring seed."""
    from riskify.core.config import Settings

    return Settings(external_renderer_url=None, scoring_seed=7, _env_file=None)


@pytest.fixture
def test_container(test_settings, zero_rng):
    """
    DependencyContainer with a deterministic random source.

    Override the renderer chain per test:
        test_container.override_renderers([fake_renderer("primitive")])
    """
    from riskify.services.container import DependencyContainer

    container = DependencyContainer(settings=test_settings)
    container.override_rng(zero_rng)
    return container


# =============================================================================
# LOGGER FIXTURES
# =============================================================================


@pytest.fixture
def mock_logger():
    """
    Mock flow logger for asserting render tracing.

    Usage:
        def test_example(mock_logger):
            orchestrator = RenderOrchestrator(chain, flow_logger=mock_logger)
            mock_logger.tier_failed.assert_called_once()
    """
    logger = MagicMock()
    logger.render_start = MagicMock()
    logger.tier_attempt = MagicMock()
    logger.tier_failed = MagicMock()
    logger.tier_succeeded = MagicMock()
    logger.render_end = MagicMock()
    logger.render_failed = MagicMock()
    logger.debug = MagicMock()
    logger.error = MagicMock()
    return logger


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
