"""
Unit tests for RendererFactory and DependencyContainer.

Tests chain construction from settings and test-time overrides.
"""

import pytest

from riskify.core.config import Settings
from riskify.documents import DocumentAssembler
from riskify.rendering import (
    TIER_ORDER,
    ExternalRendererClient,
    HeadlessBrowserRenderer,
    PrimitiveRenderer,
    RendererFactory,
    RenderOrchestrator,
    build_renderer_chain,
)
from riskify.services import DependencyContainer, get_container, reset_container


class TestRendererFactory:
    """Tests for renderer chain construction."""

    def test_chain_order(self, test_settings):
        chain = build_renderer_chain(test_settings)

        assert [r.name for r in chain] == list(TIER_ORDER)
        assert isinstance(chain[0], ExternalRendererClient)
        assert isinstance(chain[1], HeadlessBrowserRenderer)
        assert isinstance(chain[2], PrimitiveRenderer)

    def test_timeouts_come_from_settings(self):
        settings = Settings(
            external_renderer_url="http://renderer.local/pdf",
            external_renderer_timeout=3.0,
            browser_render_timeout=20.0,
            primitive_render_timeout=9.0,
            _env_file=None,
        )
        external, browser, primitive = RendererFactory(settings).create_chain()

        assert external.endpoint == "http://renderer.local/pdf"
        assert (external.timeout, browser.timeout, primitive.timeout) == (3.0, 20.0, 9.0)

    def test_default_timeouts(self):
        external, browser, primitive = build_renderer_chain(Settings(_env_file=None))

        assert external.timeout < browser.timeout
        assert (external.timeout, browser.timeout, primitive.timeout) == (10.0, 45.0, 30.0)

    def test_unknown_renderer_raises(self, test_settings):
        with pytest.raises(ValueError) as exc_info:
            RendererFactory(test_settings).create("wkhtmltopdf")

        assert "Unknown renderer" in str(exc_info.value)


class TestDependencyContainer:
    """Tests for the container's lazy services and overrides."""

    def test_assembler_is_cached(self, test_container):
        assert isinstance(test_container.assembler, DocumentAssembler)
        assert test_container.assembler is test_container.assembler

    def test_orchestrator_is_created_per_request(self, test_container):
        first = test_container.create_orchestrator()
        second = test_container.create_orchestrator()

        assert isinstance(first, RenderOrchestrator)
        assert first is not second
        assert first.status == "idle"

    def test_override_renderers(self, test_container, fake_renderer):
        test_container.override_renderers([fake_renderer("primitive")])

        assert test_container.create_orchestrator().chain == ["primitive"]

    def test_scoring_seed_makes_scores_reproducible(self, test_settings):
        first = DependencyContainer(settings=test_settings)
        second = DependencyContainer(settings=test_settings)
        tasks = ["Install switchboard", "Erect scaffold", "Hang doors", "Cut tiles"]

        assert [first.scorer.score(t, "Carpentry").value for t in tasks] == [
            second.scorer.score(t, "Carpentry").value for t in tasks
        ]

    def test_reset_clears_overrides(self, test_container, fake_renderer):
        test_container.override_renderers([fake_renderer("primitive")])
        test_container.reset()

        assert [r.name for r in test_container.renderers] == list(TIER_ORDER)

    def test_get_container_is_singleton(self):
        reset_container()
        try:
            assert get_container() is get_container()
        finally:
            reset_container()
