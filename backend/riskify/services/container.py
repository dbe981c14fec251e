"""
Dependency Injection Container.

This module provides a centralized container for managing service
dependencies across the application. Stateless services (scorer, assembler,
renderer tiers) are shared singletons; the RenderOrchestrator carries
per-request status and is created fresh for every request.

Example:
    from riskify.services.container import get_container

    container = get_container()
    document = container.assembler.assemble(sections)
    pdf = await container.create_orchestrator().render(document)
"""

import random
from functools import lru_cache
from typing import Optional, Sequence

from riskify.core.config import Settings, get_settings
from riskify.core.logging import RenderLogger
from riskify.documents.assembler import DocumentAssembler
from riskify.rendering.base import BaseRenderer
from riskify.rendering.factory import RendererFactory
from riskify.rendering.orchestrator import RenderOrchestrator
from riskify.risk import RandomSource, ResidualRiskCalculator, RiskScorer


class DependencyContainer:
    """
    Centralized container for application dependencies.

    Attributes:
        _settings: Settings the services are built from.
        _rng: Random source for scoring jitter (seeded from settings when set).
        _scorer: Cached RiskScorer instance.
        _residual_calculator: Cached ResidualRiskCalculator instance.
        _assembler: Cached DocumentAssembler instance.
        _renderers: Cached renderer chain.
        _logger: Flow logger for the render chain.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        """Initialize the container with lazy service references."""
        self._settings = settings or get_settings()
        self._rng: Optional[RandomSource] = None
        self._scorer: Optional[RiskScorer] = None
        self._residual_calculator: Optional[ResidualRiskCalculator] = None
        self._assembler: Optional[DocumentAssembler] = None
        self._renderers: Optional[list[BaseRenderer]] = None
        self._logger: Optional[RenderLogger] = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def rng(self) -> RandomSource:
        if self._rng is None:
            self._rng = random.Random(self._settings.scoring_seed)
        return self._rng

    @property
    def logger(self) -> RenderLogger:
        """
        Get the render flow logger.

        Returns:
            RenderLogger shared by the orchestrator and every tier.
        """
        if self._logger is None:
            self._logger = RenderLogger("render")
        return self._logger

    @property
    def scorer(self) -> RiskScorer:
        if self._scorer is None:
            self._scorer = RiskScorer(rng=self.rng)
        return self._scorer

    @property
    def residual_calculator(self) -> ResidualRiskCalculator:
        if self._residual_calculator is None:
            self._residual_calculator = ResidualRiskCalculator()
        return self._residual_calculator

    @property
    def assembler(self) -> DocumentAssembler:
        """
        Get the DocumentAssembler instance.

        The assembler is wired to the container's scorer so a configured
        scoring seed applies to every assembled document.
        """
        if self._assembler is None:
            self._assembler = DocumentAssembler(
                scorer=self.scorer,
                residual_calculator=self.residual_calculator,
            )
        return self._assembler

    @property
    def renderers(self) -> list[BaseRenderer]:
        """
        Get the renderer chain in fallback order.

        Returns:
            [external, headless_browser, primitive] built from settings.
        """
        if self._renderers is None:
            factory = RendererFactory(settings=self._settings, logger=self.logger)
            self._renderers = factory.create_chain()
        return self._renderers

    def create_orchestrator(self) -> RenderOrchestrator:
        """Create a new orchestrator for one render request."""
        return RenderOrchestrator(self.renderers, flow_logger=self.logger)

    def reset(self) -> None:
        """
        Reset all cached services.

        Useful for testing to ensure fresh instances.
        """
        self._rng = None
        self._scorer = None
        self._residual_calculator = None
        self._assembler = None
        self._renderers = None
        self._logger = None

    def override_renderers(self, renderers: Sequence[BaseRenderer]) -> None:
        """
        Override the renderer chain with fakes.

        Args:
            renderers: Renderers to use instead of the configured chain, in order.
        """
        self._renderers = list(renderers)

    def override_rng(self, rng: RandomSource) -> None:
        """
        Override the jitter source.

        Args:
            rng: Random source, e.g. random.Random(seed) or a stub.
        """
        self._rng = rng
        # Reset dependents to pick up the new source
        self._scorer = None
        self._assembler = None


@lru_cache(maxsize=1)
def get_container() -> DependencyContainer:
    """
    Get the singleton DependencyContainer instance.

    Uses lru_cache to ensure only one container exists per process.

    Example:
        >>> container = get_container()
        >>> document = container.assembler.assemble(sections)
    """
    return DependencyContainer()


def reset_container() -> None:
    """
    Reset the global container singleton.

    Clears the lru_cache and allows a fresh container to be created.
    Useful for testing isolation.
    """
    get_container.cache_clear()
