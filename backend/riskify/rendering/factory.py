"""
Renderer Factory for building the render chain.

This module implements the Factory pattern for the renderer tiers. Each
tier is constructed from Settings with its own timeout, and the chain is
always returned in the fixed fallback order.

Example:
    from riskify.rendering.factory import RendererFactory

    factory = RendererFactory(settings=settings, logger=render_logger)
    chain = factory.create_chain()
    orchestrator = RenderOrchestrator(chain)
"""

from typing import Callable, Dict, Optional

from riskify.core.config import Settings
from riskify.rendering.base import BaseRenderer, RenderLoggerProtocol
from riskify.rendering.browser import HeadlessBrowserRenderer
from riskify.rendering.external import ExternalRendererClient
from riskify.rendering.primitive import PrimitiveRenderer

# Fallback order: highest fidelity first, zero-dependency last
TIER_ORDER: tuple[str, ...] = (
    ExternalRendererClient.NAME,
    HeadlessBrowserRenderer.NAME,
    PrimitiveRenderer.NAME,
)


class RendererFactory:
    """
    Factory for creating renderer tiers from Settings.

    Attributes:
        _builders: Mapping of tier name to a zero-argument constructor.
    """

    def __init__(
        self,
        settings: Settings,
        logger: Optional[RenderLoggerProtocol] = None,
    ) -> None:
        """
        Initialize the factory.

        Args:
            settings: Application settings holding URLs, timeouts and browser flags.
            logger: Optional flow logger injected into every renderer.
        """
        self._settings = settings
        self._logger = logger
        self._builders: Dict[str, Callable[[], BaseRenderer]] = {
            ExternalRendererClient.NAME: self._external,
            HeadlessBrowserRenderer.NAME: self._browser,
            PrimitiveRenderer.NAME: self._primitive,
        }

    def create(self, name: str) -> BaseRenderer:
        """
        Create a single renderer tier by name.

        Raises:
            ValueError: If the tier name is unknown.
        """
        builder = self._builders.get(name)
        if builder is None:
            raise ValueError(f"Unknown renderer: '{name}'. Valid renderers are: {list(TIER_ORDER)}")
        return builder()

    def create_chain(self) -> list[BaseRenderer]:
        """Create every tier in fallback order."""
        return [self.create(name) for name in TIER_ORDER]

    def _external(self) -> BaseRenderer:
        return ExternalRendererClient(
            endpoint=self._settings.external_renderer_url,
            timeout=self._settings.external_renderer_timeout,
            logger=self._logger,
        )

    def _browser(self) -> BaseRenderer:
        return HeadlessBrowserRenderer(
            timeout=self._settings.browser_render_timeout,
            executable_path=self._settings.browser_executable_path,
            launch_args=self._settings.browser_launch_args,
            logger=self._logger,
        )

    def _primitive(self) -> BaseRenderer:
        return PrimitiveRenderer(
            timeout=self._settings.primitive_render_timeout,
            logger=self._logger,
        )


def build_renderer_chain(
    settings: Settings,
    logger: Optional[RenderLoggerProtocol] = None,
) -> list[BaseRenderer]:
    """Convenience wrapper: the full chain for the given settings."""
    return RendererFactory(settings=settings, logger=logger).create_chain()
