from riskify.rendering.base import PDF_MAGIC, BaseRenderer, RenderLoggerProtocol, TierFailure
from riskify.rendering.browser import HeadlessBrowserRenderer
from riskify.rendering.external import ExternalRendererClient, build_payload
from riskify.rendering.factory import TIER_ORDER, RendererFactory, build_renderer_chain
from riskify.rendering.html import SIGN_IN_REGISTER_ROWS, render_html
from riskify.rendering.orchestrator import RenderOrchestrator
from riskify.rendering.primitive import PrimitiveRenderer

__all__ = [
    # Classes
    "BaseRenderer",
    "ExternalRendererClient",
    "HeadlessBrowserRenderer",
    "PrimitiveRenderer",
    "RenderOrchestrator",
    "RendererFactory",
    # Models
    "TierFailure",
    "RenderLoggerProtocol",
    # Functions
    "build_payload",
    "build_renderer_chain",
    "render_html",
    # Constants
    "PDF_MAGIC",
    "SIGN_IN_REGISTER_ROWS",
    "TIER_ORDER",
]
