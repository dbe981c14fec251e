"""
Render orchestrator: ordered fallback across renderer tiers.

Tiers are attempted strictly in order (external, headless browser,
primitive), never in parallel. Each attempt runs under its own time budget;
any failure or timeout is recorded and the next tier is tried. The first
tier that returns a valid PDF wins. When every tier fails the caller gets a
single AllRenderersFailed carrying one failure per tier.
"""

import asyncio
from typing import Optional, Sequence

from riskify.core.exceptions import AllRenderersFailed, RendererError, RendererTimeout, RendererUnavailable
from riskify.core.logging import RenderLogger, get_logger
from riskify.documents.model import DocumentModel
from riskify.rendering.base import PDF_MAGIC, BaseRenderer, TierFailure
from riskify.schemas.responses import RenderStatus

logger = get_logger(__name__)


class RenderOrchestrator:
    """
    Drives one document through the renderer chain.

    An orchestrator is created per request; `status` follows
    idle -> loading -> success | error for that request.

    Attributes:
        status: Current render status.
        failures: Tier failures recorded during the last render.
        last_backend: Name of the tier that produced the last PDF.
    """

    def __init__(
        self,
        renderers: Sequence[BaseRenderer],
        flow_logger: Optional[RenderLogger] = None,
    ) -> None:
        if not renderers:
            raise ValueError("RenderOrchestrator needs at least one renderer")
        self._renderers = list(renderers)
        self._flow = flow_logger or RenderLogger("orchestrator")
        self.status: RenderStatus = "idle"
        self.failures: list[TierFailure] = []
        self.last_backend: Optional[str] = None

    @property
    def chain(self) -> list[str]:
        return [renderer.name for renderer in self._renderers]

    async def render(self, document: DocumentModel) -> bytes:
        """
        Render the document with the first tier that succeeds.

        Args:
            document: The assembled document.

        Returns:
            PDF bytes from the winning tier.

        Raises:
            AllRenderersFailed: If every tier failed or timed out.
        """
        self.status = "loading"
        self.failures = []
        self.last_backend = None
        self._flow.render_start(document.document_id, self.chain)

        for renderer in self._renderers:
            self._flow.tier_attempt(renderer.name, renderer.timeout)
            try:
                pdf = await self._attempt(renderer, document)
            except RendererError as e:
                failure = TierFailure.from_error(renderer.name, e)
                self.failures.append(failure)
                self._flow.tier_failed(failure.backend, failure.kind, failure.error)
                continue

            self.status = "success"
            self.last_backend = renderer.name
            self._flow.tier_succeeded(renderer.name, len(pdf))
            self._flow.render_end(document.document_id, renderer.name, len(pdf), len(self.failures) + 1)
            return pdf

        self.status = "error"
        self._flow.render_failed(document.document_id, [str(f) for f in self.failures])
        raise AllRenderersFailed(self.failures)

    async def _attempt(self, renderer: BaseRenderer, document: DocumentModel) -> bytes:
        """Run one tier under its time budget, normalising every failure to RendererError."""
        try:
            pdf = await asyncio.wait_for(renderer.render(document), timeout=renderer.timeout)
        except asyncio.TimeoutError as e:
            raise RendererTimeout(renderer.name, renderer.timeout) from e
        except RendererError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error in renderer '{renderer.name}'")
            raise RendererUnavailable(renderer.name, "unexpected error", original_error=e) from e

        if not isinstance(pdf, (bytes, bytearray)) or not pdf:
            raise RendererUnavailable(renderer.name, "empty output")
        if not bytes(pdf).startswith(PDF_MAGIC):
            raise RendererUnavailable(renderer.name, "output is not a PDF")
        return bytes(pdf)
