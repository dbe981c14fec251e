"""
Abstract base class for renderer backends.

Every tier of the render chain (external service, headless browser,
primitive drawing) implements the same `render()` capability, so the
RenderOrchestrator can iterate an ordered list of renderers without knowing
which concrete backend it is talking to.

The design follows these principles:
- Dependency Injection: clients, drivers and loggers are injected, enabling
  easy testing with fakes
- Template Method Pattern: subclasses implement `render()`, the base class
  handles output validation and logging helpers

Example:
    class MyRenderer(BaseRenderer):
        NAME = "my_renderer"

        async def render(self, document: DocumentModel) -> bytes:
            ...
"""

from abc import ABC, abstractmethod
from typing import Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from riskify.core.exceptions import RendererError, RendererUnavailable
from riskify.documents.model import DocumentModel

PDF_MAGIC = b"%PDF-"


# =============================================================================
# PROTOCOLS (For Dependency Injection)
# =============================================================================


@runtime_checkable
class RenderLoggerProtocol(Protocol):
    """Interface for render flow loggers; satisfied by RenderLogger and mocks."""

    def debug(self, node: str, message: str) -> None:
        ...

    def error(self, node: str, error: Exception) -> None:
        ...


# =============================================================================
# FAILURE RECORD
# =============================================================================


class TierFailure(BaseModel):
    """One failed tier attempt, kept by the orchestrator for aggregation."""

    model_config = ConfigDict(frozen=True)

    backend: str
    kind: str
    error: str

    @classmethod
    def from_error(cls, backend: str, error: Exception) -> "TierFailure":
        kind = error.kind if isinstance(error, RendererError) else "unavailable"
        return cls(backend=backend, kind=kind, error=str(error))

    def __str__(self) -> str:
        return f"{self.backend} [{self.kind}]: {self.error}"


# =============================================================================
# BASE RENDERER CLASS
# =============================================================================


class BaseRenderer(ABC):
    """
    Abstract base class for a renderer tier.

    Attributes:
        NAME: Backend name used in logs and failure records (override in subclass).
        DEFAULT_TIMEOUT: Time budget in seconds when none is injected.
    """

    NAME: str = "renderer"
    DEFAULT_TIMEOUT: float = 30.0

    def __init__(
        self,
        timeout: Optional[float] = None,
        logger: Optional[RenderLoggerProtocol] = None,
    ) -> None:
        """
        Initialize the renderer.

        Args:
            timeout: Time budget for one render attempt, enforced by the orchestrator.
            logger: Optional flow logger.
        """
        self._timeout = timeout if timeout is not None else self.DEFAULT_TIMEOUT
        self._logger = logger

    @property
    def name(self) -> str:
        return self.NAME

    @property
    def timeout(self) -> float:
        return self._timeout

    # -------------------------------------------------------------------------
    # Abstract Methods (Must be implemented by subclasses)
    # -------------------------------------------------------------------------

    @abstractmethod
    async def render(self, document: DocumentModel) -> bytes:
        """
        Render the document to PDF bytes.

        Args:
            document: The assembled document.

        Returns:
            PDF bytes.

        Raises:
            RendererUnavailable: If this tier cannot produce the document.
            RendererTimeout: If this tier detects its own timeout.
        """
        pass

    # -------------------------------------------------------------------------
    # Concrete Helper Methods
    # -------------------------------------------------------------------------

    def _ensure_pdf(self, payload: bytes | None) -> bytes:
        """Reject empty or non-PDF output so the chain falls through."""
        if not payload:
            raise RendererUnavailable(self.NAME, "empty output")
        if not payload.startswith(PDF_MAGIC):
            raise RendererUnavailable(
                self.NAME,
                "output is not a PDF",
                details=f"first bytes: {payload[:16]!r}",
            )
        return payload

    def _log_debug(self, message: str) -> None:
        if self._logger:
            self._logger.debug(self.NAME, message)

    def _log_error(self, error: Exception) -> None:
        if self._logger:
            self._logger.error(self.NAME, error)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(timeout={self._timeout})"
