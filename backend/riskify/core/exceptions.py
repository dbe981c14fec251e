"""
Custom exceptions for the Riskify SWMS backend.

This module provides a hierarchy of exceptions for consistent error handling
across the application. All exceptions inherit from RiskifyBaseException.

Assembly errors abort a request immediately. Renderer errors are raised by a
single tier and absorbed by the RenderOrchestrator, which only surfaces
AllRenderersFailed once every tier has been exhausted.

Example:
    try:
        pdf = await orchestrator.render(document)
    except AllRenderersFailed as e:
        logger.error(f"Render failed: {e}")
"""

from typing import Optional, Sequence


class RiskifyBaseException(Exception):
    """
    Base exception class for all Riskify errors.

    Attributes:
        message: Human-readable description of the error.
        details: Optional additional context for debugging.
    """

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable description of the error.
            details: Optional additional context for debugging.
        """
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation with optional details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class MalformedSection(RiskifyBaseException):
    """
    Raised when a form section does not have the expected shape.

    Assembly fails fast: no partial recovery of a corrupt section is
    attempted and the error is never retried.

    Attributes:
        section: Name of the offending section (e.g. 'activities').
        expected: Description of the shape that was expected.
    """

    def __init__(
        self,
        section: str,
        expected: str,
        details: Optional[str] = None,
    ) -> None:
        """
        Initialize malformed section error.

        Args:
            section: Name of the offending section.
            expected: Description of the expected shape.
            details: Optional validation output for debugging.
        """
        self.section = section
        self.expected = expected
        super().__init__(f"[Section: {section}] Malformed section, expected {expected}", details)


class RendererError(RiskifyBaseException):
    """
    Base class for failures of a single renderer tier.

    Attributes:
        backend: Name of the renderer backend that failed.
    """

    kind: str = "error"

    def __init__(self, message: str, backend: str, details: Optional[str] = None) -> None:
        self.backend = backend
        super().__init__(f"[Renderer: {backend}] {message}", details)


class RendererUnavailable(RendererError):
    """
    Raised when a renderer tier cannot produce a document.

    Covers missing configuration, transport errors, non-2xx responses,
    browser launch failures and invalid output.

    Attributes:
        reason: Short reason for the failure.
        original_error: The underlying exception if available.
    """

    kind = "unavailable"

    def __init__(
        self,
        backend: str,
        reason: str,
        original_error: Optional[Exception] = None,
        details: Optional[str] = None,
    ) -> None:
        self.reason = reason
        self.original_error = original_error

        message = reason
        if original_error:
            message = f"{message} | Caused by: {type(original_error).__name__}: {str(original_error)[:200]}"

        super().__init__(message, backend, details)


class RendererTimeout(RendererError):
    """
    Raised when a renderer tier exceeds its time budget.

    Attributes:
        timeout: The budget in seconds that was exceeded.
    """

    kind = "timeout"

    def __init__(self, backend: str, timeout: float, details: Optional[str] = None) -> None:
        self.timeout = timeout
        super().__init__(f"Timed out after {timeout:.1f}s", backend, details)


class AllRenderersFailed(RiskifyBaseException):
    """
    Terminal error raised when every renderer tier has failed.

    Attributes:
        failures: One TierFailure entry per attempted tier, in chain order.
    """

    def __init__(self, failures: Sequence, details: Optional[str] = None) -> None:
        self.failures = list(failures)
        backends = ", ".join(f.backend for f in self.failures) or "none"
        super().__init__(
            f"All {len(self.failures)} renderer(s) failed ({backends})",
            details,
        )
