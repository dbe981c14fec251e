"""
Headless browser renderer (tier 2).

Renders the SWMS HTML template and prints it to PDF with headless Chromium
through Playwright. Each render launches its own browser process inside a
scoped session that always tears the process down, whether the render
succeeds, fails or is cancelled by the orchestrator's timeout.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Optional, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from riskify.core.exceptions import RendererTimeout, RendererUnavailable
from riskify.documents.model import DocumentModel
from riskify.rendering.base import BaseRenderer, RenderLoggerProtocol
from riskify.rendering.html import render_html

# A4, zero margins, backgrounds on
PDF_OPTIONS: dict[str, Any] = {
    "format": "A4",
    "print_background": True,
    "margin": {"top": "0mm", "right": "0mm", "bottom": "0mm", "left": "0mm"},
    "prefer_css_page_size": True,
}


class HeadlessBrowserRenderer(BaseRenderer):
    """
    Renderer backed by a headless Chromium process.

    Attributes:
        active_sessions: Number of browser processes currently alive for
            this renderer. Returns to zero on every exit path.
    """

    NAME = "headless_browser"
    DEFAULT_TIMEOUT = 45.0

    def __init__(
        self,
        timeout: Optional[float] = None,
        executable_path: Optional[str] = None,
        launch_args: Optional[Sequence[str]] = None,
        playwright_factory: Callable[[], Any] = async_playwright,
        logger: Optional[RenderLoggerProtocol] = None,
    ) -> None:
        """
        Initialize the renderer.

        Args:
            timeout: Time budget for launch, render and teardown.
            executable_path: Optional Chromium binary; Playwright's bundled one otherwise.
            launch_args: Extra Chromium command line flags.
            playwright_factory: Returns the Playwright async context manager
                (async_playwright in production, a fake in tests).
            logger: Optional flow logger.
        """
        super().__init__(timeout=timeout, logger=logger)
        self._executable_path = executable_path
        self._launch_args = list(launch_args or [])
        self._playwright_factory = playwright_factory
        self.active_sessions = 0

    @asynccontextmanager
    async def browser_session(self) -> AsyncIterator[Any]:
        """
        Launch a browser for the duration of the block.

        The browser and the Playwright driver are closed on success, on
        error and on cancellation.
        """
        async with self._playwright_factory() as playwright:
            browser = await playwright.chromium.launch(
                headless=True,
                executable_path=self._executable_path,
                args=self._launch_args,
            )
            self.active_sessions += 1
            self._log_debug("browser launched")
            try:
                yield browser
            finally:
                self.active_sessions -= 1
                await browser.close()
                self._log_debug("browser closed")

    async def render(self, document: DocumentModel) -> bytes:
        html = render_html(document)
        self._log_debug(f"template rendered ({len(html)} chars)")

        try:
            async with self.browser_session() as browser:
                page = await browser.new_page()
                await page.set_content(html, wait_until="networkidle")
                pdf = await page.pdf(**PDF_OPTIONS)
        except PlaywrightTimeoutError as e:
            raise RendererTimeout(self.NAME, self.timeout, details=str(e)[:200]) from e
        except PlaywrightError as e:
            raise RendererUnavailable(self.NAME, "browser render failed", original_error=e) from e

        return self._ensure_pdf(pdf)
