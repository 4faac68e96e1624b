"""Browser-based renderer using the Playwright async API."""

import subprocess
import sys

from playwright.async_api import Browser, Page, Playwright, async_playwright
from structlog.typing import FilteringBoundLogger

from pagefetch.core.logging import get_logger
from pagefetch.core.models import PageSummary
from pagefetch.renderers.base import RendererNotInstalled

INSTALL_HINT = "Playwright browsers not installed. Run 'pagefetch install-browser'"

# Substrings Playwright uses when the Chromium executable is missing
MISSING_BROWSER_MARKERS = ("Executable doesn't exist", "download new browsers")

EXTRACT_SUMMARY_JS = """() => {
    const titleEl = document.querySelector("title");
    const meta = document.querySelector('meta[name="description"]');
    const h1 = document.querySelector("h1");
    return {
        title: titleEl ? titleEl.textContent : null,
        metaDescription: meta ? (meta.getAttribute("content") || null) : null,
        h1: h1 ? h1.textContent : null,
    };
}"""


def is_missing_browser_error(exc: BaseException) -> bool:
    """Check whether an exception means the browser binaries are not installed."""
    message = str(exc)
    return any(marker in message for marker in MISSING_BROWSER_MARKERS)


def install_browser() -> subprocess.CompletedProcess:
    """Install the Chromium build Playwright drives."""
    return subprocess.run(
        [sys.executable, "-m", "playwright", "install", "chromium"],
        check=False,
        capture_output=True,
        text=True,
    )


class PlaywrightPage:
    """A Playwright page opened in its own browser context."""

    def __init__(self, page: Page):
        self._page = page

    def set_timeouts(self, navigation_s: float, action_s: float) -> None:
        self._page.set_default_navigation_timeout(navigation_s * 1000)
        self._page.set_default_timeout(action_s * 1000)

    async def navigate(self, url: str, wait_until: str) -> None:
        await self._page.goto(url, wait_until=wait_until)

    async def extract_structured(self) -> PageSummary:
        data = await self._page.evaluate(EXTRACT_SUMMARY_JS)
        return PageSummary.model_validate(data)

    async def extract_full_content(self) -> str:
        return await self._page.content()


class PlaywrightEngine:
    """One headless Chromium process and its Playwright driver."""

    def __init__(
        self,
        playwright: Playwright,
        browser: Browser,
        logger: FilteringBoundLogger | None = None,
    ):
        self._playwright = playwright
        self._browser = browser
        self._closed = False
        self.logger = logger or get_logger()

    async def new_page(self, user_agent: str) -> PlaywrightPage:
        context = await self._browser.new_context(user_agent=user_agent)
        page = await context.new_page()
        return PlaywrightPage(page)

    async def close(self) -> None:
        """Close the browser and stop the driver. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        try:
            await self._browser.close()
        finally:
            await self._playwright.stop()
        self.logger.debug("browser_closed")


class PlaywrightRenderer:
    """Launch a fresh headless Chromium per fetch."""

    name = "browser"

    def __init__(self, headless: bool = True, logger: FilteringBoundLogger | None = None):
        """
        Initialize browser renderer.

        Args:
            headless: Run Chromium without a window
            logger: Optional structlog logger
        """
        self.headless = headless
        self.logger = logger or get_logger()

    async def launch(self) -> PlaywrightEngine:
        """
        Start Playwright and launch Chromium.

        Returns:
            The running engine

        Raises:
            RendererNotInstalled: If the Chromium executable is missing
            Exception: For other launch failures
        """
        self.logger.debug("launching_browser", headless=self.headless)
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(headless=self.headless)
        except Exception as e:
            await playwright.stop()
            if is_missing_browser_error(e):
                self.logger.error("browser_not_installed", error=str(e))
                raise RendererNotInstalled(str(e), hint=INSTALL_HINT) from e
            self.logger.error("browser_launch_failed", error=str(e))
            raise
        return PlaywrightEngine(playwright, browser, logger=self.logger)
