"""Page navigation with a single flat-delay retry."""

import asyncio

from structlog.typing import FilteringBoundLogger

from pagefetch.core.errors import FetchError, NavigationFailed
from pagefetch.core.logging import get_logger
from pagefetch.renderers.base import RenderPage


class RetryingNavigator:
    """Drive a page to a URL, retrying transient navigation failures."""

    def __init__(
        self,
        max_attempts: int = 2,
        retry_delay_s: float = 0.25,
        wait_until: str = "networkidle",
        logger: FilteringBoundLogger | None = None,
    ):
        """
        Initialize navigator.

        Args:
            max_attempts: Total navigation attempts, including the first
            retry_delay_s: Flat delay between attempts in seconds
            wait_until: Readiness state requested from the renderer
            logger: Optional structlog logger
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.retry_delay_s = retry_delay_s
        self.wait_until = wait_until
        self.logger = logger or get_logger()

    async def navigate(
        self,
        page: RenderPage,
        url: str,
        stop: asyncio.Event | None = None,
    ) -> int:
        """
        Navigate ``page`` to ``url``.

        Args:
            page: Page to navigate
            url: Target URL
            stop: When set, no further attempt is started

        Returns:
            The number of attempts used

        Raises:
            NavigationFailed: If the last attempt failed, with its error as detail
            FetchError: Raised by the page itself, passed through without retry
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                await page.navigate(url, wait_until=self.wait_until)
                return attempt
            except FetchError:
                # Already classified, e.g. a rejected redirect
                raise
            except Exception as e:
                if attempt == self.max_attempts:
                    self.logger.error(
                        "navigation_failed", attempt=attempt, error=str(e)
                    )
                    raise NavigationFailed(detail=str(e)) from e
                self.logger.info("navigation_retry", attempt=attempt, error=str(e))
                await asyncio.sleep(self.retry_delay_s)
                if stop is not None and stop.is_set():
                    raise NavigationFailed(detail=str(e)) from e
