"""Raw-HTTP renderer using requests, without JavaScript execution."""

import asyncio
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup
from structlog.typing import FilteringBoundLogger

from pagefetch.core.errors import DisallowedHost
from pagefetch.core.logging import get_logger
from pagefetch.core.models import PageSummary
from pagefetch.safety import HostSafetyChecker

MAX_REDIRECTS = 10

DEFAULT_HTTP_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


def parse_summary(html: str) -> PageSummary:
    """Extract title, meta description and first h1 from HTML.

    Text is taken as-is (not stripped), matching DOM ``textContent``.
    An empty ``content`` attribute counts as missing.
    """
    soup = BeautifulSoup(html, "html.parser")
    title = soup.find("title")
    meta = soup.find("meta", attrs={"name": "description"})
    h1 = soup.find("h1")
    return PageSummary(
        title=title.get_text() if title else None,
        meta_description=(meta.get("content") or None) if meta else None,
        h1=h1.get_text() if h1 else None,
    )


class StaticPage:
    """A page backed by one requests session.

    Redirects are followed one hop at a time, and each target host must pass
    the safety checker before it is requested.
    """

    def __init__(
        self,
        session: requests.Session,
        user_agent: str,
        checker: HostSafetyChecker | None = None,
        logger: FilteringBoundLogger | None = None,
    ):
        self._session = session
        self._headers = {**DEFAULT_HTTP_HEADERS, "User-Agent": user_agent}
        self._timeout: float | None = None
        self._html: str | None = None
        self.status: int | None = None
        self.logger = logger or get_logger()
        self.checker = checker or HostSafetyChecker(logger=self.logger)

    def set_timeouts(self, navigation_s: float, action_s: float) -> None:
        # Extraction is local, so only the request timeout applies
        self._timeout = navigation_s

    def _get(self, url: str) -> requests.Response:
        return self._session.get(
            url, headers=self._headers, timeout=self._timeout, allow_redirects=False
        )

    async def _request(self, url: str) -> requests.Response:
        try:
            return await asyncio.to_thread(self._get, url)
        except requests.Timeout:
            self.logger.warning("request_timeout", timeout_seconds=self._timeout)
            raise
        except requests.RequestException as e:
            self.logger.warning("request_failed", error=str(e))
            raise

    async def navigate(self, url: str, wait_until: str) -> None:
        """Fetch the URL. ``wait_until`` has no meaning without a browser.

        Raises:
            DisallowedHost: A redirect points at a host that fails the check
            requests.TooManyRedirects: More than ``MAX_REDIRECTS`` hops
        """
        self.logger.debug("fetching_static", url=url)
        resp = await self._request(url)
        for _ in range(MAX_REDIRECTS):
            if not resp.is_redirect:
                break
            location = urljoin(url, resp.headers["Location"])
            resp.close()
            verdict = await self.checker.check(location)
            if not verdict:
                self.logger.warning(
                    "redirect_rejected", location=location, reason=verdict.reason
                )
                raise DisallowedHost(detail=f"redirect: {verdict.reason}")
            self.logger.debug("following_redirect", location=location)
            url = location
            resp = await self._request(url)
        else:
            if resp.is_redirect:
                resp.close()
                raise requests.TooManyRedirects(
                    f"Exceeded {MAX_REDIRECTS} redirects", response=resp
                )
        self.status = resp.status_code
        self._html = resp.text
        self.logger.debug("fetch_complete", status=resp.status_code, chars=len(resp.text))

    def _loaded_html(self) -> str:
        if self._html is None:
            raise RuntimeError("No page loaded; call navigate() first")
        return self._html

    async def extract_structured(self) -> PageSummary:
        return parse_summary(self._loaded_html())

    async def extract_full_content(self) -> str:
        return self._loaded_html()


class StaticEngine:
    """Holds the HTTP connection pool for one fetch."""

    def __init__(
        self,
        checker: HostSafetyChecker | None = None,
        logger: FilteringBoundLogger | None = None,
    ):
        self._session = requests.Session()
        self.checker = checker
        self.logger = logger or get_logger()

    async def new_page(self, user_agent: str) -> StaticPage:
        return StaticPage(
            self._session, user_agent, checker=self.checker, logger=self.logger
        )

    async def close(self) -> None:
        # requests.Session.close() is itself idempotent
        self._session.close()


class StaticRenderer:
    """Fetch pages over plain HTTP (for static pages)."""

    name = "static"

    def __init__(
        self,
        checker: HostSafetyChecker | None = None,
        logger: FilteringBoundLogger | None = None,
    ):
        """
        Initialize renderer.

        Args:
            checker: Host check applied to every redirect target
            logger: Optional structlog logger
        """
        self.checker = checker
        self.logger = logger or get_logger()

    async def launch(self) -> StaticEngine:
        return StaticEngine(checker=self.checker, logger=self.logger)
