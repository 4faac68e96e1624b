"""Safe remote fetch: host check, render session, retry and deadline."""

import asyncio

from structlog.typing import FilteringBoundLogger

from pagefetch.config import Settings
from pagefetch.core.errors import (
    DisallowedHost,
    FetchError,
    FetchFailed,
    FetchTimeout,
    InvalidInput,
    RendererUnavailable,
)
from pagefetch.core.logging import get_logger
from pagefetch.core.models import FetchMode, FetchRequest, FetchResult, PageContent
from pagefetch.deadline import DeadlineExceeded, DeadlineGuard
from pagefetch.navigator import RetryingNavigator
from pagefetch.renderers.base import Renderer, RendererNotInstalled
from pagefetch.safety import HostSafetyChecker, is_valid_http_url
from pagefetch.session import RenderSession


class FetchOrchestrator:
    """Fetch one URL through a renderer without leaking the render session.

    Each call validates the URL, checks that its host resolves only to
    public addresses, then opens a fresh render session, navigates with one
    retry and extracts the result, all within the global budget. The session
    is closed before the call returns on every path, and every failure is
    raised as exactly one ``FetchError`` subclass.
    """

    def __init__(
        self,
        renderer: Renderer,
        settings: Settings | None = None,
        checker: HostSafetyChecker | None = None,
        navigator: RetryingNavigator | None = None,
        logger: FilteringBoundLogger | None = None,
    ):
        """
        Initialize orchestrator.

        Args:
            renderer: Backend used to open render sessions
            settings: Timing and navigation settings (defaults if omitted)
            checker: Host safety checker (system resolver if omitted)
            navigator: Navigator (built from settings if omitted)
            logger: Optional structlog logger
        """
        self.renderer = renderer
        self.settings = settings or Settings()
        self.logger = logger or get_logger()
        self.checker = checker or HostSafetyChecker(
            timeout_s=self.settings.dns_timeout_s, logger=self.logger
        )
        self.navigator = navigator or RetryingNavigator(
            max_attempts=self.settings.max_attempts,
            retry_delay_s=self.settings.retry_delay_s,
            wait_until=self.settings.wait_until,
            logger=self.logger,
        )

    async def fetch_url(
        self, url: str, full_content: bool = False, debug: bool = False
    ) -> FetchResult:
        """Fetch ``url``, returning full HTML when ``full_content`` is set."""
        return await self.fetch(FetchRequest.from_flags(url, full_content, debug))

    async def fetch(self, request: FetchRequest) -> FetchResult:
        """
        Fetch a page.

        Args:
            request: URL and extraction mode

        Returns:
            PageSummary or PageContent depending on the request mode

        Raises:
            InvalidInput: URL is not an absolute http(s) URL
            DisallowedHost: Host is localhost, unresolvable or non-public
            RendererUnavailable: Engine or page could not be acquired
            NavigationFailed: Every navigation attempt failed
            FetchTimeout: The global budget ran out
            FetchFailed: Any other failure after the session was opened

        Raised errors carry the request's ``debug`` flag, so their
        ``to_response()`` includes details only for debug requests.
        """
        try:
            return await self._fetch(request)
        except FetchError as e:
            e.debug = request.debug
            raise

    async def _fetch(self, request: FetchRequest) -> FetchResult:
        url = request.target_url
        log = self.logger.bind(url=url, mode=request.mode.value)

        if not is_valid_http_url(url):
            log.info("invalid_url")
            raise InvalidInput()

        # Host check strictly precedes any renderer allocation
        verdict = await self.checker.check(url)
        if not verdict:
            raise DisallowedHost(detail=verdict.reason)

        session = await self._open_session(log)
        try:
            timeout_s = self.settings.navigation_timeout_s
            session.page.set_timeouts(navigation_s=timeout_s, action_s=timeout_s)
            guard = DeadlineGuard(self.settings.budget_s, logger=log)
            result = await guard.run(
                self._render(session, request, guard.expired),
                on_timeout=session.close,
            )
        except DeadlineExceeded as e:
            log.warning("fetch_timeout", budget_s=self.settings.budget_s)
            raise FetchTimeout(detail=str(e)) from e
        except FetchError:
            raise
        except Exception as e:
            log.error("fetch_failed", error=str(e), error_type=type(e).__name__)
            raise FetchFailed(detail=str(e)) from e
        finally:
            await session.close()

        log.info("fetch_complete")
        return result

    async def _open_session(self, log: FilteringBoundLogger) -> RenderSession:
        try:
            return await RenderSession.open(
                self.renderer, self.settings.user_agent, logger=log
            )
        except RendererNotInstalled as e:
            raise RendererUnavailable(detail=str(e), message=e.hint) from e
        except Exception as e:
            log.error("renderer_unavailable", error=str(e))
            raise RendererUnavailable(detail=str(e)) from e

    async def _render(
        self, session: RenderSession, request: FetchRequest, stop: asyncio.Event
    ) -> FetchResult:
        await self.navigator.navigate(session.page, request.target_url, stop=stop)
        result: FetchResult
        if request.mode is FetchMode.FULL_CONTENT:
            result = PageContent(html=await session.page.extract_full_content())
        else:
            result = await session.page.extract_structured()
        await session.close()
        return result
