"""Single-use render session owned by one fetch call."""

import asyncio

from structlog.typing import FilteringBoundLogger

from pagefetch.core.logging import get_logger
from pagefetch.renderers.base import RenderEngine, Renderer, RenderPage


class RenderSession:
    """One render engine plus one page, closed exactly once.

    ``close()`` may be called from the success path, the error path and a
    deadline's timeout cleanup. The first call closes the engine; later and
    concurrent calls wait for it to finish and return without closing again.
    """

    def __init__(
        self,
        engine: RenderEngine,
        page: RenderPage,
        logger: FilteringBoundLogger | None = None,
    ):
        self.engine = engine
        self.page = page
        self.logger = logger or get_logger()
        self._closed = False
        self._lock = asyncio.Lock()

    @classmethod
    async def open(
        cls,
        renderer: Renderer,
        user_agent: str,
        logger: FilteringBoundLogger | None = None,
    ) -> "RenderSession":
        """
        Launch an engine and open a page on it.

        The engine is closed again if the page cannot be opened.

        Args:
            renderer: Renderer to launch
            user_agent: User-Agent for the page context
            logger: Optional structlog logger

        Returns:
            An open session
        """
        log = logger or get_logger()
        engine = await renderer.launch()
        try:
            page = await engine.new_page(user_agent)
        except BaseException:
            await engine.close()
            raise
        log.debug("session_opened", renderer=renderer.name)
        return cls(engine, page, logger=log)

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        """Close the engine once. Engine errors are logged, not raised."""
        async with self._lock:
            if self._closed:
                return
            try:
                await self.engine.close()
            except Exception as e:
                self.logger.warning("session_close_failed", error=str(e))
            finally:
                self._closed = True
            self.logger.debug("session_closed")
