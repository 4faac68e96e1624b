"""Protocols for page renderers consumed by the fetch orchestrator."""

from typing import Protocol

from pagefetch.core.models import PageSummary


class RendererNotInstalled(RuntimeError):
    """The renderer's engine binaries are missing."""

    def __init__(self, message: str, hint: str):
        self.hint = hint
        super().__init__(message)


class RenderPage(Protocol):
    """A navigable page inside a render engine."""

    def set_timeouts(self, navigation_s: float, action_s: float) -> None:
        """Set default timeouts for navigation and for every other page action."""
        ...

    async def navigate(self, url: str, wait_until: str) -> None:
        """
        Load a URL and wait for the requested readiness state.

        Args:
            url: The URL to load
            wait_until: Readiness predicate, e.g. "networkidle" or "load"

        Raises:
            Exception: If the page could not be loaded
        """
        ...

    async def extract_structured(self) -> PageSummary:
        """Extract title, meta description and first heading; missing ones are None."""
        ...

    async def extract_full_content(self) -> str:
        """Return the full rendered HTML."""
        ...


class RenderEngine(Protocol):
    """A launched render engine instance."""

    async def new_page(self, user_agent: str) -> RenderPage:
        """Open a page in a fresh context with the given User-Agent."""
        ...

    async def close(self) -> None:
        """Release the engine and every page it opened. Safe to call twice."""
        ...


class Renderer(Protocol):
    """Factory for render engines."""

    name: str

    async def launch(self) -> RenderEngine:
        """
        Launch a new engine instance.

        Raises:
            RendererNotInstalled: If the engine binaries are missing
            Exception: For other launch failures
        """
        ...
