"""Page rendering backends."""

from structlog.typing import FilteringBoundLogger

from pagefetch.config import Settings
from pagefetch.renderers.base import RenderEngine, Renderer, RendererNotInstalled, RenderPage
from pagefetch.renderers.browser import PlaywrightRenderer
from pagefetch.renderers.static import StaticRenderer
from pagefetch.safety import HostSafetyChecker


def create_renderer(settings: Settings, logger: FilteringBoundLogger | None = None) -> Renderer:
    """Build the renderer selected by ``settings.backend``."""
    if settings.backend == "static":
        checker = HostSafetyChecker(timeout_s=settings.dns_timeout_s, logger=logger)
        return StaticRenderer(checker=checker, logger=logger)
    return PlaywrightRenderer(headless=settings.headless, logger=logger)


__all__ = [
    "Renderer",
    "RenderEngine",
    "RenderPage",
    "RendererNotInstalled",
    "PlaywrightRenderer",
    "StaticRenderer",
    "create_renderer",
]
