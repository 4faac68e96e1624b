"""pagefetch - SSRF-safe page fetching through a headless browser."""

__version__ = "0.1.0"

from pagefetch.core import (
    AppContext,
    FetchError,
    FetchMode,
    FetchRequest,
    PageContent,
    PageSummary,
    Settings,
)
from pagefetch.orchestrator import FetchOrchestrator

__all__ = [
    "AppContext",
    "FetchError",
    "FetchMode",
    "FetchOrchestrator",
    "FetchRequest",
    "PageContent",
    "PageSummary",
    "Settings",
    "__version__",
]
