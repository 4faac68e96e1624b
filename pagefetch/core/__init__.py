"""Core domain models, errors and configuration."""

from pagefetch.config import Settings
from pagefetch.core.context import AppContext
from pagefetch.core.errors import (
    DisallowedHost,
    ErrorKind,
    FetchError,
    FetchFailed,
    FetchTimeout,
    InvalidInput,
    NavigationFailed,
    RendererUnavailable,
)
from pagefetch.core.logging import get_logger
from pagefetch.core.models import (
    FetchMode,
    FetchRequest,
    FetchResult,
    PageContent,
    PageSummary,
)

__all__ = [
    "Settings",
    "AppContext",
    "ErrorKind",
    "FetchError",
    "InvalidInput",
    "DisallowedHost",
    "FetchTimeout",
    "RendererUnavailable",
    "NavigationFailed",
    "FetchFailed",
    "FetchMode",
    "FetchRequest",
    "FetchResult",
    "PageSummary",
    "PageContent",
    "get_logger",
]
