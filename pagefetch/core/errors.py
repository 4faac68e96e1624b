"""Classified failures surfaced by the fetch orchestrator."""

from enum import Enum
from typing import ClassVar


class ErrorKind(str, Enum):
    """Taxonomy of fetch failures."""

    INVALID_INPUT = "invalid_input"
    DISALLOWED_HOST = "disallowed_host"
    TIMEOUT = "timeout"
    RENDERER_UNAVAILABLE = "renderer_unavailable"
    NAVIGATION_FAILED = "navigation_failed"
    UNCLASSIFIED = "unclassified"


class FetchError(Exception):
    """Base class for every error a fetch can end with.

    The public ``message`` is safe to show to any caller. ``detail`` holds
    the underlying error text and is only exposed in debug responses for
    kinds that set ``exposes_detail``.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.UNCLASSIFIED
    status_code: ClassVar[int] = 500
    default_message: ClassVar[str] = "Failed to scrape page"
    exposes_detail: ClassVar[bool] = False

    def __init__(self, detail: str | None = None, message: str | None = None):
        self.detail = detail
        self.message = message or self.default_message
        # Set from the originating request by the orchestrator
        self.debug = False
        super().__init__(self.message if detail is None else f"{self.message}: {detail}")

    def to_response(self, debug: bool | None = None) -> dict:
        """Build the response body for this error.

        Args:
            debug: Include the underlying detail where the kind allows it.
                Defaults to the ``debug`` flag of the request that failed.

        Returns:
            Dict with ``error`` and ``status`` keys, plus ``details`` in debug mode
        """
        if debug is None:
            debug = self.debug
        body: dict = {"error": self.message, "status": self.status_code}
        if debug and self.exposes_detail and self.detail:
            body["details"] = self.detail
        return body


class InvalidInput(FetchError):
    """The target is not an absolute http(s) URL."""

    kind = ErrorKind.INVALID_INPUT
    status_code = 400
    default_message = "Invalid URL"


class DisallowedHost(FetchError):
    """The host failed the SSRF safety check, including DNS failures."""

    kind = ErrorKind.DISALLOWED_HOST
    status_code = 400
    default_message = "Invalid URL or disallowed host"


class FetchTimeout(FetchError):
    kind = ErrorKind.TIMEOUT
    status_code = 504
    default_message = "Timeout"


class RendererUnavailable(FetchError):
    """The render engine or its page could not be acquired."""

    kind = ErrorKind.RENDERER_UNAVAILABLE
    default_message = "Renderer unavailable"


class NavigationFailed(FetchError):
    """Every navigation attempt failed."""

    kind = ErrorKind.NAVIGATION_FAILED
    exposes_detail = True


class FetchFailed(FetchError):
    """Any other failure after the render session was acquired."""

    exposes_detail = True
