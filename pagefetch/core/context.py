"""Application context for dependency injection."""

from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING

from structlog.typing import FilteringBoundLogger

from pagefetch.config import Settings
from pagefetch.core.logging import configure_logging, get_logger

if TYPE_CHECKING:
    from pagefetch.orchestrator import FetchOrchestrator
    from pagefetch.safety import HostSafetyChecker


@dataclass
class AppContext:
    """Application context holding shared dependencies."""

    config: Settings
    _logging_configured: bool = field(default=False, init=False)

    @cached_property
    def logger(self) -> FilteringBoundLogger:
        """Get configured structlog logger."""
        if not self._logging_configured:
            configure_logging(verbose=self.config.verbose)
            object.__setattr__(self, "_logging_configured", True)
        return get_logger()

    @cached_property
    def checker(self) -> "HostSafetyChecker":
        """Host safety checker using the system resolver."""
        from pagefetch.safety import HostSafetyChecker

        return HostSafetyChecker(timeout_s=self.config.dns_timeout_s, logger=self.logger)

    @cached_property
    def orchestrator(self) -> "FetchOrchestrator":
        """Lazy initialization of the fetch orchestrator for the configured backend."""
        from pagefetch.orchestrator import FetchOrchestrator
        from pagefetch.renderers import create_renderer

        self.logger.debug("initializing_renderer", backend=self.config.backend)
        return FetchOrchestrator(
            renderer=create_renderer(self.config, logger=self.logger),
            settings=self.config,
            checker=self.checker,
            logger=self.logger,
        )
