"""Wall-clock budget for a single asynchronous operation."""

import asyncio
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any, TypeVar

from structlog.typing import FilteringBoundLogger

from pagefetch.core.logging import get_logger

T = TypeVar("T")

# Operations left running after a timeout; held so they are not collected mid-flight
_detached: set[asyncio.Future] = set()


class DeadlineExceeded(TimeoutError):
    """The operation did not finish within its budget."""

    def __init__(self, budget_s: float):
        self.budget_s = budget_s
        super().__init__(f"Operation exceeded {budget_s:g}s budget")


def _release_detached(task: asyncio.Future) -> None:
    _detached.discard(task)
    if not task.cancelled():
        # Retrieve so the loop does not log "exception was never retrieved"
        task.exception()


class DeadlineGuard:
    """Race one operation against a fixed budget.

    The guard is single-use. ``expired`` is set when the budget runs out and
    can be polled by the operation itself to stop starting new work.
    On expiry the cleanup callback is awaited before ``DeadlineExceeded``
    is raised. The losing operation is not cancelled; it keeps running
    detached until it finishes on its own.
    """

    def __init__(self, budget_s: float, logger: FilteringBoundLogger | None = None):
        if budget_s <= 0:
            raise ValueError(f"budget_s must be positive, got {budget_s}")
        self.budget_s = budget_s
        self.logger = logger or get_logger()
        self.expired = asyncio.Event()
        self._deadline: float | None = None

    @property
    def deadline(self) -> float | None:
        """Event loop time at which the budget runs out, once started."""
        return self._deadline

    def remaining(self) -> float:
        """Seconds left before expiry (the full budget before ``run``)."""
        if self._deadline is None:
            return self.budget_s
        return max(0.0, self._deadline - asyncio.get_running_loop().time())

    async def run(
        self,
        operation: Coroutine[Any, Any, T],
        on_timeout: Callable[[], Awaitable[None]] | None = None,
    ) -> T:
        """
        Await ``operation`` within the budget.

        Args:
            operation: Coroutine to run
            on_timeout: Cleanup awaited after expiry, before raising

        Returns:
            The operation's result; its exception is re-raised unchanged

        Raises:
            DeadlineExceeded: If the budget ran out first
        """
        if self._deadline is not None:
            operation.close()
            raise RuntimeError("DeadlineGuard.run() may only be called once")

        loop = asyncio.get_running_loop()
        self._deadline = loop.time() + self.budget_s
        task = asyncio.ensure_future(operation)
        try:
            # asyncio.wait cancels its own timer once the task completes
            done, _ = await asyncio.wait({task}, timeout=self.budget_s)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task in done:
            return task.result()

        self.expired.set()
        self.logger.warning("deadline_expired", budget_s=self.budget_s)
        _detached.add(task)
        task.add_done_callback(_release_detached)
        if on_timeout is not None:
            try:
                await on_timeout()
            except Exception as e:
                self.logger.error("timeout_cleanup_failed", error=str(e))
                raise DeadlineExceeded(self.budget_s) from e
        raise DeadlineExceeded(self.budget_s)
