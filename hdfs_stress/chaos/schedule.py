"""
Cancellable one-shot deferred actions.

A DeferredAction runs a coroutine once after a delay on its own asyncio
task, concurrently with whatever the caller awaits next. It is owned by the
code that starts it and must be closed on every exit path.
"""

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum
from logging import Logger


class DeferredState(str, Enum):
    CREATED = "created"
    PENDING = "pending"
    FIRED = "fired"
    CANCELLED = "cancelled"


class DeferredAction:
    """
    Run ``action`` once, ``delay_s`` seconds after ``start``.

    ``cancel`` is idempotent and safe at any point: before the delay expires it
    prevents the action from running, after the action has fired it does
    nothing. ``aclose`` additionally waits for an in-flight action so that no
    task outlives the owner.
    """

    def __init__(
        self,
        delay_s: float,
        action: Callable[[], Awaitable[None]],
        logger: Logger,
        name: str = "deferred-action",
    ) -> None:
        if delay_s < 0:
            raise ValueError(f"delay_s must be >= 0, got {delay_s}")
        self._delay_s = delay_s
        self._action = action
        self._logger = logger
        self._name = name
        self._state = DeferredState.CREATED
        self._task: asyncio.Task[None] | None = None
        self._error: BaseException | None = None

    @property
    def delay_s(self) -> float:
        return self._delay_s

    @property
    def state(self) -> DeferredState:
        return self._state

    @property
    def fired(self) -> bool:
        return self._state == DeferredState.FIRED

    @property
    def cancelled(self) -> bool:
        return self._state == DeferredState.CANCELLED

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    @property
    def error(self) -> BaseException | None:
        """Exception raised by the action, if it fired and failed."""
        return self._error

    def start(self) -> None:
        """Schedule the action on the running event loop."""
        if self._state != DeferredState.CREATED:
            raise RuntimeError(f"{self._name} already started")
        self._state = DeferredState.PENDING
        self._task = asyncio.create_task(self._run(), name=self._name)
        self._logger.info("Scheduled %s in %.3fs", self._name, self._delay_s)

    async def _run(self) -> None:
        await asyncio.sleep(self._delay_s)
        # From here on cancel() no longer interrupts the action
        self._state = DeferredState.FIRED
        self._logger.info("Running %s", self._name)
        try:
            await self._action()
        except Exception as e:
            self._error = e
            self._logger.exception("%s failed", self._name)

    def cancel(self) -> bool:
        """
        Cancel the action if it has not fired yet.

        Returns:
            True if this call prevented the action from running
        """
        if self._state == DeferredState.CREATED:
            self._state = DeferredState.CANCELLED
            return True
        if self._state != DeferredState.PENDING:
            return False
        self._state = DeferredState.CANCELLED
        if self._task is not None:
            self._task.cancel()
        self._logger.info("Cancelled %s before it fired", self._name)
        return True

    async def aclose(self) -> bool:
        """
        Cancel if pending, then wait until the backing task has finished.

        Returns:
            True if the action was prevented from running
        """
        self.cancel()
        if self._task is not None and not self._task.done():
            await asyncio.wait([self._task])
        return self.cancelled
