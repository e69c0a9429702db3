"""Base implementation for actor threads bound to a ticket pool."""

from __future__ import annotations

import enum
import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ticketsim.core.pool import TicketPool

logger = logging.getLogger(__name__)


class ActorRole(enum.Enum):
    PRODUCER = "producer"
    CONSUMER = "consumer"
    MONITOR = "monitor"


class ActorThread(threading.Thread):
    """Repeats :meth:`tick` every ``interval`` seconds until cancelled.

    Cancellation is observed only between ticks: :meth:`cancel` sets the token
    and wakes the interval wait, so the loop exits within one interval and never
    in the middle of a pool operation.
    """

    role: ActorRole

    def __init__(self, name: str, pool: TicketPool, interval: float) -> None:
        super().__init__(name=name, daemon=True)
        if interval <= 0:
            raise ValueError(f"{name} interval must be greater than 0, got {interval!r}")
        self.pool = pool
        self.interval = interval
        self.ticks = 0
        self._cancel = threading.Event()
        self._failure: BaseException | None = None

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------
    def cancel(self) -> None:
        """Ask the loop to exit before its next tick."""

        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    @property
    def failure(self) -> BaseException | None:
        """The exception that ended the loop, if any."""

        return self._failure

    @property
    def failed(self) -> bool:
        return self._failure is not None

    def run(self) -> None:  # noqa: D401
        """threading.Thread API entry point."""

        try:
            self.on_start()
            while not self._cancel.is_set():
                self.ticks += 1
                if not self.tick():
                    break
                if self._cancel.wait(self.interval):
                    break
        except Exception as exc:
            self._failure = exc
            logger.exception("Actor %s encountered an unexpected error", self.name)
        finally:
            self.on_stop()

    # ------------------------------------------------------------------
    # Template methods for subclasses
    # ------------------------------------------------------------------
    def on_start(self) -> None:
        """Initialisation hook, executed once in thread context."""

    def tick(self) -> bool:
        """Perform one cycle of work; return False once the actor is done."""

        raise NotImplementedError("ActorThread subclasses must implement tick()")

    def on_stop(self) -> None:
        """Cleanup hook executed when thread exits."""
