"""Monitor actor watching a pool for completion and failed peers."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from ticketsim.actors.base import ActorRole, ActorThread
from ticketsim.core.pool import PoolSnapshot, TicketPool

logger = logging.getLogger(__name__)

SOLD_OUT = "sold out"
ACTOR_FAILURE = "actor failure"


class PoolMonitor(ActorThread):
    """Poll the pool, publish its counters, and report when the run is over.

    ``on_finished`` is called at most once with the reason the simulation
    ended. ``publish`` receives the poll number and a snapshot every tick.
    """

    role = ActorRole.MONITOR

    def __init__(
        self,
        pool: TicketPool,
        interval: float,
        on_finished: Callable[[str], None],
        publish: Callable[[int, PoolSnapshot], None] | None = None,
        peers: Sequence[ActorThread] = (),
        name: str = "PoolMonitor",
    ) -> None:
        super().__init__(name=name, pool=pool, interval=interval)
        self._on_finished = on_finished
        self._publish = publish
        self._peers = list(peers)
        self._reported = False

    def tick(self) -> bool:
        snapshot = self.pool.snapshot()
        if self._publish is not None:
            self._publish(self.ticks, snapshot)

        failed = [peer.name for peer in self._peers if peer.failed]
        if failed:
            logger.error("Actor(s) %s failed; ending simulation", ", ".join(failed))
            self._report(ACTOR_FAILURE)
            return False

        if self.pool.size() == 0 and self.pool.is_complete():
            logger.info("All tickets sold out; ending simulation automatically")
            self._report(SOLD_OUT)
            return False

        return True

    def on_stop(self) -> None:
        # A crash in the monitor itself ends the run like any other failed actor.
        if self.failed and not self._reported:
            logger.error("%s failed; ending simulation", self.name)
            self._report(ACTOR_FAILURE)

    def _report(self, reason: str) -> None:
        self._reported = True
        self._on_finished(reason)
