"""Vendor actor releasing ticket batches into the pool."""

from __future__ import annotations

import logging

from ticketsim.actors.base import ActorRole, ActorThread
from ticketsim.core.pool import TicketPool

logger = logging.getLogger(__name__)


class Vendor(ActorThread):
    """Release ``release_rate`` tickets every ``interval`` seconds."""

    role = ActorRole.PRODUCER

    def __init__(self, name: str, pool: TicketPool, release_rate: int, interval: float) -> None:
        if release_rate <= 0:
            raise ValueError("Release rate must be greater than 0")
        super().__init__(name=name, pool=pool, interval=interval)
        self.release_rate = release_rate
        self.released_batches = 0
        self.rejected_batches = 0

    def on_start(self) -> None:
        logger.info(
            "Vendor %s started (rate=%d, interval=%.3fs)",
            self.name,
            self.release_rate,
            self.interval,
        )

    def tick(self) -> bool:
        if self.pool.is_complete():
            return False

        if self.pool.release(self.release_rate):
            self.released_batches += 1
        else:
            # pool full or supply exhausted; it may drain before the next tick
            self.rejected_batches += 1
            logger.debug("Vendor %s could not release %d ticket(s)", self.name, self.release_rate)
        return True

    def on_stop(self) -> None:
        logger.info(
            "Vendor %s stopped after %d release(s), %d rejected",
            self.name,
            self.released_batches,
            self.rejected_batches,
        )
