"""Customer actor purchasing ticket batches from the pool."""

from __future__ import annotations

import logging

from ticketsim.actors.base import ActorRole, ActorThread
from ticketsim.core.pool import TicketPool

logger = logging.getLogger(__name__)


class Customer(ActorThread):
    """Purchase up to ``retrieval_rate`` tickets every ``interval`` seconds."""

    role = ActorRole.CONSUMER

    def __init__(self, name: str, pool: TicketPool, retrieval_rate: int, interval: float) -> None:
        if retrieval_rate <= 0:
            raise ValueError("Retrieval rate must be greater than 0")
        super().__init__(name=name, pool=pool, interval=interval)
        self.retrieval_rate = retrieval_rate
        self.tickets_bought = 0

    def on_start(self) -> None:
        logger.info(
            "Customer %s started (rate=%d, interval=%.3fs)",
            self.name,
            self.retrieval_rate,
            self.interval,
        )

    def tick(self) -> bool:
        bought = self.pool.purchase(self.retrieval_rate)
        if bought:
            self.tickets_bought += bought
            return True

        if self.pool.is_complete():
            return False

        # Empty for now; vendors have not released yet
        logger.debug("Customer %s found no tickets; retrying", self.name)
        return True

    def on_stop(self) -> None:
        logger.info("Customer %s stopped holding %d ticket(s)", self.name, self.tickets_bought)
