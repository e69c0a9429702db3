"""Thread-safe bounded ticket pool shared by vendors and customers."""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

from ticketsim.core.errors import ConfigurationError

if TYPE_CHECKING:
    from ticketsim.utils.config import EventConfiguration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolSnapshot:
    """Consistent view of every pool counter, taken under the pool lock."""

    capacity: int
    total_supply: int
    resident: int
    released: int
    issued: int
    customers_served: int
    complete: bool

    @property
    def remaining_to_release(self) -> int:
        return self.total_supply - self.released

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["remaining_to_release"] = self.remaining_to_release
        return data


class TicketPool:
    """Bounded buffer of ticket units for a single event.

    Every operation takes the same lock, so ``released - issued == resident``
    holds whenever the pool is observed. Once the pool is complete, either
    because the whole supply was issued or because :meth:`force_stop` was
    called, no counter changes again.
    """

    def __init__(
        self,
        capacity: int,
        total_supply: int,
        *,
        title: str = "",
        vendor_name: str = "",
        event_id: int | None = None,
    ) -> None:
        if capacity <= 0 or total_supply <= 0:
            msg = "Pool capacity and total supply must be greater than 0"
            raise ConfigurationError(msg)

        self.capacity = capacity
        self.total_supply = total_supply
        self.title = title
        self.vendor_name = vendor_name
        self.event_id = event_id

        self._lock = threading.Lock()
        self._resident = 0
        self._released = 0
        self._issued = 0
        self._customers_served = 0
        self._complete = False

    @classmethod
    def from_configuration(cls, config: EventConfiguration) -> TicketPool:
        return cls(
            capacity=config.max_ticket_capacity,
            total_supply=config.total_tickets,
            title=config.title,
            vendor_name=config.vendor_name,
            event_id=config.event_id,
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def release(self, batch: int) -> bool:
        """Add ``batch`` tickets, or reject the whole batch.

        Rejection (pool full, supply exhausted, pool complete) is an expected
        outcome and is reported through the return value.
        """

        _check_batch(batch)
        with self._lock:
            if self._complete:
                return False

            available_space = self.capacity - self._resident
            remaining_to_release = self.total_supply - self._released
            if batch > available_space or batch > remaining_to_release:
                logger.debug(
                    "Release of %d %s ticket(s) rejected (space=%d, remaining=%d)",
                    batch,
                    self.title,
                    available_space,
                    remaining_to_release,
                )
                return False

            self._resident += batch
            self._released += batch
            logger.info(
                "Vendor [%s] released %d %s ticket(s); pool %d/%d, %d left to release",
                self.vendor_name,
                batch,
                self.title,
                self._resident,
                self.capacity,
                self.total_supply - self._released,
            )
            return True

    def purchase(self, batch: int) -> int:
        """Remove up to ``batch`` tickets and return how many were taken.

        ``0`` means nothing is available right now; whether more will ever
        arrive is answered by :meth:`is_complete`.
        """

        _check_batch(batch)
        with self._lock:
            if self._complete or self._resident == 0:
                return 0

            removed = min(batch, self._resident)
            self._resident -= removed
            self._issued += removed
            self._customers_served += 1
            logger.info(
                "Customer [%d] purchased %d %s ticket(s); pool %d/%d",
                self._customers_served,
                removed,
                self.title,
                self._resident,
                self.capacity,
            )

            if self._issued == self.total_supply:
                self._complete = True
                logger.info("All %d %s tickets sold; pool complete", self.total_supply, self.title)
            return removed

    def force_stop(self) -> None:
        """Mark the pool complete regardless of how many tickets were issued."""

        with self._lock:
            if self._complete:
                return
            self._complete = True
            unsold = self.total_supply - self._issued
        logger.warning("Ticket pool for %s stopped with %d ticket(s) unsold", self.title, unsold)

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------
    def size(self) -> int:
        with self._lock:
            return 0 if self._complete else self._resident

    def is_complete(self) -> bool:
        with self._lock:
            return self._complete

    def snapshot(self) -> PoolSnapshot:
        with self._lock:
            return PoolSnapshot(
                capacity=self.capacity,
                total_supply=self.total_supply,
                resident=self._resident,
                released=self._released,
                issued=self._issued,
                customers_served=self._customers_served,
                complete=self._complete,
            )

    def __repr__(self) -> str:
        snap = self.snapshot()
        return (
            f"TicketPool(title={self.title!r}, resident={snap.resident}/{self.capacity}, "
            f"issued={snap.issued}/{self.total_supply}, complete={snap.complete})"
        )


def _check_batch(batch: int) -> None:
    if batch <= 0:
        raise ValueError(f"Batch size must be a positive integer, got {batch!r}")
