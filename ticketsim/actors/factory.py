"""Factory for constructing vendor and customer threads from a configuration."""

from __future__ import annotations

from ticketsim.actors.base import ActorThread
from ticketsim.actors.customer import Customer
from ticketsim.actors.vendor import Vendor
from ticketsim.core.pool import TicketPool
from ticketsim.utils.config import EventConfiguration


def build_actors(
    pool: TicketPool,
    config: EventConfiguration,
    vendors: int = 1,
    customers: int = 1,
) -> list[ActorThread]:
    if vendors <= 0 or customers <= 0:
        raise ValueError("At least one vendor and one customer are required")

    instances: list[ActorThread] = []
    for index in range(1, vendors + 1):
        instances.append(
            Vendor(
                name=f"Vendor-{config.event_id}-{index}",
                pool=pool,
                release_rate=config.ticket_release_rate,
                interval=config.release_interval_seconds,
            )
        )
    for index in range(1, customers + 1):
        instances.append(
            Customer(
                name=f"Customer-{config.event_id}-{index}",
                pool=pool,
                retrieval_rate=config.customer_retrieval_rate,
                interval=config.retrieval_interval_seconds,
            )
        )
    return instances
