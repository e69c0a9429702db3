"""Actor package exports."""

from ticketsim.actors.base import ActorRole, ActorThread
from ticketsim.actors.customer import Customer
from ticketsim.actors.monitor import PoolMonitor
from ticketsim.actors.vendor import Vendor

__all__ = [
    "ActorRole",
    "ActorThread",
    "Customer",
    "PoolMonitor",
    "Vendor",
]
