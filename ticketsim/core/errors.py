"""Exception hierarchy shared by the simulation core and its adapters."""

from __future__ import annotations


class TicketingError(Exception):
    """Base class for recoverable ticketing errors."""


class ConfigurationError(TicketingError, ValueError):
    """Raised when an event configuration fails validation."""


class SimulationStateError(TicketingError, RuntimeError):
    """Raised when a lifecycle request does not fit the current state."""


class SimulationAlreadyActiveError(SimulationStateError):
    """A simulation is already running."""


class NoActiveSimulationError(SimulationStateError):
    """No simulation is currently running."""


class UnknownEventError(TicketingError, KeyError):
    """Raised for an event id that is not known to the caller's scope."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""
