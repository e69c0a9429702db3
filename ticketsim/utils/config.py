"""Event configuration records and their JSON-backed store."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any

from ticketsim.core.errors import ConfigurationError, UnknownEventError

logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r"^[A-Za-z\s]+$")

POSITIVE_FIELDS = (
    "max_ticket_capacity",
    "total_tickets",
    "ticket_release_rate",
    "customer_retrieval_rate",
    "ticket_release_interval",
    "customer_retrieval_interval",
)


@dataclass
class EventConfiguration:
    """Parameters for one event's simulation. Intervals are milliseconds."""

    event_id: int
    title: str
    vendor_name: str
    max_ticket_capacity: int
    total_tickets: int
    ticket_release_rate: int
    customer_retrieval_rate: int
    ticket_release_interval: int
    customer_retrieval_interval: int

    def validate(self) -> None:
        """Raise :class:`ConfigurationError` describing the first problem found."""

        for name, label in (("title", "Ticket title"), ("vendor_name", "Vendor name")):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip() or not NAME_PATTERN.match(value):
                raise ConfigurationError(f"{label} must contain only letters and spaces")

        for name in POSITIVE_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")

        if self.total_tickets != self.max_ticket_capacity:
            raise ConfigurationError("Total number of tickets and max ticket capacity must be the same")

        if self.total_tickets % self.ticket_release_rate != 0:
            raise ConfigurationError(
                f"Total tickets ({self.total_tickets}) must be a multiple of the "
                f"ticket release rate ({self.ticket_release_rate})"
            )

    @property
    def formatted_id(self) -> str:
        return f"TICKET-{self.event_id:05d}"

    @property
    def release_interval_seconds(self) -> float:
        return self.ticket_release_interval / 1000.0

    @property
    def retrieval_interval_seconds(self) -> float:
        return self.customer_retrieval_interval / 1000.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EventConfiguration:
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration entry must be a JSON object, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        missing = known - data.keys()
        if missing:
            raise ConfigurationError(f"Configuration is missing fields: {', '.join(sorted(missing))}")
        return cls(**{key: data[key] for key in known})

    def describe(self) -> str:
        return "\n".join(
            [
                "========================================",
                f"Event Ticket ID: {self.formatted_id}",
                f"Event Title: {self.title}",
                f"Vendor Name: {self.vendor_name}",
                f"Max Ticket Capacity: {self.max_ticket_capacity}",
                f"Total Tickets: {self.total_tickets}",
                f"Ticket Release Rate: {self.ticket_release_rate} tickets/interval",
                f"Customer Retrieval Rate: {self.customer_retrieval_rate} tickets/interval",
                f"Ticket Release Interval: {self.ticket_release_interval} ms",
                f"Customer Retrieval Interval: {self.customer_retrieval_interval} ms",
                "========================================",
            ]
        )


def load_configurations(path: Path) -> tuple[list[EventConfiguration], int]:
    """Load configurations and the next id sequence value from a JSON file."""

    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, list):
        data = {"events": data}
    if not isinstance(data, dict) or not isinstance(data.get("events", []), list):
        msg = f"Ticket configuration file must hold a JSON object with an 'events' list, got {type(data)!r}"
        raise TypeError(msg)

    configs = [EventConfiguration.from_dict(entry) for entry in data.get("events", [])]
    for config in configs:
        config.validate()

    next_id = max((c.event_id for c in configs), default=0) + 1
    next_id = max(next_id, int(data.get("next_event_id", next_id)))
    return configs, next_id


class ConfigurationStore:
    """In-memory list of event configurations persisted to a JSON file.

    The store owns the event id sequence; ids are handed out by :meth:`add`
    and the next value is written alongside the configurations.
    """

    def __init__(self, path: Path | None = None, next_event_id: int = 1) -> None:
        self.path = path
        self._configs: dict[int, EventConfiguration] = {}
        self._next_event_id = next_event_id

    @property
    def next_event_id(self) -> int:
        return self._next_event_id

    def load(self) -> int:
        """Replace the store's contents with the file's; return the count loaded."""

        if self.path is None or not self.path.exists():
            logger.info("No configuration file found at %s; starting empty", self.path)
            return 0

        try:
            configs, next_id = load_configurations(self.path)
        except (OSError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"Error loading configurations from {self.path}: {exc}") from exc
        self._configs = {config.event_id: config for config in configs}
        self._next_event_id = max(next_id, self._next_event_id)
        logger.info("Loaded %d configuration(s) from %s", len(configs), self.path)
        return len(configs)

    def save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "next_event_id": self._next_event_id,
            "events": [config.to_dict() for config in self.list()],
        }
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.debug("Saved %d configuration(s) to %s", len(self._configs), self.path)

    def add(self, **values: Any) -> EventConfiguration:
        """Validate and store a new configuration under the next event id."""

        config = EventConfiguration(event_id=self._next_event_id, **values)
        config.validate()
        self._configs[config.event_id] = config
        self._next_event_id += 1
        self.save()
        logger.info("Added configuration %s (%s)", config.formatted_id, config.title)
        return config

    def get(self, event_id: int) -> EventConfiguration:
        try:
            return self._configs[event_id]
        except KeyError:
            raise UnknownEventError(f"Configuration with Ticket ID {event_id} not found") from None

    def remove(self, event_id: int) -> EventConfiguration:
        config = self.get(event_id)
        del self._configs[event_id]
        self.save()
        logger.info("Removed configuration %s", config.formatted_id)
        return config

    def update(self, event_id: int, /, **changes: Any) -> EventConfiguration:
        """Apply ``changes``; an invalid result leaves the stored record as it was."""

        if "event_id" in changes:
            raise ConfigurationError("The event id of a configuration cannot be changed")
        unknown = set(changes) - {f.name for f in fields(EventConfiguration)}
        if unknown:
            raise ConfigurationError(f"Unknown configuration fields: {', '.join(sorted(unknown))}")
        updated = replace(self.get(event_id), **changes)
        updated.validate()
        self._configs[event_id] = updated
        self.save()
        logger.info("Updated configuration %s", updated.formatted_id)
        return updated

    def list(self) -> list[EventConfiguration]:
        return [self._configs[key] for key in sorted(self._configs)]

    def __len__(self) -> int:
        return len(self._configs)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._configs
