from __future__ import annotations

import time
from typing import Any, Callable

import pytest

from ticketsim.utils.config import EventConfiguration


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0, interval: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def make_config() -> Callable[..., EventConfiguration]:
    def _make(**overrides: Any) -> EventConfiguration:
        values: dict[str, Any] = {
            "event_id": 1,
            "title": "Test Concert",
            "vendor_name": "Box Office",
            "max_ticket_capacity": 12,
            "total_tickets": 12,
            "ticket_release_rate": 3,
            "customer_retrieval_rate": 2,
            "ticket_release_interval": 5,
            "customer_retrieval_interval": 5,
        }
        values.update(overrides)
        return EventConfiguration(**values)

    return _make
