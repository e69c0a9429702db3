from __future__ import annotations

import logging
import random
import threading

import pytest

from ticketsim.core.errors import ConfigurationError
from ticketsim.core.pool import PoolSnapshot, TicketPool


def check_invariants(snap: PoolSnapshot) -> list[str]:
    problems = []
    if not 0 <= snap.resident <= snap.capacity:
        problems.append(f"resident out of bounds: {snap}")
    if snap.released - snap.issued != snap.resident:
        problems.append(f"released - issued != resident: {snap}")
    if snap.issued > snap.total_supply or snap.released > snap.total_supply:
        problems.append(f"supply exceeded: {snap}")
    return problems


def test_release_and_purchase_walkthrough():
    pool = TicketPool(capacity=5, total_supply=10)

    assert pool.release(5) is True
    assert pool.size() == 5

    assert pool.release(5) is False
    assert pool.snapshot().released == 5

    assert pool.purchase(5) == 5
    snap = pool.snapshot()
    assert (snap.resident, snap.issued) == (0, 5)

    assert pool.release(5) is True
    snap = pool.snapshot()
    assert (snap.resident, snap.released, snap.issued) == (5, 10, 5)
    assert not pool.is_complete()

    assert pool.purchase(5) == 5
    snap = pool.snapshot()
    assert snap.issued == 10
    assert snap.complete is True
    assert pool.is_complete()
    assert pool.size() == 0


def test_release_is_rejected_whole_when_supply_would_be_exceeded():
    pool = TicketPool(capacity=10, total_supply=4)

    assert pool.release(3) is True
    assert pool.release(3) is False
    assert pool.snapshot().released == 3
    assert pool.release(1) is True
    assert pool.snapshot().remaining_to_release == 0


def test_purchase_partially_fills_from_what_is_left():
    pool = TicketPool(capacity=10, total_supply=10)
    pool.release(2)

    assert pool.purchase(5) == 2
    snap = pool.snapshot()
    assert snap.resident == 0
    assert snap.customers_served == 1


def test_purchase_on_empty_pool_is_transient():
    pool = TicketPool(capacity=5, total_supply=5)

    assert pool.purchase(3) == 0
    assert pool.is_complete() is False
    assert pool.snapshot().customers_served == 0


def test_force_stop_collapses_size_and_blocks_mutation():
    pool = TicketPool(capacity=10, total_supply=10)
    pool.release(6)
    pool.purchase(1)

    pool.force_stop()

    assert pool.size() == 0
    assert pool.is_complete()
    assert pool.release(1) is False
    assert pool.purchase(1) == 0
    snap = pool.snapshot()
    assert (snap.resident, snap.released, snap.issued) == (5, 6, 1)


def test_force_stop_logs_unsold_count_once(caplog):
    pool = TicketPool(capacity=10, total_supply=10, title="Jazz Night")
    pool.release(6)
    pool.purchase(4)

    with caplog.at_level(logging.WARNING, logger="ticketsim.core.pool"):
        pool.force_stop()
        pool.force_stop()

    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert warnings == ["Ticket pool for Jazz Night stopped with 6 ticket(s) unsold"]


def test_force_stop_twice_matches_once():
    pool = TicketPool(capacity=4, total_supply=4)
    pool.release(2)

    pool.force_stop()
    first = pool.snapshot()
    pool.force_stop()

    assert pool.snapshot() == first
    assert pool.release(2) is False
    assert pool.purchase(2) == 0


@pytest.mark.parametrize("capacity,total", [(0, 5), (5, 0), (-1, 3)])
def test_non_positive_bounds_are_rejected(capacity, total):
    with pytest.raises(ConfigurationError):
        TicketPool(capacity=capacity, total_supply=total)


@pytest.mark.parametrize("batch", [0, -2])
def test_non_positive_batches_raise(batch):
    pool = TicketPool(capacity=5, total_supply=5)
    with pytest.raises(ValueError):
        pool.release(batch)
    with pytest.raises(ValueError):
        pool.purchase(batch)


def test_from_configuration_copies_event_details(make_config):
    config = make_config(event_id=7, title="Jazz Night", vendor_name="Blue Note")
    pool = TicketPool.from_configuration(config)

    assert pool.capacity == 12
    assert pool.total_supply == 12
    assert pool.event_id == 7
    assert pool.title == "Jazz Night"
    assert pool.vendor_name == "Blue Note"


def test_snapshot_dict_includes_remaining():
    pool = TicketPool(capacity=6, total_supply=6)
    pool.release(2)

    data = pool.snapshot().to_dict()

    assert data["remaining_to_release"] == 4
    assert data["resident"] == 2
    assert data["complete"] is False


def test_sequential_schedule_completes_within_bound():
    total, release_rate, retrieval_rate = 20, 4, 3
    pool = TicketPool(capacity=total, total_supply=total)

    ticks = 0
    bound = 4 * (total // min(release_rate, retrieval_rate) + 1)
    while not pool.is_complete() and ticks < bound:
        pool.release(release_rate)
        pool.purchase(retrieval_rate)
        assert not check_invariants(pool.snapshot())
        ticks += 1

    assert pool.is_complete()
    assert pool.snapshot().issued == total


@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
def test_concurrent_vendors_and_customers_keep_invariants(seed):
    rng = random.Random(seed)
    capacity = rng.randint(3, 15)
    total = rng.randint(20, 120)
    pool = TicketPool(capacity=capacity, total_supply=total)
    violations: list[str] = []
    start = threading.Barrier(7)

    def vendor(vseed: int) -> None:
        local = random.Random(vseed)
        start.wait()
        for _ in range(400):
            pool.release(local.randint(1, 4))
            violations.extend(check_invariants(pool.snapshot()))

    def customer(cseed: int) -> None:
        local = random.Random(cseed)
        start.wait()
        for _ in range(400):
            pool.purchase(local.randint(1, 4))
            violations.extend(check_invariants(pool.snapshot()))

    threads = [threading.Thread(target=vendor, args=(rng.random(),)) for _ in range(3)]
    threads += [threading.Thread(target=customer, args=(rng.random(),)) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert not any(thread.is_alive() for thread in threads)
    assert violations == []
    final = pool.snapshot()
    assert not check_invariants(final)
    assert final.issued <= total
    if final.complete:
        assert final.issued == total
