from __future__ import annotations

import pytest

from conftest import wait_for
from ticketsim.actors import ActorRole, ActorThread, Customer, PoolMonitor, Vendor
from ticketsim.actors.factory import build_actors
from ticketsim.actors.monitor import ACTOR_FAILURE, SOLD_OUT
from ticketsim.core.pool import TicketPool


class ExplodingActor(ActorThread):
    role = ActorRole.PRODUCER

    def tick(self) -> bool:
        raise RuntimeError("boom")


def test_vendor_exits_immediately_on_complete_pool():
    pool = TicketPool(capacity=5, total_supply=5)
    pool.force_stop()
    vendor = Vendor("Vendor-test", pool, release_rate=1, interval=0.001)

    vendor.start()
    vendor.join(timeout=2)

    assert not vendor.is_alive()
    assert vendor.ticks == 1
    assert pool.snapshot().released == 0


def test_vendor_keeps_going_after_rejection():
    pool = TicketPool(capacity=2, total_supply=10)
    vendor = Vendor("Vendor-test", pool, release_rate=2, interval=0.001)

    vendor.start()
    assert wait_for(lambda: vendor.rejected_batches >= 3)
    assert vendor.is_alive()
    vendor.cancel()
    vendor.join(timeout=2)

    assert vendor.released_batches == 1
    assert pool.snapshot().released == 2


def test_customer_waits_through_empty_pool_until_sold_out():
    pool = TicketPool(capacity=2, total_supply=2)
    customer = Customer("Customer-test", pool, retrieval_rate=1, interval=0.001)

    customer.start()
    assert wait_for(lambda: customer.ticks >= 5)
    assert customer.is_alive()

    pool.release(2)
    customer.join(timeout=5)

    assert not customer.is_alive()
    assert customer.tickets_bought == 2
    assert pool.is_complete()


def test_customer_exits_when_pool_force_stopped():
    pool = TicketPool(capacity=4, total_supply=4)
    customer = Customer("Customer-test", pool, retrieval_rate=1, interval=0.001)
    customer.start()
    assert wait_for(lambda: customer.ticks >= 2)

    pool.force_stop()
    customer.join(timeout=2)

    assert not customer.is_alive()


def test_cancel_wakes_long_interval():
    pool = TicketPool(capacity=10, total_supply=10)
    vendor = Vendor("Vendor-slow", pool, release_rate=1, interval=30.0)

    vendor.start()
    assert wait_for(lambda: pool.snapshot().released == 1)
    vendor.cancel()
    vendor.join(timeout=2)

    assert not vendor.is_alive()
    assert vendor.cancelled
    assert pool.snapshot().released == 1


def test_unexpected_error_is_caught_and_recorded():
    pool = TicketPool(capacity=1, total_supply=1)
    actor = ExplodingActor("Exploder", pool, interval=0.01)

    actor.start()
    actor.join(timeout=2)

    assert not actor.is_alive()
    assert actor.failed
    assert isinstance(actor.failure, RuntimeError)


@pytest.mark.parametrize(
    "factory",
    [
        lambda pool: Vendor("v", pool, release_rate=0, interval=1.0),
        lambda pool: Vendor("v", pool, release_rate=1, interval=0),
        lambda pool: Customer("c", pool, retrieval_rate=-1, interval=1.0),
        lambda pool: Customer("c", pool, retrieval_rate=1, interval=-0.5),
    ],
)
def test_invalid_rates_and_intervals(factory):
    pool = TicketPool(capacity=1, total_supply=1)
    with pytest.raises(ValueError):
        factory(pool)


def test_one_vendor_one_customer_sell_everything():
    pool = TicketPool(capacity=12, total_supply=12)
    vendor = Vendor("Vendor-1", pool, release_rate=3, interval=0.001)
    customer = Customer("Customer-1", pool, retrieval_rate=2, interval=0.001)

    vendor.start()
    customer.start()
    vendor.join(timeout=5)
    customer.join(timeout=5)

    assert not vendor.is_alive() and not customer.is_alive()
    snap = pool.snapshot()
    assert snap.complete
    assert snap.issued == 12
    assert customer.tickets_bought == 12


def test_monitor_reports_sold_out_and_publishes():
    pool = TicketPool(capacity=2, total_supply=2)
    pool.release(2)
    pool.purchase(2)
    reasons: list[str] = []
    published: list[tuple[int, object]] = []

    monitor = PoolMonitor(pool, 0.001, on_finished=reasons.append, publish=lambda t, s: published.append((t, s)))
    monitor.start()
    monitor.join(timeout=2)

    assert reasons == [SOLD_OUT]
    assert published and published[-1][1].issued == 2


def test_monitor_keeps_polling_while_incomplete():
    pool = TicketPool(capacity=2, total_supply=2)
    reasons: list[str] = []
    monitor = PoolMonitor(pool, 0.001, on_finished=reasons.append)

    monitor.start()
    assert wait_for(lambda: monitor.ticks >= 3)
    monitor.cancel()
    monitor.join(timeout=2)

    assert reasons == []


def test_monitor_reports_failed_peer():
    pool = TicketPool(capacity=1, total_supply=1)
    broken = ExplodingActor("Exploder", pool, interval=0.01)
    broken.start()
    broken.join(timeout=2)
    reasons: list[str] = []

    monitor = PoolMonitor(pool, 0.001, on_finished=reasons.append, peers=[broken])
    monitor.start()
    monitor.join(timeout=2)

    assert reasons == [ACTOR_FAILURE]


def test_monitor_reports_its_own_crash_once():
    pool = TicketPool(capacity=2, total_supply=2)
    reasons: list[str] = []

    def broken_publish(tick, snapshot):
        raise RuntimeError("metrics sink down")

    monitor = PoolMonitor(pool, 0.001, on_finished=reasons.append, publish=broken_publish)
    monitor.start()
    monitor.join(timeout=2)

    assert monitor.failed
    assert reasons == [ACTOR_FAILURE]


def test_monitor_does_not_report_twice_when_callback_raises():
    pool = TicketPool(capacity=2, total_supply=2)
    pool.force_stop()
    reasons: list[str] = []

    def failing_callback(reason):
        reasons.append(reason)
        raise RuntimeError("listener gone")

    monitor = PoolMonitor(pool, 0.001, on_finished=failing_callback)
    monitor.start()
    monitor.join(timeout=2)

    assert monitor.failed
    assert reasons == [SOLD_OUT]


def test_build_actors_creates_requested_roles(make_config):
    config = make_config(event_id=4, ticket_release_interval=250, customer_retrieval_interval=100)
    pool = TicketPool.from_configuration(config)

    actors = build_actors(pool, config, vendors=2, customers=3)

    roles = [actor.role for actor in actors]
    assert roles.count(ActorRole.PRODUCER) == 2
    assert roles.count(ActorRole.CONSUMER) == 3
    assert actors[0].name == "Vendor-4-1"
    assert actors[0].interval == pytest.approx(0.25)
    assert actors[-1].name == "Customer-4-3"
    assert actors[-1].interval == pytest.approx(0.1)
    assert all(actor.pool is pool for actor in actors)


def test_build_actors_requires_at_least_one_of_each(make_config):
    config = make_config()
    pool = TicketPool.from_configuration(config)
    with pytest.raises(ValueError):
        build_actors(pool, config, vendors=0)
