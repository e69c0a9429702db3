"""Lifecycle management for a running ticket simulation."""

from __future__ import annotations

import enum
import logging
import threading
from functools import partial
from queue import Empty, Full, Queue
from typing import Any, Optional

from ticketsim.actors.base import ActorThread
from ticketsim.actors.factory import build_actors
from ticketsim.actors.monitor import PoolMonitor
from ticketsim.core.errors import (
    NoActiveSimulationError,
    SimulationAlreadyActiveError,
    SimulationStateError,
    UnknownEventError,
)
from ticketsim.core.pool import PoolSnapshot, TicketPool
from ticketsim.utils.config import EventConfiguration

logger = logging.getLogger(__name__)

STOPPED_BY_REQUEST = "stopped"


class SimulationState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class SimulationManager:
    """Own one ticket pool and the threads acting on it.

    ``start`` and ``stop`` are serialised by a lifecycle lock and may block
    while threads are joined. Completion reported by the monitor only takes
    the short state lock, so a monitor never waits on a caller joining it.
    """

    def __init__(
        self,
        monitor_interval: float = 2.0,
        metrics_buffer: int = 256,
        history_limit: int = 300,
        join_timeout: float = 3.0,
    ) -> None:
        self.monitor_interval = monitor_interval
        self.join_timeout = join_timeout

        self._lifecycle_lock = threading.RLock()
        self._state_lock = threading.Lock()
        self._state = SimulationState.IDLE
        self._generation = 0
        self._config: EventConfiguration | None = None
        self._pool: TicketPool | None = None
        self._actors: list[ActorThread] = []
        self._monitor: PoolMonitor | None = None
        self._stop_reason: str | None = None
        self._stopped = threading.Event()
        self._stopped.set()

        self._metrics_queue: Queue[dict[str, Any]] = Queue(maxsize=metrics_buffer)
        self._history_lock = threading.Lock()
        self._history: list[tuple[int, dict[str, Any]]] = []
        self._history_limit = history_limit

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self, config: EventConfiguration, vendors: int = 1, customers: int = 1) -> TicketPool:
        """Build a pool from ``config`` and start its vendors, customers and monitor."""

        config.validate()

        with self._lifecycle_lock:
            with self._state_lock:
                if self._state is SimulationState.RUNNING:
                    active = self._config.title if self._config else "another event"
                    msg = f"A simulation is already running for {active}. Please stop it before starting a new one."
                    raise SimulationAlreadyActiveError(msg)
                previous = self._threads()

            self._join(previous)

            pool = TicketPool.from_configuration(config)
            actors = build_actors(pool, config, vendors=vendors, customers=customers)

            with self._state_lock:
                self._generation += 1
                monitor = PoolMonitor(
                    pool=pool,
                    interval=self.monitor_interval,
                    on_finished=partial(self._finish, self._generation),
                    publish=partial(self.publish_metrics, config.event_id),
                    peers=actors,
                    name=f"PoolMonitor-{config.event_id}",
                )
                self._config = config
                self._pool = pool
                self._actors = actors
                self._monitor = monitor
                self._stop_reason = None
                self._state = SimulationState.RUNNING
                self._stopped.clear()
                self._metrics_queue = Queue(maxsize=self._metrics_queue.maxsize)
                with self._history_lock:
                    self._history.clear()

            logger.info(
                "Simulation initialised for %s (%s): vendor=%s total=%d capacity=%d",
                config.title,
                config.formatted_id,
                config.vendor_name,
                config.total_tickets,
                config.max_ticket_capacity,
            )
            for actor in actors:
                actor.start()
            monitor.start()
            logger.info("Started %d actor thread(s) and monitor", len(actors))
            return pool

    def stop(self) -> None:
        """Force the running simulation to stop, whether or not it sold out."""

        with self._lifecycle_lock:
            with self._state_lock:
                if self._state is not SimulationState.RUNNING:
                    raise NoActiveSimulationError("No active simulation to stop.")
                self._state = SimulationState.STOPPED
                self._stop_reason = STOPPED_BY_REQUEST
                pool = self._pool
                threads = self._threads()

            if pool is not None:
                pool.force_stop()
            self._join(threads)
            self._announce_stopped()
            logger.info("Simulation stopped successfully")

    def reset(self) -> None:
        """Discard a stopped simulation and return to idle."""

        with self._lifecycle_lock:
            with self._state_lock:
                if self._state is SimulationState.RUNNING:
                    raise SimulationStateError("Stop the running simulation before resetting it.")
                threads = self._threads()
            self._join(threads)
            with self._state_lock:
                self._config = None
                self._pool = None
                self._actors = []
                self._monitor = None
                self._stop_reason = None
                self._state = SimulationState.IDLE

    def _finish(self, generation: int, reason: str) -> None:
        """Completion callback invoked from the monitor thread."""

        with self._state_lock:
            if generation != self._generation or self._state is not SimulationState.RUNNING:
                logger.debug("Ignoring completion from a stale or stopped simulation")
                return
            self._state = SimulationState.STOPPED
            self._stop_reason = reason
            pool = self._pool
            actors = list(self._actors)

        if pool is not None:
            pool.force_stop()
        for actor in actors:
            actor.cancel()
        self._announce_stopped()
        logger.info("Simulation finished: %s", reason)

    def _threads(self) -> list[ActorThread]:
        threads = list(self._actors)
        if self._monitor is not None:
            threads.append(self._monitor)
        return threads

    def _join(self, threads: list[ActorThread]) -> None:
        current = threading.current_thread()
        for thread in threads:
            thread.cancel()
        for thread in threads:
            if thread is current or thread.ident is None:
                continue
            thread.join(timeout=self.join_timeout)
            if thread.is_alive():
                logger.warning("Actor %s did not terminate cleanly", thread.name)

    def _announce_stopped(self) -> None:
        self._stopped.set()
        # Notify any listeners that the stream has ended
        try:
            self._metrics_queue.put_nowait({"type": "shutdown"})
        except Full:
            logger.debug("Metrics queue is full; shutdown event dropped")

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------
    @property
    def state(self) -> SimulationState:
        with self._state_lock:
            return self._state

    @property
    def active_config(self) -> EventConfiguration | None:
        with self._state_lock:
            return self._config

    @property
    def stop_reason(self) -> str | None:
        with self._state_lock:
            return self._stop_reason

    def is_running(self) -> bool:
        return self.state is SimulationState.RUNNING

    def wait_until_stopped(self, timeout: float | None = None) -> bool:
        return self._stopped.wait(timeout=timeout)

    def current_pool_size(self, event_id: int) -> int:
        return self._pool_for(event_id).size()

    def is_complete(self, event_id: int) -> bool:
        return self._pool_for(event_id).is_complete()

    def status(self) -> dict[str, Any]:
        with self._state_lock:
            config = self._config
            pool = self._pool
            state = self._state
            reason = self._stop_reason
            threads = self._threads()

        return {
            "state": state.value,
            "event_id": config.event_id if config else None,
            "title": config.title if config else None,
            "stop_reason": reason,
            "pool": pool.snapshot().to_dict() if pool else None,
            "actors": [
                {
                    "name": thread.name,
                    "role": thread.role.value,
                    "alive": thread.is_alive(),
                    "failed": thread.failed,
                }
                for thread in threads
            ],
        }

    def _pool_for(self, event_id: int) -> TicketPool:
        with self._state_lock:
            pool = self._pool
        if pool is None or pool.event_id != event_id:
            raise UnknownEventError(f"No simulation has been started for event {event_id}")
        return pool

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------
    def publish_metrics(self, event_id: int, tick: int, snapshot: PoolSnapshot) -> None:
        """Record a pool snapshot and push it to the metrics stream."""

        metrics = snapshot.to_dict()
        with self._history_lock:
            self._history.append((tick, metrics))
            if len(self._history) > self._history_limit:
                del self._history[0 : len(self._history) - self._history_limit]

        event = {
            "type": "metrics",
            "tick": tick,
            "event_id": event_id,
            "metrics": dict(metrics),
        }
        try:
            self._metrics_queue.put_nowait(event)
        except Full:
            logger.debug("Metrics queue is full; dropping event for %s", event_id)

    def metrics_stream(self, timeout: float | None = None) -> Optional[dict[str, Any]]:
        """Retrieve the next metrics event from the queue."""

        try:
            return self._metrics_queue.get(timeout=timeout)
        except Empty:
            return None

    def get_history(self) -> list[tuple[int, dict[str, Any]]]:
        with self._history_lock:
            return list(self._history)
