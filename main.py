"""Entry point for the real-time ticketing simulation."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from ticketsim.cli.menu import MenuManager
from ticketsim.core.errors import TicketingError
from ticketsim.core.simulation import SimulationManager
from ticketsim.utils.config import ConfigurationStore
from ticketsim.utils.logging import configure_logging


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments for the simulation runner."""

    parser = argparse.ArgumentParser(
        description="Run the real-time event ticketing simulation"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("data/ticket-configurations.json"),
        help="Path to the ticket configuration file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity level",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also append log records to this file (e.g. application.log)",
    )
    parser.add_argument(
        "--mode",
        default="menu",
        choices=["menu", "headless", "report", "dash"],
        help="Execution mode: interactive menu, headless run, offline report, or Dash control center",
    )
    parser.add_argument(
        "--event-id",
        type=int,
        default=None,
        help="Event Ticket ID to simulate (headless and report modes)",
    )
    parser.add_argument("--vendors", type=int, default=1, help="Number of vendor threads")
    parser.add_argument("--customers", type=int, default=1, help="Number of customer threads")
    parser.add_argument(
        "--monitor-interval",
        type=float,
        default=2.0,
        help="Seconds between monitor polls of the ticket pool",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Save the report figure to this path instead of showing it (report mode only)",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    configure_logging(args.log_level, args.log_file)
    logger = logging.getLogger(__name__)

    store = load_store(args.config, logger)
    manager = SimulationManager(monitor_interval=args.monitor_interval)

    if args.mode == "menu":
        MenuManager(store, manager, vendors=args.vendors, customers=args.customers).run()
    elif args.mode == "dash":
        _run_with_dash(manager, store, logger)
    else:
        if args.event_id is None:
            raise SystemExit(f"--event-id is required in {args.mode} mode")
        try:
            config = store.get(args.event_id)
            manager.start(config, vendors=args.vendors, customers=args.customers)
        except TicketingError as exc:
            raise SystemExit(f"Cannot start simulation: {exc}") from exc

        if args.mode == "report":
            _run_with_report(manager, args, logger, config.title)
        else:
            _run_headless(manager, logger)


def load_store(path: Path, logger: logging.Logger) -> ConfigurationStore:
    """Load saved configurations; a broken file leaves the store empty."""

    store = ConfigurationStore(path)
    try:
        store.load()
    except TicketingError as exc:
        logger.error("%s", exc)
    return store


def _run_headless(manager: SimulationManager, logger: logging.Logger) -> None:
    try:
        while not manager.wait_until_stopped(timeout=0.5):
            pass
    except KeyboardInterrupt:
        logger.warning("Simulation interrupted by user")
    finally:
        if manager.is_running():
            manager.stop()
        logger.info("Final status: %s", manager.status())


def _run_with_report(
    manager: SimulationManager,
    args: argparse.Namespace,
    logger: logging.Logger,
    title: str,
) -> None:
    from ticketsim.viz.report import TelemetryRecorder, render_static_dashboard
    import matplotlib.pyplot as plt

    recorder = TelemetryRecorder(manager)
    records = {}
    try:
        records = recorder.record(timeout=0.5)
    except KeyboardInterrupt:
        logger.warning("Recording interrupted by user")
    finally:
        if manager.is_running():
            manager.stop()

    logger.info("Simulation completed; rendering report")
    fig = render_static_dashboard(records or recorder.data, title=f"{title} Ticket Report")
    if args.output is not None:
        fig.savefig(args.output)
        logger.info("Report saved to %s", args.output)
    else:
        fig.canvas.manager.set_window_title("Ticket Simulation Report")
        plt.show()


def _run_with_dash(manager: SimulationManager, store: ConfigurationStore, logger: logging.Logger) -> None:
    from ticketsim.viz.server import build_dashboard_app

    app = build_dashboard_app(manager, store)

    try:
        logger.info("Starting Dash control center on http://127.0.0.1:8050")
        app.run(debug=False, use_reloader=False)
    except KeyboardInterrupt:
        logger.warning("Dash server interrupted by user")
    finally:
        if manager.is_running():
            manager.stop()


if __name__ == "__main__":
    main()
