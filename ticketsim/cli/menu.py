"""Interactive console menu for managing configurations and simulations."""

from __future__ import annotations

import logging
from typing import Any, Callable

from ticketsim.core.errors import TicketingError
from ticketsim.core.simulation import SimulationManager
from ticketsim.utils.config import NAME_PATTERN, ConfigurationStore, EventConfiguration

logger = logging.getLogger(__name__)

MENU_TEXT = "\n".join(
    [
        "",
        "---------------------------------------------------",
        "               Ticket Management System            ",
        "---------------------------------------------------",
        " 1. Add Ticket Configuration",
        " 2. Load Ticket Configurations",
        " 3. Display Ticket Configurations",
        " 4. Start Ticket Simulation",
        " 5. Stop Ticket Simulation",
        " 6. Remove Ticket Configuration",
        " 7. Update Ticket Configuration",
        " 8. Show Simulation Status",
        " 9. Exit from the System",
        "---------------------------------------------------",
    ]
)


class MenuManager:
    """Console front-end over a :class:`ConfigurationStore` and a :class:`SimulationManager`.

    ``input_func`` and ``output`` default to :func:`input` and :func:`print`
    and can be replaced to drive the menu from a script.
    """

    def __init__(
        self,
        store: ConfigurationStore,
        manager: SimulationManager,
        input_func: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
        vendors: int = 1,
        customers: int = 1,
    ) -> None:
        self.store = store
        self.manager = manager
        self._input = input_func
        self._output = output
        self.vendors = vendors
        self.customers = customers
        self._actions: dict[int, Callable[[], None]] = {
            1: self.add_configuration,
            2: self.load_configurations,
            3: self.display_configurations,
            4: self.start_simulation,
            5: self.stop_simulation,
            6: self.remove_configuration,
            7: self.update_configuration,
            8: self.show_status,
        }

    def run(self) -> None:
        """Show the menu until the user exits or input runs out."""

        try:
            while True:
                self._output(MENU_TEXT)
                option = self._read_option()
                if option == 9:
                    self._output("Thank you for using the Ticket Management System. Goodbye!")
                    break
                action = self._actions.get(option)
                if action is None:
                    self._output("Invalid choice. Please select a valid option.\n")
                    continue
                try:
                    action()
                except TicketingError as exc:
                    logger.warning("Menu option %d failed: %s", option, exc)
                    self._output(f"Error: {exc}\n")
        except (EOFError, KeyboardInterrupt):
            self._output("Input closed; exiting.")
        finally:
            if self.manager.is_running():
                self.manager.stop()

    # ------------------------------------------------------------------
    # Menu actions
    # ------------------------------------------------------------------
    def add_configuration(self) -> None:
        config = self.store.add(**self._prompt_configuration_values())
        self._output(config.describe())
        self._output("Configuration saved.\n")

    def load_configurations(self) -> None:
        count = self.store.load()
        self._output(f"Loaded {count} configuration(s).\n")

    def display_configurations(self) -> None:
        configs = self.store.list()
        if not configs:
            self._output("No configurations available.\n")
            return
        self._output("Available Event Configurations:\n")
        for config in configs:
            self._output(config.describe())

    def start_simulation(self) -> None:
        if not len(self.store):
            self._output("No configurations available. Please add or load configurations first.\n")
            return

        event_id = self._prompt_int("Enter the Event Ticket ID to start the simulation: ")
        config = self.store.get(event_id)
        self.manager.start(config, vendors=self.vendors, customers=self.customers)
        self._output(_banner(config))
        self._output("Vendor and Customer threads started.\n")

    def stop_simulation(self) -> None:
        self.manager.stop()
        self._output("Simulation stopped successfully.\n")

    def remove_configuration(self) -> None:
        event_id = self._prompt_int("Enter Ticket ID to remove: ")
        self.store.remove(event_id)
        self._output(f"Configuration with Ticket ID {event_id} has been removed.\n")

    def update_configuration(self) -> None:
        event_id = self._prompt_int("Enter Ticket ID to update: ")
        self.store.get(event_id)
        self._output(f"Updating configuration for Ticket ID: {event_id}")
        self.store.update(event_id, **self._prompt_configuration_values())
        self._output(f"Configuration for Ticket ID {event_id} has been updated.\n")

    def show_status(self) -> None:
        status = self.manager.status()
        self._output(f"Simulation state: {status['state']}")
        if status["title"] is not None:
            self._output(f"Event: {status['title']} (ID {status['event_id']})")
        if status["stop_reason"]:
            self._output(f"Stop reason: {status['stop_reason']}")
        pool = status["pool"]
        if pool is not None:
            self._output(
                "Pool: {resident}/{capacity} resident, {released} released, "
                "{issued}/{total_supply} sold, complete={complete}".format(**pool)
            )
        self._output("")

    # ------------------------------------------------------------------
    # Prompt helpers
    # ------------------------------------------------------------------
    def _read_option(self) -> int:
        raw = self._input(" Please select an option (1-9): ").strip()
        try:
            return int(raw)
        except ValueError:
            self._output("Invalid input. Please enter a number between 1 and 9.\n")
            return -1

    def _prompt_configuration_values(self) -> dict[str, Any]:
        values: dict[str, Any] = {
            "title": self._prompt_text("Enter Ticket Title: ", "Ticket Title"),
            "vendor_name": self._prompt_text("Enter Vendor Name: ", "Vendor Name"),
        }

        while True:
            total = self._prompt_int("Enter Total Number of Tickets: ")
            capacity = self._prompt_int("Enter Max Ticket Capacity of the Pool: ")
            if total == capacity:
                break
            self._output(
                "Error: Total Number of Tickets and Max Ticket Capacity must be the same. "
                "Please re-enter both values."
            )
        values["total_tickets"] = total
        values["max_ticket_capacity"] = capacity

        while True:
            release_rate = self._prompt_int("Enter Ticket Release Rate: ")
            if total % release_rate == 0:
                break
            self._output(f"Error: Ticket Release Rate must divide the total of {total} tickets evenly.")
        values["ticket_release_rate"] = release_rate

        values["customer_retrieval_rate"] = self._prompt_int("Enter Customer Retrieval Rate: ")
        values["ticket_release_interval"] = self._prompt_int("Enter Ticket Release Interval (in milliseconds): ")
        values["customer_retrieval_interval"] = self._prompt_int(
            "Enter Customer Retrieval Interval (in milliseconds): "
        )
        return values

    def _prompt_text(self, prompt: str, field_name: str) -> str:
        while True:
            value = self._input(prompt).strip()
            if value and NAME_PATTERN.match(value):
                return value
            self._output(
                f"Error: {field_name} cannot contain numbers, symbols, or special characters. "
                "Please enter a valid value."
            )

    def _prompt_int(self, prompt: str, minimum: int = 1) -> int:
        while True:
            raw = self._input(prompt).strip()
            try:
                value = int(raw)
            except ValueError:
                self._output("Error: Please enter a valid integer.")
                continue
            if value >= minimum:
                return value
            self._output(f"Error: Value must be at least {minimum}.")


def _banner(config: EventConfiguration) -> str:
    return "\n".join(
        [
            "==============================================",
            f"| Simulation Initialized for Event: {config.title}",
            f"| Vendor: {config.vendor_name}",
            f"| Total Tickets: {config.total_tickets}",
            f"| Max Ticket Capacity: {config.max_ticket_capacity}",
            "==============================================",
        ]
    )
