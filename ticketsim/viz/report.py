"""Offline reporting helpers for the ticket simulation."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, DefaultDict, Dict, List, Tuple

import matplotlib.pyplot as plt

from ticketsim.core.simulation import SimulationManager

NumericPoint = Tuple[int, float]
MetricSeries = DefaultDict[str, List[NumericPoint]]

PLOT_CONFIG: Dict[str, Dict[str, Any]] = {
    "occupancy": {
        "metrics": {
            "resident": {"label": "Tickets in pool", "color": "tab:blue"},
            "capacity": {"label": "Capacity", "color": "tab:gray"},
        },
        "title": "Pool Occupancy",
        "ylabel": "Tickets",
    },
    "flow": {
        "metrics": {
            "released": {"label": "Released", "color": "tab:green"},
            "issued": {"label": "Sold", "color": "tab:red"},
            "remaining_to_release": {"label": "Left to release", "color": "tab:orange"},
        },
        "title": "Cumulative Ticket Flow",
        "ylabel": "Tickets",
    },
}


class TelemetryRecorder:
    """Collect pool snapshots emitted by the monitor for offline analysis."""

    def __init__(self, manager: SimulationManager) -> None:
        self.manager = manager
        self.data: MetricSeries = defaultdict(list)

    def record(self, timeout: float = 0.5) -> MetricSeries:
        """Block until the simulation stops and return captured metrics."""

        while True:
            event = self.manager.metrics_stream(timeout=timeout)
            if event is None:
                if not self.manager.is_running():
                    break
                continue

            event_type = event.get("type")
            if event_type == "shutdown":
                break

            if event_type != "metrics":
                continue

            tick = int(event.get("tick", 0))
            for key, value in event.get("metrics", {}).items():
                if isinstance(value, bool):
                    numeric = 1.0 if value else 0.0
                elif isinstance(value, (int, float)):
                    numeric = float(value)
                else:
                    continue
                self.data[key].append((tick, numeric))

        return self.data


def render_static_dashboard(records: MetricSeries, title: str = "Ticket Simulation Report") -> plt.Figure:
    """Render pool occupancy and cumulative flow from recorded metrics."""

    fig, axes = plt.subplots(1, 2, figsize=(12, 5))
    fig.suptitle(title, fontsize=16)

    for axis, panel in zip(axes, PLOT_CONFIG.values()):
        axis.set_title(panel["title"])
        axis.set_xlabel("Monitor poll")
        axis.set_ylabel(panel["ylabel"])
        axis.grid(True, linestyle="--", linewidth=0.5, alpha=0.6)

        plotted = False
        for metric_name, props in panel["metrics"].items():
            points = sorted(records.get(metric_name, []), key=lambda p: p[0])
            if not points:
                continue
            ticks, values = zip(*points)
            axis.step(ticks, values, where="post", label=props["label"], color=props["color"])
            plotted = True

        if plotted:
            axis.legend(loc="upper left")

        xmin, xmax = axis.get_xlim()
        if xmin == xmax:
            axis.set_xlim(xmin - 1, xmax + 1)
        ymin, ymax = axis.get_ylim()
        if ymin == ymax:
            pad = 1 if ymin == 0 else abs(ymin) * 0.1
            axis.set_ylim(ymin - pad, ymax + pad)

    fig.tight_layout()
    return fig
