"""Visualization utilities for the ticket simulation."""

from ticketsim.viz.report import TelemetryRecorder, render_static_dashboard
from ticketsim.viz.server import build_dashboard_app

__all__ = [
    "TelemetryRecorder",
    "render_static_dashboard",
    "build_dashboard_app",
]
