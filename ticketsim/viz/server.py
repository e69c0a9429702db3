"""Dash application providing live controls and a dashboard for the simulation."""

from __future__ import annotations

import logging
from typing import Any

import dash
from dash import Dash, Input, Output, State, dcc, html
import plotly.graph_objs as go

from ticketsim.core.errors import TicketingError
from ticketsim.core.simulation import SimulationManager
from ticketsim.utils.config import ConfigurationStore

logger = logging.getLogger(__name__)

CHART_METRICS = ("resident", "released", "issued")


def build_dashboard_app(manager: SimulationManager, store: ConfigurationStore) -> Dash:
    dash_app = dash.Dash(__name__, title="Ticketing Control Center")

    dash_app.layout = html.Div(
        className="app-container",
        children=[
            html.Div(
                className="header",
                children=[
                    html.H1("Real-time Ticketing Control Center"),
                    html.Div(id="status-indicator", className="status-indicator"),
                ],
            ),
            html.Div(
                className="controls",
                children=[
                    dcc.Dropdown(
                        id="event-select",
                        options=event_options(store),
                        placeholder="Select an event",
                        clearable=False,
                    ),
                    html.Button("Start", id="start-btn", n_clicks=0, className="btn btn-start"),
                    html.Button("Stop", id="stop-btn", n_clicks=0, className="btn btn-stop"),
                    html.Div(id="action-message", className="action-message"),
                ],
            ),
            html.Div(
                className="charts",
                children=[dcc.Graph(id="pool-chart")],
            ),
            html.Div(
                className="event-log",
                children=[
                    html.H3("Recent Pool Snapshots"),
                    html.Pre(id="event-log-content", className="log-content"),
                ],
            ),
            dcc.Interval(id="metric-poll", interval=1000, n_intervals=0),
        ],
    )

    register_callbacks(dash_app, manager, store)
    return dash_app


def event_options(store: ConfigurationStore) -> list[dict[str, Any]]:
    return [
        {"label": f"{config.formatted_id} {config.title}", "value": config.event_id}
        for config in store.list()
    ]


def handle_control(manager: SimulationManager, store: ConfigurationStore, action: str, event_id: Any) -> str:
    """Apply a start/stop request and return the message to display."""

    try:
        if action == "start-btn":
            if event_id is None:
                return "Select an event before starting."
            config = store.get(int(event_id))
            manager.start(config)
            return f"Started simulation for {config.title}."
        if action == "stop-btn":
            manager.stop()
            return "Simulation stopped."
    except TicketingError as exc:
        logger.warning("Control request %s rejected: %s", action, exc)
        return str(exc)
    return ""


def register_callbacks(app: Dash, manager: SimulationManager, store: ConfigurationStore) -> None:
    @app.callback(
        Output("action-message", "children"),
        Input("start-btn", "n_clicks"),
        Input("stop-btn", "n_clicks"),
        State("event-select", "value"),
        prevent_initial_call=True,
    )
    def handle_buttons(_start: int, _stop: int, event_id: Any) -> str:
        return handle_control(manager, store, str(dash.ctx.triggered_id), event_id)

    @app.callback(
        Output("status-indicator", "children"),
        Output("pool-chart", "figure"),
        Output("event-log-content", "children"),
        Input("metric-poll", "n_intervals"),
    )
    def refresh_metrics(_interval: int):
        status = manager.status()
        history = manager.get_history()

        label = status["state"].capitalize()
        if status["title"]:
            label = f"{label}: {status['title']}"
        if status["stop_reason"]:
            label = f"{label} ({status['stop_reason']})"

        title = status["title"] or "No simulation"
        log_lines = [
            f"[{tick}] pool={metrics['resident']}/{metrics['capacity']} "
            f"released={metrics['released']} sold={metrics['issued']}"
            for tick, metrics in history[-12:]
        ]
        return f"Status: {label}", build_pool_chart(history, title), "\n".join(log_lines)


def build_pool_chart(history: list[tuple[int, dict[str, Any]]], title: str) -> go.Figure:
    fig = go.Figure()
    series: dict[str, tuple[list[int], list[float]]] = {}
    for tick, metrics in history:
        for key in CHART_METRICS:
            value = metrics.get(key)
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                continue
            xs, ys = series.setdefault(key, ([], []))
            xs.append(tick)
            ys.append(float(value))

    for key, (xs, ys) in series.items():
        fig.add_trace(go.Scatter(x=xs, y=ys, mode="lines+markers", name=key))

    fig.update_layout(title=title, template="plotly_dark", xaxis_title="Monitor poll", yaxis_title="Tickets")
    return fig
