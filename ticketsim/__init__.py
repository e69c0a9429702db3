"""Real-time event ticketing simulation."""

__version__ = "0.1.0"
