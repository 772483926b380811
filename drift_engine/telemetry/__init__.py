"""Logging setup for the drift engine."""

from drift_engine.telemetry.logging import JSONFormatter, configure_logging

__all__ = ["JSONFormatter", "configure_logging"]
