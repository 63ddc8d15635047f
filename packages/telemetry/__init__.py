"""Convenience exports for lexshift telemetry utilities."""

from . import logger, metrics

__all__ = [
    "logger",
    "metrics",
]
