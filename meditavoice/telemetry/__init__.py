"""Logging helpers shared by the service layers."""

from .logger import RunLogger, configure_logging

__all__ = ["RunLogger", "configure_logging"]
