"""Logging configuration for flux_inventory."""

from flux_inventory.logging.config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
