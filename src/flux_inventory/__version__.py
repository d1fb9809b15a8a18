"""Version information for flux_inventory."""

__version__ = "0.3.0"
