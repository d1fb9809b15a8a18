"""flux-inventory - FluxCD resource aggregation and relationship graphs."""

from flux_inventory.__version__ import __version__

__all__ = ["__version__"]
