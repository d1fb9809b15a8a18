"""Command line interface for flux-inventory."""
