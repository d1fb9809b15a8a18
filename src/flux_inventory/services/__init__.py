"""Service layer for Flux inventory aggregation."""
