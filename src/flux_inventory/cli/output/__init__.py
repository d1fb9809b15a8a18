"""Shared CLI output helpers.

Usage:
    from flux_inventory.cli.output import Table

    table = Table(title="Kustomizations")
    table.add_column("Name", style="cyan")
    table.add_row("apps")
    console.print(table)
"""

from flux_inventory.cli.output.table import Table

__all__ = ["Table"]
