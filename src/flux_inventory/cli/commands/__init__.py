"""fluxinv command modules."""

from flux_inventory.cli.commands.inventory import register_inventory_commands

__all__ = ["register_inventory_commands"]
