"""Output formatters for fluxinv commands.

Commands hand plain rows (dicts) plus column definitions to a formatter;
the formatter decides whether they become a Rich table, JSON or YAML.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from enum import Enum, StrEnum
from typing import Any

import yaml
from pydantic import BaseModel
from rich.console import Console

from flux_inventory.cli.output import Table

Columns = list[tuple[str, str]]


class OutputFormat(StrEnum):
    """Supported output formats for CLI commands."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"


def to_plain(value: Any) -> Any:
    """Convert models (possibly nested in lists/dicts) to JSON-compatible data."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_none=True)
    if isinstance(value, Mapping):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, list | tuple | set | frozenset):
        items = [to_plain(v) for v in value]
        return sorted(items) if isinstance(value, set | frozenset) else items
    return value


class Formatter(ABC):
    """Abstract base class for output formatters."""

    def __init__(self, console: Console) -> None:
        self.console = console

    @abstractmethod
    def format_list(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Columns,
        title: str = "",
        data: Any = None,
    ) -> None:
        """Display rows.

        Args:
            rows: One mapping per row, keyed by column field.
            columns: ``(field, header)`` pairs in display order.
            title: Table title.
            data: Full payload for machine-readable formats; defaults to rows.
        """

    def format_success(self, message: str) -> None:
        self.console.print(f"[green]{message}[/green]")

    def _print(self, text: str) -> None:
        # machine-readable output must not be wrapped or styled
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)


class TableFormatter(Formatter):
    """Rich table output formatter."""

    def format_list(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Columns,
        title: str = "",
        data: Any = None,
    ) -> None:
        table = Table(title=title or None)
        for field, header in columns:
            style = "cyan" if field in ("name", "key", "cluster") else None
            table.add_column(header, style=style)

        for row in rows:
            table.add_row(*(self._format_cell_value(row.get(field)) for field, _ in columns))

        self.console.print(table)
        self.console.print(f"\n[dim]Total: {len(rows)}[/dim]")

    def _format_cell_value(self, value: Any) -> str:
        if isinstance(value, bool):
            return "Yes" if value else "No"
        if value is None or value == "":
            return "-"
        if isinstance(value, dict):
            return json.dumps(value)
        if isinstance(value, list):
            if not value:
                return "-"
            return ", ".join(str(v) for v in value)
        return str(value)


class JsonFormatter(Formatter):
    """JSON output formatter."""

    def format_list(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Columns,
        title: str = "",
        data: Any = None,
    ) -> None:
        payload = to_plain(rows if data is None else data)
        self._print(json.dumps(payload, indent=2, default=str))


class YamlFormatter(Formatter):
    """YAML output formatter."""

    def format_list(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Columns,
        title: str = "",
        data: Any = None,
    ) -> None:
        payload = to_plain(rows if data is None else data)
        self._print(yaml.safe_dump(payload, default_flow_style=False, sort_keys=False))


def get_formatter(format_type: OutputFormat, console: Console | None = None) -> Formatter:
    """Factory function to get the appropriate formatter."""
    if console is None:
        console = Console()

    formatters: dict[OutputFormat, type[Formatter]] = {
        OutputFormat.TABLE: TableFormatter,
        OutputFormat.JSON: JsonFormatter,
        OutputFormat.YAML: YamlFormatter,
    }

    return formatters.get(format_type, TableFormatter)(console)
