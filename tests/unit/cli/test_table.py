"""Tests for the CLI table helper."""

from __future__ import annotations

import pytest

from flux_inventory.cli.output import Table


@pytest.mark.unit
class TestTable:
    """Tests for the Table defaults."""

    def test_defaults(self) -> None:
        table = Table(title="Flux resources")

        assert table.show_header is True
        assert table.header_style == "bold"

    def test_columns_fold_by_default(self) -> None:
        table = Table()
        table.add_column("Name", style="cyan")
        table.add_column("Status", overflow="ellipsis")

        assert [c.overflow for c in table.columns] == ["fold", "ellipsis"]
        assert table.columns[0].style == "cyan"

    def test_explicit_header_style(self) -> None:
        assert Table(header_style="red").header_style == "red"
