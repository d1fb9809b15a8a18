"""Rich table with the defaults used by every fluxinv command."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from rich.table import Table as RichTable

if TYPE_CHECKING:
    from rich.console import ConsoleRenderable, RichCast

OverflowMethod = Literal["fold", "crop", "ellipsis", "ignore"]


class Table(RichTable):
    """Rich Table whose columns wrap long values instead of truncating them.

    Resource keys such as ``Kustomization/flux-system/infrastructure`` are
    often wider than the terminal allows for a column; ``fold`` keeps them
    readable.
    """

    def __init__(self, *headers: Any, **kwargs: Any) -> None:
        kwargs.setdefault("show_header", True)
        kwargs.setdefault("header_style", "bold")
        super().__init__(*headers, **kwargs)

    def add_column(
        self,
        header: ConsoleRenderable | RichCast | str = "",
        footer: ConsoleRenderable | RichCast | str = "",
        *,
        overflow: OverflowMethod = "fold",
        **kwargs: Any,
    ) -> None:
        """Add a column with ``overflow="fold"`` by default.

        Args:
            header: Column header text or renderable.
            footer: Column footer text or renderable.
            overflow: How to handle text overflow.
            **kwargs: Any other ``rich.table.Table.add_column`` argument.
        """
        super().add_column(header, footer, overflow=overflow, **kwargs)
