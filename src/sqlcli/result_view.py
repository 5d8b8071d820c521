"""Rendering of query results on the terminal."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from sqlcli.gateway import ResultDescriptor
from sqlcli.terminal import Terminal

NULL_COLUMN = "<NULL>"
ROW_KIND_INSERT = "+I"


def format_value(value: Any, max_width: int | None = None) -> str:
    """Format a value for display.

    Args:
        value: The value to format
        max_width: Maximum character width before truncating, None for no limit
    """
    if value is None:
        s = NULL_COLUMN
    elif isinstance(value, bool):
        s = "TRUE" if value else "FALSE"
    elif isinstance(value, float):
        s = repr(value)
    else:
        s = str(value)
    if max_width is not None and len(s) > max_width:
        if max_width <= 3:
            return s[:max_width]
        return s[: max_width - 3] + "..."
    return s


def _is_numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def column_widths(columns: Sequence[str], rows: Sequence[Sequence[Any]], max_width: int | None) -> list[int]:
    """Widths inferred from the header and the data, capped at ``max_width``."""
    widths = [len(col) for col in columns]
    for row in rows:
        for i, value in enumerate(row):
            widths[i] = max(widths[i], len(format_value(value, max_width)))
    if max_width is not None:
        widths = [min(w, max(max_width, len(columns[i]))) for i, w in enumerate(widths)]
    return widths


def _border(widths: Sequence[int]) -> str:
    return "+" + "+".join("-" * (w + 2) for w in widths) + "+"


def _tableau_line(values: Sequence[Any], widths: Sequence[int], max_width: int | None) -> str:
    cells = []
    for value, width in zip(values, widths):
        text = format_value(value, max_width)
        cells.append(text.rjust(width) if _is_numeric(value) else text.ljust(width))
    return "| " + " | ".join(cells) + " |"


def print_tableau(
    terminal: Terminal,
    columns: Sequence[str],
    rows: Sequence[Sequence[Any]],
    max_width: int | None = None,
    row_kind: str | None = None,
) -> int:
    """Print rows as a bordered table with widths inferred from the data.

    With ``row_kind`` an ``op`` column is prepended showing that kind for
    every row. Stops early when the terminal's interrupt flag is raised and
    returns the number of rows printed.
    """
    if row_kind is not None:
        columns = ["op", *columns]
        rows = [(row_kind, *row) for row in rows]

    if not rows:
        terminal.println("Empty set")
        return 0

    widths = column_widths(columns, rows, max_width)
    border = _border(widths)
    terminal.println(border)
    terminal.println("| " + " | ".join(col.center(w) for col, w in zip(columns, widths)) + " |")
    terminal.println(border)
    printed = 0
    for row in rows:
        if terminal.interrupt_requested.is_set():
            break
        terminal.println(_tableau_line(row, widths, max_width))
        printed += 1
    terminal.println(border)
    terminal.flush()
    return printed


class ResultView(ABC):
    """Base for views that take over the terminal until the result is left."""

    def __init__(self, terminal: Terminal, descriptor: ResultDescriptor) -> None:
        self.terminal = terminal
        self.descriptor = descriptor
        self.closed = False

    @abstractmethod
    def open(self) -> None:
        """Show the result until the user leaves it."""

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.terminal.flush()

    def __enter__(self) -> ResultView:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class TableauResultView(ResultView):
    """Prints the result directly in tableau form."""

    def __enter__(self) -> TableauResultView:
        return self

    def open(self) -> None:
        self.display_results()

    def display_results(self) -> None:
        desc = self.descriptor
        row_kind = ROW_KIND_INSERT if desc.is_streaming else None
        printed = print_tableau(self.terminal, desc.columns, desc.rows, desc.max_column_width, row_kind)
        if printed < len(desc.rows):
            self.terminal.println(f"Query terminated, received a total of {printed} rows")
        elif desc.is_streaming:
            self.terminal.println(f"Received a total of {printed} row{'s' if printed != 1 else ''}")
        elif printed:
            self.terminal.println(f"{printed} row{'s' if printed != 1 else ''} in set")
        self.terminal.flush()


class TableResultView(ResultView):
    """Materialized view: the final content of the result as a table."""

    def __init__(self, terminal: Terminal, descriptor: ResultDescriptor, max_rows: int | None = None) -> None:
        super().__init__(terminal, descriptor)
        self.max_rows = max_rows

    def open(self) -> None:
        desc = self.descriptor
        rows = desc.rows
        if self.max_rows is not None and len(rows) > self.max_rows:
            # Only the most recent rows are kept
            rows = rows[-self.max_rows:]

        if not rows:
            self.terminal.println("(no results)")
            return

        widths = column_widths(desc.columns, rows, desc.max_column_width)
        header = " | ".join(col.ljust(w) for col, w in zip(desc.columns, widths))
        self.terminal.println(header)
        self.terminal.println("-" * len(header))
        shown = 0
        for row in rows:
            if self.terminal.interrupt_requested.is_set():
                break
            values = [format_value(v, desc.max_column_width).ljust(w) for v, w in zip(row, widths)]
            self.terminal.println(" | ".join(values))
            shown += 1
        self.terminal.println(f"\n({shown} row{'s' if shown != 1 else ''})")


class ChangelogResultView(ResultView):
    """Changelog view: every change of the result with its row kind."""

    def open(self) -> None:
        desc = self.descriptor
        columns = ["op", *desc.columns]
        rows = [(ROW_KIND_INSERT, *row) for row in desc.rows]
        if not rows:
            self.terminal.println("(no changes)")
            return
        widths = column_widths(columns, rows, desc.max_column_width)
        self.terminal.println(" | ".join(col.ljust(w) for col, w in zip(columns, widths)))
        for row in rows:
            if self.terminal.interrupt_requested.is_set():
                break
            self.terminal.println(
                " | ".join(format_value(v, desc.max_column_width).ljust(w) for v, w in zip(row, widths))
            )
