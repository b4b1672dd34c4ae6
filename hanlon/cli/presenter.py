"""
Response Presentation.

Engine responses are lists of field mappings. Before rendering they are
decorated with a self-link (`@uri`) and sorted; RichPresenter then prints
them as a table or as key/value blocks.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Literal, Protocol

from rich.console import Console
from rich.table import Table
from rich.text import Text

Style = Literal["table", "plain"]

URI_FIELD = "@uri"


class Presenter(Protocol):
    """Anything that can render a list of records."""

    def render(self, objects: Sequence[Mapping[str, Any]], title: str, style: Style = "plain") -> None: ...

    def message(self, text: str) -> None: ...

    def error(self, text: str) -> None: ...


def expand_response_with_uris(
    records: Sequence[Mapping[str, Any]],
    base_uri: str,
    id_field: str = "uuid",
) -> list[dict[str, Any]]:
    """Return copies of the records with `@uri` = base_uri/<id> added."""
    base = base_uri.rstrip("/")
    expanded = []
    for record in records:
        item = dict(record)
        identifier = item.get(id_field)
        if identifier is not None:
            item[URI_FIELD] = f"{base}/{identifier}"
        expanded.append(item)
    return expanded


def _sort_key(value: Any) -> tuple[int, int, str]:
    # integers (or integer strings) first, then text, then missing
    if value is None:
        return (2, 0, "")
    if isinstance(value, bool):
        return (1, 0, str(value))
    if isinstance(value, int):
        return (0, value, "")
    if isinstance(value, str):
        try:
            return (0, int(value), "")
        except ValueError:
            pass
    return (1, 0, str(value))


def sort_records(records: Sequence[Mapping[str, Any]], key: str) -> list[Mapping[str, Any]]:
    """
    Stable sort by one field.

    Records missing the field (or holding None) go last, in response order.
    """
    return sorted(records, key=lambda record: _sort_key(record.get(key)))


def _format_value(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value) or "-"
    return str(value)


class RichPresenter:
    """
    Presenter backed by a rich Console.

    Usage:
        presenter = RichPresenter()
        presenter.render(policies, "Policies:", style="table")
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render(self, objects: Sequence[Mapping[str, Any]], title: str, style: Style = "plain") -> None:
        if not objects:
            self.console.print(f"[bold]{title}[/bold]")
            self.console.print("[dim]No records[/dim]")
            return

        if style == "table":
            self.console.print(self._table(objects, title))
            return

        self.console.print(f"[bold]{title}[/bold]")
        for record in objects:
            width = max(len(str(field)) for field in record) if record else 0
            for field, value in record.items():
                self.console.print(f"  {str(field).ljust(width)} : {_format_value(value)}", markup=False)
            self.console.print()

    def message(self, text: str) -> None:
        self.console.print(text, markup=False, highlight=False)

    def error(self, text: str) -> None:
        self.console.print(Text(f"Error: {text}", style="red"))

    def _table(self, objects: Sequence[Mapping[str, Any]], title: str) -> Table:
        columns: list[str] = []
        for record in objects:
            for field in record:
                if field not in columns:
                    columns.append(field)

        table = Table(title=title, show_header=True)
        for column in columns:
            table.add_column(column, style="cyan" if column == "line_number" else None)
        for record in objects:
            table.add_row(*(Text(_format_value(record.get(column))) for column in columns))
        return table
