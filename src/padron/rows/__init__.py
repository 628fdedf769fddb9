"""Table state and rendering."""

from .render import TableRenderer, format_table
from .store import (
    DisplayRow,
    Placeholder,
    PlaceholderKind,
    RowStore,
    row_from_record,
)

__all__ = [
    "DisplayRow",
    "Placeholder",
    "PlaceholderKind",
    "RowStore",
    "TableRenderer",
    "format_table",
    "row_from_record",
]
