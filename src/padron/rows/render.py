"""Plain-text table rendering.

The renderer only reads RowStore; it never holds row state of its own.
"""

from collections.abc import Callable

from .store import PlaceholderKind, RowStore

HEADERS = ["#", "Nombre", "Apellido", "Sexo", "Nacimiento", "Rol", "Calificación"]

_RED = "\033[31m"
_DIM = "\033[2m"
_RESET = "\033[0m"


def format_table(store: RowStore, color: bool = False) -> str:
    """Render the store as an aligned text table. Rows are numbered from 1."""
    body = [[str(index), *row.cells] for index, row in enumerate(store.rows, start=1)]
    widths = [len(header) for header in HEADERS]
    for line in body:
        widths = [max(width, len(cell)) for width, cell in zip(widths, line)]

    def fmt(cells: list[str]) -> str:
        return "  ".join(cell.ljust(width) for cell, width in zip(cells, widths)).rstrip()

    lines = [fmt(HEADERS), "-" * (sum(widths) + 2 * (len(widths) - 1))]

    placeholder = store.placeholder
    if placeholder is not None:
        message = placeholder.message
        if color:
            tint = _RED if placeholder.kind is PlaceholderKind.ERROR else _DIM
            message = f"{tint}{message}{_RESET}"
        lines.append(message)
    else:
        lines.extend(fmt(line) for line in body)

    return "\n".join(lines)


class TableRenderer:
    """Prints the table every time the store changes.

    The loading placeholder is skipped; the status banner already says so.
    """

    def __init__(self, output: Callable[[str], None] = print, color: bool = True) -> None:
        self._output = output
        self._color = color

    def __call__(self, store: RowStore) -> None:
        placeholder = store.placeholder
        if placeholder is not None and placeholder.kind is PlaceholderKind.LOADING:
            return
        self._output(format_table(store, color=self._color))

    def attach(self, store: RowStore) -> None:
        """Subscribe to store changes."""
        store.subscribe(self)
