"""In-memory table state.

Every refresh rebuilds the rows from scratch; there is no incremental
patching and no identity kept across reloads.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..codec import (
    NOT_AVAILABLE,
    decode_date,
    decode_role,
    decode_score,
    decode_sex,
    extract_identifier,
)

DATE_KEYS = ("fh_nac", "fecha", "fechaNacimiento")
ROLE_ID_KEYS = ("id_rol", "rolId")


class PlaceholderKind(Enum):
    """Kinds of non-data rows the table can show."""

    LOADING = "loading"
    EMPTY = "empty"
    ERROR = "error"


@dataclass(frozen=True)
class Placeholder:
    """A single row shown instead of records."""

    kind: PlaceholderKind
    message: str


LOADING_PLACEHOLDER = Placeholder(PlaceholderKind.LOADING, "Cargando...")
EMPTY_PLACEHOLDER = Placeholder(PlaceholderKind.EMPTY, "Sin registros")


@dataclass(frozen=True)
class DisplayRow:
    """One rendered record: display cells plus hidden wire values."""

    nombre: str
    apellido: str
    sexo: str
    fecha: str
    rol: str
    calificacion: str
    identifier: str | None = None
    iso_date_raw: str = ""

    @property
    def cells(self) -> list[str]:
        """The six visible cells, in column order."""
        return [self.nombre, self.apellido, self.sexo, self.fecha, self.rol, self.calificacion]

    @property
    def editable(self) -> bool:
        """Rows without an identifier can be listed but not edited or deleted."""
        return self.identifier is not None


def _first(record: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = record.get(key)
        if value:
            return value
    return None


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def row_from_record(record: Any) -> DisplayRow:
    """Decode one wire record into a DisplayRow."""
    if not isinstance(record, Mapping):
        record = {}

    identifier = extract_identifier(record)
    iso_date = _text(_first(record, DATE_KEYS))

    role_id = None
    for key in ROLE_ID_KEYS:
        if record.get(key) is not None:
            role_id = record[key]
            break

    return DisplayRow(
        nombre=_text(record.get("nombre")),
        apellido=_text(record.get("apellido")),
        sexo=decode_sex(record.get("sexo")),
        fecha=decode_date(iso_date) or NOT_AVAILABLE,
        rol=decode_role(role_id, record.get("rol")),
        calificacion=decode_score(record.get("calificacion")),
        identifier=None if identifier is None else str(identifier),
        iso_date_raw=iso_date,
    )


Listener = Callable[["RowStore"], None]


class RowStore:
    """Current table contents: data rows or a single placeholder."""

    def __init__(self) -> None:
        self._rows: list[DisplayRow] = []
        self._placeholder: Placeholder | None = EMPTY_PLACEHOLDER
        self._listeners: list[Listener] = []

    @property
    def rows(self) -> list[DisplayRow]:
        """Snapshot of the data rows in server order."""
        return list(self._rows)

    @property
    def placeholder(self) -> Placeholder | None:
        """The placeholder row, or None when data rows are shown."""
        return self._placeholder

    def __len__(self) -> int:
        return len(self._rows)

    def subscribe(self, listener: Listener) -> None:
        """Call listener with the store after every change."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        """Stop notifying listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _replace(self, rows: list[DisplayRow], placeholder: Placeholder | None) -> None:
        self._rows = rows
        self._placeholder = placeholder
        self._notify()

    def refresh(self, records: Any) -> None:
        """Replace every row with the decoded records.

        Empty or non-list input shows the "no records" placeholder.
        """
        if not isinstance(records, list) or not records:
            self._replace([], EMPTY_PLACEHOLDER)
            return

        self._replace([row_from_record(record) for record in records], None)

    def show_loading(self) -> None:
        """Show the loading placeholder."""
        self._replace([], LOADING_PLACEHOLDER)

    def show_error(self, message: str) -> None:
        """Show an error placeholder carrying the failure message."""
        self._replace([], Placeholder(PlaceholderKind.ERROR, f"Error al cargar: {message}"))

    def row_at(self, handle: int) -> DisplayRow:
        """Return the row rendered at 0-based position handle."""
        if isinstance(handle, bool) or not isinstance(handle, int):
            raise LookupError(f"Invalid row handle: {handle!r}")
        if handle < 0 or handle >= len(self._rows):
            raise LookupError(f"No row at position {handle}")
        return self._rows[handle]
