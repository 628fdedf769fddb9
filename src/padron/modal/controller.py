"""Modal form session: closed, creating a person, or editing one."""

from dataclasses import dataclass
from typing import Any, Union

from ..codec import (
    encode_role_from_label,
    encode_score_from_display,
    encode_sex_from_label,
)
from ..errors import ValidationFailure
from ..rows import DisplayRow
from .form import FormFields, ModalMode, Submission, build_create, build_update


@dataclass(frozen=True)
class ClosedSession:
    mode = ModalMode.CLOSED


@dataclass(frozen=True)
class CreateSession:
    mode = ModalMode.CREATE


@dataclass(frozen=True)
class EditSession:
    identifier: str
    mode = ModalMode.EDIT


ModalSession = Union[ClosedSession, CreateSession, EditSession]

CLOSED = ClosedSession()


def form_from_row(row: DisplayRow) -> FormFields:
    """Hydrate a form from table state.

    Display-only cells go back through the codec; the raw ISO date is taken
    as-is so it is never converted twice.
    """
    score = encode_score_from_display(row.calificacion)
    return FormFields(
        nombre=row.nombre,
        apellido=row.apellido,
        sexo=encode_sex_from_label(row.sexo),
        fh_nac=row.iso_date_raw,
        id_rol=str(encode_role_from_label(row.rol)),
        calificacion="" if score is None else str(score),
    )


class ModalController:
    """Owns the single modal form and its session state."""

    CREATE_TITLE = "Nueva persona"
    EDIT_TITLE = "Editar persona"

    def __init__(self) -> None:
        self._session: ModalSession = CLOSED
        self.form = FormFields()
        self.errors: list[str] = []

    @property
    def session(self) -> ModalSession:
        return self._session

    @property
    def mode(self) -> ModalMode:
        return self._session.mode

    @property
    def is_open(self) -> bool:
        return self.mode is not ModalMode.CLOSED

    @property
    def title(self) -> str:
        if self.mode is ModalMode.EDIT:
            return self.EDIT_TITLE
        if self.mode is ModalMode.CREATE:
            return self.CREATE_TITLE
        return ""

    def open_create(self) -> CreateSession:
        """Start a blank create session."""
        session = CreateSession()
        self._session = session
        self.form = FormFields()
        self.errors = []
        return session

    def open_edit(self, row: DisplayRow) -> EditSession:
        """Start an edit session hydrated from a rendered row."""
        if row.identifier is None:
            raise LookupError("Row has no identifier and cannot be edited")

        session = EditSession(identifier=row.identifier)
        self._session = session
        self.form = form_from_row(row)
        self.errors = []
        return session

    def close(self) -> None:
        """Discard the session and working form without asking."""
        self._session = CLOSED
        self.form = FormFields()
        self.errors = []

    def update_form(self, **changes: Any) -> FormFields:
        """Replace some inputs in the working form."""
        if not self.is_open:
            raise RuntimeError("Modal is closed")
        self.form = self.form.with_changes(**changes)
        return self.form

    def validate_and_build_payload(self) -> Submission:
        """Validate the working form and build the submission for this mode.

        Raises ValidationFailure with field messages; they are also kept on
        ``errors`` for display.
        """
        session = self._session
        try:
            if isinstance(session, EditSession):
                submission = build_update(self.form, session.identifier)
            elif isinstance(session, CreateSession):
                submission = build_create(self.form)
            else:
                raise RuntimeError("Modal is closed")
        except ValidationFailure as e:
            self.errors = e.messages
            raise

        self.errors = []
        return submission
