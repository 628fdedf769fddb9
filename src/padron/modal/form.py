"""Form working copy, payload building and validation."""

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any

from ..codec import parse_number
from ..errors import ValidationFailure

QUICK_ENTRY_MESSAGE = "Completa todos los campos."


class ModalMode(Enum):
    """Which kind of session the modal is in."""

    CLOSED = "closed"
    CREATE = "create"
    EDIT = "edit"


@dataclass
class FormFields:
    """Form inputs exactly as entered (text, not yet wire values)."""

    nombre: str = ""
    apellido: str = ""
    sexo: str = ""
    fh_nac: str = ""
    id_rol: str = ""
    calificacion: str = ""

    @classmethod
    def names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def with_changes(self, **changes: Any) -> "FormFields":
        """Return a copy with some inputs replaced."""
        unknown = set(changes) - set(self.names())
        if unknown:
            raise KeyError(f"Unknown form field(s): {', '.join(sorted(unknown))}")
        return replace(self, **{k: "" if v is None else str(v) for k, v in changes.items()})


@dataclass(frozen=True)
class Submission:
    """A validated form, ready to send.

    ``fields`` never carries the identifier; ``payload`` is the exact
    request body.
    """

    mode: ModalMode
    fields: dict[str, Any] = field(default_factory=dict)
    identifier: str | None = None

    @property
    def payload(self) -> dict[str, Any]:
        if self.mode is ModalMode.EDIT:
            return {"id_persona": self.identifier, **self.fields}
        return dict(self.fields)


def _clean(form: FormFields) -> dict[str, Any]:
    return {
        "nombre": form.nombre.strip(),
        "apellido": form.apellido.strip(),
        # the endpoint stores lowercase sex codes
        "sexo": form.sexo.strip().lower(),
        "fh_nac": form.fh_nac.strip(),
        "id_rol": parse_number(form.id_rol),
        "calificacion": parse_number(form.calificacion),
    }


def validate_form(form: FormFields) -> list[str]:
    """Return one message per missing required field, in form order."""
    values = _clean(form)
    errors = []
    if not values["nombre"]:
        errors.append("Nombre es requerido")
    if not values["apellido"]:
        errors.append("Apellido es requerido")
    if not values["sexo"]:
        errors.append("Sexo es requerido")
    if not values["fh_nac"]:
        errors.append("Fecha de nacimiento es requerida")
    if not values["id_rol"]:
        errors.append("Rol es requerido")
    return errors


def build_create(form: FormFields) -> Submission:
    """Build a create submission. calificacion is always sent, possibly null."""
    errors = validate_form(form)
    if errors:
        raise ValidationFailure(errors)
    return Submission(mode=ModalMode.CREATE, fields=_clean(form))


def build_update(form: FormFields, identifier: str | None) -> Submission:
    """Build an update submission.

    calificacion is only included when it was given and is numeric.
    """
    errors = validate_form(form)
    if errors:
        raise ValidationFailure(errors)

    values = _clean(form)
    if values["calificacion"] is None:
        del values["calificacion"]
    return Submission(mode=ModalMode.EDIT, fields=values, identifier=identifier)


def parse_quick_entry(text: str) -> FormFields:
    """Parse ``nombre;apellido;sexo;fh_nac;id_rol[;calificacion]``."""
    parts = [part.strip() for part in (text or "").split(";")]
    parts += [""] * (6 - len(parts))
    return FormFields(*parts[:6])


def build_quick_create(text: str) -> Submission:
    """Validate a quick entry line as a whole and build a create submission."""
    form = parse_quick_entry(text)
    if validate_form(form):
        raise ValidationFailure([QUICK_ENTRY_MESSAGE])
    return Submission(mode=ModalMode.CREATE, fields=_clean(form))
