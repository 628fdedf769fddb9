"""Wire <-> display conversions for person fields.

The table shows localized values (``02/05/2001``, ``Profesor``,
``Masculino``) while the endpoint speaks ISO dates, numeric role ids and
single-letter sex codes. Every function here is pure and never raises on
malformed input.
"""

import math
from collections.abc import Mapping
from typing import Any

ROLES: dict[int, str] = {
    1: "Alumno",
    2: "Profesor",
    3: "Administrativo",
    4: "Otro",
}

# Reverse role lookups that match nothing resolve to this id.
DEFAULT_ROLE_ID = 1
UNKNOWN_ROLE = "Desconocido"

IDENTIFIER_KEYS = ("id", "persona_id", "id_persona", "personaId")

NOT_AVAILABLE = "N/A"

SEX_MALE = "Masculino"
SEX_FEMALE = "Femenino"
SEX_OTHER = "Otro"

# M and F both collapse to Femenino; the inverse map only knows M.
_SEX_LABELS = {
    "H": SEX_MALE,
    "M": SEX_FEMALE,
    "F": SEX_FEMALE,
}

_SEX_CODES = {
    SEX_MALE: "H",
    SEX_FEMALE: "M",
}


def extract_identifier(record: Any) -> Any:
    """Return the record identifier from the first known alias present.

    Returns None when the record carries none of the aliases.
    """
    if not isinstance(record, Mapping):
        return None

    for key in IDENTIFIER_KEYS:
        value = record.get(key)
        if value is not None:
            return value
    return None


def decode_date(iso: Any) -> str:
    """Format ``YYYY-MM-DD`` as ``DD/MM/YYYY``.

    Anything that does not split into three non-empty parts comes back
    unchanged.
    """
    if not iso:
        return ""
    if not isinstance(iso, str):
        return str(iso)

    parts = iso.split("-")
    if len(parts) < 3:
        return iso

    year, month, day = parts[0], parts[1], parts[2]
    if year and month and day:
        return f"{day}/{month}/{year}"
    return iso


def encode_date_from_display(text: Any) -> str:
    """Turn ``DD/MM/YYYY`` back into ``YYYY-MM-DD``.

    ISO input and anything unrecognised is returned unchanged.
    """
    if not text:
        return ""
    if not isinstance(text, str):
        return str(text)

    value = text.strip()
    parts = value.split("/")
    if len(parts) != 3 or not all(parts):
        return value

    day, month, year = parts
    return f"{year}-{month}-{day}"


def decode_sex(code: Any) -> str:
    """Map a sex code (case-insensitive) to its display label."""
    if not code:
        return NOT_AVAILABLE
    return _SEX_LABELS.get(str(code).upper(), SEX_OTHER)


def encode_sex_from_label(label: Any) -> str:
    """Map a rendered sex label back to a code. Unknown labels become O."""
    if not isinstance(label, str):
        return "O"
    return _SEX_CODES.get(label.strip(), "O")


_ROLE_TEXT_KEYS = {str(role_id): role_id for role_id in ROLES}


def _role_key(role_id: Any) -> int | None:
    """Exact table key for role_id: integral numbers or their canonical text."""
    if isinstance(role_id, bool):
        return None
    if isinstance(role_id, int):
        return role_id
    if isinstance(role_id, float):
        return int(role_id) if role_id.is_integer() else None
    if isinstance(role_id, str) and role_id in _ROLE_TEXT_KEYS:
        return _ROLE_TEXT_KEYS[role_id]
    return None


def decode_role(role_id: Any, fallback_text: Any = None) -> str:
    """Look up the role label, falling back to free text, then Desconocido."""
    key = _role_key(role_id)
    label = ROLES.get(key) if key is not None else None
    if label:
        return label
    if fallback_text:
        return str(fallback_text)
    return UNKNOWN_ROLE


def encode_role_from_label(label: Any) -> int:
    """Reverse role lookup by label text, defaulting to DEFAULT_ROLE_ID."""
    text = label.strip() if isinstance(label, str) else label
    for role_id, role_label in ROLES.items():
        if role_label == text:
            return role_id
    return DEFAULT_ROLE_ID


def parse_number(value: Any) -> int | float | None:
    """Parse user or wire input as a number.

    Integral text becomes an int, other numeric text a float. Empty,
    non-numeric and non-finite input gives None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None

    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def decode_score(value: Any) -> str:
    """Render a score, or N/A when there is none."""
    if value is None:
        return NOT_AVAILABLE
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def encode_score_from_display(text: Any) -> int | float | None:
    """Read a rendered score back. N/A and blank mean no score."""
    if isinstance(text, str) and text.strip() == NOT_AVAILABLE:
        return None
    return parse_number(text)
