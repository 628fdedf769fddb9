"""Create/edit modal session management."""

from .controller import (
    ClosedSession,
    CreateSession,
    EditSession,
    ModalController,
    ModalSession,
    form_from_row,
)
from .form import (
    QUICK_ENTRY_MESSAGE,
    FormFields,
    ModalMode,
    Submission,
    build_create,
    build_quick_create,
    build_update,
    parse_quick_entry,
    validate_form,
)

__all__ = [
    "QUICK_ENTRY_MESSAGE",
    "ClosedSession",
    "CreateSession",
    "EditSession",
    "FormFields",
    "ModalController",
    "ModalMode",
    "ModalSession",
    "Submission",
    "build_create",
    "build_quick_create",
    "build_update",
    "form_from_row",
    "parse_quick_entry",
    "validate_form",
]
