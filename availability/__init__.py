"""Verfügbarkeits-Modul: erlaubte Fächer/Daten für Sitzungsnotizen."""

from .resolver import (
    AvailabilityWindow,
    DEFAULT_HORIZON_DAYS,
    calendar_weekday,
    is_allowed,
    resolve,
)
from .notes import (
    NoteDraft,
    NoteValidationError,
    create_note,
    default_note_choice,
    edit_note,
    ensure_valid_date,
    validate_note,
)

__all__ = [
    "AvailabilityWindow",
    "DEFAULT_HORIZON_DAYS",
    "calendar_weekday",
    "is_allowed",
    "resolve",
    "NoteDraft",
    "NoteValidationError",
    "create_note",
    "default_note_choice",
    "edit_note",
    "ensure_valid_date",
    "validate_note",
]
