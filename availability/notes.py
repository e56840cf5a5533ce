"""Prüfung neuer oder geänderter Sitzungsnotizen gegen das Verfügbarkeitsfenster."""

from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel

from availability.resolver import AvailabilityWindow, first_allowed_date, resolve

if TYPE_CHECKING:
    from config.schema import AvailabilityConfig
    from models.progress import ProgressRecord
    from models.tutoring_data import TutoringData


class NoteValidationError(ValueError):
    """Notiz darf so nicht gespeichert werden (Meldung ist für den Nutzer gedacht)."""


class NoteDraft(BaseModel):
    """Geprüfter, normalisierter Notiz-Entwurf."""

    subject: str
    record_date: date
    content: str


def validate_note(
    subject: str,
    record_date: Optional[date],
    content: str,
    window: AvailabilityWindow,
    *,
    strict_subjects: bool = False,
) -> NoteDraft:
    """Prüft einen Notiz-Entwurf und gibt ihn normalisiert zurück.

    Reihenfolge der Prüfungen:
    1. Fach und Text sind Pflicht
    2. Fach muss zu einem Slot des Schülers gehören
    3. Schüler braucht mindestens einen Slot
    4. Datum muss ein Sitzungstag im Fenster sein

    Raises:
        NoteValidationError: mit einer Meldung für die Oberfläche.
    """
    subject = subject or ""
    if isinstance(record_date, datetime):
        record_date = record_date.date()
    content = (content or "").strip()

    if not subject.strip() or not content:
        raise NoteValidationError("Fach und Notiz sind Pflichtfelder.")
    # Fach exakt wie im Slot geschrieben, wie bei is_allowed
    if window.subjects and subject not in window.subjects:
        raise NoteValidationError(
            "Das Fach muss zu einem Zeitslot des Schülers gehören."
        )
    if not window.subjects and strict_subjects:
        raise NoteValidationError(
            "Für diesen Schüler sind keine Fächer hinterlegt."
        )
    if not window.weekdays:
        raise NoteValidationError(
            "Ordne dem Schüler zuerst einen Zeitslot zu, um ein Datum wählen zu können."
        )
    if record_date is None or record_date not in window.dates:
        raise NoteValidationError(
            "Das Datum muss auf einen Sitzungstag des Schülers fallen."
        )
    return NoteDraft(subject=subject, record_date=record_date, content=content)


def default_note_choice(
    window: AvailabilityWindow,
) -> tuple[Optional[str], Optional[date]]:
    """Vorauswahl für das Notiz-Formular: erstes Fach, erstes Datum."""
    subject = window.subjects[0] if window.subjects else None
    return subject, first_allowed_date(window)


def ensure_valid_date(
    current: Optional[date], window: AvailabilityWindow
) -> Optional[date]:
    """Behält ``current`` falls noch erlaubt, sonst erstes erlaubtes Datum (oder None)."""
    if current is not None and current in window.dates:
        return current
    return first_allowed_date(window)


# ─── Speichern ───

def _check_against_fresh_window(
    data: "TutoringData",
    student_id: str,
    subject: str,
    record_date: Optional[date],
    content: str,
    config: "AvailabilityConfig",
    today: date,
) -> NoteDraft:
    # Fenster immer aus den aktuellen Zuordnungen, nie aus einem Cache
    window = resolve(
        data.slots_for_student(student_id), config.horizon_days, today=today
    )
    return validate_note(
        subject, record_date, content, window,
        strict_subjects=config.strict_subjects,
    )


def create_note(
    data: "TutoringData",
    student_id: str,
    subject: str,
    record_date: Optional[date],
    content: str,
    config: "AvailabilityConfig",
    *,
    today: date,
) -> "ProgressRecord":
    """Prüft die Notiz und legt sie im Datensatz an.

    Raises:
        NoteValidationError: Notiz verletzt das Fenster des Schülers.
        ValueError: Schüler unbekannt.
    """
    if data.get_student(student_id) is None:
        raise ValueError(f"Unbekannter Schüler: {student_id}")
    draft = _check_against_fresh_window(
        data, student_id, subject, record_date, content, config, today
    )
    return data.add_record(student_id, draft.subject, draft.record_date, draft.content)


def edit_note(
    data: "TutoringData",
    record_id: str,
    subject: str,
    record_date: Optional[date],
    content: str,
    config: "AvailabilityConfig",
    *,
    today: date,
) -> "ProgressRecord":
    """Prüft die geänderte Notiz gegen das Fenster ihres Schülers und speichert sie."""
    record = data.get_record(record_id)
    if record is None:
        raise ValueError(f"Unbekannte Notiz: {record_id}")
    draft = _check_against_fresh_window(
        data, record.student_id, subject, record_date, content, config, today
    )
    return data.update_record(record_id, draft.subject, draft.record_date, draft.content)
