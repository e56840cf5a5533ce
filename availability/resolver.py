"""Verfügbarkeitsfenster: erlaubte Fächer und Daten für Sitzungsnotizen.

Aus den einem Schüler zugeordneten Wochen-Slots wird abgeleitet, für welche
Fächer und an welchen Kalendertagen (innerhalb eines Horizonts ab ``today``)
eine Notiz angelegt werden darf.

Wochentag-Konvention:
  Slots zählen Montag=0 .. Sonntag=6. Die Umrechnung auf die Nummerierung
  des ``calendar``-Moduls passiert ausschließlich in ``calendar_weekday``.
"""

import calendar
import logging
import unicodedata
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from models.timeslot import TimeSlot

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 120

# Slot-Tag (Index) → Wochentag des calendar-Moduls
_CALENDAR_WEEKDAYS = (
    calendar.MONDAY,
    calendar.TUESDAY,
    calendar.WEDNESDAY,
    calendar.THURSDAY,
    calendar.FRIDAY,
    calendar.SATURDAY,
    calendar.SUNDAY,
)


class AvailabilityWindow(BaseModel):
    """Abgeleitetes Fenster eines Schülers (wird nie gespeichert)."""

    model_config = ConfigDict(frozen=True)

    subjects: tuple[str, ...] = ()
    weekdays: frozenset[int] = frozenset()   # Slot-Konvention 0=Mo..6=So
    dates: tuple[date, ...] = ()

    @property
    def is_empty(self) -> bool:
        """True wenn keine Notiz angelegt werden kann."""
        return not self.dates


def calendar_weekday(day_of_week: int) -> int:
    """Slot-Wochentag (0=Mo) → ``date.weekday()``-Wert."""
    if not 0 <= day_of_week <= 6:
        raise ValueError(f"Wochentag außerhalb 0..6: {day_of_week}")
    return _CALENDAR_WEEKDAYS[day_of_week]


def subject_sort_key(subject: str) -> str:
    """Sortierschlüssel ohne Akzente und Groß-/Kleinschreibung ("Éco" neben "Eco")."""
    decomposed = unicodedata.normalize("NFKD", subject)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return stripped.casefold()


def _as_date(value: date) -> date:
    # datetime ist Unterklasse von date, Uhrzeit wird verworfen
    if isinstance(value, datetime):
        return value.date()
    return value


def _dedupe(slots: Iterable[TimeSlot]) -> list[TimeSlot]:
    seen: set[str] = set()
    unique: list[TimeSlot] = []
    for slot in slots:
        if slot.id in seen:
            continue
        seen.add(slot.id)
        unique.append(slot)
    return unique


def resolve(
    assigned_slots: Iterable[TimeSlot],
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    *,
    today: date,
) -> AvailabilityWindow:
    """Berechnet das Verfügbarkeitsfenster eines Schülers.

    Args:
        assigned_slots: Dem Schüler zugeordnete Slots (Reihenfolge egal,
            Duplikate per ID werden ignoriert).
        horizon_days: Anzahl Tage nach ``today``; geprüft werden
            ``horizon_days + 1`` Tage inklusive ``today``.
        today: Stichtag (lokales Datum). Wird nie aus der Systemuhr gelesen.

    Returns:
        AvailabilityWindow; leer wenn keine Slots zugeordnet sind.
    """
    if horizon_days < 0:
        raise ValueError(f"horizon_days muss >= 0 sein (war {horizon_days})")

    slots = _dedupe(assigned_slots)
    start = _as_date(today)

    subjects: list[str] = []
    for slot in slots:
        if slot.subject.strip() and slot.subject not in subjects:
            subjects.append(slot.subject)
    # sorted() ist stabil → Gleichstände behalten die Eingangsreihenfolge
    subjects.sort(key=subject_sort_key)

    weekdays = frozenset(slot.day_of_week for slot in slots)
    target = {calendar_weekday(d) for d in weekdays}

    dates: list[date] = []
    if target:
        for offset in range(horizon_days + 1):
            candidate = start + timedelta(days=offset)
            if candidate.weekday() in target:
                dates.append(candidate)

    logger.debug(
        "Verfügbarkeit: %d Slots → %d Fächer, %d Tage (%d Daten ab %s)",
        len(slots), len(subjects), len(weekdays), len(dates), start.isoformat(),
    )
    return AvailabilityWindow(
        subjects=tuple(subjects),
        weekdays=weekdays,
        dates=tuple(dates),
    )


def is_allowed(
    subject: str,
    day: date,
    window: AvailabilityWindow,
    *,
    strict_subjects: bool = False,
) -> bool:
    """Prüft ob eine Notiz für (Fach, Datum) im aktuellen Fenster zulässig ist.

    Ein leeres ``window.subjects`` bedeutet "keine Fach-Einschränkung",
    außer bei ``strict_subjects=True`` (dann ist nichts erlaubt).
    Immer gegen das aktuelle Fenster prüfen, nicht gegen einen alten Stand.
    """
    if window.subjects:
        subject_ok = subject in window.subjects
    else:
        subject_ok = not strict_subjects
    return subject_ok and _as_date(day) in window.dates


def first_allowed_date(window: AvailabilityWindow) -> Optional[date]:
    return window.dates[0] if window.dates else None
