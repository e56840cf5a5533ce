"""Datenmodell für einen wöchentlich wiederkehrenden Nachhilfe-Zeitslot."""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Wochentag (0=Montag, 1=Dienstag, ..., 6=Sonntag)
DAY_NAMES = ["Mo", "Di", "Mi", "Do", "Fr", "Sa", "So"]

MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_time(value: str) -> int:
    """Wandelt "HH:MM" (optional "HH:MM:SS") in Minuten seit Mitternacht um."""
    match = _TIME_RE.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"Ungültige Uhrzeit: {value!r} (erwartet HH:MM)")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Uhrzeit außerhalb des Tages: {value!r}")
    return hours * 60 + minutes


def format_minutes(minutes: int) -> str:
    """Minuten seit Mitternacht → "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


class TimeSlot(BaseModel):
    """Wöchentlich wiederkehrender Unterrichtsblock (Tag, Beginn, Dauer, Fach).

    Immutable (frozen=True), damit es als Dict-Key / Set-Element nutzbar ist.
    Mehrere Slots dürfen sich am selben Tag überschneiden.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    day_of_week: int = Field(ge=0, le=6)   # 0=Mo..6=So
    start_time: str                        # "HH:MM"
    duration_minutes: int = Field(gt=0)
    subject: str = Field(min_length=1)

    @field_validator("start_time")
    @classmethod
    def _check_start_time(cls, v: str) -> str:
        parse_time(v)
        return v

    @field_validator("subject")
    @classmethod
    def _check_subject(cls, v: str) -> str:
        # Wert bleibt wie geschrieben, nur reine Leerzeichen sind kein Fach
        if not v.strip():
            raise ValueError("Das Fach darf nicht leer sein.")
        return v

    @model_validator(mode="after")
    def _check_end_of_day(self):
        # Kein Clamping, kein Umbruch über Mitternacht
        if self.end_minutes > MINUTES_PER_DAY:
            raise ValueError(
                f"Slot {self.id}: Ende {self.end_minutes} min liegt nach Mitternacht"
            )
        return self

    @property
    def start_minutes(self) -> int:
        return parse_time(self.start_time)

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration_minutes

    @property
    def day_name(self) -> str:
        """Abgekürzter Tagesname."""
        return DAY_NAMES[self.day_of_week]

    def __str__(self) -> str:
        return f"{self.day_name} {format_minutes(self.start_minutes)} {self.subject}"
