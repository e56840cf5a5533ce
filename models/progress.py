"""Fortschrittsnotizen pro Sitzung (Pydantic v2)."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

# Gruppenname für Notizen ohne Fach
OTHER_SUBJECT = "Sonstiges"


class ProgressRecord(BaseModel):
    """Eine Notiz zu einer Nachhilfe-Sitzung."""

    id: str
    student_id: str
    subject: str
    notes: Optional[str] = None
    record_date: date
    created_at: Optional[datetime] = None


def group_records_by_subject(
    records: list[ProgressRecord],
) -> dict[str, list[ProgressRecord]]:
    """Gruppiert Notizen nach Fach, jeweils neueste zuerst."""
    ordered = sorted(
        records,
        key=lambda r: (
            r.record_date,
            r.created_at.timestamp() if r.created_at else float("-inf"),
        ),
        reverse=True,
    )
    groups: dict[str, list[ProgressRecord]] = {}
    for record in ordered:
        key = record.subject.strip() or OTHER_SUBJECT
        groups.setdefault(key, []).append(record)
    return groups
