"""Zuordnung Schüler ↔ Zeitslot (Pydantic v2)."""

from pydantic import BaseModel, ConfigDict


class Assignment(BaseModel):
    """Verknüpft einen Schüler mit einem Zeitslot (n:m)."""

    model_config = ConfigDict(frozen=True)

    id: str
    time_slot_id: str
    student_id: str
