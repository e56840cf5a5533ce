"""TutoringData: Vollständiger Datenstand eines Lehrers (Pydantic v2).

Spiegelt die Ergebnisse der externen Datenbank-Abfragen. Die Kernlogik
(Verfügbarkeit, Raster) bekommt daraus nur fertige Listen übergeben.
"""

import json
from collections import defaultdict
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from models.assignment import Assignment
from models.chat import StudentChat
from models.progress import ProgressRecord
from models.student import Student
from models.timeslot import TimeSlot


class TutoringData(BaseModel):
    """Schüler, Zeitslots, Zuordnungen, Notizen und Chats eines Lehrers."""

    teacher_name: str = ""
    students: list[Student] = []
    time_slots: list[TimeSlot] = []
    assignments: list[Assignment] = []
    progress_records: list[ProgressRecord] = []
    chats: list[StudentChat] = []
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    data_version: str = "1.0"

    # ─── Lookups ───

    def get_student(self, student_id: str) -> Optional[Student]:
        return next((s for s in self.students if s.id == student_id), None)

    def find_student(self, key: str) -> Optional[Student]:
        """Sucht per ID, sonst per (eindeutigem) Namen ohne Groß-/Kleinschreibung."""
        student = self.get_student(key)
        if student is not None:
            return student
        matches = [s for s in self.students if s.full_name.casefold() == key.casefold()]
        return matches[0] if len(matches) == 1 else None

    def slot_map(self) -> dict[str, TimeSlot]:
        return {slot.id: slot for slot in self.time_slots}

    def assignments_by_slot(self) -> dict[str, list[Assignment]]:
        grouped: dict[str, list[Assignment]] = defaultdict(list)
        for a in self.assignments:
            grouped[a.time_slot_id].append(a)
        return dict(grouped)

    def slots_for_student(self, student_id: str) -> list[TimeSlot]:
        """Alle dem Schüler zugeordneten Slots (unbekannte Slot-IDs werden übersprungen)."""
        slots = self.slot_map()
        return [
            slots[a.time_slot_id]
            for a in self.assignments
            if a.student_id == student_id and a.time_slot_id in slots
        ]

    def student_names_for_slot(self, slot_id: str) -> list[str]:
        names = []
        for a in self.assignments_by_slot().get(slot_id, []):
            student = self.get_student(a.student_id)
            names.append(student.full_name if student else "Schüler")
        return names

    def records_for_student(self, student_id: str) -> list[ProgressRecord]:
        return [r for r in self.progress_records if r.student_id == student_id]

    def chat_for_student(self, student_id: str) -> Optional[StudentChat]:
        return next((c for c in self.chats if c.student_id == student_id), None)

    def get_record(self, record_id: str) -> Optional[ProgressRecord]:
        return next((r for r in self.progress_records if r.id == record_id), None)

    # ─── Änderungen ───
    # Alle Methoden ändern den Datensatz direkt; gespeichert wird mit save_json().

    @staticmethod
    def _next_id(prefix: str, existing: list) -> str:
        """Nächste freie ID der Form <prefix><n> (wie in den Demo-Daten)."""
        taken = {item.id for item in existing}
        n = len(existing) + 1
        while f"{prefix}{n}" in taken:
            n += 1
        return f"{prefix}{n}"

    def _require_student(self, student_id: str) -> Student:
        student = self.get_student(student_id)
        if student is None:
            raise ValueError(f"Unbekannter Schüler: {student_id}")
        return student

    def add_student(
        self,
        full_name: str,
        email: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Student:
        student = Student(
            id=self._next_id("s", self.students),
            full_name=full_name, email=email, notes=notes,
        )
        self.students.append(student)
        return student

    def remove_student(self, student_id: str) -> Student:
        """Löscht den Schüler samt Zuordnungen, Notizen und Chat."""
        student = self._require_student(student_id)
        self.students = [s for s in self.students if s.id != student_id]
        self.assignments = [a for a in self.assignments if a.student_id != student_id]
        self.progress_records = [
            r for r in self.progress_records if r.student_id != student_id
        ]
        self.chats = [c for c in self.chats if c.student_id != student_id]
        return student

    def update_billing(
        self,
        student_id: str,
        amount_due: Optional[float] = None,
        alert_threshold: Optional[float] = None,
    ) -> Student:
        """Setzt offenen Betrag und/oder Warnschwelle (None = unverändert)."""
        student = self._require_student(student_id)
        values = student.model_dump()
        if amount_due is not None:
            values["amount_due"] = amount_due
        if alert_threshold is not None:
            values["alert_threshold"] = alert_threshold
        updated = Student.model_validate(values)
        self.students = [updated if s.id == student_id else s for s in self.students]
        return updated

    def add_slot(
        self, day_of_week: int, start_time: str, duration_minutes: int, subject: str
    ) -> TimeSlot:
        slot = TimeSlot(
            id=self._next_id("t", self.time_slots),
            day_of_week=day_of_week,
            start_time=start_time,
            duration_minutes=duration_minutes,
            subject=subject,
        )
        self.time_slots.append(slot)
        return slot

    def remove_slot(self, slot_id: str) -> TimeSlot:
        """Löscht den Slot samt seiner Zuordnungen."""
        slot = self.slot_map().get(slot_id)
        if slot is None:
            raise ValueError(f"Unbekannter Zeitslot: {slot_id}")
        self.time_slots = [s for s in self.time_slots if s.id != slot_id]
        self.assignments = [a for a in self.assignments if a.time_slot_id != slot_id]
        return slot

    def assign(self, slot_id: str, student_id: str) -> Assignment:
        self._require_student(student_id)
        if slot_id not in self.slot_map():
            raise ValueError(f"Unbekannter Zeitslot: {slot_id}")
        if any(a.time_slot_id == slot_id and a.student_id == student_id
               for a in self.assignments):
            raise ValueError(f"Schüler {student_id} ist Slot {slot_id} bereits zugeordnet")
        assignment = Assignment(
            id=self._next_id("a", self.assignments),
            time_slot_id=slot_id,
            student_id=student_id,
        )
        self.assignments.append(assignment)
        return assignment

    def unassign(self, slot_id: str, student_id: str) -> Assignment:
        match = next(
            (a for a in self.assignments
             if a.time_slot_id == slot_id and a.student_id == student_id),
            None,
        )
        if match is None:
            raise ValueError(f"Keine Zuordnung von {student_id} zu Slot {slot_id}")
        self.assignments = [a for a in self.assignments if a.id != match.id]
        return match

    def add_record(
        self, student_id: str, subject: str, record_date: date, notes: str
    ) -> ProgressRecord:
        """Legt eine Notiz an. Prüfung gegen das Fenster: availability.notes.create_note."""
        self._require_student(student_id)
        record = ProgressRecord(
            id=self._next_id("p", self.progress_records),
            student_id=student_id,
            subject=subject,
            notes=notes,
            record_date=record_date,
            created_at=datetime.now(timezone.utc),
        )
        self.progress_records.append(record)
        return record

    def update_record(
        self, record_id: str, subject: str, record_date: date, notes: str
    ) -> ProgressRecord:
        record = self.get_record(record_id)
        if record is None:
            raise ValueError(f"Unbekannte Notiz: {record_id}")
        updated = record.model_copy(
            update={"subject": subject, "record_date": record_date, "notes": notes}
        )
        self.progress_records = [
            updated if r.id == record_id else r for r in self.progress_records
        ]
        return updated

    def remove_record(self, record_id: str) -> ProgressRecord:
        record = self.get_record(record_id)
        if record is None:
            raise ValueError(f"Unbekannte Notiz: {record_id}")
        self.progress_records = [r for r in self.progress_records if r.id != record_id]
        return record

    def ensure_chat(self, student_id: str) -> StudentChat:
        """Gibt den Chat des Schülers zurück und legt ihn bei Bedarf an."""
        self._require_student(student_id)
        chat = self.chat_for_student(student_id)
        if chat is None:
            chat = StudentChat(id=self._next_id("c", self.chats), student_id=student_id)
            self.chats.append(chat)
        return chat

    def store_chat(self, chat: StudentChat) -> None:
        """Ersetzt den gespeicherten Chat gleicher ID (oder hängt ihn an)."""
        if any(c.id == chat.id for c in self.chats):
            self.chats = [chat if c.id == chat.id else c for c in self.chats]
        else:
            self.chats.append(chat)

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        weekly_minutes = sum(s.duration_minutes for s in self.time_slots)
        alerts = sum(1 for s in self.students if s.billing_alert)
        lines = [
            f"Lehrkraft: {self.teacher_name}" if self.teacher_name else "",
            f"Schüler: {len(self.students)}",
            f"Zeitslots: {len(self.time_slots)} ({weekly_minutes / 60:.1f}h/Woche)",
            f"Zuordnungen: {len(self.assignments)}",
            f"Notizen: {len(self.progress_records)}",
            f"Zahlungswarnungen: {alerts}" if alerts else "",
        ]
        return "\n".join(l for l in lines if l)

    # ─── Persistenz ────────────────────────────────────────────────────────

    def save_json(self, path: Path) -> None:
        """Speichert den kompletten Datensatz als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        now = datetime.now(timezone.utc)
        updated = self.model_copy(update={
            "modified_at": now,
            "created_at": self.created_at or now,
        })
        with open(path, "w", encoding="utf-8") as f:
            f.write(updated.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "TutoringData":
        """Lädt einen Datensatz aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate(json.load(f))
