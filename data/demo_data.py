"""Demo-Daten-Generator für den Nachhilfeplaner.

Erzeugt reproduzierbare Beispieldaten (Seed) mit absichtlichen Sonderfällen:
  1. Überschneidung: zwei Slots am Dienstag überlappen sich
  2. Schüler ohne Slot: kann keine Notizen bekommen
  3. Zahlungswarnung: ein Schüler über seiner Warnschwelle
"""

import random
from datetime import date, timedelta
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich import box

from availability.resolver import calendar_weekday
from config.defaults import DEFAULT_SUBJECTS
from config.schema import AppConfig
from models.assignment import Assignment
from models.progress import ProgressRecord
from models.student import Student
from models.timeslot import TimeSlot, format_minutes
from models.tutoring_data import TutoringData

console = Console()

_FIRST_NAMES = [
    "Anna", "Ben", "Clara", "David", "Elif", "Finn", "Greta", "Hannes",
    "Ida", "Jonas", "Lea", "Milan", "Nora", "Paul", "Sophie", "Yusuf",
]

_LAST_NAMES = [
    "Müller", "Schmidt", "Fischer", "Weber", "Wagner", "Becker", "Hoffmann",
    "Koch", "Richter", "Klein", "Wolf", "Neumann", "Braun", "Krüger",
]

# Jeder Schüler bekommt eine eindeutige Vor-/Nachnamen-Kombination
MAX_STUDENTS = len(_FIRST_NAMES) * len(_LAST_NAMES)

_START_TIMES = ["14:00", "15:00", "15:30", "16:00", "16:30", "17:00", "18:00"]
_DURATIONS = [45, 60, 90]


class DemoDataGenerator:
    """Generiert einen vollständigen Demo-Datenstand."""

    def __init__(
        self,
        config: AppConfig,
        seed: Optional[int] = None,
        num_students: int = 6,
        reference_date: Optional[date] = None,
    ) -> None:
        if num_students > MAX_STUDENTS:
            raise ValueError(
                f"Höchstens {MAX_STUDENTS} Demo-Schüler möglich (angefragt: {num_students})"
            )
        self.config = config
        self.rng = random.Random(seed)
        self.num_students = max(2, num_students)
        self.reference_date = reference_date or date.today()

    def _generate_students(self) -> list[Student]:
        combos = [f"{first} {last}" for first in _FIRST_NAMES for last in _LAST_NAMES]
        students = []
        for name in self.rng.sample(combos, self.num_students):
            students.append(Student(
                id=f"s{len(students) + 1}",
                full_name=name,
                amount_due=float(self.rng.choice([0, 0, 40, 80])),
                alert_threshold=float(self.rng.choice([0, 100])),
            ))
        # Sonderfall 3: Zahlungswarnung
        students[0] = students[0].model_copy(
            update={"amount_due": 150.0, "alert_threshold": 100.0}
        )
        return students

    def _generate_slots(self) -> list[TimeSlot]:
        slots = []
        for day in range(5):
            for start in sorted(self.rng.sample(_START_TIMES, 2)):
                slots.append(TimeSlot(
                    id=f"t{len(slots) + 1}",
                    day_of_week=day,
                    start_time=start,
                    duration_minutes=self.rng.choice(_DURATIONS),
                    subject=self.rng.choice(DEFAULT_SUBJECTS),
                ))
        # Sonderfall 1: Überschneidung am Dienstag
        slots.append(TimeSlot(
            id=f"t{len(slots) + 1}", day_of_week=1, start_time="16:15",
            duration_minutes=60, subject="Mathematik",
        ))
        slots.append(TimeSlot(
            id=f"t{len(slots) + 1}", day_of_week=1, start_time="16:45",
            duration_minutes=45, subject="Englisch",
        ))
        return slots

    def _generate_assignments(
        self, students: list[Student], slots: list[TimeSlot]
    ) -> list[Assignment]:
        assignments = []
        # Sonderfall 2: letzter Schüler bleibt ohne Slot
        for student in students[:-1]:
            for slot in self.rng.sample(slots, self.rng.randint(1, 3)):
                assignments.append(Assignment(
                    id=f"a{len(assignments) + 1}",
                    time_slot_id=slot.id,
                    student_id=student.id,
                ))
        return assignments

    def _generate_records(
        self, assignments: list[Assignment], slots: list[TimeSlot]
    ) -> list[ProgressRecord]:
        """Je Zuordnung eine Notiz am letzten passenden Sitzungstag vor dem Stichtag."""
        slot_map = {s.id: s for s in slots}
        records = []
        for a in assignments:
            slot = slot_map[a.time_slot_id]
            back = (self.reference_date.weekday() - calendar_weekday(slot.day_of_week)) % 7 or 7
            records.append(ProgressRecord(
                id=f"p{len(records) + 1}",
                student_id=a.student_id,
                subject=slot.subject,
                notes=f"{slot.subject}: Hausaufgaben besprochen.",
                record_date=self.reference_date - timedelta(days=back),
            ))
        return records

    def generate(self) -> TutoringData:
        students = self._generate_students()
        slots = self._generate_slots()
        assignments = self._generate_assignments(students, slots)
        return TutoringData(
            teacher_name=self.config.teacher_name,
            students=students,
            time_slots=slots,
            assignments=assignments,
            progress_records=self._generate_records(assignments, slots),
        )

    def print_summary(self, data: TutoringData) -> None:
        table = Table(title="Demo-Daten", box=box.ROUNDED)
        table.add_column("Schüler", style="bold")
        table.add_column("Slots")
        table.add_column("Offen", justify="right")
        for student in data.students:
            slots = data.slots_for_student(student.id)
            table.add_row(
                student.full_name,
                ", ".join(
                    f"{s.day_name} {format_minutes(s.start_minutes)}" for s in slots
                ) or "—",
                f"{student.amount_due:.2f}",
            )
        console.print(table)
