"""Konsistenzprüfung eines TutoringData-Datenstands.

Sicherheitsnetz über den Daten aus der externen Datenbank: verwaiste
Zuordnungen, Überschneidungen, Notizen an Tagen ohne Sitzung usw.
"""

import logging
from collections import Counter
from typing import Literal

from pydantic import BaseModel

from availability.resolver import calendar_weekday
from layout.timetable import find_overlaps
from models.timeslot import format_minutes
from models.tutoring_data import TutoringData

logger = logging.getLogger(__name__)


class ValidationViolation(BaseModel):
    """Ein einzelner Befund."""

    severity: Literal["error", "warning"]
    constraint: str      # z.B. "dangling_assignment"
    description: str
    entity: str          # student_id / slot_id / assignment_id / record_id


class ValidationReport(BaseModel):
    """Ergebnis der Konsistenzprüfung."""

    violations: list[ValidationViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    @property
    def errors(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "error"]

    @property
    def warnings(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "warning"]

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ KONSISTENT[/bold green]"
            if self.is_valid
            else "[bold red]✗ FEHLER GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(self.errors)} | Warnungen: {len(self.warnings)}"]
        console.print(Panel("\n".join(lines), title="Daten-Prüfung", border_style="cyan"))

        if not self.violations:
            console.print("[dim]Keine Befunde.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Prüfung", width=24)
        table.add_column("Entität", width=12)
        table.add_column("Beschreibung")

        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.constraint,
                v.entity,
                v.description,
            )
        console.print(table)


class DataValidator:
    """Prüft einen TutoringData-Stand auf Inkonsistenzen."""

    def validate(self, data: TutoringData) -> ValidationReport:
        """Führt alle Prüfungen durch und gibt einen ValidationReport zurück."""
        violations: list[ValidationViolation] = []

        violations.extend(self._check_dangling_assignments(data))
        violations.extend(self._check_duplicate_assignments(data))
        violations.extend(self._check_overlapping_slots(data))
        violations.extend(self._check_unassigned_students(data))
        violations.extend(self._check_billing_alerts(data))
        violations.extend(self._check_progress_records(data))

        has_errors = any(v.severity == "error" for v in violations)
        if violations:
            logger.info(
                "Daten-Prüfung: %d Befunde (%s)",
                len(violations), "mit Fehlern" if has_errors else "nur Warnungen",
            )
        return ValidationReport(violations=violations, is_valid=not has_errors)

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _check_dangling_assignments(self, data: TutoringData) -> list[ValidationViolation]:
        """Zuordnungen müssen auf existierende Slots und Schüler zeigen."""
        violations: list[ValidationViolation] = []
        slot_ids = {s.id for s in data.time_slots}
        student_ids = {s.id for s in data.students}
        for a in data.assignments:
            missing = []
            if a.time_slot_id not in slot_ids:
                missing.append(f"Slot '{a.time_slot_id}'")
            if a.student_id not in student_ids:
                missing.append(f"Schüler '{a.student_id}'")
            if missing:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="dangling_assignment",
                    entity=a.id,
                    description=f"Verweist auf unbekannte(n) {' und '.join(missing)}.",
                ))
        return violations

    def _check_duplicate_assignments(self, data: TutoringData) -> list[ValidationViolation]:
        """Derselbe Schüler sollte einem Slot nur einmal zugeordnet sein."""
        counts = Counter((a.time_slot_id, a.student_id) for a in data.assignments)
        return [
            ValidationViolation(
                severity="warning",
                constraint="duplicate_assignment",
                entity=student_id,
                description=f"{n}× dem Slot '{slot_id}' zugeordnet.",
            )
            for (slot_id, student_id), n in counts.items()
            if n > 1
        ]

    def _check_overlapping_slots(self, data: TutoringData) -> list[ValidationViolation]:
        """Überschneidungen sind erlaubt, werden aber gemeldet."""
        return [
            ValidationViolation(
                severity="warning",
                constraint="overlapping_slots",
                entity=a.id,
                description=(
                    f"{a.day_name} {format_minutes(a.start_minutes)}–"
                    f"{format_minutes(a.end_minutes)} überschneidet sich mit "
                    f"'{b.id}' ({format_minutes(b.start_minutes)}–"
                    f"{format_minutes(b.end_minutes)})."
                ),
            )
            for a, b in find_overlaps(data.time_slots)
        ]

    def _check_unassigned_students(self, data: TutoringData) -> list[ValidationViolation]:
        """Schüler ohne Slot können keine Notizen bekommen."""
        assigned = {a.student_id for a in data.assignments}
        return [
            ValidationViolation(
                severity="warning",
                constraint="student_without_slot",
                entity=s.id,
                description=f"{s.full_name} ist keinem Zeitslot zugeordnet.",
            )
            for s in data.students
            if s.id not in assigned
        ]

    def _check_billing_alerts(self, data: TutoringData) -> list[ValidationViolation]:
        return [
            ValidationViolation(
                severity="warning",
                constraint="billing_alert",
                entity=s.id,
                description=(
                    f"{s.full_name}: offener Betrag {s.amount_due:.2f} "
                    f"über Warnschwelle {s.alert_threshold:.2f}."
                ),
            )
            for s in data.students
            if s.billing_alert
        ]

    def _check_progress_records(self, data: TutoringData) -> list[ValidationViolation]:
        """Notizen sollten zu Fach und Wochentag eines Slots des Schülers passen."""
        violations: list[ValidationViolation] = []
        for record in data.progress_records:
            slots = data.slots_for_student(record.student_id)
            weekdays = {calendar_weekday(s.day_of_week) for s in slots}
            subjects = {s.subject for s in slots}
            if record.record_date.weekday() not in weekdays:
                violations.append(ValidationViolation(
                    severity="warning",
                    constraint="record_off_schedule",
                    entity=record.id,
                    description=(
                        f"Notiz vom {record.record_date.strftime('%d.%m.%Y')} "
                        f"liegt auf keinem Sitzungstag des Schülers."
                    ),
                ))
            if subjects and record.subject not in subjects:
                violations.append(ValidationViolation(
                    severity="warning",
                    constraint="record_unknown_subject",
                    entity=record.id,
                    description=f"Fach '{record.subject}' gehört zu keinem Slot des Schülers.",
                ))
        return violations
