"""Terminal-Darstellung des Wochenrasters und der Verfügbarkeit (Rich)."""

from typing import TYPE_CHECKING, Optional

from layout.timetable import TICK_MINUTES, compute_axis, group_by_day, tick_labels
from models.timeslot import format_minutes

if TYPE_CHECKING:
    from rich.console import Console
    from availability.resolver import AvailabilityWindow
    from config.schema import AppConfig
    from models.chat import StudentChat
    from models.progress import ProgressRecord
    from models.student import Student
    from models.tutoring_data import TutoringData


def render_week_rows(data: "TutoringData") -> list[list[str]]:
    """Gibt Tabellenzeilen für das Wochenraster zurück.

    Jede Zeile: [Uhrzeit, Mo, Di, Mi, Do, Fr, Sa, So], eine Zeile pro
    30 Minuten. Ein Slot erscheint in der Zeile, in der er beginnt;
    laufende Slots werden in den Folgezeilen mit '│' markiert.
    """
    axis = compute_axis(data.time_slots)
    labels = tick_labels(axis)
    columns = group_by_day(data.time_slots)
    rows: list[list[str]] = []

    for idx, tick in enumerate(axis.ticks[:-1]):
        row_end = tick + TICK_MINUTES
        cells = [labels[idx]]
        for day in sorted(columns):
            starting = [s for s in columns[day] if tick <= s.start_minutes < row_end]
            running = any(
                s.start_minutes < tick < s.end_minutes for s in columns[day]
            )
            if starting:
                parts = []
                for slot in starting:
                    names = ", ".join(data.student_names_for_slot(slot.id)) or "Kein Schüler"
                    parts.append(
                        f"{slot.subject}\n"
                        f"{format_minutes(slot.start_minutes)} • {slot.duration_minutes} min\n"
                        f"{names}"
                    )
                cells.append("\n".join(parts))
            elif running:
                cells.append("│")
            else:
                cells.append("")
        rows.append(cells)

    return rows


def render_timetable(
    data: "TutoringData", config: "AppConfig", console: Optional["Console"] = None
) -> None:
    """Gibt das Wochenraster als Rich-Tabelle aus."""
    from rich.console import Console
    from rich.table import Table
    from rich import box

    console = console or Console()
    columns = group_by_day(data.time_slots)
    table = Table(title="Stundenplan", box=box.ROUNDED, show_lines=False)
    table.add_column("Zeit", style="dim", width=6)
    for day, name in enumerate(config.layout.day_names):
        count = len(columns[day])
        table.add_column(f"{name} ({count})" if count else name, min_width=10)

    for row in render_week_rows(data):
        table.add_row(*row)
    console.print(table)

    if not data.time_slots:
        console.print("[dim]Noch keine Zeitslots angelegt.[/dim]")
    elif not data.students:
        console.print(
            "[yellow]Lege mindestens einen Schüler an, um Slots zuzuordnen.[/yellow]"
        )


def render_notes(
    student: "Student",
    records: list["ProgressRecord"],
    console: Optional["Console"] = None,
) -> None:
    """Notizen eines Schülers, nach Fach gruppiert, neueste zuerst."""
    from rich.console import Console
    from rich.table import Table
    from rich import box

    from models.progress import group_records_by_subject

    console = console or Console()
    if not records:
        console.print(f"[dim]Noch keine Notizen für {student.full_name}.[/dim]")
        return

    table = Table(title=f"Notizen – {student.full_name}", box=box.ROUNDED)
    table.add_column("Fach", style="bold")
    table.add_column("Datum")
    table.add_column("ID", style="dim")
    table.add_column("Notiz")
    for subject, group in group_records_by_subject(records).items():
        for idx, record in enumerate(group):
            table.add_row(
                subject if idx == 0 else "",
                record.record_date.strftime("%d.%m.%Y"),
                record.id,
                record.notes or "",
            )
    console.print(table)


def render_chat(chat: "StudentChat", console: Optional["Console"] = None) -> None:
    """Gibt den Chat-Verlauf aus."""
    from rich.console import Console

    console = console or Console()
    if not chat.messages:
        console.print("[dim]Noch keine Nachrichten.[/dim]")
        return
    for message in chat.messages:
        if message.role == "assistant":
            console.print(f"[bold cyan]Assistent:[/bold cyan] {message.content}")
        else:
            console.print(f"[bold]Du:[/bold] {message.content}")


def render_availability(
    student: "Student",
    window: "AvailabilityWindow",
    config: "AppConfig",
    console: Optional["Console"] = None,
    max_dates: int = 10,
) -> None:
    """Zeigt Fächer, Sitzungstage und die nächsten erlaubten Daten eines Schülers."""
    from rich.console import Console
    from rich.panel import Panel

    console = console or Console()
    if window.is_empty:
        console.print(Panel(
            f"[yellow]{student.full_name} hat keine Zeitslots – "
            f"Notizen sind nicht möglich.[/yellow]",
            title="Verfügbarkeit",
            border_style="cyan",
        ))
        return

    day_names = config.layout.day_names
    lines = [
        f"[bold]{student.full_name}[/bold]",
        f"Fächer: {', '.join(window.subjects) or '—'}",
        f"Sitzungstage: {', '.join(day_names[d] for d in sorted(window.weekdays))}",
        f"Erlaubte Daten: {len(window.dates)}",
    ]
    upcoming = [
        f"  • {day_names[d.weekday()]} {d.strftime('%d.%m.%Y')}"
        for d in window.dates[:max_dates]
    ]
    if len(window.dates) > max_dates:
        upcoming.append(f"  … und {len(window.dates) - max_dates} weitere")
    console.print(Panel(
        "\n".join(lines + upcoming), title="Verfügbarkeit", border_style="cyan"
    ))
