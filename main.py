"""Nachhilfeplan — Haupt-CLI.

Verwendung:
  python main.py setup                          Standard-Konfiguration anlegen
  python main.py config show                    Konfiguration anzeigen
  python main.py generate                       Demo-Daten erzeugen + speichern
  python main.py validate                       Datenstand prüfen
  python main.py timetable                      Wochenraster anzeigen
  python main.py availability <schüler>         Erlaubte Notiz-Daten anzeigen
  python main.py check-note <schüler> <fach> <datum>
                                                Notiz gegen Fenster prüfen
  python main.py student add|remove|billing|list Schüler verwalten
  python main.py slot add|remove                Zeitslots verwalten
  python main.py assign|unassign <schüler> <slot>
                                                Schüler einem Slot zuordnen
  python main.py note add|edit|remove|list      Sitzungsnotizen verwalten
  python main.py chat <schüler> [nachricht]     KI-Assistent fragen
"""

import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich import box

from data.demo_data import MAX_STUDENTS

console = Console()

# Standard-Pfad für den gespeicherten Datenstand
DEFAULT_DATA_JSON = Path("output/tutoring_data.json")


def _load_config_or_abort():
    """Lädt die Konfiguration oder bricht mit Fehlermeldung ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    if mgr.first_run_check():
        console.print(
            "[red]Keine Konfiguration gefunden.[/red]\n"
            "Führen Sie zunächst [bold]python main.py setup[/bold] aus."
        )
        sys.exit(1)
    try:
        return mgr, mgr.load()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def _load_data_or_abort(json_path: str):
    """Lädt den Datenstand oder bricht mit Fehlermeldung ab."""
    from models.tutoring_data import TutoringData
    from pydantic import ValidationError

    p = Path(json_path)
    if not p.exists():
        console.print(
            f"[red]Keine Datendatei gefunden: {p}[/red]\n"
            "Verwenden Sie [bold]python main.py generate[/bold]."
        )
        sys.exit(1)
    try:
        return TutoringData.load_json(p)
    except ValidationError as e:
        console.print(f"[red bold]Datendatei ungültig:[/red bold] {p}\n{e}")
        sys.exit(1)


def _find_student_or_abort(data, key: str):
    student = data.find_student(key)
    if student is None:
        console.print(f"[red]Schüler nicht gefunden: {key}[/red]")
        sys.exit(1)
    return student


def _save_data(data, json_path: str) -> None:
    data.save_json(Path(json_path))
    console.print(f"[dim]Gespeichert: {json_path}[/dim]")


def _abort(message: str):
    console.print(f"[red]{escape(message)}[/red]")
    sys.exit(1)


def _parse_day(value: str, day_names: list[str]) -> int:
    """Wochentag als Zahl (0=Mo..6=So) oder Name aus der Konfiguration."""
    if value.isdigit() and int(value) < 7:
        return int(value)
    for idx, name in enumerate(day_names):
        if name.casefold() == value.casefold():
            return idx
    raise click.BadParameter(
        f"Wochentag 0–6 oder einer von {', '.join(day_names)} erwartet: {value}",
        param_hint="DAY",
    )


def _completion_client(config):
    """Completion-Callable für den Chat (in Tests ersetzbar)."""
    from assistant.client import GeminiClient
    return GeminiClient(config)


def _parse_date(value: Optional[str], label: str) -> date:
    if value is None:
        return date.today()
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise click.BadParameter(f"Datum im Format JJJJ-MM-TT erwartet: {value}",
                                 param_hint=label)


# ─── SETUP ────────────────────────────────────────────────────────────────────

@click.command("setup")
@click.option("--teacher", default="", help="Name der Lehrkraft.")
@click.option("--force", is_flag=True, default=False,
              help="Bestehende Konfiguration überschreiben.")
def cmd_setup(teacher: str, force: bool):
    """Ersteinrichtung: Standard-Konfiguration anlegen."""
    from config.defaults import default_app_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check() and not force:
        console.print(
            "[yellow]Eine Konfiguration existiert bereits.[/yellow]\n"
            "Mit [bold]--force[/bold] neu anlegen."
        )
        return

    mgr.save(default_app_config(teacher_name=teacher))
    console.print("[bold green]Einrichtung abgeschlossen![/bold green]")
    console.print("Führen Sie jetzt [bold]python main.py generate[/bold] aus.")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen."""


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    mgr, config = _load_config_or_abort()

    console.print(Panel(
        f"[bold]{config.teacher_name or '(ohne Namen)'}[/bold]",
        title="Nachhilfeplan-Konfiguration",
        border_style="cyan",
    ))

    table = Table(box=box.ROUNDED)
    table.add_column("Bereich")
    table.add_column("Einstellung")
    table.add_column("Wert")
    av = config.availability
    table.add_row("Verfügbarkeit", "Horizont", f"{av.horizon_days} Tage")
    table.add_row("", "Strenge Fachprüfung", "ja" if av.strict_subjects else "nein")
    lc = config.layout
    table.add_row("Wochenraster", "Zeilenhöhe", f"{lc.row_height_px}px / 30 min")
    table.add_row("", "Tage", ", ".join(lc.day_names))
    table.add_row("KI-Assistent", "Modell", config.assistant.model)
    table.add_row("", "Sprache", config.assistant.language)
    table.add_row("", "API-Schlüssel aus", f"${config.assistant.api_key_env}")
    console.print(table)


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--students", "num_students", default=6,
              type=click.IntRange(2, MAX_STUDENTS), help="Anzahl Schüler.")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad für JSON-Export.")
def cmd_generate(seed: int, num_students: int, json_path: str):
    """Erzeugt Demo-Daten (Schüler, Slots, Zuordnungen, Notizen)."""
    mgr, config = _load_config_or_abort()
    from data.demo_data import DemoDataGenerator

    console.print("[bold]Demo-Daten werden generiert...[/bold]")
    gen = DemoDataGenerator(config, seed=seed, num_students=num_students)
    data = gen.generate()
    gen.print_summary(data)
    console.print(f"\n[dim]{data.summary()}[/dim]")

    out_path = Path(json_path)
    data.save_json(out_path)
    console.print(f"[green]✓[/green] JSON gespeichert: {out_path}")


# ─── VALIDATE ─────────────────────────────────────────────────────────────────

@click.command("validate")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zur gespeicherten JSON-Datei.")
def cmd_validate(json_path: str):
    """Prüft den Datenstand auf Inkonsistenzen."""
    from analysis.data_validator import DataValidator

    data = _load_data_or_abort(json_path)
    console.print(f"\n{data.summary()}\n")
    report = DataValidator().validate(data)
    report.print_rich()

    sys.exit(0 if report.is_valid else 1)


# ─── TIMETABLE ────────────────────────────────────────────────────────────────

@click.command("timetable")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zur gespeicherten JSON-Datei.")
@click.option("--layout-json", default=None,
              help="Pixel-Layout (top/height pro Slot) zusätzlich als JSON schreiben.")
def cmd_timetable(json_path: str, layout_json: Optional[str]):
    """Zeigt das Wochenraster aller Zeitslots."""
    from export.tui_renderer import render_timetable

    mgr, config = _load_config_or_abort()
    data = _load_data_or_abort(json_path)
    render_timetable(data, config, console)

    if layout_json:
        from export.layout_export import save_layout_json
        out = save_layout_json(data, config, Path(layout_json))
        console.print(
            f"[green]✓[/green] Layout gespeichert: {out} "
            f"({config.layout.row_height_px}px / 30 min)"
        )


# ─── AVAILABILITY ─────────────────────────────────────────────────────────────

@click.command("availability")
@click.argument("student")
@click.option("--today", "today_str", default=None,
              help="Stichtag JJJJ-MM-TT (Standard: heute).")
@click.option("--horizon", type=int, default=None,
              help="Horizont in Tagen (Standard: aus Konfiguration).")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zur gespeicherten JSON-Datei.")
def cmd_availability(student: str, today_str: Optional[str],
                     horizon: Optional[int], json_path: str):
    """Zeigt Fächer und erlaubte Notiz-Daten eines Schülers (ID oder Name)."""
    from availability.resolver import resolve
    from export.tui_renderer import render_availability

    mgr, config = _load_config_or_abort()
    data = _load_data_or_abort(json_path)
    target = _find_student_or_abort(data, student)
    today = _parse_date(today_str, "--today")
    horizon_days = config.availability.horizon_days if horizon is None else horizon
    if horizon_days < 0:
        raise click.BadParameter("Horizont muss >= 0 sein.", param_hint="--horizon")

    window = resolve(data.slots_for_student(target.id), horizon_days, today=today)
    render_availability(target, window, config, console)


# ─── CHECK-NOTE ───────────────────────────────────────────────────────────────

@click.command("check-note")
@click.argument("student")
@click.argument("subject")
@click.argument("record_date")
@click.option("--content", default="(Prüfung)", help="Notiztext.")
@click.option("--today", "today_str", default=None,
              help="Stichtag JJJJ-MM-TT (Standard: heute).")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zur gespeicherten JSON-Datei.")
def cmd_check_note(student: str, subject: str, record_date: str, content: str,
                   today_str: Optional[str], json_path: str):
    """Prüft, ob eine Notiz (Fach, Datum) für den Schüler gespeichert werden darf."""
    from availability.notes import NoteValidationError, validate_note
    from availability.resolver import resolve

    mgr, config = _load_config_or_abort()
    data = _load_data_or_abort(json_path)
    target = _find_student_or_abort(data, student)
    day = _parse_date(record_date, "RECORD_DATE")
    today = _parse_date(today_str, "--today")

    # Fenster immer frisch aus den aktuellen Zuordnungen berechnen
    window = resolve(
        data.slots_for_student(target.id),
        config.availability.horizon_days,
        today=today,
    )
    try:
        draft = validate_note(
            subject, day, content, window,
            strict_subjects=config.availability.strict_subjects,
        )
    except NoteValidationError as e:
        console.print(f"[red bold]✗ Nicht erlaubt:[/red bold] {e}")
        sys.exit(1)

    console.print(
        f"[green]✓[/green] Notiz für {target.full_name} erlaubt: "
        f"{draft.subject} am {draft.record_date.strftime('%d.%m.%Y')}"
    )


# ─── STUDENT ──────────────────────────────────────────────────────────────────

_json_path_option = click.option(
    "--json-path", default=str(DEFAULT_DATA_JSON),
    help="Pfad zur gespeicherten JSON-Datei.",
)


@click.group("student")
def cmd_student():
    """Schüler anlegen, löschen, Abrechnung pflegen."""


@cmd_student.command("list")
@_json_path_option
def student_list(json_path: str):
    """Listet alle Schüler mit offenen Beträgen."""
    data = _load_data_or_abort(json_path)
    table = Table(title="Schüler", box=box.ROUNDED)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Slots", justify="right")
    table.add_column("Offen", justify="right")
    table.add_column("Schwelle", justify="right")
    for s in data.students:
        style = "red" if s.billing_alert else None
        table.add_row(
            s.id, s.full_name, str(len(data.slots_for_student(s.id))),
            f"{s.amount_due:.2f}", f"{s.alert_threshold:.2f}", style=style,
        )
    console.print(table)


@cmd_student.command("add")
@click.argument("full_name")
@click.option("--email", default=None, help="E-Mail-Adresse.")
@click.option("--notes", default=None, help="Notizen für den Assistenten.")
@_json_path_option
def student_add(full_name: str, email: Optional[str], notes: Optional[str],
                json_path: str):
    """Legt einen neuen Schüler an."""
    from models.tutoring_data import TutoringData

    p = Path(json_path)
    data = TutoringData.load_json(p) if p.exists() else TutoringData()
    try:
        student = data.add_student(full_name, email=email, notes=notes)
    except ValueError as e:
        _abort(f"Schüler ungültig: {e}")
    _save_data(data, json_path)
    console.print(f"[green]✓[/green] Schüler angelegt: {student.full_name} ({student.id})")


@cmd_student.command("remove")
@click.argument("student")
@_json_path_option
def student_remove(student: str, json_path: str):
    """Löscht einen Schüler samt Zuordnungen, Notizen und Chat."""
    data = _load_data_or_abort(json_path)
    target = _find_student_or_abort(data, student)
    data.remove_student(target.id)
    _save_data(data, json_path)
    console.print(f"[green]✓[/green] Schüler gelöscht: {target.full_name}")


@cmd_student.command("billing")
@click.argument("student")
@click.option("--amount-due", type=float, default=None, help="Offener Betrag.")
@click.option("--threshold", type=float, default=None,
              help="Warnschwelle (0 = keine Warnung).")
@_json_path_option
def student_billing(student: str, amount_due: Optional[float],
                    threshold: Optional[float], json_path: str):
    """Aktualisiert offenen Betrag und Warnschwelle."""
    data = _load_data_or_abort(json_path)
    target = _find_student_or_abort(data, student)
    try:
        updated = data.update_billing(target.id, amount_due, threshold)
    except ValueError as e:
        _abort(f"Abrechnung ungültig: {e}")
    _save_data(data, json_path)
    marker = " [red bold]⚠ Zahlungswarnung[/red bold]" if updated.billing_alert else ""
    console.print(
        f"[green]✓[/green] {updated.full_name}: offen {updated.amount_due:.2f}, "
        f"Schwelle {updated.alert_threshold:.2f}{marker}"
    )


# ─── SLOT ─────────────────────────────────────────────────────────────────────

@click.group("slot")
def cmd_slot():
    """Zeitslots anlegen und löschen."""


@cmd_slot.command("add")
@click.argument("day")
@click.argument("start_time")
@click.argument("duration", type=int)
@click.argument("subject")
@_json_path_option
def slot_add(day: str, start_time: str, duration: int, subject: str, json_path: str):
    """Legt einen Slot an (DAY: 0–6 oder Tagesname, START_TIME: HH:MM)."""
    mgr, config = _load_config_or_abort()
    data = _load_data_or_abort(json_path)
    day_of_week = _parse_day(day, config.layout.day_names)
    try:
        slot = data.add_slot(day_of_week, start_time, duration, subject)
    except ValueError as e:
        _abort(f"Zeitslot ungültig: {e}")
    _save_data(data, json_path)
    console.print(f"[green]✓[/green] Zeitslot angelegt: {slot} ({slot.id})")


@cmd_slot.command("remove")
@click.argument("slot_id")
@_json_path_option
def slot_remove(slot_id: str, json_path: str):
    """Löscht einen Slot samt seiner Zuordnungen."""
    data = _load_data_or_abort(json_path)
    try:
        slot = data.remove_slot(slot_id)
    except ValueError as e:
        _abort(str(e))
    _save_data(data, json_path)
    console.print(f"[green]✓[/green] Zeitslot gelöscht: {slot}")


# ─── ZUORDNUNG ────────────────────────────────────────────────────────────────

@click.command("assign")
@click.argument("student")
@click.argument("slot_id")
@_json_path_option
def cmd_assign(student: str, slot_id: str, json_path: str):
    """Ordnet einen Schüler einem Slot zu."""
    data = _load_data_or_abort(json_path)
    target = _find_student_or_abort(data, student)
    try:
        data.assign(slot_id, target.id)
    except ValueError as e:
        _abort(str(e))
    _save_data(data, json_path)
    console.print(f"[green]✓[/green] {target.full_name} → {data.slot_map()[slot_id]}")


@click.command("unassign")
@click.argument("student")
@click.argument("slot_id")
@_json_path_option
def cmd_unassign(student: str, slot_id: str, json_path: str):
    """Entfernt die Zuordnung eines Schülers zu einem Slot."""
    data = _load_data_or_abort(json_path)
    target = _find_student_or_abort(data, student)
    try:
        data.unassign(slot_id, target.id)
    except ValueError as e:
        _abort(str(e))
    _save_data(data, json_path)
    console.print(f"[green]✓[/green] Zuordnung entfernt: {target.full_name} / {slot_id}")


# ─── NOTE ─────────────────────────────────────────────────────────────────────

@click.group("note")
def cmd_note():
    """Sitzungsnotizen anlegen, ändern, löschen, anzeigen."""


@cmd_note.command("list")
@click.argument("student")
@_json_path_option
def note_list(student: str, json_path: str):
    """Zeigt die Notizen eines Schülers nach Fach gruppiert."""
    from export.tui_renderer import render_notes

    data = _load_data_or_abort(json_path)
    target = _find_student_or_abort(data, student)
    render_notes(target, data.records_for_student(target.id), console)


@cmd_note.command("add")
@click.argument("student")
@click.argument("subject")
@click.argument("record_date")
@click.argument("content")
@click.option("--today", "today_str", default=None,
              help="Stichtag JJJJ-MM-TT (Standard: heute).")
@_json_path_option
def note_add(student: str, subject: str, record_date: str, content: str,
             today_str: Optional[str], json_path: str):
    """Legt eine Notiz an, wenn Fach und Datum im Fenster des Schülers liegen."""
    from availability.notes import NoteValidationError, create_note

    mgr, config = _load_config_or_abort()
    data = _load_data_or_abort(json_path)
    target = _find_student_or_abort(data, student)
    day = _parse_date(record_date, "RECORD_DATE")
    today = _parse_date(today_str, "--today")
    try:
        record = create_note(
            data, target.id, subject, day, content, config.availability, today=today
        )
    except NoteValidationError as e:
        _abort(f"✗ Nicht erlaubt: {e}")
    _save_data(data, json_path)
    console.print(
        f"[green]✓[/green] Notiz {record.id} gespeichert: {record.subject} am "
        f"{record.record_date.strftime('%d.%m.%Y')}"
    )


@cmd_note.command("edit")
@click.argument("record_id")
@click.argument("subject")
@click.argument("record_date")
@click.argument("content")
@click.option("--today", "today_str", default=None,
              help="Stichtag JJJJ-MM-TT (Standard: heute).")
@_json_path_option
def note_edit(record_id: str, subject: str, record_date: str, content: str,
              today_str: Optional[str], json_path: str):
    """Ändert eine Notiz; dieselben Regeln wie beim Anlegen."""
    from availability.notes import NoteValidationError, edit_note

    mgr, config = _load_config_or_abort()
    data = _load_data_or_abort(json_path)
    day = _parse_date(record_date, "RECORD_DATE")
    today = _parse_date(today_str, "--today")
    try:
        record = edit_note(
            data, record_id, subject, day, content, config.availability, today=today
        )
    except NoteValidationError as e:
        _abort(f"✗ Nicht erlaubt: {e}")
    except ValueError as e:
        _abort(str(e))
    _save_data(data, json_path)
    console.print(f"[green]✓[/green] Notiz {record.id} aktualisiert.")


@cmd_note.command("remove")
@click.argument("record_id")
@_json_path_option
def note_remove(record_id: str, json_path: str):
    """Löscht eine Notiz."""
    data = _load_data_or_abort(json_path)
    try:
        data.remove_record(record_id)
    except ValueError as e:
        _abort(str(e))
    _save_data(data, json_path)
    console.print(f"[green]✓[/green] Notiz {record_id} gelöscht.")


# ─── CHAT ─────────────────────────────────────────────────────────────────────

@click.command("chat")
@click.argument("student")
@click.argument("message", required=False)
@_json_path_option
def cmd_chat(student: str, message: Optional[str], json_path: str):
    """Fragt den KI-Assistenten zu einem Schüler; ohne MESSAGE: Verlauf anzeigen."""
    from assistant.prompt import AssistantError
    from assistant.session import ChatSession
    from export.tui_renderer import render_chat

    mgr, config = _load_config_or_abort()
    data = _load_data_or_abort(json_path)
    target = _find_student_or_abort(data, student)

    if message is None:
        chat = data.chat_for_student(target.id)
        if chat is None:
            console.print("[dim]Noch keine Nachrichten.[/dim]")
        else:
            render_chat(chat, console)
        return

    try:
        completion = _completion_client(config.assistant)
    except AssistantError as e:
        _abort(str(e))

    session = ChatSession(target, data.ensure_chat(target.id), completion, config.assistant)
    try:
        reply = session.send(message)
    except ValueError as e:
        _abort(str(e))
    except AssistantError as e:
        # Nutzer-Nachricht bleibt im Verlauf
        data.store_chat(session.chat)
        _save_data(data, json_path)
        _abort(f"Assistent: {e}")

    data.store_chat(session.chat)
    _save_data(data, json_path)
    console.print(f"[bold cyan]Assistent:[/bold cyan] {reply.content}")


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Ausführliche Log-Ausgabe.")
def cli(verbose: bool):
    """Nachhilfeplan: Wochenraster, Schüler-Verfügbarkeit und Sitzungsnotizen.

    Starten Sie mit: python main.py setup
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def main():
    """Einstiegspunkt."""
    cli()


# Befehle registrieren
cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_generate)
cli.add_command(cmd_validate)
cli.add_command(cmd_timetable)
cli.add_command(cmd_availability)
cli.add_command(cmd_check_note)
cli.add_command(cmd_student)
cli.add_command(cmd_slot)
cli.add_command(cmd_assign)
cli.add_command(cmd_unassign)
cli.add_command(cmd_note)
cli.add_command(cmd_chat)


if __name__ == "__main__":
    main()
