"""Tests für main.py (click)."""

import json
from pathlib import Path

from click.testing import CliRunner

import main
from config.defaults import default_app_config
from config.manager import ConfigManager
from config.schema import LayoutConfig
from main import cli
from models.assignment import Assignment
from models.student import Student
from models.timeslot import TimeSlot
from models.tutoring_data import TutoringData


def _prepare() -> None:
    """Legt Konfiguration und Datenstand im aktuellen Verzeichnis an."""
    ConfigManager().save(default_app_config("Frau Test"))
    TutoringData(
        students=[Student(id="s1", full_name="Lea Koch"),
                  Student(id="s2", full_name="Ben Wolf")],
        time_slots=[
            TimeSlot(id="t1", day_of_week=0, start_time="16:00",
                     duration_minutes=60, subject="Mathematik"),
        ],
        assignments=[Assignment(id="a1", time_slot_id="t1", student_id="s1")],
    ).save_json(Path("output/tutoring_data.json"))


class TestCli:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_config_show_no_file(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["config", "show"])
            assert result.exit_code != 0
            assert "Keine Konfiguration" in result.output

    def test_setup_then_show(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["setup", "--teacher", "Frau Test"])
            assert result.exit_code == 0
            assert Path("config/nachhilfe_config.yaml").exists()
            result = runner.invoke(cli, ["config", "show"])
            assert result.exit_code == 0
            assert "Frau Test" in result.output
            assert "120 Tage" in result.output

    def test_generate_and_validate(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["setup"])
            result = runner.invoke(cli, ["generate", "--seed", "5"])
            assert result.exit_code == 0
            assert Path("output/tutoring_data.json").exists()
            result = runner.invoke(cli, ["validate"])
            # Demo-Daten enthalten nur Warnungen
            assert result.exit_code == 0
            assert "Daten-Prüfung" in result.output

    def test_validate_without_data(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["validate"])
            assert result.exit_code == 1
            assert "Keine Datendatei" in result.output

    def test_timetable(self, tmp_path):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            _prepare()
            result = runner.invoke(cli, ["timetable"])
            assert result.exit_code == 0
            assert "Stundenplan" in result.output

    def test_availability_by_name(self, tmp_path):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            _prepare()
            result = runner.invoke(
                cli, ["availability", "lea koch", "--today", "2024-01-01", "--horizon", "13"]
            )
            assert result.exit_code == 0
            assert "Mathematik" in result.output
            assert "08.01.2024" in result.output

    def test_availability_unknown_student(self, tmp_path):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            _prepare()
            result = runner.invoke(cli, ["availability", "Niemand"])
            assert result.exit_code == 1
            assert "nicht gefunden" in result.output

    def test_check_note_allowed(self, tmp_path):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            _prepare()
            result = runner.invoke(
                cli, ["check-note", "s1", "Mathematik", "2024-01-08", "--today", "2024-01-01"]
            )
            assert result.exit_code == 0
            assert "erlaubt" in result.output

    def test_check_note_wrong_day(self, tmp_path):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            _prepare()
            result = runner.invoke(
                cli, ["check-note", "s1", "Mathematik", "2024-01-09", "--today", "2024-01-01"]
            )
            assert result.exit_code == 1
            assert "Sitzungstag" in result.output

    def test_check_note_student_without_slot(self, tmp_path):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            _prepare()
            result = runner.invoke(
                cli, ["check-note", "s2", "Mathematik", "2024-01-08", "--today", "2024-01-01"]
            )
            assert result.exit_code == 1

    def test_bad_date_is_usage_error(self, tmp_path):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            _prepare()
            result = runner.invoke(cli, ["check-note", "s1", "Mathematik", "08.01.2024"])
            assert result.exit_code == 2

    def test_generate_too_many_students_is_usage_error(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["setup"])
            result = runner.invoke(cli, ["generate", "--students", "300"])
            assert result.exit_code == 2
            assert not Path("output/tutoring_data.json").exists()

    def test_timetable_layout_json_uses_configured_row_height(self, tmp_path):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            _prepare()
            config = default_app_config("Frau Test")
            config.layout = LayoutConfig(row_height_px=24)
            ConfigManager().save(config)
            result = runner.invoke(cli, ["timetable", "--layout-json", "out/layout.json"])
            assert result.exit_code == 0
            with open("out/layout.json", encoding="utf-8") as f:
                layout = json.load(f)
            assert layout["row_height_px"] == 24
            # Mo 16:00 → 16 halbe Stunden nach 08:00
            assert layout["days"][0]["slots"][0]["top"] == 16 * 24


def _load() -> TutoringData:
    return TutoringData.load_json(Path("output/tutoring_data.json"))


class TestCliEditing:
    def test_student_slot_assign_note_flow(self, tmp_path):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            _prepare()
            assert runner.invoke(cli, ["student", "add", "Nora Braun"]).exit_code == 0
            assert runner.invoke(cli, ["slot", "add", "Mi", "17:00", "45", "Englisch"]).exit_code == 0
            result = runner.invoke(cli, ["assign", "Nora Braun", "t2"])
            assert result.exit_code == 0

            result = runner.invoke(cli, ["note", "add", "s3", "Englisch", "2024-01-03",
                                         "Vokabeln", "--today", "2024-01-01"])
            assert result.exit_code == 0
            data = _load()
            assert [s.id for s in data.slots_for_student("s3")] == ["t2"]
            assert [r.notes for r in data.records_for_student("s3")] == ["Vokabeln"]

            result = runner.invoke(cli, ["note", "list", "s3"])
            assert result.exit_code == 0
            assert "Vokabeln" in result.output

    def test_note_add_rejected_is_not_saved(self, tmp_path):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            _prepare()
            result = runner.invoke(cli, ["note", "add", "s1", "Mathematik", "2024-01-09",
                                         "x", "--today", "2024-01-01"])
            assert result.exit_code == 1
            assert "Sitzungstag" in result.output
            assert _load().progress_records == []

    def test_unassign_closes_window(self, tmp_path):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            _prepare()
            assert runner.invoke(cli, ["unassign", "s1", "t1"]).exit_code == 0
            result = runner.invoke(cli, ["note", "add", "s1", "Mathematik", "2024-01-08",
                                         "x", "--today", "2024-01-01"])
            assert result.exit_code == 1
            assert _load().assignments == []

    def test_note_edit_and_remove(self, tmp_path):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            _prepare()
            runner.invoke(cli, ["note", "add", "s1", "Mathematik", "2024-01-01",
                                "alt", "--today", "2024-01-01"])
            result = runner.invoke(cli, ["note", "edit", "p1", "Mathematik", "2024-01-08",
                                         "neu", "--today", "2024-01-01"])
            assert result.exit_code == 0
            assert _load().get_record("p1").notes == "neu"

            result = runner.invoke(cli, ["note", "edit", "p1", "Mathematik", "2024-01-09",
                                         "x", "--today", "2024-01-01"])
            assert result.exit_code == 1
            assert _load().get_record("p1").record_date.isoformat() == "2024-01-08"

            assert runner.invoke(cli, ["note", "remove", "p1"]).exit_code == 0
            assert _load().progress_records == []

    def test_slot_add_invalid(self, tmp_path):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            _prepare()
            result = runner.invoke(cli, ["slot", "add", "0", "23:30", "60", "Mathematik"])
            assert result.exit_code == 1
            assert "ungültig" in result.output
            result = runner.invoke(cli, ["slot", "add", "Xy", "10:00", "60", "Mathematik"])
            assert result.exit_code == 2
            assert len(_load().time_slots) == 1

    def test_slot_remove_drops_assignments(self, tmp_path):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            _prepare()
            assert runner.invoke(cli, ["slot", "remove", "t1"]).exit_code == 0
            data = _load()
            assert data.time_slots == []
            assert data.assignments == []
            assert runner.invoke(cli, ["slot", "remove", "t1"]).exit_code == 1

    def test_student_billing_and_remove(self, tmp_path):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            _prepare()
            result = runner.invoke(cli, ["student", "billing", "s1",
                                         "--amount-due", "150", "--threshold", "100"])
            assert result.exit_code == 0
            assert "Zahlungswarnung" in result.output
            assert _load().get_student("s1").billing_alert

            result = runner.invoke(cli, ["student", "billing", "s1", "--amount-due", "-1"])
            assert result.exit_code == 1

            assert runner.invoke(cli, ["student", "remove", "Lea Koch"]).exit_code == 0
            data = _load()
            assert data.get_student("s1") is None
            assert data.assignments == []


class TestCliChat:
    def test_chat_stores_both_messages(self, tmp_path, monkeypatch):
        sent = []

        def completion(payload):
            sent.append(payload)
            return {"reply": "Brüche üben."}

        monkeypatch.setattr(main, "_completion_client", lambda config: completion)
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            _prepare()
            result = runner.invoke(cli, ["chat", "s1", "Was üben wir?"])
            assert result.exit_code == 0
            assert "Brüche üben." in result.output
            assert len(sent) == 1

            chat = _load().chat_for_student("s1")
            assert [m.role for m in chat.messages] == ["user", "assistant"]

            result = runner.invoke(cli, ["chat", "s1"])
            assert result.exit_code == 0
            assert "Was üben wir?" in result.output

    def test_chat_failure_keeps_user_message(self, tmp_path, monkeypatch):
        def completion(payload):
            raise ConnectionError("offline")

        monkeypatch.setattr(main, "_completion_client", lambda config: completion)
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            _prepare()
            result = runner.invoke(cli, ["chat", "s1", "Hallo"])
            assert result.exit_code == 1
            assert "offline" in result.output
            chat = _load().chat_for_student("s1")
            assert [m.content for m in chat.messages] == ["Hallo"]

    def test_chat_without_api_key(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            _prepare()
            result = runner.invoke(cli, ["chat", "s1", "Hallo"])
            assert result.exit_code == 1
            assert "GEMINI_API_KEY" in result.output
            assert _load().chats == []
