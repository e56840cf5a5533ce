"""Tests für die Datenmodelle (Pydantic v2)."""

from datetime import date, datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

from models.assignment import Assignment
from models.chat import ChatMessage
from models.progress import ProgressRecord, group_records_by_subject
from models.student import Student
from models.timeslot import TimeSlot, format_minutes, parse_time
from models.tutoring_data import TutoringData


def _mini_data() -> TutoringData:
    return TutoringData(
        teacher_name="Frau Test",
        students=[
            Student(id="s1", full_name="Lea Koch"),
            Student(id="s2", full_name="Ben Wolf", amount_due=120, alert_threshold=100),
        ],
        time_slots=[
            TimeSlot(id="t1", day_of_week=0, start_time="16:00",
                     duration_minutes=60, subject="Mathematik"),
            TimeSlot(id="t2", day_of_week=2, start_time="17:00",
                     duration_minutes=45, subject="Englisch"),
        ],
        assignments=[
            Assignment(id="a1", time_slot_id="t1", student_id="s1"),
            Assignment(id="a2", time_slot_id="t2", student_id="s1"),
            Assignment(id="a3", time_slot_id="t2", student_id="s2"),
            Assignment(id="a4", time_slot_id="gone", student_id="s2"),
        ],
    )


# ─── ZEITSLOT ─────────────────────────────────────────────────────────────────

class TestTimeSlot:
    def test_minutes(self):
        slot = TimeSlot(id="x", day_of_week=0, start_time="09:15",
                        duration_minutes=90, subject="Physik")
        assert slot.start_minutes == 555
        assert slot.end_minutes == 645
        assert slot.day_name == "Mo"

    def test_sql_time_with_seconds_accepted(self):
        slot = TimeSlot(id="x", day_of_week=6, start_time="08:30:00",
                        duration_minutes=30, subject="Physik")
        assert slot.start_minutes == 510
        assert slot.day_name == "So"

    @pytest.mark.parametrize("kwargs", [
        {"day_of_week": 7},
        {"day_of_week": -1},
        {"duration_minutes": 0},
        {"duration_minutes": -30},
        {"start_time": "24:00"},
        {"start_time": "9h15"},
        {"subject": ""},
        {"subject": "   "},
        {"start_time": "23:30", "duration_minutes": 60},
    ])
    def test_malformed_slot_fails_fast(self, kwargs):
        base = dict(id="x", day_of_week=0, start_time="09:00",
                    duration_minutes=60, subject="Physik")
        base.update(kwargs)
        with pytest.raises(ValidationError):
            TimeSlot(**base)

    def test_slot_ending_at_midnight_allowed(self):
        slot = TimeSlot(id="x", day_of_week=0, start_time="23:00",
                        duration_minutes=60, subject="Physik")
        assert slot.end_minutes == 1440

    def test_slot_is_hashable(self):
        slot = TimeSlot(id="x", day_of_week=0, start_time="09:00",
                        duration_minutes=60, subject="Physik")
        assert slot in {slot}

    def test_time_helpers(self):
        assert parse_time("7:05") == 425
        assert format_minutes(425) == "07:05"
        with pytest.raises(ValueError):
            parse_time("12:60")


# ─── SCHÜLER / NOTIZEN ────────────────────────────────────────────────────────

class TestStudent:
    def test_billing_alert(self):
        assert Student(id="s", full_name="A", amount_due=150, alert_threshold=100).billing_alert
        assert not Student(id="s", full_name="A", amount_due=150, alert_threshold=0).billing_alert
        assert not Student(id="s", full_name="A", amount_due=100, alert_threshold=100).billing_alert

    def test_name_required(self):
        with pytest.raises(ValidationError):
            Student(id="s", full_name="   ")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            Student(id="s", full_name="A", amount_due=-1)


class TestProgressGrouping:
    def test_grouped_newest_first(self):
        records = [
            ProgressRecord(id="1", student_id="s", subject="Mathe", record_date=date(2024, 1, 1)),
            ProgressRecord(id="2", student_id="s", subject="Mathe", record_date=date(2024, 1, 8)),
            ProgressRecord(id="3", student_id="s", subject=" ", record_date=date(2024, 1, 3)),
            ProgressRecord(id="4", student_id="s", subject="Mathe", record_date=date(2024, 1, 8),
                           created_at=datetime(2024, 1, 8, 18, 0)),
        ]
        groups = group_records_by_subject(records)
        assert [r.id for r in groups["Mathe"]] == ["4", "2", "1"]
        assert [r.id for r in groups["Sonstiges"]] == ["3"]


# ─── TUTORINGDATA ─────────────────────────────────────────────────────────────

class TestTutoringData:
    def test_slots_for_student(self):
        data = _mini_data()
        assert [s.id for s in data.slots_for_student("s1")] == ["t1", "t2"]
        # unbekannter Slot "gone" wird übersprungen
        assert [s.id for s in data.slots_for_student("s2")] == ["t2"]
        assert data.slots_for_student("nobody") == []

    def test_student_names_for_slot(self):
        data = _mini_data()
        assert data.student_names_for_slot("t2") == ["Lea Koch", "Ben Wolf"]
        assert data.student_names_for_slot("t9") == []

    def test_find_student_by_id_or_name(self):
        data = _mini_data()
        assert data.find_student("s2").full_name == "Ben Wolf"
        assert data.find_student("lea koch").id == "s1"
        assert data.find_student("Unbekannt") is None

    def test_summary(self):
        text = _mini_data().summary()
        assert "Schüler: 2" in text
        assert "Zahlungswarnungen: 1" in text

    def test_json_roundtrip(self, tmp_path: Path):
        data = _mini_data()
        path = tmp_path / "sub" / "data.json"
        data.save_json(path)
        loaded = TutoringData.load_json(path)
        assert loaded.time_slots == data.time_slots
        assert loaded.assignments == data.assignments
        assert loaded.created_at is not None

    def test_load_missing_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            TutoringData.load_json(tmp_path / "missing.json")


class TestTutoringDataChanges:
    def test_add_student_gets_next_free_id(self):
        data = _mini_data()
        student = data.add_student("  Nora Braun ", email="nora@example.org")
        assert student.id == "s3"
        assert student.full_name == "Nora Braun"
        assert data.get_student("s3") == student

    def test_add_student_requires_name(self):
        with pytest.raises(ValidationError):
            _mini_data().add_student("   ")

    def test_remove_student_cascades(self):
        data = _mini_data()
        data.add_record("s1", "Mathematik", date(2024, 1, 1), "x")
        data.ensure_chat("s1")
        data.remove_student("s1")
        assert data.get_student("s1") is None
        assert all(a.student_id != "s1" for a in data.assignments)
        assert data.records_for_student("s1") == []
        assert data.chat_for_student("s1") is None

    def test_remove_unknown_student(self):
        with pytest.raises(ValueError, match="Unbekannter Schüler"):
            _mini_data().remove_student("nobody")

    def test_update_billing(self):
        data = _mini_data()
        updated = data.update_billing("s1", amount_due=150, alert_threshold=100)
        assert updated.billing_alert
        assert data.get_student("s1").amount_due == 150
        # None lässt den Wert unverändert
        assert data.update_billing("s1", amount_due=20).alert_threshold == 100

    def test_update_billing_rejects_negative(self):
        data = _mini_data()
        with pytest.raises(ValidationError):
            data.update_billing("s1", amount_due=-5)
        assert data.get_student("s1").amount_due == 0

    def test_add_slot_validates(self):
        data = _mini_data()
        slot = data.add_slot(4, "15:30", 45, "Chemie")
        assert slot.id == "t3"
        with pytest.raises(ValidationError):
            data.add_slot(4, "23:30", 60, "Chemie")
        assert len(data.time_slots) == 3

    def test_remove_slot_drops_assignments(self):
        data = _mini_data()
        data.remove_slot("t2")
        assert [s.id for s in data.time_slots] == ["t1"]
        assert all(a.time_slot_id != "t2" for a in data.assignments)
        assert [s.id for s in data.slots_for_student("s1")] == ["t1"]

    def test_assign_and_unassign(self):
        data = _mini_data()
        assignment = data.assign("t1", "s2")
        assert assignment.id == "a5"
        assert [s.id for s in data.slots_for_student("s2")] == ["t2", "t1"]
        with pytest.raises(ValueError, match="bereits"):
            data.assign("t1", "s2")
        data.unassign("t1", "s2")
        assert [s.id for s in data.slots_for_student("s2")] == ["t2"]
        with pytest.raises(ValueError):
            data.unassign("t1", "s2")

    def test_assign_unknown_slot_or_student(self):
        data = _mini_data()
        with pytest.raises(ValueError, match="Zeitslot"):
            data.assign("t9", "s1")
        with pytest.raises(ValueError, match="Schüler"):
            data.assign("t1", "s9")

    def test_record_add_update_remove(self):
        data = _mini_data()
        record = data.add_record("s1", "Mathematik", date(2024, 1, 1), "Brüche")
        assert record.id == "p1"
        assert record.created_at is not None
        updated = data.update_record("p1", "Englisch", date(2024, 1, 3), "Vokabeln")
        assert data.get_record("p1") == updated
        assert updated.created_at == record.created_at
        data.remove_record("p1")
        assert data.progress_records == []
        with pytest.raises(ValueError, match="Unbekannte Notiz"):
            data.remove_record("p1")

    def test_ensure_and_store_chat(self):
        data = _mini_data()
        chat = data.ensure_chat("s1")
        assert data.ensure_chat("s1") is chat
        data.store_chat(chat.model_copy(update={
            "messages": [ChatMessage(role="user", content="Hallo")],
        }))
        assert len(data.chats) == 1
        assert data.chat_for_student("s1").messages[0].content == "Hallo"

    def test_changes_survive_json_roundtrip(self, tmp_path: Path):
        data = _mini_data()
        data.add_student("Nora Braun")
        data.assign("t1", "s3")
        path = tmp_path / "data.json"
        data.save_json(path)
        loaded = TutoringData.load_json(path)
        assert [s.id for s in loaded.slots_for_student("s3")] == ["t1"]
