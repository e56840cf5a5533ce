from models.timeslot import TimeSlot, DAY_NAMES, parse_time, format_minutes
from models.assignment import Assignment
from models.student import Student
from models.progress import ProgressRecord, group_records_by_subject
from models.chat import ChatMessage, StudentChat
from models.tutoring_data import TutoringData

__all__ = [
    "TimeSlot",
    "DAY_NAMES",
    "parse_time",
    "format_minutes",
    "Assignment",
    "Student",
    "ProgressRecord",
    "group_records_by_subject",
    "ChatMessage",
    "StudentChat",
    "TutoringData",
]
