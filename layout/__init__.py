"""Layout-Modul: Wochenraster (Zeitachse + Slot-Positionen)."""

from .timetable import (
    GridLayout,
    SlotPlacement,
    TimeAxis,
    compute_axis,
    compute_grid_layout,
    find_overlaps,
    group_by_day,
    place_slot,
    tick_labels,
)

__all__ = [
    "GridLayout",
    "SlotPlacement",
    "TimeAxis",
    "compute_axis",
    "compute_grid_layout",
    "find_overlaps",
    "group_by_day",
    "place_slot",
    "tick_labels",
]
