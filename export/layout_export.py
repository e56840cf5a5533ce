"""Export des Pixel-Layouts des Wochenrasters als JSON.

Liefert pro Tagesspalte die Slots mit top/height in Pixeln, so dass eine
Oberfläche das Raster ohne eigene Zeitrechnung zeichnen kann.
"""

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from layout.timetable import compute_grid_layout, group_by_day, tick_labels, TimeAxis
from models.timeslot import format_minutes

if TYPE_CHECKING:
    from config.schema import AppConfig
    from models.tutoring_data import TutoringData

logger = logging.getLogger(__name__)


def build_layout_export(data: "TutoringData", config: "AppConfig") -> dict[str, Any]:
    """Raster-Layout mit der Zeilenhöhe aus der Konfiguration."""
    layout = compute_grid_layout(data.time_slots, config.layout.row_height_px)
    axis = TimeAxis(
        start_minutes=layout.axis_start_minutes,
        end_minutes=layout.axis_end_minutes,
        ticks=layout.tick_minutes,
    )

    days = []
    for day, slots in group_by_day(data.time_slots).items():
        days.append({
            "day_of_week": day,
            "name": config.layout.day_names[day],
            "slots": [
                {
                    "id": slot.id,
                    "subject": slot.subject,
                    "start": format_minutes(slot.start_minutes),
                    "end": format_minutes(slot.end_minutes),
                    "students": data.student_names_for_slot(slot.id),
                    "top": layout.slot_placements[slot.id].top,
                    "height": layout.slot_placements[slot.id].height,
                }
                for slot in slots
            ],
        })

    return {
        "row_height_px": layout.row_height_px,
        "column_height_px": layout.column_height_px,
        "axis_start": format_minutes(layout.axis_start_minutes),
        "axis_end": format_minutes(layout.axis_end_minutes),
        "ticks": [format_minutes(t) for t in layout.tick_minutes],
        "tick_labels": tick_labels(axis),
        "days": days,
    }


def save_layout_json(data: "TutoringData", config: "AppConfig", path: Path) -> Path:
    """Schreibt das Layout als JSON-Datei und gibt den Pfad zurück."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = build_layout_export(data, config)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
    logger.info("Raster-Layout exportiert: %s", path)
    return path
