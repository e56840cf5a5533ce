"""Export-Modul: Terminal-Darstellung (Rich) und JSON-Export des Raster-Layouts."""

from export.layout_export import build_layout_export, save_layout_json
from export.tui_renderer import (
    render_availability,
    render_chat,
    render_notes,
    render_timetable,
    render_week_rows,
)

__all__ = [
    "build_layout_export",
    "save_layout_json",
    "render_availability",
    "render_chat",
    "render_notes",
    "render_timetable",
    "render_week_rows",
]
