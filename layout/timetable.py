"""Wochenraster-Layout: Zeitachse und Pixel-Position der Slots.

Reine Arithmetik ohne Kollisionsauflösung: überlappende Slots am selben Tag
werden unabhängig positioniert und dürfen sich optisch überdecken.
"""

import logging
import math
from typing import Iterable

from pydantic import BaseModel, ConfigDict

from models.timeslot import DAY_NAMES, TimeSlot, format_minutes

logger = logging.getLogger(__name__)

TICK_MINUTES = 30
DEFAULT_AXIS_START = 8 * 60    # 08:00
DEFAULT_AXIS_END = 20 * 60     # 20:00
DEFAULT_ROW_HEIGHT_PX = 48


class TimeAxis(BaseModel):
    """Gemeinsame Zeitachse des Wochenrasters."""

    model_config = ConfigDict(frozen=True)

    start_minutes: int
    end_minutes: int
    ticks: tuple[int, ...]

    @property
    def rows(self) -> int:
        """Anzahl der 30-Minuten-Zeilen zwischen erstem und letztem Tick."""
        return len(self.ticks) - 1


class SlotPlacement(BaseModel):
    """Position eines Slots innerhalb seiner Tagesspalte."""

    model_config = ConfigDict(frozen=True)

    top: float
    height: float


class GridLayout(BaseModel):
    """Komplettes Layout: Achse + Platzierung pro Slot-ID."""

    model_config = ConfigDict(frozen=True)

    axis_start_minutes: int
    axis_end_minutes: int
    tick_minutes: tuple[int, ...]
    slot_placements: dict[str, SlotPlacement]
    row_height_px: float = DEFAULT_ROW_HEIGHT_PX

    @property
    def column_height_px(self) -> float:
        return (len(self.tick_minutes) - 1) * self.row_height_px


def compute_axis(slots: Iterable[TimeSlot]) -> TimeAxis:
    """Zeitachse, die alle Slots abdeckt (mindestens 08:00–20:00).

    Beginn wird auf die vorige, Ende auf die nächste halbe Stunde gerundet.
    """
    lo, hi = DEFAULT_AXIS_START, DEFAULT_AXIS_END
    for slot in slots:
        lo = min(lo, slot.start_minutes)
        hi = max(hi, slot.end_minutes)

    start = (lo // TICK_MINUTES) * TICK_MINUTES
    end = math.ceil(hi / TICK_MINUTES) * TICK_MINUTES
    ticks = tuple(range(start, end + 1, TICK_MINUTES))
    return TimeAxis(start_minutes=start, end_minutes=end, ticks=ticks)


def place_slot(
    slot: TimeSlot, axis: TimeAxis, row_height_px: float = DEFAULT_ROW_HEIGHT_PX
) -> SlotPlacement:
    """Berechnet top/height eines Slots relativ zum Achsenbeginn."""
    if row_height_px <= 0:
        raise ValueError(f"row_height_px muss > 0 sein (war {row_height_px})")
    if slot.start_minutes < axis.start_minutes or slot.end_minutes > axis.end_minutes:
        raise ValueError(
            f"Slot {slot.id} ({slot}) liegt außerhalb der Achse "
            f"{format_minutes(axis.start_minutes)}–{format_minutes(axis.end_minutes)}"
        )
    top = (slot.start_minutes - axis.start_minutes) / TICK_MINUTES * row_height_px
    height = slot.duration_minutes / TICK_MINUTES * row_height_px
    return SlotPlacement(top=top, height=height)


def group_by_day(slots: Iterable[TimeSlot]) -> dict[int, list[TimeSlot]]:
    """Verteilt Slots auf genau 7 Tagesspalten (Mo..So), je nach Beginn sortiert.

    Tage ohne Slots liefern eine leere Liste.
    """
    columns: dict[int, list[TimeSlot]] = {day: [] for day in range(len(DAY_NAMES))}
    for slot in slots:
        columns[slot.day_of_week].append(slot)
    for day_slots in columns.values():
        day_slots.sort(key=lambda s: (s.start_minutes, s.id))
    return columns


def compute_grid_layout(
    slots: Iterable[TimeSlot], row_height_px: float = DEFAULT_ROW_HEIGHT_PX
) -> GridLayout:
    """Achse + Platzierung aller Slots. Wird bei jeder Änderung neu berechnet."""
    slots = list(slots)
    axis = compute_axis(slots)
    placements = {slot.id: place_slot(slot, axis, row_height_px) for slot in slots}
    logger.debug(
        "Raster: %d Slots, Achse %s–%s",
        len(slots), format_minutes(axis.start_minutes), format_minutes(axis.end_minutes),
    )
    return GridLayout(
        axis_start_minutes=axis.start_minutes,
        axis_end_minutes=axis.end_minutes,
        tick_minutes=axis.ticks,
        slot_placements=placements,
        row_height_px=row_height_px,
    )


def tick_labels(axis: TimeAxis) -> list[str]:
    """Beschriftung der Zeitspalte: volle Stunden als "HH:MM", halbe leer."""
    return [format_minutes(t) if t % 60 == 0 else "" for t in axis.ticks]


def find_overlaps(slots: Iterable[TimeSlot]) -> list[tuple[TimeSlot, TimeSlot]]:
    """Paare von Slots, die sich am selben Tag zeitlich überschneiden."""
    overlaps: list[tuple[TimeSlot, TimeSlot]] = []
    for day_slots in group_by_day(slots).values():
        for i, a in enumerate(day_slots):
            for b in day_slots[i + 1:]:
                if b.start_minutes >= a.end_minutes:
                    break
                overlaps.append((a, b))
    return overlaps
