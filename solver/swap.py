"""Manueller Zellentausch mit Kollisionsprüfung (Lehrkraft und Laborraum).

Die Prüfung arbeitet nur auf den Klassenrastern – die Ledger eines Laufs
werden nicht gespeichert. Eingaben werden nie verändert: ein akzeptierter
Tausch liefert neue Raster, ein abgelehnter gar keine.
"""

import logging
from typing import Literal, Optional

from pydantic import BaseModel, Field

from config.schema import Weekday
from models.room import LabResource
from models.roster import Roster, resolve_teacher
from models.schedule_grid import Cell, CellKind, ScheduleGrid
from solver.teacher_view import TeacherTimetable, build_teacher_timetables

logger = logging.getLogger(__name__)


class CellRef(BaseModel):
    """Zelle im gerenderten Klassenplan. `column` zählt ab 1, Pausen-Marker mitgezählt."""

    class_name: str
    day: Weekday
    column: int = Field(ge=1)

    @classmethod
    def parse(cls, class_name: str, text: str) -> "CellRef":
        """Liest "Mon:3" (Tag:Spalte)."""
        day, _, column = text.partition(":")
        if not column:
            raise ValueError(f"Ungültige Zellangabe '{text}' (erwartet z.B. Mon:3)")
        return cls(class_name=class_name, day=day.strip().capitalize(), column=int(column))

    def __str__(self) -> str:
        return f"{self.class_name} {self.day.value}:{self.column}"


class CollisionInfo(BaseModel):
    kind: Literal["teacher", "lab"]
    resource: str          # Lehrkraft oder Laborraum
    class_name: str        # Klasse, die den Slot bereits belegt
    day: Weekday
    period: int


class SwapResult(BaseModel):
    accepted: bool
    updated_class_grids: Optional[list[ScheduleGrid]] = None
    updated_teacher_grids: Optional[list[TeacherTimetable]] = None
    conflict_message: Optional[str] = None
    collisions: list[CollisionInfo] = []


def _reject(message: str, collisions: Optional[list[CollisionInfo]] = None) -> SwapResult:
    logger.info(f"Tausch abgelehnt: {message}")
    return SwapResult(accepted=False, conflict_message=message, collisions=collisions or [])


def _teacher_of(grid: ScheduleGrid, cell: Cell, roster: Roster) -> Optional[str]:
    subj = grid.class_config.subject_by_code(cell.code)
    if subj is None or subj.is_exempt:
        return None
    return resolve_teacher(subj, grid.name, roster)


def _lab_of(grid: ScheduleGrid, cell: Cell, labs: list[LabResource]) -> Optional[str]:
    """Gebuchter Laborraum der Zelle, sonst erster Raum, der das Fach zulässt."""
    if cell.kind != CellKind.LAB:
        return None
    if cell.lab_name:
        return cell.lab_name
    subj = grid.class_config.subject_by_code(cell.code)
    if subj is None:
        return None
    return next((lab.name for lab in labs if lab.allows(subj)), None)


def _scan_collisions(
    grids: list[ScheduleGrid],
    roster: Roster,
    labs: list[LabResource],
    moving_grid: ScheduleGrid,
    moving: Cell,
    day: Weekday,
    period: int,
    excluded: set[tuple[str, Weekday, int]],
) -> list[CollisionInfo]:
    """Kollisionen, wenn `moving` nach (day, period) verschoben wird."""
    if moving.is_empty:
        return []
    collisions = []
    teacher = _teacher_of(moving_grid, moving, roster)
    lab = _lab_of(moving_grid, moving, labs)
    for grid in grids:
        if day not in grid.cells or period > grid.periods_per_day:
            continue
        if (grid.name, day, period) in excluded:
            continue
        other = grid.get(day, period)
        if other.is_empty:
            continue
        if teacher is not None and _teacher_of(grid, other, roster) == teacher:
            collisions.append(CollisionInfo(
                kind="teacher", resource=teacher, class_name=grid.name, day=day, period=period
            ))
        if lab is not None and _lab_of(grid, other, labs) == lab:
            collisions.append(CollisionInfo(
                kind="lab", resource=lab, class_name=grid.name, day=day, period=period
            ))
    return collisions


def propose_swap(
    class_grids: list[ScheduleGrid],
    roster: Roster,
    labs: list[LabResource],
    source: CellRef,
    target: CellRef,
) -> SwapResult:
    """Tauscht zwei Zellen, falls weder Lehrkraft noch Laborraum doppelt belegt würden.

    Geprüft wird in beide Richtungen: Fach A am Slot von B und Fach B am Slot
    von A. Bei Annahme wird die Lehrer-Ansicht neu aufgebaut.
    """
    if source == target:
        return _reject("Quelle und Ziel sind identisch.")

    by_name = {g.name: g for g in class_grids}
    grid_a, grid_b = by_name.get(source.class_name), by_name.get(target.class_name)
    if grid_a is None or grid_b is None:
        missing = source.class_name if grid_a is None else target.class_name
        return _reject(f"Klasse '{missing}' nicht gefunden.")

    cell_a = grid_a.cell_at_column(source.day, source.column)
    cell_b = grid_b.cell_at_column(target.day, target.column)
    if cell_a is None or cell_b is None:
        return _reject(f"Zelle {source if cell_a is None else target} existiert nicht.")
    if cell_a.is_marker or cell_b.is_marker:
        return _reject("Pausen und Mittagspausen können nicht getauscht werden.")
    for cell, grid in ((cell_a, grid_b), (cell_b, grid_a)):
        if not cell.is_empty and grid.class_config.subject_by_code(cell.code) is None:
            return _reject(f"Fach {cell.code} gehört nicht zum Lehrplan von {grid.name}.")

    period_a = grid_a.period_at_column(source.column)
    period_b = grid_b.period_at_column(target.column)
    excluded = {
        (grid_a.name, source.day, period_a),
        (grid_b.name, target.day, period_b),
    }

    collisions = _scan_collisions(
        class_grids, roster, labs, grid_a, cell_a, target.day, period_b, excluded
    ) + _scan_collisions(
        class_grids, roster, labs, grid_b, cell_b, source.day, period_a, excluded
    )
    if collisions:
        details = "; ".join(
            f"{'Lehrkraft' if c.kind == 'teacher' else 'Labor'} {c.resource} "
            f"belegt bereits {c.class_name} ({c.day.value} P{c.period})"
            for c in collisions
        )
        return _reject(f"Kollision: {details}", collisions)

    updated = [g.model_copy(deep=True) for g in class_grids]
    new_by_name = {g.name: g for g in updated}
    new_by_name[grid_a.name].put(source.day, period_a, cell_b)
    new_by_name[grid_b.name].put(target.day, period_b, cell_a)

    logger.info(f"Tausch übernommen: {source} ↔ {target}")
    return SwapResult(
        accepted=True,
        updated_class_grids=updated,
        updated_teacher_grids=build_teacher_timetables(updated, roster),
    )
