"""Lehrer-Ansicht: leitet aus allen Klassenrastern einen Plan je Lehrkraft ab.

Reine Funktion ohne Zustand – wird nach jeder Generierung und jedem
manuellen Tausch neu aufgerufen.
"""

from typing import Optional

from pydantic import BaseModel

from models.coupling import GROUP_SEPARATOR
from models.roster import Roster, resolve_teacher
from models.schedule_grid import CellKind, ScheduleGrid
from models.timeslot import sort_days
from solver.combined import class_sort_key

FREE_LABEL = "Free"


class TeacherTimetable(BaseModel):
    """Wochenplan einer Lehrkraft im selben Zeilenformat wie die Klassenpläne."""

    name: str
    header: list[str]
    rows: list[list[str]]

    def cell(self, day: str, column: int) -> Optional[str]:
        for row in self.rows:
            if row[0] == day and 0 < column < len(row):
                return row[column]
        return None

    def busy_count(self) -> int:
        """Anzahl belegter Perioden."""
        return sum(
            1 for row in self.rows for label in row[1:]
            if label not in (FREE_LABEL, "BREAK", "LUNCH")
        )


def _teacher_names(grids: list[ScheduleGrid], roster: Roster) -> list[str]:
    names = set(roster.teachers())
    for grid in grids:
        for subj in grid.class_config.subjects:
            if subj.teacher:
                names.add(subj.teacher)
    return sorted(names, key=str.lower)


def build_teacher_timetables(
    grids: list[ScheduleGrid], roster: Roster
) -> list[TeacherTimetable]:
    """Erzeugt für jede Lehrkraft einen Plan über alle Tage/Perioden aller Klassen.

    Zellen: "CODE (Klasse)", bei gleichzeitigen Klassen "CODE (A+B)", sonst "Free".
    """
    if not grids:
        return []

    days = sort_days(d for g in grids for d in g.days)
    # Pausen-Layout der Klasse mit den meisten Perioden
    reference = max(grids, key=lambda g: g.periods_per_day)
    layout = reference.layout()
    header = reference.header()

    # (Lehrkraft, Tag, Periode) → Kürzel → Klassen
    occupancy: dict[tuple, dict[str, list[str]]] = {}
    for grid in grids:
        teacher_by_code = {
            s.code: resolve_teacher(s, grid.name, roster) for s in grid.class_config.subjects
        }
        for slot in grid.slots():
            cell = grid.get(slot.day, slot.period)
            if cell.is_empty:
                continue
            teacher = teacher_by_code.get(cell.code)
            if teacher is None:
                continue
            occupancy.setdefault((teacher, slot.day, slot.period), {}).setdefault(
                cell.code, []
            ).append(grid.name)

    timetables = []
    for teacher in _teacher_names(grids, roster):
        rows = []
        for day in days:
            row = [day.value]
            for entry in layout:
                if entry == CellKind.BREAK:
                    row.append("BREAK")
                elif entry == CellKind.LUNCH:
                    row.append("LUNCH")
                else:
                    row.append(_label(occupancy.get((teacher, day, entry))))
            rows.append(row)
        timetables.append(TeacherTimetable(name=teacher, header=header, rows=rows))
    return timetables


def _label(entries: Optional[dict[str, list[str]]]) -> str:
    if not entries:
        return FREE_LABEL
    return ", ".join(
        f"{code} ({GROUP_SEPARATOR.join(sorted(classes, key=class_sort_key))})"
        for code, classes in entries.items()
    )
