"""Stundenraster einer Klasse: (Tag, Periode) → Zelle (Pydantic v2)."""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from config.schema import Weekday
from models.school_class import ClassConfig
from models.timeslot import TimeSlot

LAB_SUFFIX = " (Lab)"


class CellKind(str, Enum):
    EMPTY = "empty"
    SUBJECT = "subject"
    LAB = "lab"
    BREAK = "break"
    LUNCH = "lunch"


class Cell(BaseModel):
    """Belegung einer Rasterzelle. Unveränderlich, wird beim Setzen ersetzt."""

    model_config = ConfigDict(frozen=True)

    kind: CellKind = CellKind.EMPTY
    code: Optional[str] = None
    lab_name: Optional[str] = None   # Gebuchter Laborraum (nur bei LAB)

    @classmethod
    def subject(cls, code: str) -> "Cell":
        return cls(kind=CellKind.SUBJECT, code=code)

    @classmethod
    def lab(cls, code: str, lab_name: Optional[str] = None) -> "Cell":
        return cls(kind=CellKind.LAB, code=code, lab_name=lab_name)

    @property
    def is_empty(self) -> bool:
        return self.kind == CellKind.EMPTY

    @property
    def is_marker(self) -> bool:
        return self.kind in (CellKind.BREAK, CellKind.LUNCH)

    @property
    def label(self) -> str:
        """Darstellung wie im gerenderten Plan ("DBMS", "CN (Lab)", "BREAK")."""
        if self.kind == CellKind.SUBJECT:
            return self.code or ""
        if self.kind == CellKind.LAB:
            return f"{self.code}{LAB_SUFFIX}"
        if self.kind == CellKind.BREAK:
            return "BREAK"
        if self.kind == CellKind.LUNCH:
            return "LUNCH"
        return ""


EMPTY_CELL = Cell()
BREAK_CELL = Cell(kind=CellKind.BREAK)
LUNCH_CELL = Cell(kind=CellKind.LUNCH)

# Eintrag im Zeilenlayout: Periodennummer oder Pausen-Marker
LayoutEntry = Union[int, CellKind]


class ScheduleGrid(BaseModel):
    """Wochenraster einer Klasse.

    `cells[day][period - 1]` enthält die Zelle der Periode. Pausen und
    Mittagspausen sind keine Zellen, sondern werden erst im Zeilenlayout
    (`layout()`, `to_rows()`) zwischen die Perioden eingefügt. Spalten
    (`column`) sind 1-basiert und zählen die Marker mit, d.h.
    `to_rows()[i][column]` ist die Zelle der Spalte.
    """

    class_config: ClassConfig
    cells: dict[Weekday, list[Cell]]

    @classmethod
    def empty(cls, class_config: ClassConfig) -> "ScheduleGrid":
        return cls(
            class_config=class_config,
            cells={
                day: [EMPTY_CELL] * class_config.periods_per_day
                for day in class_config.active_days
            },
        )

    # ─── Zellzugriff ───

    @property
    def name(self) -> str:
        return self.class_config.name

    @property
    def days(self) -> list[Weekday]:
        return list(self.class_config.active_days)

    @property
    def periods_per_day(self) -> int:
        return self.class_config.periods_per_day

    def get(self, day: Weekday, period: int) -> Cell:
        return self.cells[day][period - 1]

    def put(self, day: Weekday, period: int, cell: Cell) -> None:
        self.cells[day][period - 1] = cell

    def clear(self, day: Weekday, period: int) -> None:
        self.put(day, period, EMPTY_CELL)

    def is_free(self, day: Weekday, period: int) -> bool:
        return self.get(day, period).is_empty

    def slots(self) -> list[TimeSlot]:
        """Alle (Tag, Periode)-Paare in Wochenreihenfolge."""
        return [
            TimeSlot(day, p)
            for day in self.days
            for p in range(1, self.periods_per_day + 1)
        ]

    def count(self, code: str) -> int:
        """Anzahl Zellen mit diesem Fach-Kürzel (Labor-Zellen eingeschlossen)."""
        return sum(
            1 for row in self.cells.values() for c in row
            if c.code == code and not c.is_empty
        )

    def count_on_day(self, code: str, day: Weekday) -> int:
        return sum(1 for c in self.cells[day] if c.code == code and not c.is_empty)

    def periods_of(self, code: str, day: Weekday) -> list[int]:
        return [p for p, c in enumerate(self.cells[day], start=1) if c.code == code]

    def filled_count(self) -> int:
        return sum(1 for row in self.cells.values() for c in row if not c.is_empty)

    def empty_slots(self) -> list[TimeSlot]:
        return [s for s in self.slots() if self.is_free(s.day, s.period)]

    # ─── Zeilenlayout (Pausen-Marker) ───

    def layout(self) -> list[LayoutEntry]:
        """Spaltenfolge einer Zeile: Perioden mit eingeschobenen BREAK/LUNCH-Markern."""
        cfg = self.class_config
        entries: list[LayoutEntry] = []
        for p in range(1, cfg.periods_per_day + 1):
            entries.append(p)
            if cfg.break_after and p == cfg.break_after:
                entries.append(CellKind.BREAK)
            if cfg.lunch_after and p == cfg.lunch_after:
                entries.append(CellKind.LUNCH)
        return entries

    def period_at_column(self, column: int) -> Optional[int]:
        """Periode einer Spalte, None bei Markern oder ungültiger Spalte."""
        entries = self.layout()
        if column < 1 or column > len(entries):
            return None
        entry = entries[column - 1]
        return entry if isinstance(entry, int) else None

    def cell_at_column(self, day: Weekday, column: int) -> Optional[Cell]:
        """Zelle an einer Spalte (Marker liefern BREAK/LUNCH-Zellen)."""
        entries = self.layout()
        if day not in self.cells or column < 1 or column > len(entries):
            return None
        entry = entries[column - 1]
        if entry == CellKind.BREAK:
            return BREAK_CELL
        if entry == CellKind.LUNCH:
            return LUNCH_CELL
        return self.get(day, entry)

    def header(self) -> list[str]:
        labels = ["Day"]
        for entry in self.layout():
            if entry == CellKind.BREAK:
                labels.append("Break")
            elif entry == CellKind.LUNCH:
                labels.append("Lunch")
            else:
                labels.append(f"P{entry}")
        return labels

    def to_rows(self) -> list[list[str]]:
        """Tageweise Zeilen: [Tag, Zelle, ..., "BREAK", ..., "LUNCH", ...]."""
        width = len(self.layout())
        return [
            [day.value] + [self.cell_at_column(day, col).label for col in range(1, width + 1)]
            for day in self.days
        ]
