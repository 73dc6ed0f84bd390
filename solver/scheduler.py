"""Stundenplan-Generator: randomisierte Platzierung mit begrenzten Wiederholungen.

Architektur:
  - Ein Lauf besitzt exklusiv seine Ledger (Lehrkräfte, Laborräume)
  - Kombinierte Veranstaltungen werden vor allen Klassen eingeplant
  - Klassen werden nacheinander platziert (Ziffern zuerst, dann alphabetisch)
  - Gescheiterte Klassen bekommen eine Ersatzbelegung und werden markiert
  - Lehrer-Ansicht wird am Ende aus den Klassenrastern abgeleitet
"""

import random
import time
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from models.coupling import CombinedSession
from models.roster import resolve_teacher
from models.schedule_grid import ScheduleGrid
from models.school_data import PlanningData
from solver.combined import CombinedSessionPlanner, class_sort_key
from solver.ledger import RunLedgers
from solver.placement import ClassPlacer
from solver.teacher_view import TeacherTimetable, build_teacher_timetables

logger = logging.getLogger(__name__)

NOT_ASSIGNED = "Not Assigned"


# ─── Ergebnis-Modelle ─────────────────────────────────────────────────────────

class FacultyDetail(BaseModel):
    """Eine Zeile der Lehrkräfte-Tabelle unter einem Klassenplan."""

    faculty_name: str
    subject_name: str
    subject_code: str
    periods_per_week: int


class ClassTimetable(BaseModel):
    """Fertiger Plan einer Klasse."""

    name: str
    grid: ScheduleGrid
    faculty_details: list[FacultyDetail]
    attempts: int = 0
    needs_regeneration: bool = False

    def header(self) -> list[str]:
        return self.grid.header()

    def rows(self) -> list[list[str]]:
        return self.grid.to_rows()


class RunControl(BaseModel):
    """Zähler des Aufrufers für Gesamtläufe (wird im Ergebnis zurückgegeben)."""

    attempt: int = Field(1, ge=1)
    max_attempts: int = Field(1, ge=1)

    def next(self) -> "RunControl":
        return RunControl(attempt=self.attempt + 1, max_attempts=self.max_attempts)


class GenerationResult(BaseModel):
    """Vollständiges Ergebnis eines Generierungslaufs."""

    classes: list[ClassTimetable]
    teachers: list[TeacherTimetable]
    diagnostics: list[str] = []
    needs_regeneration: bool = False
    run_control: RunControl = Field(default_factory=RunControl)
    combined_sessions: list[CombinedSession] = []
    elapsed_seconds: float = 0.0

    @property
    def can_regenerate(self) -> bool:
        return self.needs_regeneration and self.run_control.attempt < self.run_control.max_attempts

    def class_grids(self) -> list[ScheduleGrid]:
        return [c.grid for c in self.classes]

    def get_class(self, name: str) -> Optional[ClassTimetable]:
        for c in self.classes:
            if c.name == name:
                return c
        return None

    def get_teacher(self, name: str) -> Optional[TeacherTimetable]:
        for t in self.teachers:
            if t.name == name:
                return t
        return None

    def with_grids(
        self, grids: list[ScheduleGrid], teachers: list[TeacherTimetable]
    ) -> "GenerationResult":
        """Kopie mit ersetzten Klassenrastern (z.B. nach manuellem Tausch)."""
        by_name = {g.name: g for g in grids}
        classes = [
            c.model_copy(update={"grid": by_name.get(c.name, c.grid)}) for c in self.classes
        ]
        return self.model_copy(update={"classes": classes, "teachers": teachers})

    def save_json(self, path: Path) -> None:
        """Speichert das Ergebnis als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "GenerationResult":
        """Lädt ein gespeichertes Ergebnis aus JSON."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Ergebnis nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())


# ─── Generator ────────────────────────────────────────────────────────────────

class TimetableGenerator:
    """Erzeugt die Pläne aller Klassen in einem Lauf.

    Verwendung:
        generator = TimetableGenerator(planning_data)
        result = generator.generate(RunControl(attempt=1, max_attempts=10))
    """

    def __init__(self, data: PlanningData) -> None:
        self.data = data
        self.config = data.config.generation

    def generate(self, run_control: Optional[RunControl] = None) -> GenerationResult:
        """Ein vollständiger Lauf mit frischen Ledgern."""
        run_control = run_control or RunControl()
        t0 = time.time()
        rng = self._make_rng(run_control.attempt)

        ledgers = RunLedgers.fresh(self.data.labs)
        planner = CombinedSessionPlanner(self.data.classes, self.data.roster, self.config)
        sessions, diagnostics = planner.pre_schedule(ledgers)

        timetables: list[ClassTimetable] = []
        for cls in sorted(self.data.classes, key=lambda c: class_sort_key(c.name)):
            placer = ClassPlacer(
                cls, self.data.roster, sessions, self.config, rng,
                headcount=self.data.headcount(cls),
            )
            outcome = placer.place(ledgers)
            ledgers = outcome.ledgers
            diagnostics.extend(outcome.diagnostics)
            timetables.append(ClassTimetable(
                name=cls.name,
                grid=outcome.grid,
                faculty_details=self._faculty_details(cls),
                attempts=outcome.attempts,
                needs_regeneration=not outcome.success,
            ))
            logger.info(
                f"Klasse {cls.name}: "
                f"{'OK' if outcome.success else 'FEHLGESCHLAGEN'} "
                f"({outcome.attempts} Versuch(e))"
            )

        teachers = build_teacher_timetables([t.grid for t in timetables], self.data.roster)
        needs_regeneration = any(t.needs_regeneration for t in timetables)
        elapsed = time.time() - t0

        logger.info(
            f"Lauf {run_control.attempt}/{run_control.max_attempts} beendet | "
            f"Zeit: {elapsed:.2f}s | "
            f"Klassen: {len(timetables)} | "
            f"Markiert: {sum(1 for t in timetables if t.needs_regeneration)}"
        )

        return GenerationResult(
            classes=timetables,
            teachers=teachers,
            diagnostics=diagnostics,
            needs_regeneration=needs_regeneration,
            run_control=run_control,
            combined_sessions=sessions,
            elapsed_seconds=elapsed,
        )

    def _make_rng(self, attempt: int) -> random.Random:
        """Fester Seed → reproduzierbar, jeder Gesamtlauf mit eigenem Seed."""
        if self.config.seed is None:
            return random.Random()
        return random.Random(self.config.seed + attempt - 1)

    def _faculty_details(self, cls) -> list[FacultyDetail]:
        return [
            FacultyDetail(
                faculty_name=resolve_teacher(s, cls.name, self.data.roster) or NOT_ASSIGNED,
                subject_name=s.name,
                subject_code=s.code,
                periods_per_week=s.periods_per_week,
            )
            for s in cls.subjects
        ]
