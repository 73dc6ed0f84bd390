"""Solver-Modul (randomisierte Platzierung mit Ledgern und Wiederholungen)."""

from .ledger import (
    ClassBooking,
    LabBooking,
    LabLedger,
    RunLedgers,
    SharedSessionBooking,
    TeacherLedger,
)
from .combined import CombinedSessionPlanner, class_sort_key, find_combined_groups
from .placement import ClassPlacer, PlacementOutcome
from .scheduler import (
    ClassTimetable,
    FacultyDetail,
    GenerationResult,
    RunControl,
    TimetableGenerator,
)
from .regeneration import RegenerationController, RegenerationState
from .teacher_view import TeacherTimetable, build_teacher_timetables
from .swap import CellRef, CollisionInfo, SwapResult, propose_swap

__all__ = [
    "ClassBooking",
    "LabBooking",
    "LabLedger",
    "RunLedgers",
    "SharedSessionBooking",
    "TeacherLedger",
    "CombinedSessionPlanner",
    "class_sort_key",
    "find_combined_groups",
    "ClassPlacer",
    "PlacementOutcome",
    "ClassTimetable",
    "FacultyDetail",
    "GenerationResult",
    "RunControl",
    "TimetableGenerator",
    "RegenerationController",
    "RegenerationState",
    "TeacherTimetable",
    "build_teacher_timetables",
    "CellRef",
    "CollisionInfo",
    "SwapResult",
    "propose_swap",
]
