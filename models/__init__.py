from models.timeslot import TimeSlot, sort_days
from models.subject import SubjectRequirement, classify_subject, generate_short_code
from models.school_class import ClassConfig
from models.room import LabResource
from models.roster import Roster, RosterEntry, resolve_teacher
from models.schedule_grid import Cell, CellKind, ScheduleGrid
from models.coupling import CombinedSession, CombinedSessionGroup
from models.school_data import PlanningData, FeasibilityReport

__all__ = [
    "TimeSlot",
    "sort_days",
    "SubjectRequirement",
    "classify_subject",
    "generate_short_code",
    "ClassConfig",
    "LabResource",
    "Roster",
    "RosterEntry",
    "resolve_teacher",
    "Cell",
    "CellKind",
    "ScheduleGrid",
    "CombinedSession",
    "CombinedSessionGroup",
    "PlanningData",
    "FeasibilityReport",
]
