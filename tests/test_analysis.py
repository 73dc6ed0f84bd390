"""Tests für Machbarkeits-Check und Post-Generierungs-Validierung."""

import pytest

from config.schema import Weekday
from data.demo_data import DemoDataGenerator
from models.coupling import CombinedSession, CombinedSessionGroup
from models.room import LabResource
from models.roster import Roster, RosterEntry
from models.schedule_grid import Cell, ScheduleGrid
from models.school_class import ClassConfig
from models.school_data import PlanningData
from models.subject import SubjectRequirement
from models.timeslot import TimeSlot
from analysis.solution_validator import SolutionValidator
from solver.scheduler import ClassTimetable, GenerationResult

MON, TUE = Weekday.MON, Weekday.TUE


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

def _subjects(maths_teacher: str = "Dr. Menon") -> list[SubjectRequirement]:
    return [
        SubjectRequirement(name="English", code="ENG", periods_per_week=4),
        SubjectRequirement(name="Mathematics", code="MATHS", periods_per_week=2,
                           teacher=maths_teacher),
        SubjectRequirement(name="OS Lab", code="OSL", periods_per_week=2, is_lab=True),
    ]


def _class(name: str, subjects=None, days=None, periods_per_day: int = 4,
           lunch_after: int = 2, capacity=None) -> ClassConfig:
    return ClassConfig(
        name=name,
        active_days=days or [MON, TUE],
        periods_per_day=periods_per_day,
        lunch_after=lunch_after,
        capacity=capacity,
        subjects=_subjects() if subjects is None else subjects,
    )


def _grid(cls: ClassConfig, rows: dict[Weekday, list[str]], lab: str = "CS Lab 1") -> ScheduleGrid:
    """Raster aus Kürzel-Zeilen; Laborfächer bekommen den angegebenen Raum."""
    grid = ScheduleGrid.empty(cls)
    for day, codes in rows.items():
        for period, code in enumerate(codes, start=1):
            if not code:
                continue
            subj = cls.subject_by_code(code)
            cell = Cell.lab(code, lab) if subj is not None and subj.is_lab else Cell.subject(code)
            grid.put(day, period, cell)
    return grid


def _result(grids: list[ScheduleGrid], sessions=None) -> GenerationResult:
    return GenerationResult(
        classes=[ClassTimetable(name=g.name, grid=g, faculty_details=[]) for g in grids],
        teachers=[],
        combined_sessions=sessions or [],
    )


def _validate(grids, sessions=None):
    data = PlanningData(classes=[g.class_config for g in grids])
    return SolutionValidator().validate(_result(grids, sessions), data)


def _valid_pair() -> list[ScheduleGrid]:
    a = _grid(_class("CSE-A"), {
        MON: ["MATHS", "ENG", "OSL", "OSL"],
        TUE: ["ENG", "MATHS", "ENG", "ENG"],
    })
    b = _grid(_class("CSE-B"), {
        MON: ["ENG", "MATHS", "ENG", "ENG"],
        TUE: ["MATHS", "ENG", "OSL", "OSL"],
    }, lab="CS Lab 2")
    return [a, b]


def _maths_session(slots) -> CombinedSession:
    group = CombinedSessionGroup(
        subject_code="MATHS", subject_name="Mathematics", teacher="Dr. Menon",
        member_classes=["CSE-A", "CSE-B"], periods_per_week=len(slots),
    )
    return CombinedSession(group=group, slots=slots)


# ─── MACHBARKEITS-CHECK ───────────────────────────────────────────────────────

class TestFeasibility:
    def test_demo_data_feasible(self):
        report = DemoDataGenerator(seed=42).generate().validate_feasibility()
        assert report.is_feasible
        assert report.errors == []

    def test_period_sum_mismatch(self):
        subjects = _subjects()[:2]
        report = PlanningData(classes=[_class("CSE-A", subjects)]).validate_feasibility()
        assert not report.is_feasible
        assert any("Summe der Perioden (6)" in e for e in report.errors)

    def test_odd_lab(self):
        subjects = [
            SubjectRequirement(name="English", code="ENG", periods_per_week=5),
            SubjectRequirement(name="OS Lab", code="OSL", periods_per_week=3, is_lab=True),
        ]
        labs = [LabResource(id="L1", name="CS Lab 1", capacity=70)]
        report = PlanningData(classes=[_class("CSE-A", subjects)], labs=labs).validate_feasibility()
        assert any("ungerade" in e for e in report.errors)

    def test_no_host_lab_is_warning(self):
        report = PlanningData(classes=[_class("CSE-A")]).validate_feasibility()
        assert report.is_feasible
        assert any("Kein Laborraum" in w for w in report.warnings)

    def test_lab_capacity(self):
        labs = [LabResource(id="L1", name="CS Lab 1", capacity=30)]
        report = PlanningData(
            classes=[_class("CSE-A", capacity=45)], labs=labs
        ).validate_feasibility()
        assert any("45 Teilnehmer" in e for e in report.errors)

    def test_default_capacity_used(self):
        """Ohne Klassenkapazität gilt die Standard-Teilnehmerzahl (60)."""
        labs = [LabResource(id="L1", name="CS Lab 1", capacity=50)]
        report = PlanningData(classes=[_class("CSE-A")], labs=labs).validate_feasibility()
        assert any("60 Teilnehmer" in e for e in report.errors)

    def test_strict_subject_exceeds_days(self):
        subjects = [
            SubjectRequirement(name="Sports", periods_per_week=3, teacher="Mr. Sharma"),
            SubjectRequirement(name="English", code="ENG", periods_per_week=5, teacher="Ms. Pillai"),
        ]
        report = PlanningData(classes=[_class("CSE-A", subjects)]).validate_feasibility()
        assert any("letzten Stunde" in e for e in report.errors)

    def test_missing_teacher_warning(self):
        report = PlanningData(classes=[_class("CSE-A")]).validate_feasibility()
        assert any("Keine Lehrkraft für 'English'" in w for w in report.warnings)
        assert not any("Mathematics" in w and "Lehrkraft" in w for w in report.warnings)

    def test_unknown_partner_warning(self):
        subjects = [
            SubjectRequirement(name="English", code="ENG", periods_per_week=8, teacher="Ms. Pillai",
                               combine=True, combine_with=["CSE-Z"]),
        ]
        report = PlanningData(classes=[_class("CSE-A", subjects)]).validate_feasibility()
        assert any("'CSE-Z'" in w and "existiert nicht" in w for w in report.warnings)

    def test_one_sided_partner_warning(self):
        wants = [SubjectRequirement(name="English", code="ENG", periods_per_week=8,
                                    teacher="Ms. Pillai", combine=True, combine_with=["CSE-B"])]
        plain = [SubjectRequirement(name="English", code="ENG", periods_per_week=8,
                                    teacher="Ms. Pillai")]
        report = PlanningData(
            classes=[_class("CSE-A", wants), _class("CSE-B", plain)]
        ).validate_feasibility()
        assert any("nicht gegenseitig" in w for w in report.warnings)

    def test_teacher_overload(self):
        """Gleiche Lehrkraft in zwei Klassen mit je 4 Perioden an einem 4-Perioden-Tag."""
        subjects = [SubjectRequirement(name="Mathematics", code="MATHS", periods_per_week=4,
                                       teacher="Dr. Menon")]
        classes = [_class(n, subjects, days=[MON]) for n in ("CSE-A", "CSE-B")]
        report = PlanningData(classes=classes).validate_feasibility()
        assert not report.is_feasible
        assert any("Dr. Menon: 8 Perioden" in e for e in report.errors)

    def test_combined_counted_once(self):
        def subjects(partner):
            return [SubjectRequirement(name="Mathematics", code="MATHS", periods_per_week=4,
                                       teacher="Dr. Menon", combine=True, combine_with=[partner])]
        classes = [
            _class("CSE-A", subjects("CSE-B"), days=[MON]),
            _class("CSE-B", subjects("CSE-A"), days=[MON]),
        ]
        report = PlanningData(classes=classes).validate_feasibility()
        assert report.is_feasible
        assert report.warnings == []

    def test_combined_with_roster_teacher_counted_once(self):
        """Lehrkraft der Kombination aus dem Roster: gemeinsame Perioden zählen einmal."""
        week = [Weekday.MON, Weekday.TUE, Weekday.WED, Weekday.THU, Weekday.FRI]

        def dbms(partner):
            return SubjectRequirement(name="DBMS", periods_per_week=10,
                                      combine=True, combine_with=[partner])

        classes = [
            _class("CSE-A", [dbms("CSE-B"), SubjectRequirement(
                name="Operating Systems", code="OS", periods_per_week=10, teacher="Dr. Rao",
            )], days=week),
            _class("CSE-B", [dbms("CSE-A"), SubjectRequirement(
                name="English", code="ENG", periods_per_week=10, teacher="Ms. Pillai",
            )], days=week),
        ]
        roster = Roster(entries=[
            RosterEntry(teacher="Dr. Rao", subject="DBMS", class_name=name)
            for name in ("CSE-A", "CSE-B")
        ])
        data = PlanningData(classes=classes, roster=roster)
        report = data.validate_feasibility()
        assert report.is_feasible
        assert not any("Dr. Rao" in e for e in report.errors)
        assert "Kombinierte Gruppen: 1" in data.summary()

    def test_combined_remainder_counted_per_class(self):
        """Unterschiedliche Periodenzahlen: nur das Minimum ist gemeinsam, der Rest zählt je Klasse."""
        def maths(periods, partner):
            return SubjectRequirement(name="Mathematics", code="MATHS", periods_per_week=periods,
                                      teacher="Dr. Menon", combine=True, combine_with=[partner])

        physics = SubjectRequirement(name="Physics", code="PHY", periods_per_week=2,
                                     teacher="Dr. Menon")
        classes = [
            _class("CSE-A", [maths(4, "CSE-B")], days=[MON]),
            _class("CSE-B", [maths(2, "CSE-A"), physics], days=[MON]),
        ]
        report = PlanningData(classes=classes).validate_feasibility()
        assert not report.is_feasible
        assert any("Dr. Menon: 6 Perioden" in e for e in report.errors)

    def test_exempt_subject_not_counted(self):
        subjects = [SubjectRequirement(name="Games", code="GAMES", periods_per_week=4,
                                       teacher="Coach Das")]
        classes = [_class(n, subjects, days=[MON]) for n in ("CSE-A", "CSE-B")]
        assert PlanningData(classes=classes).validate_feasibility().is_feasible


# ─── POST-GENERIERUNGS-VALIDIERUNG ─────────────────────────────────────────────

class TestSolutionValidator:
    def test_valid_pair(self):
        report = _validate(_valid_pair())
        assert report.is_valid
        assert report.violations == []

    def test_missing_cell_and_count(self):
        grids = _valid_pair()
        grids[0].clear(TUE, 4)
        report = _validate(grids)
        assert not report.is_valid
        assert report.counts_by_constraint() == {"subject_count": 1, "empty_cell": 1}

    def test_teacher_double_booking(self):
        grids = _valid_pair()
        grids[1].put(MON, 1, Cell.subject("MATHS"))
        grids[1].put(MON, 2, Cell.subject("ENG"))
        report = _validate(grids)
        assert [v.constraint for v in report.violations] == ["teacher_double_booking"]
        assert report.violations[0].entity == "Dr. Menon"
        assert "Mon P1" in report.violations[0].description

    def test_combined_session_not_double_booking(self):
        """Kombinierte Veranstaltung: gleiche Lehrkraft in beiden Klassen ist korrekt."""
        grids = _valid_pair()
        grids[1].put(MON, 1, Cell.subject("MATHS"))
        grids[1].put(MON, 2, Cell.subject("ENG"))
        report = _validate(grids, [_maths_session([TimeSlot(MON, 1)])])
        assert report.is_valid

    def test_combined_identity_violated(self):
        report = _validate(_valid_pair(), [_maths_session([TimeSlot(MON, 1)])])
        combined = [v for v in report.violations if v.constraint == "combined_session"]
        assert len(combined) == 1
        assert combined[0].entity == "CSE-B"

    def test_exempt_subject_shared(self):
        subjects = [
            SubjectRequirement(name="Games", code="GAMES", periods_per_week=1, teacher="Coach Das"),
            SubjectRequirement(name="English", code="ENG", periods_per_week=3),
        ]
        grids = [
            _grid(_class(n, subjects, days=[MON]), {MON: ["ENG", "ENG", "ENG", "GAMES"]})
            for n in ("CSE-A", "CSE-B")
        ]
        assert _validate(grids).is_valid

    def test_lab_double_booking(self):
        a, _ = _valid_pair()
        b = _grid(_class("CSE-B"), {
            MON: ["ENG", "MATHS", "OSL", "OSL"],
            TUE: ["MATHS", "ENG", "ENG", "ENG"],
        })
        report = _validate([a, b])
        lab = [v for v in report.violations if v.constraint == "lab_double_booking"]
        assert len(lab) == 2
        assert all(v.entity == "CS Lab 1" for v in lab)

    @pytest.mark.parametrize("rows,problem", [
        ({MON: ["OSL", "OSL", "MATHS", "ENG"], TUE: ["ENG", "MATHS", "ENG", "ENG"]}, "Montag P1"),
        ({MON: ["MATHS", "MATHS", "ENG", "ENG"], TUE: ["ENG", "OSL", "OSL", "ENG"]}, "Mittagspause"),
        ({MON: ["MATHS", "MATHS", "ENG", "ENG"], TUE: ["OSL", "ENG", "OSL", "ENG"]}, "aufeinanderfolgend"),
    ])
    def test_lab_block_rules(self, rows, problem):
        report = _validate([_grid(_class("CSE-A"), rows)])
        assert [v.constraint for v in report.violations] == ["lab_block"]
        assert problem in report.violations[0].description

    def test_strict_position(self):
        subjects = [
            SubjectRequirement(name="Sports", code="SPORTS", periods_per_week=1),
            SubjectRequirement(name="English", code="ENG", periods_per_week=7),
        ]
        grid = _grid(_class("CSE-A", subjects), {
            MON: ["SPORTS", "ENG", "ENG", "ENG"],
            TUE: ["ENG", "ENG", "ENG", "ENG"],
        })
        report = _validate([grid])
        assert [v.constraint for v in report.violations] == ["strict_position"]
