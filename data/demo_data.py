"""Demo-Datensatz für den Stundenplan-Generator.

Vier Klassen eines Informatik-Jahrgangs (6 Tage × 6 Perioden, Pause nach P2,
Mittag nach P3) mit bewusst geteilten Ressourcen:
  1. DBMS für CSE-A und CSE-B gemeinsam bei Dr. Rao (kombinierte Veranstaltung)
  2. Zwei Rechnerlabore für drei Laborfächer je Klasse
  3. Sport und Bibliothek bei derselben Lehrkraft für alle Klassen
     (feste letzte Stunde → verschiedene Tage nötig)
  4. Games für alle Klassen bei einer Lehrkraft (Gruppenaufsicht erlaubt)
"""

import random
from typing import Optional

from config.defaults import DEFAULT_ACTIVE_DAYS, default_engine_config
from models.room import LabResource
from models.roster import Roster, RosterEntry
from models.school_class import ClassConfig
from models.school_data import PlanningData
from models.subject import SubjectRequirement

CLASS_NAMES = ["CSE-A", "CSE-B", "CSE-C", "CSE-D"]
COMBINED_TEACHER = "Dr. Rao"

# (Name, Kürzel, Perioden, Labor)
_CURRICULUM: list[tuple[str, str, int, bool]] = [
    ("Database Management Systems", "DBMS", 4, False),
    ("Mathematics", "MATHS", 5, False),
    ("Operating Systems", "OS", 5, False),
    ("Computer Networks", "CN", 5, False),
    ("Software Engineering", "SE", 4, False),
    ("English", "ENG", 3, False),
    ("Mentoring", "MENTOR", 1, False),
    ("Library", "library", 1, False),
    ("Sports", "SPORTS", 1, False),
    ("Games", "GAMES", 1, False),
    ("DBMS Lab", "DBMSL", 2, True),
    ("OS Lab", "OSL", 2, True),
    ("Networks Lab", "CNL", 2, True),
]

# Lehrkräfte, die ein Fach in allen Klassen geben
_SHARED_TEACHERS = {
    "SPORTS": "Mr. Sharma",
    "library": "Ms. Nair",
    "GAMES": "Coach Das",
}

_TEACHER_POOL = [
    "Dr. Menon", "Ms. Pillai", "Mr. Kapoor", "Dr. Banerjee", "Ms. Fernandes",
    "Mr. Reddy", "Dr. Joshi", "Ms. Kulkarni", "Mr. Bose", "Dr. Chatterjee",
    "Ms. Thomas", "Mr. Verma", "Dr. Krishnan", "Ms. Gupta", "Mr. Iyer",
    "Dr. Mehta", "Ms. Saxena", "Mr. Naidu", "Dr. Hegde", "Ms. Desai",
    "Mr. Ghosh", "Ms. Mathew", "Dr. Agarwal",
]


class DemoDataGenerator:
    """Erzeugt den Demo-Datensatz (reproduzierbar über `seed`)."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self.rng = random.Random(seed)

    def generate(self) -> PlanningData:
        roster = self._generate_roster()
        classes = [self._make_class(name) for name in CLASS_NAMES]
        labs = [
            LabResource(id="LAB1", name="CS Lab 1", capacity=70),
            LabResource(id="LAB2", name="CS Lab 2", capacity=70),
        ]
        config = default_engine_config()
        config.institution_name = "Demo Engineering College"
        config.generation.seed = self.seed
        return PlanningData(classes=classes, roster=roster, labs=labs, config=config)

    def _make_class(self, name: str) -> ClassConfig:
        subjects = []
        for subj_name, code, periods, is_lab in _CURRICULUM:
            req = SubjectRequirement(
                name=subj_name, code=code, periods_per_week=periods, is_lab=is_lab
            )
            if code == "DBMS" and name in ("CSE-A", "CSE-B"):
                partner = "CSE-B" if name == "CSE-A" else "CSE-A"
                req = req.model_copy(update={
                    "teacher": COMBINED_TEACHER,
                    "combine": True,
                    "combine_with": [partner],
                })
            subjects.append(req)
        return ClassConfig(
            name=name,
            active_days=list(DEFAULT_ACTIVE_DAYS),
            periods_per_day=6,
            break_after=2,
            lunch_after=3,
            capacity=60,
            lecture_hall=f"LH-{101 + CLASS_NAMES.index(name)}",
            subjects=subjects,
        )

    def _generate_roster(self) -> Roster:
        """Pro Fach ein Lehrer für je zwei Klassen (A/B und C/D), geteilte Fächer gemeinsam."""
        pool = list(_TEACHER_POOL)
        self.rng.shuffle(pool)
        entries: list[RosterEntry] = []
        for subj_name, code, _, _ in _CURRICULUM:
            if code in _SHARED_TEACHERS:
                for cls in CLASS_NAMES:
                    entries.append(RosterEntry(
                        teacher=_SHARED_TEACHERS[code], subject=subj_name, class_name=cls
                    ))
                continue
            if code == "MENTOR":
                # Klassenmentoren: eigene Lehrkraft je Klasse
                for cls in CLASS_NAMES:
                    entries.append(RosterEntry(teacher=pool.pop(), subject=subj_name, class_name=cls))
                continue
            first, second = pool.pop(), pool.pop()
            for cls in CLASS_NAMES:
                if code == "DBMS" and cls in ("CSE-A", "CSE-B"):
                    teacher = COMBINED_TEACHER
                else:
                    teacher = first if cls in ("CSE-A", "CSE-B") else second
                entries.append(RosterEntry(teacher=teacher, subject=subj_name, class_name=cls))
        return Roster(entries=entries)
