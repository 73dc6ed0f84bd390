"""Datenmodell für eine Klasse mit ihrem Periodenraster (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from config.schema import Weekday
from models.subject import SubjectRequirement


class ClassConfig(BaseModel):
    """Konfiguration einer Klasse (z.B. "CSE-A"): Tage, Raster, Fächer."""

    name: str
    active_days: list[Weekday]              # Geordnete Unterrichtstage
    periods_per_day: int = Field(ge=1, le=12)
    lunch_after: int = Field(ge=0)          # Mittagspause nach dieser Periode
    break_after: int = Field(0, ge=0)       # Kurze Pause nach dieser Periode (0 = keine)
    capacity: Optional[int] = Field(None, ge=1)  # Teilnehmerzahl für Labore
    lecture_hall: Optional[str] = None      # z.B. "LH-101"
    subjects: list[SubjectRequirement] = []

    @model_validator(mode="after")
    def _check_grid(self):
        if not self.active_days:
            raise ValueError(f"Klasse {self.name}: keine Unterrichtstage angegeben.")
        if len(set(self.active_days)) != len(self.active_days):
            raise ValueError(f"Klasse {self.name}: Unterrichtstage doppelt angegeben.")
        if self.lunch_after > self.periods_per_day:
            raise ValueError(
                f"Klasse {self.name}: Mittagspause nach P{self.lunch_after} "
                f"liegt außerhalb des Tages ({self.periods_per_day} Perioden)."
            )
        if self.break_after > self.periods_per_day:
            raise ValueError(
                f"Klasse {self.name}: Pause nach P{self.break_after} "
                f"liegt außerhalb des Tages ({self.periods_per_day} Perioden)."
            )
        codes = [s.code for s in self.subjects]
        duplicates = sorted({c for c in codes if codes.count(c) > 1})
        if duplicates:
            raise ValueError(
                f"Klasse {self.name}: Fach-Kürzel mehrfach vergeben: {', '.join(duplicates)}"
            )
        return self

    @property
    def weekly_target(self) -> int:
        """Anzahl belegbarer Zellen pro Woche (Tage × Perioden)."""
        return len(self.active_days) * self.periods_per_day

    @property
    def total_required(self) -> int:
        """Summe aller geforderten Wochenperioden."""
        return sum(s.periods_per_week for s in self.subjects)

    def subject_by_code(self, code: str) -> Optional[SubjectRequirement]:
        """Fach anhand des Rasterkürzels (oder Namens) finden."""
        for s in self.subjects:
            if s.code == code:
                return s
        for s in self.subjects:
            if s.matches(code):
                return s
        return None

    def is_before_lunch(self, period: int) -> bool:
        """True wenn die Periode vor (oder direkt an) der Mittagspause liegt."""
        return period <= self.lunch_after
