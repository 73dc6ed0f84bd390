"""Platzierung einer einzelnen Klasse in ihr Wochenraster.

Pro Versuch laufen die Pässe in fester Reihenfolge:
  1. Kombinierte Veranstaltungen übernehmen (vorab geplante Slots)
  2. Feste Fächer (Mentoring, Sport, Bibliothek, ...) → letzte Stunde eines Tages
  3. Laborfächer → Doppelblöcke mit freiem Laborraum
  4. Reguläre Fächer → gemischt, erster passender Slot
  5. Lückenfüllung → nur Fächer unter ihrem Soll

Jeder Versuch arbeitet auf einer Kopie der Ledger. Nur ein gültiges Raster
(alle Zellen belegt, jedes Fach exakt mit Soll-Anzahl) wird übernommen.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Optional

from config.schema import GenerationConfig, Weekday
from models.coupling import CombinedSession
from models.roster import Roster, resolve_teacher
from models.schedule_grid import Cell, ScheduleGrid
from models.school_class import ClassConfig
from models.subject import SubjectRequirement
from solver.ledger import ClassBooking, LabBooking, RunLedgers

logger = logging.getLogger(__name__)


@dataclass
class PlacementOutcome:
    """Ergebnis der Platzierung einer Klasse."""

    grid: ScheduleGrid
    ledgers: RunLedgers          # Ledger nach Übernahme (bei Fallback unverändert)
    success: bool
    attempts: int
    diagnostics: list[str] = field(default_factory=list)


class ClassPlacer:
    """Füllt das Raster einer Klasse mit begrenzten, zufällig gemischten Versuchen.

    Verwendung:
        placer = ClassPlacer(cls, roster, sessions, config, rng, headcount=60)
        outcome = placer.place(ledgers)
    """

    def __init__(
        self,
        class_config: ClassConfig,
        roster: Roster,
        sessions: list[CombinedSession],
        config: GenerationConfig,
        rng: random.Random,
        headcount: int,
    ) -> None:
        self.cls = class_config
        self.config = config
        self.rng = rng
        self.headcount = headcount
        self.sessions = [s for s in sessions if s.group.includes(class_config.name)]
        self.teachers: dict[str, Optional[str]] = {
            s.code: resolve_teacher(s, class_config.name, roster) for s in class_config.subjects
        }
        self.last_period = class_config.periods_per_day

    # ─── Öffentliche API ───

    def place(self, ledgers: RunLedgers) -> PlacementOutcome:
        """Platziert die Klasse. Bei Erfolg enthalten die zurückgegebenen Ledger die Buchungen."""
        problem = self._precheck()
        if problem:
            logger.warning(problem)
            return PlacementOutcome(
                grid=self.fallback_grid(), ledgers=ledgers, success=False,
                attempts=0, diagnostics=[problem],
            )

        last_errors: list[str] = []
        for attempt in range(1, self.config.max_class_attempts + 1):
            work = ledgers.snapshot()
            grid = self._run_attempt(work)
            last_errors = self.validate(grid)
            if not last_errors:
                logger.debug(f"Klasse {self.cls.name}: gültig nach {attempt} Versuch(en)")
                return PlacementOutcome(grid=grid, ledgers=work, success=True, attempts=attempt)
            logger.debug(
                f"Klasse {self.cls.name}: Versuch {attempt} verworfen ({'; '.join(last_errors)})"
            )

        msg = (
            f"Klasse {self.cls.name}: nach {self.config.max_class_attempts} Versuchen keine "
            f"gültige Belegung ({'; '.join(last_errors)}) – Ersatzbelegung verwendet."
        )
        logger.warning(msg)
        return PlacementOutcome(
            grid=self.fallback_grid(), ledgers=ledgers, success=False,
            attempts=self.config.max_class_attempts, diagnostics=[msg],
        )

    def validate(self, grid: ScheduleGrid) -> list[str]:
        """Prüft Vollständigkeit und exakte Periodenzahl je Fach."""
        errors = []
        filled = grid.filled_count()
        if filled != self.cls.weekly_target:
            errors.append(f"{filled}/{self.cls.weekly_target} Zellen belegt")
        for subj in self.cls.subjects:
            placed = grid.count(subj.code)
            if placed != subj.periods_per_week:
                errors.append(f"{subj.code}: {placed} statt {subj.periods_per_week}")
        return errors

    def fallback_grid(self) -> ScheduleGrid:
        """Proportionale Ersatzbelegung: Fächer der Reihe nach wiederholt, ohne Prüfung."""
        grid = ScheduleGrid.empty(self.cls)
        sequence = [s for s in self.cls.subjects for _ in range(s.periods_per_week)]
        for slot, subj in zip(grid.slots(), sequence):
            cell = Cell.lab(subj.code) if subj.is_lab else Cell.subject(subj.code)
            grid.put(slot.day, slot.period, cell)
        return grid

    # ─── Vorprüfung (deterministische Fehler) ───

    def _precheck(self) -> Optional[str]:
        if self.cls.total_required != self.cls.weekly_target:
            return (
                f"Klasse {self.cls.name}: Summe der Perioden ({self.cls.total_required}) "
                f"≠ Wochenziel ({self.cls.weekly_target})."
            )
        odd_labs = [s.name for s in self.cls.subjects if s.is_lab and s.periods_per_week % 2]
        if odd_labs:
            return (
                f"Klasse {self.cls.name}: Laborfach {', '.join(odd_labs)} hat ungerade "
                f"Periodenzahl – nur Doppelblöcke möglich."
            )
        return None

    # ─── Ein Versuch ───

    def _run_attempt(self, ledgers: RunLedgers) -> ScheduleGrid:
        grid = ScheduleGrid.empty(self.cls)
        self._import_combined(grid)
        if not self._place_strict(grid, ledgers):
            return grid
        if not self._place_labs(grid, ledgers):
            return grid
        self._place_regular(grid, ledgers)
        self._fill_gaps(grid, ledgers)
        return grid

    def _import_combined(self, grid: ScheduleGrid) -> None:
        """Übernimmt die vorab reservierten Slots (Lehrkraft ist bereits gebucht)."""
        for session in self.sessions:
            for slot in session.slots:
                grid.put(slot.day, slot.period, Cell.subject(session.group.subject_code))

    def _book_teacher(
        self, ledgers: RunLedgers, subj: SubjectRequirement, day: Weekday, period: int
    ) -> bool:
        return ledgers.teachers.assign(
            self.teachers[subj.code], day, period,
            ClassBooking(self.cls.name, subj.code), exempt=subj.is_exempt,
        )

    def _teacher_free(
        self, ledgers: RunLedgers, subj: SubjectRequirement, day: Weekday, period: int
    ) -> bool:
        if subj.is_exempt:
            return True
        return ledgers.teachers.is_available(self.teachers[subj.code], day, period)

    # ─── Pass 2: feste Fächer ───

    def _place_strict(self, grid: ScheduleGrid, ledgers: RunLedgers) -> bool:
        for subj in self.cls.subjects:
            if not subj.is_strict:
                continue
            for _ in range(subj.periods_per_week - grid.count(subj.code)):
                days = list(self.cls.active_days)
                self.rng.shuffle(days)
                for day in days:
                    if grid.is_free(day, self.last_period) and self._teacher_free(
                        ledgers, subj, day, self.last_period
                    ):
                        self._book_teacher(ledgers, subj, day, self.last_period)
                        grid.put(day, self.last_period, Cell.subject(subj.code))
                        break
                else:
                    logger.debug(f"Klasse {self.cls.name}: {subj.code} ohne freie letzte Stunde")
                    return False
        return True

    # ─── Pass 3: Labore ───

    def lab_starts(self, day: Weekday) -> list[int]:
        """Zulässige Startperioden eines Laborblocks an einem Tag."""
        lunch = self.cls.lunch_after
        starts = [s for s in range(1, lunch) if s + 1 < lunch]
        after = self.cls.periods_per_day - 1
        if after > lunch:
            starts.append(after)
        if day == Weekday.MON:
            starts = [s for s in starts if s != 1]
        return starts

    def _place_labs(self, grid: ScheduleGrid, ledgers: RunLedgers) -> bool:
        for subj in self.cls.subjects:
            if not subj.is_lab:
                continue
            needs_room = ledgers.labs.has_resource_for(subj)
            for _ in range((subj.periods_per_week - grid.count(subj.code)) // 2):
                candidates = [
                    (day, start) for day in self.cls.active_days for start in self.lab_starts(day)
                ]
                self.rng.shuffle(candidates)
                # Tage ohne Block dieses Fachs zuerst
                candidates.sort(key=lambda c: grid.count_on_day(subj.code, c[0]) > 0)
                if not any(
                    self._try_lab_block(grid, ledgers, subj, day, start, needs_room)
                    for day, start in candidates
                ):
                    logger.debug(f"Klasse {self.cls.name}: kein Laborblock für {subj.code}")
                    return False
        return True

    def _try_lab_block(
        self,
        grid: ScheduleGrid,
        ledgers: RunLedgers,
        subj: SubjectRequirement,
        day: Weekday,
        start: int,
        needs_room: bool,
    ) -> bool:
        periods = (start, start + 1)
        if not all(grid.is_free(day, p) for p in periods):
            return False
        if not all(self._teacher_free(ledgers, subj, day, p) for p in periods):
            return False
        lab_name = None
        if needs_room:
            resource = ledgers.labs.find_free_resource_for(
                subj, day, start, start + 1, self.headcount
            )
            if resource is None:
                return False
            lab_name = resource.name
            booking = LabBooking(self.cls.name, subj.code, self.headcount)
            for p in periods:
                ledgers.labs.assign(lab_name, day, p, booking)
        for p in periods:
            self._book_teacher(ledgers, subj, day, p)
            grid.put(day, p, Cell.lab(subj.code, lab_name))
        return True

    # ─── Pass 4: reguläre Fächer ───

    def _place_regular(self, grid: ScheduleGrid, ledgers: RunLedgers) -> None:
        units = [
            subj
            for subj in self.cls.subjects
            if not subj.is_lab and not subj.is_strict
            for _ in range(max(0, subj.periods_per_week - grid.count(subj.code)))
        ]
        self.rng.shuffle(units)
        for subj in units:
            slot = self._find_regular_slot(grid, ledgers, subj, allow_last=False)
            if slot is None:
                slot = self._find_regular_slot(grid, ledgers, subj, allow_last=True)
            if slot is None:
                continue
            day, period = slot
            self._book_teacher(ledgers, subj, day, period)
            grid.put(day, period, Cell.subject(subj.code))

    def _find_regular_slot(
        self,
        grid: ScheduleGrid,
        ledgers: RunLedgers,
        subj: SubjectRequirement,
        allow_last: bool,
    ) -> Optional[tuple[Weekday, int]]:
        if allow_last and any(
            grid.is_free(s.day, s.period) for s in grid.slots() if s.period != self.last_period
        ):
            # Letzte Stunde nur, wenn sonst nirgends mehr Platz ist
            return None
        for day in self.cls.active_days:
            for period in range(1, self.cls.periods_per_day + 1):
                if period == self.last_period and not allow_last:
                    continue
                if not grid.is_free(day, period):
                    continue
                if not self._same_day_ok(grid, subj, day, period):
                    continue
                if not self._teacher_free(ledgers, subj, day, period):
                    continue
                return day, period
        return None

    def _same_day_ok(
        self, grid: ScheduleGrid, subj: SubjectRequirement, day: Weekday, period: int
    ) -> bool:
        """≤5 Perioden/Woche: max. 1 pro Tag. >5: max. 2, dann beidseits der Mittagspause."""
        existing = grid.periods_of(subj.code, day)
        if not existing:
            return True
        if subj.periods_per_week <= 5 or len(existing) >= 2:
            return False
        return self.cls.is_before_lunch(existing[0]) != self.cls.is_before_lunch(period)

    # ─── Pass 5: Lückenfüllung ───

    def _fill_gaps(self, grid: ScheduleGrid, ledgers: RunLedgers) -> None:
        """Füllt leere Zellen nur mit Fächern, die ihr Soll noch nicht erreicht haben."""
        by_need = sorted(
            (s for s in self.cls.subjects if not s.is_lab),
            key=lambda s: s.periods_per_week,
            reverse=True,
        )
        for slot in grid.empty_slots():
            for subj in by_need:
                if grid.count(subj.code) >= subj.periods_per_week:
                    continue
                if subj.is_strict and slot.period != self.last_period:
                    continue
                if not self._teacher_free(ledgers, subj, slot.day, slot.period):
                    continue
                self._book_teacher(ledgers, subj, slot.day, slot.period)
                grid.put(slot.day, slot.period, Cell.subject(subj.code))
                break
