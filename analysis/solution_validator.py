"""Post-Generierungs-Validierung der fertigen Stundenpläne.

Prüft das Ergebnis allein anhand der Klassenraster als Sicherheitsnetz
unabhängig vom Generator (die Ledger eines Laufs werden nicht gespeichert).
"""

from collections import defaultdict
from typing import Literal

from pydantic import BaseModel

from config.schema import Weekday
from models.roster import resolve_teacher
from models.schedule_grid import CellKind
from models.school_data import PlanningData
from solver.scheduler import GenerationResult


class ValidationViolation(BaseModel):
    """Eine einzelne Constraint-Verletzung."""

    severity: Literal["error", "warning"]
    constraint: str      # z.B. "teacher_double_booking"
    description: str
    entity: str          # Klasse / Lehrkraft / Laborraum


class ValidationReport(BaseModel):
    """Ergebnis der Post-Generierungs-Validierung."""

    violations: list[ValidationViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    def counts_by_constraint(self) -> dict[str, int]:
        counts: dict[str, int] = defaultdict(int)
        for v in self.violations:
            counts[v.constraint] += 1
        return dict(counts)

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        errors = [v for v in self.violations if v.severity == "error"]
        warnings = [v for v in self.violations if v.severity == "warning"]

        status = (
            "[bold green]✓ VALIDE[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERLETZUNGEN GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(errors)} | Warnungen: {len(warnings)}"]
        for constraint, count in sorted(self.counts_by_constraint().items()):
            lines.append(f"  {constraint}: {count}")
        console.print(Panel("\n".join(lines), title="Plan-Validierung", border_style="cyan"))

        if not self.violations:
            console.print("[dim]Keine Verletzungen gefunden.[/dim]")
            return

        table = Table(title="Verletzungen", box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Regel", width=24)
        table.add_column("Klasse / Ressource", width=18)
        table.add_column("Beschreibung")

        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.constraint,
                v.entity,
                v.description,
            )
        console.print(table)


class SolutionValidator:
    """Prüft ein GenerationResult auf Verletzungen der Platzierungsregeln."""

    def validate(self, result: GenerationResult, data: PlanningData) -> ValidationReport:
        """Führt alle Validierungschecks durch und gibt einen ValidationReport zurück."""
        violations: list[ValidationViolation] = []

        violations.extend(self._check_subject_counts(result))
        violations.extend(self._check_no_empty_cells(result))
        violations.extend(self._check_teacher_double_booking(result, data))
        violations.extend(self._check_lab_double_booking(result))
        violations.extend(self._check_lab_blocks(result))
        violations.extend(self._check_strict_positions(result))
        violations.extend(self._check_combined_identity(result))

        has_errors = any(v.severity == "error" for v in violations)
        return ValidationReport(violations=violations, is_valid=not has_errors)

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _check_subject_counts(self, result: GenerationResult) -> list[ValidationViolation]:
        """Jedes Fach exakt mit seiner Soll-Anzahl."""
        violations = []
        for grid in result.class_grids():
            for subj in grid.class_config.subjects:
                placed = grid.count(subj.code)
                if placed != subj.periods_per_week:
                    violations.append(ValidationViolation(
                        severity="error",
                        constraint="subject_count",
                        entity=grid.name,
                        description=(
                            f"{subj.code}: {placed} Perioden platziert, "
                            f"{subj.periods_per_week} gefordert."
                        ),
                    ))
        return violations

    def _check_no_empty_cells(self, result: GenerationResult) -> list[ValidationViolation]:
        violations = []
        for grid in result.class_grids():
            empty = grid.empty_slots()
            if empty:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="empty_cell",
                    entity=grid.name,
                    description=f"{len(empty)} freie Zelle(n): {', '.join(str(s) for s in empty[:6])}"
                    f"{' ...' if len(empty) > 6 else ''}",
                ))
        return violations

    def _check_teacher_double_booking(
        self, result: GenerationResult, data: PlanningData
    ) -> list[ValidationViolation]:
        """Keine Lehrkraft zur selben Zeit in zwei Klassen.

        Kombinierte Veranstaltungen zählen einmal, befreite Fächer gar nicht.
        """
        shared: dict[tuple, str] = {}
        for session in result.combined_sessions:
            for slot in session.slots:
                for member in session.group.member_classes:
                    shared[(member, slot.day, slot.period, session.group.subject_code)] = (
                        session.group.label
                    )

        seen: dict[tuple, set[str]] = defaultdict(set)
        for grid in result.class_grids():
            for slot in grid.slots():
                cell = grid.get(slot.day, slot.period)
                if cell.is_empty:
                    continue
                subj = grid.class_config.subject_by_code(cell.code)
                if subj is None or subj.is_exempt:
                    continue
                teacher = resolve_teacher(subj, grid.name, data.roster)
                if teacher is None:
                    continue
                label = shared.get((grid.name, slot.day, slot.period, cell.code), grid.name)
                seen[(teacher, slot.day, slot.period)].add(label)

        violations = []
        for (teacher, day, period), labels in seen.items():
            if len(labels) > 1:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="teacher_double_booking",
                    entity=teacher,
                    description=f"{day.value} P{period}: gleichzeitig in {', '.join(sorted(labels))}",
                ))
        return violations

    def _check_lab_double_booking(self, result: GenerationResult) -> list[ValidationViolation]:
        """Ein Laborraum (nach Name) höchstens einmal pro Slot."""
        seen: dict[tuple, list[str]] = defaultdict(list)
        for grid in result.class_grids():
            for slot in grid.slots():
                cell = grid.get(slot.day, slot.period)
                if cell.kind == CellKind.LAB and cell.lab_name:
                    seen[(cell.lab_name, slot.day, slot.period)].append(grid.name)

        violations = []
        for (lab, day, period), classes in seen.items():
            if len(classes) > 1:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="lab_double_booking",
                    entity=lab,
                    description=f"{day.value} P{period}: belegt von {', '.join(classes)}",
                ))
        return violations

    def _check_lab_blocks(self, result: GenerationResult) -> list[ValidationViolation]:
        """Laborfächer nur als Doppelblöcke, nicht über die Mittagspause, nie Mo P1."""
        violations = []
        for grid in result.class_grids():
            cfg = grid.class_config
            for subj in cfg.subjects:
                if not subj.is_lab:
                    continue
                for day in grid.days:
                    periods = grid.periods_of(subj.code, day)
                    problem = None
                    if len(periods) % 2:
                        problem = "ungerade Anzahl Perioden"
                    for start, end in zip(periods[::2], periods[1::2]):
                        if end != start + 1:
                            problem = f"P{start}/P{end} nicht aufeinanderfolgend"
                        elif cfg.is_before_lunch(start) != cfg.is_before_lunch(end):
                            problem = f"Block P{start}-P{end} über der Mittagspause"
                        elif day == Weekday.MON and start == 1:
                            problem = "Block beginnt Montag P1"
                    if problem:
                        violations.append(ValidationViolation(
                            severity="error",
                            constraint="lab_block",
                            entity=grid.name,
                            description=f"{subj.code} am {day.value}: {problem}",
                        ))
        return violations

    def _check_strict_positions(self, result: GenerationResult) -> list[ValidationViolation]:
        """Feste Fächer nur in der letzten Stunde."""
        violations = []
        for grid in result.class_grids():
            strict = {s.code for s in grid.class_config.subjects if s.is_strict}
            for slot in grid.slots():
                cell = grid.get(slot.day, slot.period)
                if cell.code in strict and slot.period != grid.periods_per_day:
                    violations.append(ValidationViolation(
                        severity="error",
                        constraint="strict_position",
                        entity=grid.name,
                        description=f"{cell.code} in {slot} statt letzter Stunde",
                    ))
        return violations

    def _check_combined_identity(self, result: GenerationResult) -> list[ValidationViolation]:
        """Alle Mitglieder einer Kombination haben das Fach in denselben Slots."""
        violations = []
        for session in result.combined_sessions:
            code = session.group.subject_code
            for member in session.group.member_classes:
                timetable = result.get_class(member)
                if timetable is None:
                    continue
                grid = timetable.grid
                missing = [
                    s for s in session.slots
                    if s.day not in grid.cells
                    or s.period > grid.periods_per_day
                    or grid.get(s.day, s.period).code != code
                ]
                if missing:
                    violations.append(ValidationViolation(
                        severity="error",
                        constraint="combined_session",
                        entity=member,
                        description=(
                            f"{code} ({session.group.label}) fehlt in "
                            f"{', '.join(str(s) for s in missing)}"
                        ),
                    ))
        return violations
