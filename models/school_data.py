"""PlanningData: Vollständiger Planungsdatensatz + Machbarkeits-Check (Pydantic v2)."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from config.schema import EngineConfig
from models.coupling import CombinedSessionGroup
from models.room import LabResource
from models.roster import Roster, resolve_teacher
from models.school_class import ClassConfig
from models.subject import SubjectRequirement


class FeasibilityReport(BaseModel):
    """Ergebnis des Machbarkeits-Checks."""

    is_feasible: bool
    errors: list[str]      # Kritische Probleme (Lösung unmöglich)
    warnings: list[str]    # Hinweise (Lösung schwierig aber möglich)

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        if self.is_feasible:
            status = "[bold green]✓ LÖSBAR[/bold green]"
        else:
            status = "[bold red]✗ NICHT LÖSBAR[/bold red]"

        lines = [status]
        if self.errors:
            lines.append("\n[red bold]Fehler (kritisch):[/red bold]")
            for e in self.errors:
                lines.append(f"  [red]• {e}[/red]")
        if self.warnings:
            lines.append("\n[yellow bold]Warnungen:[/yellow bold]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w}[/yellow]")
        if not self.errors and not self.warnings:
            lines.append("[dim]Keine Probleme gefunden.[/dim]")

        console.print(Panel("\n".join(lines), title="Machbarkeits-Check", border_style="cyan"))


class PlanningData(BaseModel):
    """Vollständiger Planungsdatensatz: Klassen, Roster, Labore, Konfiguration."""

    classes: list[ClassConfig]
    roster: Roster = Field(default_factory=Roster)
    labs: list[LabResource] = []
    config: EngineConfig = Field(default_factory=EngineConfig)
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    data_version: str = "1.0"

    # ─── Zugriff ───

    def get_class(self, name: str) -> Optional[ClassConfig]:
        for cls in self.classes:
            if cls.name == name:
                return cls
        return None

    def headcount(self, cls: ClassConfig) -> int:
        """Teilnehmerzahl für Laborbuchungen (Klassenwert oder Standard)."""
        return cls.capacity or self.config.generation.default_class_capacity

    def teacher_of(self, subject: SubjectRequirement, class_name: str) -> Optional[str]:
        return resolve_teacher(subject, class_name, self.roster)

    def combined_groups(self) -> list[CombinedSessionGroup]:
        """Gegenseitige Kombinationen mit aufgelöster Lehrkraft (wie im Generator)."""
        from solver.combined import find_combined_groups

        return find_combined_groups(self.classes, self.roster)

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        total_slots = sum(c.weekly_target for c in self.classes)
        total_need = sum(c.total_required for c in self.classes)
        num_labs = sum(1 for c in self.classes for s in c.subjects if s.is_lab)
        num_combined = len(self.combined_groups())
        lines = [
            f"Einrichtung: {self.config.institution_name}",
            f"Klassen: {len(self.classes)}",
            f"Lehrkräfte (Roster): {len(self.roster.teachers())}",
            f"Wochenslots gesamt: {total_slots}",
            f"Geforderte Perioden gesamt: {total_need}",
            f"Laborfächer: {num_labs} (Laborräume: {len(self.labs)})",
            f"Kombinierte Gruppen: {num_combined}" if num_combined else "",
        ]
        return "\n".join(l for l in lines if l)

    # ─── Machbarkeits-Check ───

    def validate_feasibility(self) -> FeasibilityReport:
        """Prüft ob die Konfiguration grundsätzlich lösbar ist.

        Prüfungen:
        1. Pro Klasse: Summe der Perioden = Wochenziel
        2. Laborfächer: gerade Periodenzahl, passender Raum mit Kapazität
        3. Feste Fächer (letzte Stunde): höchstens eine pro Tag
        4. Kombinationen: Partner existiert und hat gegenseitig gewählt
        5. Jede Lehrkraft: Bedarf ≤ verfügbare Slots
        """
        errors: list[str] = []
        warnings: list[str] = []
        class_map = {c.name: c for c in self.classes}

        for cls in self.classes:
            # ── 1. Wochenziel ─────────────────────────────────────────────
            if cls.total_required != cls.weekly_target:
                errors.append(
                    f"Klasse {cls.name}: Summe der Perioden ({cls.total_required}) "
                    f"≠ Wochenziel ({cls.weekly_target} = "
                    f"{len(cls.active_days)} Tage × {cls.periods_per_day} Perioden)."
                )

            for subj in cls.subjects:
                # ── 2. Labore ─────────────────────────────────────────────
                if subj.is_lab:
                    if subj.periods_per_week % 2:
                        errors.append(
                            f"Klasse {cls.name}: Laborfach '{subj.name}' hat ungerade "
                            f"Periodenzahl ({subj.periods_per_week}) – nur Doppelblöcke möglich."
                        )
                    hosts = [lab for lab in self.labs if lab.allows(subj)]
                    if not hosts:
                        warnings.append(
                            f"Klasse {cls.name}: Kein Laborraum für '{subj.name}' freigegeben – "
                            f"Blöcke werden ohne Raum eingeplant."
                        )
                    elif all(lab.capacity < self.headcount(cls) for lab in hosts):
                        errors.append(
                            f"Klasse {cls.name}: {self.headcount(cls)} Teilnehmer, aber kein "
                            f"Laborraum für '{subj.name}' fasst so viele "
                            f"(max. {max(lab.capacity for lab in hosts)})."
                        )

                # ── 3. Feste Position ─────────────────────────────────────
                if subj.is_strict and subj.periods_per_week > len(cls.active_days):
                    errors.append(
                        f"Klasse {cls.name}: '{subj.name}' darf nur in der letzten Stunde liegen, "
                        f"braucht aber {subj.periods_per_week} Perioden bei "
                        f"{len(cls.active_days)} Tagen."
                    )

                if self.teacher_of(subj, cls.name) is None:
                    warnings.append(
                        f"Klasse {cls.name}: Keine Lehrkraft für '{subj.name}' zugeordnet."
                    )

                # ── 4. Kombinationen ──────────────────────────────────────
                if subj.combine:
                    warnings.extend(self._check_partners(cls, subj, class_map))

        # ── 5. Lehrer-Auslastung ──────────────────────────────────────────
        errors.extend(self._check_teacher_load())

        return FeasibilityReport(
            is_feasible=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    def _check_partners(
        self, cls: ClassConfig, subj: SubjectRequirement, class_map: dict[str, ClassConfig]
    ) -> list[str]:
        warnings = []
        if not subj.combine_with:
            warnings.append(
                f"Klasse {cls.name}: '{subj.name}' soll kombiniert werden, aber ohne Partnerklasse."
            )
        for partner_name in subj.combine_with:
            partner = class_map.get(partner_name)
            if partner is None:
                warnings.append(
                    f"Klasse {cls.name}: Kombinationspartner '{partner_name}' "
                    f"für '{subj.name}' existiert nicht."
                )
                continue
            other = partner.subject_by_code(subj.code)
            if (
                other is None
                or not other.combine
                or cls.name not in other.combine_with
                or self.teacher_of(other, partner.name) != self.teacher_of(subj, cls.name)
            ):
                warnings.append(
                    f"Klasse {cls.name}: Kombination '{subj.name}' mit {partner_name} "
                    f"ist nicht gegenseitig (gleiches Fach, gleiche Lehrkraft) – wird ignoriert."
                )
            elif other.periods_per_week != subj.periods_per_week:
                warnings.append(
                    f"Kombination '{subj.name}' {cls.name}/{partner_name}: unterschiedliche "
                    f"Periodenzahlen ({subj.periods_per_week} vs. {other.periods_per_week})."
                )
        return warnings

    def _check_teacher_load(self) -> list[str]:
        """Bedarf je Lehrkraft gegen die Slots der Klassen, die sie unterrichtet."""
        need: dict[str, int] = {}
        slots: dict[str, set[tuple]] = {}
        # (Klasse, Kürzel) → Perioden, die bereits über die Gruppe zählen
        shared: dict[tuple[str, str], int] = {}

        for group in self.combined_groups():
            need[group.teacher] = need.get(group.teacher, 0) + group.periods_per_week
            for member in group.member_classes:
                shared[(member, group.subject_code)] = group.periods_per_week

        for cls in self.classes:
            for subj in cls.subjects:
                teacher = self.teacher_of(subj, cls.name)
                if teacher is None or subj.is_exempt:
                    continue
                slots.setdefault(teacher, set()).update(
                    (d, p) for d in cls.active_days for p in range(1, cls.periods_per_day + 1)
                )
                own = subj.periods_per_week - shared.get((cls.name, subj.code), 0)
                need[teacher] = need.get(teacher, 0) + own

        errors = []
        for teacher, hours in need.items():
            available = len(slots[teacher])
            if hours > available:
                errors.append(
                    f"Lehrkraft {teacher}: {hours} Perioden benötigt, "
                    f"aber nur {available} Slots verfügbar."
                )
        return errors

    # ─── Persistenz ────────────────────────────────────────────────────────

    def save_json(self, path: Path) -> None:
        """Speichert den kompletten Datensatz als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        now = datetime.now(timezone.utc)
        updated = self.model_copy(update={
            "modified_at": now,
            "created_at": self.created_at or now,
        })
        with open(path, "w", encoding="utf-8") as f:
            f.write(updated.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "PlanningData":
        """Lädt einen Datensatz aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
