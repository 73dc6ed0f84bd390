"""Belegungs-Ledger für Lehrkräfte und Laborräume während eines Generierungslaufs.

Beide Ledger gehören exklusiv einem Lauf (`RunLedgers`). Ein Platzierungsversuch
arbeitet auf einer Kopie (`snapshot()`) und ersetzt bei Erfolg das Original –
ein gescheiterter Versuch wird einfach verworfen.
"""

import copy
from dataclasses import dataclass, field
from typing import Optional, Union

from config.schema import Weekday
from models.room import LabResource
from models.subject import SubjectRequirement
from models.coupling import GROUP_SEPARATOR


# ─── Buchungen ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ClassBooking:
    """Eine Lehrkraft unterrichtet eine einzelne Klasse."""

    class_name: str
    subject: str

    @property
    def class_names(self) -> tuple[str, ...]:
        return (self.class_name,)


@dataclass(frozen=True)
class SharedSessionBooking:
    """Eine kombinierte Veranstaltung: ein Eintrag für alle Mitgliedsklassen."""

    class_names: tuple[str, ...]
    subject: str

    @property
    def label(self) -> str:
        return GROUP_SEPARATOR.join(self.class_names)


TeacherBooking = Union[ClassBooking, SharedSessionBooking]


@dataclass(frozen=True)
class LabBooking:
    class_name: str
    subject: str
    headcount: int


# ─── Lehrer-Ledger ────────────────────────────────────────────────────────────

class TeacherLedger:
    """Lehrkraft → (Tag, Periode) → Liste von Buchungen.

    Mehr als eine Buchung pro Slot nur für befreite Fächer (Gruppenaktivitäten).
    Kombinierte Veranstaltungen belegen den Slot mit EINER SharedSessionBooking.
    Fächer ohne Lehrkraft (None) werden nicht geführt.
    """

    def __init__(self) -> None:
        self._slots: dict[str, dict[tuple[Weekday, int], list[TeacherBooking]]] = {}

    def is_available(self, teacher: Optional[str], day: Weekday, period: int) -> bool:
        if teacher is None:
            return True
        return not self._slots.get(teacher, {}).get((day, period))

    def assign(
        self,
        teacher: Optional[str],
        day: Weekday,
        period: int,
        booking: TeacherBooking,
        exempt: bool = False,
    ) -> bool:
        """Bucht den Slot. False (ohne Änderung) wenn die Lehrkraft schon belegt ist."""
        if teacher is None:
            return True
        entries = self._slots.setdefault(teacher, {}).setdefault((day, period), [])
        if entries and not exempt:
            return False
        entries.append(booking)
        return True

    def bookings(self, teacher: str, day: Weekday, period: int) -> list[TeacherBooking]:
        return list(self._slots.get(teacher, {}).get((day, period), []))

    def load(self, teacher: str) -> int:
        """Anzahl belegter Slots einer Lehrkraft."""
        return sum(1 for entries in self._slots.get(teacher, {}).values() if entries)


# ─── Labor-Ledger ─────────────────────────────────────────────────────────────

class LabLedger:
    """Laborraum-Name → (Tag, Periode) → Buchung. Höchstens ein Belegter pro Slot."""

    def __init__(self, resources: list[LabResource]) -> None:
        self.resources = list(resources)
        self._by_name = {r.name: r for r in self.resources}
        self._slots: dict[str, dict[tuple[Weekday, int], LabBooking]] = {
            r.name: {} for r in self.resources
        }

    def is_available(self, resource_name: str, day: Weekday, period: int) -> bool:
        return (day, period) not in self._slots.get(resource_name, {})

    def assign(self, resource_name: str, day: Weekday, period: int, booking: LabBooking) -> bool:
        """Bucht den Raum. False bei unbekanntem Raum, Belegung oder Überkapazität."""
        resource = self._by_name.get(resource_name)
        if resource is None or booking.headcount > resource.capacity:
            return False
        if not self.is_available(resource_name, day, period):
            return False
        self._slots[resource_name][(day, period)] = booking
        return True

    def has_resource_for(self, subject: SubjectRequirement) -> bool:
        """True wenn irgendein Raum das Fach zulässt (unabhängig von Belegung)."""
        return any(r.allows(subject) for r in self.resources)

    def find_free_resource_for(
        self,
        subject: SubjectRequirement,
        day: Weekday,
        period_1: int,
        period_2: int,
        headcount: int = 0,
    ) -> Optional[LabResource]:
        """Erster Raum (Listenreihenfolge), der das Fach zulässt und zu beiden Perioden frei ist."""
        for resource in self.resources:
            if not resource.allows(subject) or resource.capacity < headcount:
                continue
            if self.is_available(resource.name, day, period_1) and self.is_available(
                resource.name, day, period_2
            ):
                return resource
        return None


# ─── Lauf-Zustand ─────────────────────────────────────────────────────────────

@dataclass
class RunLedgers:
    """Alle gemeinsam genutzten Ledger eines Generierungslaufs."""

    teachers: TeacherLedger = field(default_factory=TeacherLedger)
    labs: LabLedger = field(default_factory=lambda: LabLedger([]))

    @classmethod
    def fresh(cls, resources: list[LabResource]) -> "RunLedgers":
        return cls(teachers=TeacherLedger(), labs=LabLedger(resources))

    def snapshot(self) -> "RunLedgers":
        """Unabhängige Kopie für einen Platzierungsversuch."""
        return copy.deepcopy(self)
