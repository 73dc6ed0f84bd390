"""Vorab-Planung kombinierter Veranstaltungen (ein Fach, eine Lehrkraft, mehrere Klassen).

Ablauf:
  1. find_combined_groups(): gegenseitige Partnerwahl je (Kürzel, Lehrkraft)
     als Graph, Zusammenhangskomponenten mit ≥2 Klassen bilden eine Gruppe.
  2. CombinedSessionPlanner.pre_schedule(): pro Gruppe gemeinsame Slots im
     gemeinsamen Raster (Schnitt der Tage, minimale Periodenzahl) suchen und
     als EINE SharedSessionBooking im Lehrer-Ledger reservieren.
"""

import logging
import re
from typing import Optional

from config.schema import GenerationConfig
from models.coupling import CombinedSession, CombinedSessionGroup
from models.roster import Roster, resolve_teacher
from models.school_class import ClassConfig
from models.timeslot import TimeSlot, sort_days
from solver.ledger import RunLedgers, SharedSessionBooking

logger = logging.getLogger(__name__)


def class_sort_key(name: str) -> tuple:
    """Sortierschlüssel: Namen mit führender Zahl zuerst (numerisch), dann alphabetisch."""
    match = re.match(r"^\d+", name)
    if match:
        return (0, int(match.group()), name.lower())
    return (1, 0, name.lower())


def find_combined_groups(
    classes: list[ClassConfig], roster: Optional[Roster] = None
) -> list[CombinedSessionGroup]:
    """Ermittelt alle kombinierten Gruppen aus den Partnerwünschen der Klassen.

    Eine Kante A–B entsteht nur, wenn beide Klassen dasselbe Fach (Kürzel) bei
    derselben Lehrkraft kombinieren wollen und sich gegenseitig nennen.
    Labor- und feste Fächer werden nie kombiniert.
    """
    roster = roster or Roster()

    # (Kürzel, Lehrkraft) → Klasse → Fach
    candidates: dict[tuple[str, str], dict[str, object]] = {}
    for cls in classes:
        for subj in cls.subjects:
            if not subj.combine or not subj.combine_with or subj.is_lab or subj.is_strict:
                continue
            teacher = resolve_teacher(subj, cls.name, roster)
            if teacher is None:
                continue
            candidates.setdefault((subj.code, teacher), {})[cls.name] = subj

    groups: list[CombinedSessionGroup] = []
    for (code, teacher), members in candidates.items():
        adjacency: dict[str, set[str]] = {name: set() for name in members}
        for name, subj in members.items():
            for partner in subj.combine_with:
                other = members.get(partner)
                if other is not None and name in other.combine_with:
                    adjacency[name].add(partner)
                    adjacency[partner].add(name)

        seen: set[str] = set()
        for start in sorted(adjacency, key=class_sort_key):
            if start in seen or not adjacency[start]:
                continue
            component, stack = set(), [start]
            while stack:
                node = stack.pop()
                if node in component:
                    continue
                component.add(node)
                stack.extend(adjacency[node] - component)
            seen |= component

            ordered = sorted(component, key=class_sort_key)
            first = members[ordered[0]]
            groups.append(CombinedSessionGroup(
                subject_code=code,
                subject_name=first.name,
                teacher=teacher,
                member_classes=ordered,
                periods_per_week=min(members[n].periods_per_week for n in ordered),
            ))
            counts = {members[n].periods_per_week for n in ordered}
            if len(counts) > 1:
                logger.warning(
                    f"Kombination {code} ({'+'.join(ordered)}): unterschiedliche Periodenzahlen "
                    f"{sorted(counts)} – gemeinsam werden {min(counts)} geplant."
                )
    return groups


class CombinedSessionPlanner:
    """Reserviert die gemeinsamen Slots aller kombinierten Gruppen eines Laufs."""

    def __init__(
        self,
        classes: list[ClassConfig],
        roster: Roster,
        config: GenerationConfig,
    ) -> None:
        self.classes = {c.name: c for c in classes}
        self.roster = roster
        self.config = config

    def pre_schedule(
        self, ledgers: RunLedgers
    ) -> tuple[list[CombinedSession], list[str]]:
        """Plant alle Gruppen vorab ein.

        Returns:
            (eingeplante Sitzungen, Diagnosen für verworfene Gruppen)
        """
        sessions: list[CombinedSession] = []
        diagnostics: list[str] = []
        # Slots, die eine Klasse bereits durch eine andere Gruppe belegt
        class_busy: dict[str, set[TimeSlot]] = {name: set() for name in self.classes}

        groups = find_combined_groups(list(self.classes.values()), self.roster)
        for group in groups:
            members = [self.classes[n] for n in group.member_classes]
            common_days = sort_days(
                set.intersection(*(set(m.active_days) for m in members))
            )
            if not common_days:
                msg = (
                    f"Kombination '{group.subject_name}' ({group.label}): "
                    f"keine gemeinsamen Unterrichtstage – wird einzeln geplant."
                )
                logger.warning(msg)
                diagnostics.append(msg)
                continue
            min_periods = min(m.periods_per_day for m in members)

            slots = self._find_slots(group, common_days, min_periods, ledgers, class_busy)
            if len(slots) < group.periods_per_week:
                msg = (
                    f"Kombination '{group.subject_name}' ({group.label}): nur "
                    f"{len(slots)} von {group.periods_per_week} gemeinsamen Slots frei – "
                    f"wird einzeln geplant."
                )
                logger.warning(msg)
                diagnostics.append(msg)
                continue

            booking = SharedSessionBooking(
                class_names=tuple(group.member_classes), subject=group.subject_code
            )
            for slot in slots:
                ledgers.teachers.assign(group.teacher, slot.day, slot.period, booking)
                for name in group.member_classes:
                    class_busy[name].add(slot)
            sessions.append(CombinedSession(group=group, slots=slots))
            logger.info(
                f"Kombination {group.subject_code} ({group.label}, {group.teacher}): "
                f"{', '.join(str(s) for s in slots)}"
            )
        return sessions, diagnostics

    def _find_slots(
        self,
        group: CombinedSessionGroup,
        days: list,
        min_periods: int,
        ledgers: RunLedgers,
        class_busy: dict[str, set[TimeSlot]],
    ) -> list[TimeSlot]:
        """Sucht Slots ohne den Ledger zu verändern (Übernahme erst bei Vollständigkeit)."""
        chosen: list[TimeSlot] = []
        for _ in range(group.periods_per_week):
            used_days = {s.day for s in chosen}
            if self.config.spread_combined_sessions:
                ordered_days = [d for d in days if d not in used_days] + [
                    d for d in days if d in used_days
                ]
            else:
                ordered_days = days
            slot = next(
                (
                    TimeSlot(day, p)
                    for day in ordered_days
                    for p in range(1, min_periods + 1)
                    if self._is_open(group, TimeSlot(day, p), chosen, ledgers, class_busy)
                ),
                None,
            )
            if slot is None:
                break
            chosen.append(slot)
        return chosen

    @staticmethod
    def _is_open(group, slot, chosen, ledgers, class_busy) -> bool:
        if slot in chosen:
            return False
        if not ledgers.teachers.is_available(group.teacher, slot.day, slot.period):
            return False
        return all(slot not in class_busy[n] for n in group.member_classes)
