"""Datenmodell für kombinierte Veranstaltungen (klassenübergreifend, Pydantic v2)."""

from pydantic import BaseModel

from models.timeslot import TimeSlot

GROUP_SEPARATOR = "+"


class CombinedSessionGroup(BaseModel):
    """Ein Fach, das eine Lehrkraft mehreren Klassen gleichzeitig gibt.

    Beispiel DBMS bei Dr. Rao:
    - CSE-A und CSE-B haben sich gegenseitig als Partner gewählt.
    - Beide Klassen bekommen exakt dieselben (Tag, Periode)-Slots.
    - Im Lehrer-Ledger steht pro Slot EIN gemeinsamer Eintrag.

    WICHTIG: Nur Klassen, die sich gegenseitig gewählt haben, sind Mitglieder!
    """

    subject_code: str
    subject_name: str
    teacher: str
    member_classes: list[str]         # Sortiert, mindestens 2
    periods_per_week: int

    @property
    def label(self) -> str:
        """Gemeinsames Klassen-Label, z.B. "CSE-A+CSE-B"."""
        return GROUP_SEPARATOR.join(self.member_classes)

    def includes(self, class_name: str) -> bool:
        return class_name in self.member_classes


class CombinedSession(BaseModel):
    """Eine vorab eingeplante Gruppe samt ihren festen Slots."""

    group: CombinedSessionGroup
    slots: list[TimeSlot]
