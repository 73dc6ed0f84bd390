"""Lehrkräfte-Zuordnung (Roster): wer unterrichtet welches Fach in welcher Klasse."""

from typing import Optional

from pydantic import BaseModel

from models.subject import SubjectRequirement


class RosterEntry(BaseModel):
    """Ein normalisierter Roster-Eintrag (genau eine Klasse pro Eintrag)."""

    teacher: str
    subject: str
    class_name: str


class Roster(BaseModel):
    """Geordnete Liste aller (Lehrkraft, Fach, Klasse)-Tripel."""

    entries: list[RosterEntry] = []

    def teachers(self) -> list[str]:
        """Alle Lehrkräfte in Reihenfolge des ersten Auftretens (ohne Duplikate)."""
        seen: dict[str, None] = {}
        for e in self.entries:
            name = e.teacher.strip()
            if name:
                seen.setdefault(name, None)
        return list(seen)

    def teacher_for(self, subject: str, class_name: str) -> Optional[str]:
        """Lehrkraft für ein Fach in einer Klasse (exakter Vergleich, ohne Groß-/Kleinschreibung)."""
        wanted = subject.strip().lower()
        for e in self.entries:
            if e.class_name.strip() == class_name and e.subject.strip().lower() == wanted:
                return e.teacher.strip()
        return None


def resolve_teacher(
    subject: SubjectRequirement, class_name: str, roster: Roster
) -> Optional[str]:
    """Lehrkraft eines Fachs: explizite Zuordnung vor Roster (Name, dann Kürzel).

    None bedeutet "nicht zugeordnet" – solche Fächer umgehen das Lehrer-Ledger.
    """
    if subject.teacher:
        return subject.teacher
    return (
        roster.teacher_for(subject.name, class_name)
        or roster.teacher_for(subject.code, class_name)
    )
