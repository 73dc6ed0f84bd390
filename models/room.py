"""Datenmodell für einen Laborraum (Pydantic v2)."""

from typing import Literal

from pydantic import BaseModel, Field

from models.subject import SubjectRequirement


class LabResource(BaseModel):
    """Repräsentiert einen physischen Laborraum."""

    id: str                                   # "LAB1"
    name: str                                 # "CS Lab 1" (eindeutig, maßgeblich für Kollisionen)
    capacity: int = Field(ge=1)               # Maximale Teilnehmerzahl
    type: Literal["lab", "classroom"] = "lab"
    allowed_subjects: list[str] = []          # Leer = für alle Laborfächer nutzbar

    @property
    def is_unrestricted(self) -> bool:
        """True wenn der Raum keine Fach-Einschränkung hat."""
        return not self.allowed_subjects

    def allows(self, subject: SubjectRequirement) -> bool:
        """Prüft ob das Fach (Name oder Kürzel) in diesem Raum stattfinden darf."""
        if self.is_unrestricted:
            return True
        return any(subject.matches(a) for a in self.allowed_subjects)
