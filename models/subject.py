"""Datenmodell für eine Fach-Anforderung einer Klasse (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from config.schema import SubjectCategory
from config.defaults import (
    EXEMPT_CATEGORIES,
    SHORT_CODE_STOP_WORDS,
    STRICT_CATEGORIES,
    SUBJECT_CATEGORY_KEYWORDS,
)

UNASSIGNED = "unassigned"


def classify_subject(name: str) -> SubjectCategory:
    """Ordnet einem Fachnamen einmalig eine Kategorie zu (erster Treffer gewinnt)."""
    lowered = name.lower()
    for category, keywords in SUBJECT_CATEGORY_KEYWORDS.items():
        if any(k in lowered for k in keywords):
            return category
    return SubjectCategory.REGULAR


def generate_short_code(name: str) -> str:
    """Erzeugt ein Kürzel aus dem Fachnamen.

    Ein Wort → erste 6 Buchstaben, zwei Wörter → je 3 Buchstaben,
    mehr Wörter → Initialen (max. 6). Bibliothek behält "library".
    """
    if "library" in name.lower():
        return "library"
    words = [w for w in name.split() if w and w.lower() not in SHORT_CODE_STOP_WORDS]
    if not words:
        return name.strip()[:6].upper()
    if len(words) == 1:
        return words[0][:6].upper()
    if len(words) == 2:
        return (words[0][:3] + words[1][:3]).upper()
    return "".join(w[0] for w in words[:6]).upper()


class SubjectRequirement(BaseModel):
    """Ein Fach im Stundenplan einer Klasse inkl. Wochenstunden und Lehrkraft."""

    name: str
    code: str = ""                       # Kürzel im Raster, leer = automatisch
    periods_per_week: int = Field(ge=0)
    is_lab: bool = False                 # Labor: immer Doppelstunden-Blöcke
    teacher: Optional[str] = None        # None / "unassigned" = aus Roster auflösen
    combine: bool = False                # Mit Partnerklassen gemeinsam unterrichten
    combine_with: list[str] = []         # Namen der Partnerklassen
    category: Optional[SubjectCategory] = None

    @model_validator(mode="after")
    def _fill_defaults(self):
        if not self.code.strip():
            self.code = generate_short_code(self.name)
        if self.teacher is not None:
            teacher = self.teacher.strip()
            self.teacher = None if not teacher or teacher.lower() in (UNASSIGNED, "n/a") else teacher
        if self.category is None:
            self.category = classify_subject(self.name)
        return self

    @property
    def is_strict(self) -> bool:
        """True wenn das Fach nur an der letzten Stunde eines Tages liegen darf."""
        return not self.is_lab and self.category in STRICT_CATEGORIES

    @property
    def is_exempt(self) -> bool:
        """True für Gruppenaktivitäten, bei denen die Lehrkraft mehrfach belegt sein darf."""
        return self.category in EXEMPT_CATEGORIES

    def matches(self, label: str) -> bool:
        """Vergleicht Name oder Kürzel (Groß-/Kleinschreibung egal)."""
        lowered = label.strip().lower()
        return lowered in (self.name.lower(), self.code.lower())
