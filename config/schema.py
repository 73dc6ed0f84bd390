from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum


class SubjectCategory(str, Enum):
    """Geschlossene Fach-Kategorien (einmalig beim Anlegen zugeordnet)."""
    REGULAR = "regular"
    MENTORING = "mentoring"
    FITNESS = "fitness"
    SPORTS = "sports"
    LIBRARY = "library"
    GAMES = "games"


class Weekday(str, Enum):
    """Wochentage in fester Wochenreihenfolge."""
    MON = "Mon"
    TUE = "Tue"
    WED = "Wed"
    THU = "Thu"
    FRI = "Fri"
    SAT = "Sat"
    SUN = "Sun"

    @property
    def order(self) -> int:
        """Position in der Woche (0=Mon .. 6=Sun)."""
        return list(Weekday).index(self)


# ─── GENERIERUNG ───

class GenerationConfig(BaseModel):
    """Grenzen und Zufallssteuerung für einen Generierungslauf."""
    # Lokale Wiederholungen pro Klasse, bevor der Fallback greift
    max_class_attempts: int = Field(500, ge=1, le=5000,
        description="Versuche pro Klasse vor dem Fallback")
    # Obergrenze für komplette Neuläufe (vom Aufrufer hochgezählt)
    max_regenerations: int = Field(50, ge=0, le=500,
        description="Maximale Anzahl kompletter Neuläufe")
    # Fester Seed für reproduzierbare Pläne (None = zufällig)
    seed: Optional[int] = Field(None,
        description="Zufalls-Seed (leer = nicht deterministisch)")
    # Teilnehmerzahl, wenn eine Klasse keine eigene Kapazität angibt
    default_class_capacity: int = Field(60, ge=1,
        description="Standard-Teilnehmerzahl für Labor-Kapazitätsprüfung")
    # Gemeinsame Stunden zuerst auf verschiedene Tage verteilen
    spread_combined_sessions: bool = Field(True,
        description="Kombinierte Stunden über die Woche verteilen")


# ─── GESAMT-CONFIG ───

class EngineConfig(BaseModel):
    """Gesamtkonfiguration der Stundenplan-Engine."""
    # Name der Einrichtung (nur für Ausgaben)
    institution_name: str = Field("Muster-Hochschule",
        description="Name der Einrichtung")
    # Wiederholungs- und Zufallsparameter
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
