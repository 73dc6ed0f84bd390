"""Datenmodell für einen Zeitslot im Wochenraster."""

from dataclasses import dataclass

from config.schema import Weekday


@dataclass(frozen=True)
class TimeSlot:
    """Repräsentiert einen einzelnen Unterrichtszeitslot im Wochenraster.

    Kombination aus Wochentag und Stunde (Periode).
    Immutable (frozen=True) damit es als Dict-Key / Set-Element nutzbar ist.
    """

    # Wochentag (Weekday.MON .. Weekday.SUN)
    day: Weekday
    # Periode (1-basiert, z.B. 1 = 1. Stunde)
    period: int

    def __repr__(self) -> str:
        return f"TimeSlot({self.day.value}, P{self.period})"

    def __str__(self) -> str:
        return f"{self.day.value} P{self.period}"


def sort_days(days) -> list[Weekday]:
    """Sortiert Wochentage in Wochenreihenfolge (Duplikate entfernt)."""
    return sorted({Weekday(d) for d in days}, key=lambda d: d.order)
