"""Gesamtlauf-Wiederholung: erneute Generierung solange Klassen markiert sind."""

import logging
from typing import Callable, Optional

from pydantic import BaseModel

from models.school_data import PlanningData
from solver.scheduler import GenerationResult, RunControl, TimetableGenerator

logger = logging.getLogger(__name__)


class RegenerationState(BaseModel):
    """Zustand der Wiederholungsschleife (lebt nur während run())."""

    attempt: int = 0
    cap: int
    last_diagnostics: list[str] = []

    @property
    def exhausted(self) -> bool:
        return self.attempt >= self.cap


class RegenerationController:
    """Wiederholt komplette Läufe (frische Ledger, neue Vorab-Planung) bis zum Erfolg.

    `on_attempt` erhält jedes Zwischenergebnis; gibt der Callback False zurück,
    wird abgebrochen und das letzte Ergebnis geliefert.
    """

    def __init__(
        self,
        data: PlanningData,
        on_attempt: Optional[Callable[[GenerationResult], Optional[bool]]] = None,
    ) -> None:
        self.data = data
        self.on_attempt = on_attempt
        self.generator = TimetableGenerator(data)
        self.state = RegenerationState(cap=data.config.generation.max_regenerations + 1)

    def run(self) -> GenerationResult:
        run_control = RunControl(attempt=1, max_attempts=self.state.cap)
        while True:
            self.state.attempt = run_control.attempt
            result = self.generator.generate(run_control)
            self.state.last_diagnostics = list(result.diagnostics)

            if self.on_attempt is not None and self.on_attempt(result) is False:
                logger.info(f"Generierung nach Lauf {run_control.attempt} vom Aufrufer beendet")
                return result
            if not result.needs_regeneration:
                logger.info(f"Gültiger Stundenplan nach {run_control.attempt} Lauf/Läufen")
                return result
            if not self._retry_can_help(result):
                logger.warning(
                    "Markierte Klassen scheitern deterministisch (Eingabefehler) – "
                    "keine weiteren Läufe."
                )
                return result
            if not result.can_regenerate:
                logger.warning(
                    f"Maximale Anzahl Läufe ({self.state.cap}) erreicht – "
                    f"{len(result.diagnostics)} Diagnose(n) offen."
                )
                return result

            logger.info(
                f"Lauf {run_control.attempt}: "
                f"{sum(1 for c in result.classes if c.needs_regeneration)} Klasse(n) markiert "
                f"– neuer Lauf"
            )
            run_control = run_control.next()

    @staticmethod
    def _retry_can_help(result: GenerationResult) -> bool:
        """False wenn alle markierten Klassen schon an der Vorprüfung scheitern."""
        return any(c.needs_regeneration and c.attempts > 0 for c in result.classes)
