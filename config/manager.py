"""Konfigurationsmanager: Laden und Speichern von Engine-Konfiguration und Planungsdaten.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import EngineConfig
from models.school_data import PlanningData

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Kollegplan - Engine-Konfiguration
# Version: 1.0
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_DATA_HEADER = f"""\
# ============================================
# Kollegplan - Planungsdaten
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "generation": (
        "Generierung",
        "Versuche pro Klasse und Anzahl kompletter Neuläufe.\n"
        "seed: feste Zahl = reproduzierbare Pläne, leer = zufällig.",
    ),
}

_DATA_SECTION_COMMENTS = {
    "classes": (
        "Klassen",
        "Summe der Fach-Perioden muss Tage × Perioden pro Tag ergeben.",
    ),
    "roster": ("Lehrkräfte-Zuordnung", None),
    "labs": (
        "Laborräume",
        "allowed_subjects leer = für alle Laborfächer nutzbar.",
    ),
    "config": ("Engine-Konfiguration", None),
}

_DATA_SUFFIXES = (".yaml", ".yml", ".json")


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "engine_config.yaml"

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> EngineConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic."""
        target = Path(path or self.DEFAULT_CONFIG)
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'kollegplan init' aus, um eine Standard-Konfiguration anzulegen."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            return EngineConfig.model_validate(dict(raw or {}))
        except ValidationError as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e

    def load_planning_data(self, path: Path) -> PlanningData:
        """Lädt Planungsdaten aus YAML oder JSON."""
        target = Path(path)
        if not target.exists():
            raise FileNotFoundError(f"Planungsdaten nicht gefunden: {target}")
        suffix = target.suffix.lower()
        if suffix not in _DATA_SUFFIXES:
            raise ValueError(
                f"Unbekanntes Dateiformat '{suffix}' (erlaubt: {', '.join(_DATA_SUFFIXES)})"
            )
        try:
            if suffix == ".json":
                return PlanningData.load_json(target)
            with open(target, "r", encoding="utf-8") as f:
                raw = yaml.load(f)
            if raw is None:
                raise ValueError(f"Planungsdaten leer: {target}")
            return PlanningData.model_validate(dict(raw))
        except ValidationError as e:
            raise ValueError(
                f"Planungsdaten ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e

    # ─── Speichern ───

    def save(self, config: EngineConfig, path: Optional[Path] = None) -> None:
        """Speichere Config als YAML mit deutschen Kommentaren."""
        target = Path(path or self.DEFAULT_CONFIG)
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(
            json.loads(config.model_dump_json()), _SECTION_COMMENTS
        )

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def save_planning_data(self, data: PlanningData, path: Path) -> None:
        """Speichert Planungsdaten; Format nach Dateiendung (.yaml/.yml/.json)."""
        target = Path(path)
        suffix = target.suffix.lower()
        if suffix not in _DATA_SUFFIXES:
            raise ValueError(
                f"Unbekanntes Dateiformat '{suffix}' (erlaubt: {', '.join(_DATA_SUFFIXES)})"
            )
        if suffix == ".json":
            data.save_json(target)
            return

        target.parent.mkdir(parents=True, exist_ok=True)
        raw = json.loads(data.model_dump_json(exclude_none=True))
        cm = self._build_commented_yaml(raw, _DATA_SECTION_COMMENTS)
        with open(target, "w", encoding="utf-8") as f:
            f.write(_DATA_HEADER + "\n")
            yaml.dump(cm, f)

    def _build_commented_yaml(
        self, raw: dict, comments: dict[str, tuple[str, Optional[str]]]
    ) -> CommentedMap:
        """Baut die YAML-Struktur mit Abschnitts-Kommentaren auf."""
        cm = CommentedMap(raw)
        for field, (label, comment) in comments.items():
            if field not in cm:
                continue
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )
        return cm
