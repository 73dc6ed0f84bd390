from config.schema import EngineConfig, GenerationConfig, SubjectCategory, Weekday


# Schlüsselwörter zur einmaligen Kategorisierung beim Anlegen eines Fachs.
# Reihenfolge = Priorität (erste Kategorie mit Treffer gewinnt).
SUBJECT_CATEGORY_KEYWORDS: dict[SubjectCategory, tuple[str, ...]] = {
    SubjectCategory.MENTORING: ("mentor", "mentoring"),
    SubjectCategory.FITNESS:   ("yoga", "fitness"),
    SubjectCategory.SPORTS:    ("sports",),
    SubjectCategory.LIBRARY:   ("library",),
    SubjectCategory.GAMES:     ("games",),
}

# Nur an der letzten Stunde eines Tages erlaubt
STRICT_CATEGORIES: frozenset[SubjectCategory] = frozenset({
    SubjectCategory.MENTORING,
    SubjectCategory.FITNESS,
    SubjectCategory.SPORTS,
    SubjectCategory.LIBRARY,
})

# Gruppenaktivitäten mit geteilter Aufsicht: Lehrkraft darf mehrfach belegt sein
EXEMPT_CATEGORIES: frozenset[SubjectCategory] = frozenset({
    SubjectCategory.GAMES,
})

DEFAULT_ACTIVE_DAYS: list[Weekday] = [
    Weekday.MON, Weekday.TUE, Weekday.WED,
    Weekday.THU, Weekday.FRI, Weekday.SAT,
]

# Wörter, die bei der Kürzel-Erzeugung ignoriert werden
SHORT_CODE_STOP_WORDS: frozenset[str] = frozenset({
    "and", "of", "the", "in", "for", "with", "by", "to", "from",
})


def default_engine_config() -> EngineConfig:
    """Standard-Konfiguration: 500 Versuche pro Klasse, 50 Neuläufe, kein Seed."""
    return EngineConfig(
        institution_name="Muster-Hochschule",
        generation=GenerationConfig(),
    )
