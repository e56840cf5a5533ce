from config.schema import AppConfig, AssistantConfig, AvailabilityConfig, LayoutConfig

# Beispielfächer für Demo-Daten und Vorschläge
DEFAULT_SUBJECTS = [
    "Mathematik",
    "Deutsch",
    "Englisch",
    "Französisch",
    "Physik",
    "Chemie",
]


def default_app_config(teacher_name: str = "") -> AppConfig:
    """Standard-Konfiguration: 120 Tage Horizont, 48px pro halbe Stunde."""
    return AppConfig(
        teacher_name=teacher_name,
        availability=AvailabilityConfig(),
        layout=LayoutConfig(),
        assistant=AssistantConfig(),
    )
