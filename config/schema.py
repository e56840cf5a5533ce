from pydantic import BaseModel, Field, field_validator


# ─── VERFÜGBARKEIT ───

class AvailabilityConfig(BaseModel):
    """Regeln für erlaubte Notiz-Daten und -Fächer."""
    # Anzahl Tage ab heute, für die Sitzungsdaten angeboten werden
    horizon_days: int = Field(120, ge=0, le=730,
        description="Horizont für Sitzungsdaten (Tage ab heute)")
    # True: Schüler ohne hinterlegte Fächer dürfen gar keine Notiz bekommen
    strict_subjects: bool = Field(False,
        description="Leere Fachliste = nichts erlaubt (statt: keine Einschränkung)")


# ─── WOCHENRASTER ───

class LayoutConfig(BaseModel):
    """Darstellung des Wochenrasters."""
    # Höhe einer 30-Minuten-Zeile in Pixeln
    row_height_px: int = Field(48, gt=0, le=400,
        description="Pixelhöhe pro 30 Minuten")
    # Namen der Wochentage, Montag zuerst
    day_names: list[str] = Field(
        default=["Mo", "Di", "Mi", "Do", "Fr", "Sa", "So"],
        description="Namen der Wochentage (Montag zuerst)")

    @field_validator("day_names")
    @classmethod
    def _seven_days(cls, v: list[str]) -> list[str]:
        if len(v) != 7:
            raise ValueError(f"Genau 7 Tagesnamen erwartet, nicht {len(v)}")
        return v


# ─── KI-ASSISTENT ───

class AssistantConfig(BaseModel):
    """Parameter für Anfragen an den KI-Assistenten."""
    # Modellname des Completion-Dienstes
    model: str = Field("gemini-1.5-flash",
        description="Modellname des Completion-Dienstes")
    # Basis-URL der generateContent-API
    api_base_url: str = Field("https://generativelanguage.googleapis.com/v1beta",
        description="Basis-URL des Completion-Dienstes")
    # Umgebungsvariable mit dem API-Schlüssel (nie in der YAML speichern)
    api_key_env: str = Field("GEMINI_API_KEY",
        description="Name der Umgebungsvariable für den API-Schlüssel")
    timeout_s: float = Field(60.0, gt=0, le=600,
        description="Timeout pro Anfrage in Sekunden")
    # Antwortsprache
    language: str = Field("Deutsch",
        description="Sprache der Antworten")
    # Grundanweisungen (werden dem Systemprompt vorangestellt)
    instructions: list[str] = Field(
        default=[
            "Du bist ein pädagogischer Assistent.",
            "Ziel: der Lehrkraft helfen, den Fortschritt des Schülers zu verfolgen "
            "und passende Stunden vorzuschlagen.",
        ],
        description="Grundanweisungen des Systemprompts")


# ─── GESAMT-CONFIG ───

class AppConfig(BaseModel):
    """Gesamtkonfiguration des Nachhilfeplaners."""
    # Name der Lehrkraft (nur Anzeige)
    teacher_name: str = Field("", description="Name der Lehrkraft")
    availability: AvailabilityConfig = Field(default_factory=AvailabilityConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    assistant: AssistantConfig = Field(default_factory=AssistantConfig)
