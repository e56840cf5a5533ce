"""Datenmodell für einen Nachhilfe-Schüler (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Student(BaseModel):
    """Repräsentiert einen Schüler inkl. offener Beträge."""

    id: str
    full_name: str = Field(min_length=1)
    email: Optional[str] = None
    notes: Optional[str] = None
    amount_due: float = Field(0.0, ge=0)        # Offener Betrag
    alert_threshold: float = Field(0.0, ge=0)   # 0 = keine Warnung

    @field_validator("full_name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Der Name ist obligatorisch.")
        return v

    @property
    def billing_alert(self) -> bool:
        """True wenn der offene Betrag die Warnschwelle übersteigt."""
        return self.alert_threshold > 0 and self.amount_due > self.alert_threshold
