"""Aufbereitung von Anfragen an den KI-Assistenten und Auswertung der Antwort.

Hier wird nur der Request-Body gebaut und die Antwort ausgelesen; der
HTTP-Aufruf liegt in assistant.client.
"""

from typing import Any, Optional, Sequence

from config.schema import AssistantConfig
from models.chat import ChatMessage


class AssistantError(RuntimeError):
    """Fehler beim Aufruf oder bei der Antwort des Assistenten."""


def build_system_prompt(
    student_name: Optional[str],
    student_notes: Optional[str],
    config: AssistantConfig,
) -> str:
    """Systemanweisung inkl. Schülername und Notizen."""
    parts = list(config.instructions)
    parts.append(f"Antworte immer auf {config.language}, klar und strukturiert.")
    parts.append(f"Schüler: {student_name or 'unbekannt'}.")
    if student_notes and student_notes.strip():
        parts.append(f"Notizen: {student_notes.strip()}.")
    return " ".join(p for p in parts if p)


def build_payload(
    student_name: Optional[str],
    student_notes: Optional[str],
    messages: Sequence[ChatMessage],
    config: AssistantConfig,
) -> dict[str, Any]:
    """Request-Body für den Completion-Dienst.

    Der Systemprompt wird als erste Nutzer-Nachricht gesendet; "assistant"
    wird auf die Rolle "model" abgebildet, alles andere auf "user".
    """
    contents = [{
        "role": "user",
        "parts": [{"text": build_system_prompt(student_name, student_notes, config)}],
    }]
    for message in messages:
        contents.append({
            "role": "model" if message.role == "assistant" else "user",
            "parts": [{"text": message.content}],
        })
    return {"model": config.model, "contents": contents}


def extract_reply(response: dict[str, Any]) -> str:
    """Liest den Antworttext aus; Fehler oder leere Antwort → AssistantError."""
    if not isinstance(response, dict):
        raise AssistantError("Ungültige Antwort des Assistenten.")
    if response.get("error"):
        raise AssistantError(str(response["error"]))

    text = response.get("reply")
    if text is None:
        try:
            text = response["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            text = None
    reply = (text or "").strip()
    if not reply:
        raise AssistantError("Leere Antwort des Assistenten.")
    return reply
