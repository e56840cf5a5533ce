"""KI-Assistent: Prompt-Aufbau, Antwort-Auswertung, Chat-Sitzung, HTTP-Client."""

from .prompt import AssistantError, build_payload, build_system_prompt, extract_reply
from .session import ChatSession
from .client import GeminiClient

__all__ = [
    "AssistantError",
    "build_payload",
    "build_system_prompt",
    "extract_reply",
    "ChatSession",
    "GeminiClient",
]
