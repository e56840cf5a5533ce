"""Chat-Sitzung eines Schülers mit dem KI-Assistenten."""

import logging
from typing import Any, Callable

from assistant.prompt import AssistantError, build_payload, extract_reply
from config.schema import AssistantConfig
from models.chat import ChatMessage, StudentChat
from models.student import Student

logger = logging.getLogger(__name__)

# Externer Completion-Aufruf: Request-Body → Antwort-JSON
Completion = Callable[[dict[str, Any]], dict[str, Any]]


class ChatSession:
    """Hält den Verlauf eines Chats und schickt neue Nachrichten ab.

    Verwendung:
        session = ChatSession(student, chat, completion, config)
        reply = session.send("Was sollten wir nächste Woche üben?")

    Kein automatischer Retry: ein Fehler des Dienstes wird als
    AssistantError weitergereicht.
    """

    def __init__(
        self,
        student: Student,
        chat: StudentChat,
        completion: Completion,
        config: AssistantConfig,
    ) -> None:
        if chat.student_id != student.id:
            raise ValueError(
                f"Chat {chat.id} gehört nicht zu Schüler {student.id}"
            )
        self.student = student
        self.chat = chat
        self.config = config
        self._completion = completion

    @property
    def messages(self) -> list[ChatMessage]:
        return self.chat.messages

    def send(self, content: str) -> ChatMessage:
        """Hängt die Nutzer-Nachricht an, fragt den Assistenten, hängt die Antwort an."""
        content = (content or "").strip()
        if not content:
            raise ValueError("Leere Nachricht.")

        user_message = ChatMessage(role="user", content=content, chat_id=self.chat.id)
        history = [*self.chat.messages, user_message]
        self.chat = self.chat.model_copy(update={"messages": history})

        payload = build_payload(
            self.student.full_name, self.student.notes, history, self.config
        )
        try:
            response = self._completion(payload)
        except AssistantError:
            raise
        except Exception as e:
            logger.warning("Assistent nicht erreichbar: %s", e)
            raise AssistantError(f"Nachricht konnte nicht gesendet werden: {e}") from e

        reply = ChatMessage(
            role="assistant", content=extract_reply(response), chat_id=self.chat.id
        )
        self.chat = self.chat.model_copy(update={"messages": [*history, reply]})
        logger.info("Assistent antwortete (%d Zeichen)", len(reply.content))
        return reply
