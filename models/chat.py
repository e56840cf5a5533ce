"""Chat-Verlauf mit dem KI-Assistenten (ein Chat pro Schüler)."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

Role = Literal["user", "assistant", "system"]


class ChatMessage(BaseModel):
    """Eine einzelne Nachricht im Verlauf."""

    role: Role
    content: str = Field(min_length=1)
    id: Optional[str] = None
    chat_id: Optional[str] = None
    created_at: Optional[datetime] = None


class StudentChat(BaseModel):
    """Chat eines Schülers mit dem Assistenten."""

    id: str
    student_id: str
    messages: list[ChatMessage] = []
