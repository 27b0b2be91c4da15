"""Chat transcript models."""

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from asistente.models.enums import Role


class Attachment(BaseModel):
    """Client-side file metadata. Nothing is uploaded."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex[:12])
    name: str
    size: int
    type: str


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    role: Role
    content: str
    timestamp: datetime
    attachments: tuple[Attachment, ...] = ()

    @property
    def sender(self) -> str:
        return "Yo" if self.role == Role.USER else "Asistente"
