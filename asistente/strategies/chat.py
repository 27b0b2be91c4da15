"""AI chat strategy: canned assistant over an append-only transcript."""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from pathlib import Path

from asistente.exceptions import InvalidTransitionError, OperationPendingError
from asistente.models.chat import Attachment, ChatMessage
from asistente.models.enums import MethodId, Role
from asistente.models.records import FilingDraft
from asistente.progress import conversation_progress
from asistente.reports.transcript import TranscriptGenerator
from asistente.strategies import responses
from asistente.strategies.base import AcquisitionStrategy

logger = logging.getLogger(__name__)


class ChatStrategy(AcquisitionStrategy):
    """Question-and-answer chat with a rule-based assistant.

    Replies arrive ``settings.chat_reply_delay`` seconds after a send. Only
    one reply may be pending; sending again before it lands raises
    `OperationPendingError`. A "done" phrase in the user text offers
    completion, which `complete()` then accepts.
    """

    method = MethodId.AI

    def __init__(self, *args, clock: Callable[[], datetime] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.clock = clock or datetime.now
        self.messages: list[ChatMessage] = [
            ChatMessage(
                id=1,
                role=Role.ASSISTANT,
                content=responses.greeting(self.form),
                timestamp=self.clock() - timedelta(minutes=5),
            )
        ]
        self.attachments: list[Attachment] = []
        self.completion_offered = False

    @property
    def suggested_questions(self) -> tuple[str, ...]:
        return responses.SUGGESTED_QUESTIONS[self.form_type]

    @property
    def show_suggestions(self) -> bool:
        """Suggestions are only offered before the first user message."""
        return len(self.messages) == 1

    @property
    def progress(self) -> float:
        if self.completed:
            return 100.0
        return conversation_progress(len(self.messages))

    # --- Attachments ---

    def add_attachments(self, files: Iterable[tuple[str, int, str]]) -> list[Attachment]:
        """Queue ``(name, size, mime_type)`` files for the next message."""
        added = [Attachment(name=name, size=size, type=mime) for name, size, mime in files]
        if not added:
            return added
        self.attachments.extend(added)
        if len(added) > 1:
            self.notifier.success("Archivos añadidos", f"{len(added)} archivos preparados para enviar.")
        else:
            self.notifier.success("Archivo añadido", f"{added[0].name} preparado para enviar.")
        return added

    def add_attachment(self, name: str, size: int, mime_type: str) -> Attachment:
        return self.add_attachments([(name, size, mime_type)])[0]

    def remove_attachment(self, attachment_id: str) -> None:
        self.attachments = [a for a in self.attachments if a.id != attachment_id]

    # --- Messaging ---

    def send_message(self, text: str = "", attachments: Iterable[Attachment] | None = None) -> ChatMessage | None:
        """Append a user message and schedule the assistant reply.

        Uses the queued attachments when *attachments* is None. Returns None
        without doing anything when there is neither text nor attachments.
        """
        self._ensure_live("send a message")
        files = tuple(self.attachments if attachments is None else attachments)
        if not text.strip() and not files:
            return None
        if self.busy:
            raise OperationPendingError("send a message")

        message = ChatMessage(
            id=len(self.messages) + 1,
            role=Role.USER,
            content=text,
            timestamp=self.clock(),
            attachments=files,
        )
        self.messages.append(message)
        self.attachments = []
        logger.info("User message #%d (%d attachment(s))", message.id, len(files))
        self.timers.call_later(self.settings.chat_reply_delay, lambda: self._reply(text))
        return message

    def _reply(self, text: str) -> None:
        reply = ChatMessage(
            id=len(self.messages) + 1,
            role=Role.ASSISTANT,
            content=responses.respond(text, self.form),
            timestamp=self.clock(),
        )
        self.messages.append(reply)
        logger.debug("Assistant reply #%d", reply.id)
        if responses.wants_to_finish(text):
            self.completion_offered = True
            logger.info("Chat completion offered")

    def complete(self) -> None:
        """Accept the offered completion: progress 100 and ``on_complete``."""
        self._ensure_live("complete the chat")
        if self.completed:
            raise InvalidTransitionError("complete the chat", "completed")
        if not self.completion_offered:
            raise InvalidTransitionError("complete the chat", "in conversation")
        self.notifier.success("Asistente completado", "La información ha sido procesada correctamente.")
        self._complete()

    def cancel(self) -> None:
        self._cancel()

    # --- Output ---

    def export_transcript(self, directory: Path) -> Path:
        path = TranscriptGenerator().write(self.messages, self.form, directory, self.clock().date())
        self.notifier.success(
            "Conversación guardada",
            "El historial de chat ha sido guardado como archivo de texto.",
        )
        return path

    def draft(self) -> FilingDraft:
        notes = [m.content for m in self.messages if m.role == Role.USER and m.content.strip()]
        return FilingDraft(form_type=self.form_type, source=self.method, notes=notes)
