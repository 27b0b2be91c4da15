"""Tests for the chat strategy."""

from datetime import datetime

import pytest

from asistente.exceptions import InvalidTransitionError, OperationPendingError
from asistente.models.enums import Role
from asistente.strategies import ChatStrategy


@pytest.fixture
def chat(make_strategy, fixed_clock):
    return make_strategy(ChatStrategy, clock=fixed_clock)


class TestGreeting:
    def test_single_greeting(self, chat):
        assert len(chat.messages) == 1
        greeting = chat.messages[0]
        assert greeting.id == 1
        assert greeting.role == Role.ASSISTANT
        assert "declaración de Modelo 100" in greeting.content
        assert greeting.timestamp == datetime(2025, 5, 1, 10, 25)

    def test_suggestions_only_before_first_message(self, chat, scheduler):
        assert chat.show_suggestions is True
        assert chat.suggested_questions[0] == "¿Qué es el Modelo 100?"
        chat.send_message("hola")
        assert chat.show_suggestions is False

    def test_per_form_suggestions(self, make_strategy):
        chat = make_strategy(ChatStrategy, "modelo303")
        assert "¿Cómo calculo el IVA repercutido?" in chat.suggested_questions


class TestSendMessage:
    def test_reply_after_delay(self, chat, scheduler):
        sent = chat.send_message("¿Qué es el Modelo 100?")
        assert sent.id == 2
        assert sent.role == Role.USER
        assert len(chat.messages) == 2

        scheduler.advance(1.4)
        assert len(chat.messages) == 2
        scheduler.advance(0.1)
        assert len(chat.messages) == 3
        reply = chat.messages[-1]
        assert reply.id == 3
        assert reply.role == Role.ASSISTANT
        assert reply.content.startswith("El Modelo 100 es la declaración anual del IRPF")

    def test_empty_message_ignored(self, chat, scheduler):
        assert chat.send_message("   ") is None
        assert len(chat.messages) == 1
        assert scheduler.pending == 0

    def test_second_send_while_pending(self, chat):
        chat.send_message("hola")
        with pytest.raises(OperationPendingError):
            chat.send_message("¿sigues ahí?")

    def test_ids_stay_sequential(self, chat, scheduler):
        for text in ("uno", "dos", "tres"):
            chat.send_message(text)
            scheduler.advance(2)
        assert [m.id for m in chat.messages] == [1, 2, 3, 4, 5, 6, 7]

    def test_progress_from_length(self, chat, scheduler):
        assert chat.progress == 0
        chat.send_message("hola")
        scheduler.advance(2)
        assert chat.progress == 30


class TestAttachments:
    def test_attachment_only_message(self, chat, notifier):
        chat.add_attachment("nomina.pdf", 2048, "application/pdf")
        assert notifier.last.title == "Archivo añadido"
        message = chat.send_message()
        assert message.content == ""
        assert [a.name for a in message.attachments] == ["nomina.pdf"]
        assert chat.attachments == []

    def test_multiple_attachments(self, chat, notifier):
        added = chat.add_attachments([("a.pdf", 1, "application/pdf"), ("b.png", 2, "image/png")])
        assert len(added) == 2
        assert notifier.last.title == "Archivos añadidos"

    def test_remove_attachment(self, chat):
        first = chat.add_attachment("a.pdf", 1, "application/pdf")
        chat.add_attachment("b.pdf", 1, "application/pdf")
        chat.remove_attachment(first.id)
        assert [a.name for a in chat.attachments] == ["b.pdf"]


class TestCompletion:
    def test_done_phrase_offers_completion(self, chat, scheduler, callbacks):
        on_complete, _ = callbacks
        chat.send_message("Creo que ya he terminado, quiero finalizar")
        assert chat.completion_offered is False
        scheduler.advance(2)
        assert chat.completion_offered is True
        assert "Completar Asistente" in chat.messages[-1].content

        chat.complete()
        on_complete.assert_called_once_with()
        assert chat.progress == 100

    def test_complete_requires_offer(self, chat):
        with pytest.raises(InvalidTransitionError):
            chat.complete()

    def test_complete_once(self, chat, scheduler):
        chat.send_message("listo")
        scheduler.advance(2)
        chat.complete()
        with pytest.raises(InvalidTransitionError):
            chat.complete()

    def test_dispose_drops_pending_reply(self, chat, scheduler):
        chat.send_message("hola")
        chat.dispose()
        scheduler.advance(5)
        assert len(chat.messages) == 2

    def test_draft_collects_user_text(self, chat, scheduler):
        chat.send_message("Tengo dos pagadores")
        scheduler.advance(2)
        draft = chat.draft()
        assert draft.notes == ["Tengo dos pagadores"]
        assert draft.is_empty is True


class TestTranscript:
    def test_export(self, chat, scheduler, tmp_path, notifier):
        chat.send_message("hola")
        scheduler.advance(2)
        path = chat.export_transcript(tmp_path)
        assert path.name == "Conversación-Modelo-100-2025-05-01.txt"
        text = path.read_text(encoding="utf-8")
        assert text.startswith("[10:25] Asistente: 👋 ¡Hola!")
        assert "\n\n[10:30] Yo: hola\n\n[10:30] Asistente: " in text
        assert notifier.last.title == "Conversación guardada"
