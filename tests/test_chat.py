"""Tests for the interactive chat REPL."""

import io
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from asistente.chat import run_chat
from asistente.models.enums import Role
from asistente.strategies import ChatStrategy


def _console(*lines):
    """Console whose input() replays *lines*, then hits end of input."""
    console = Console(file=io.StringIO(), width=200)
    console.input = MagicMock(side_effect=[*lines, EOFError()])
    return console


def _output(console):
    return console.file.getvalue()


@pytest.fixture
def chat(make_strategy, fixed_clock):
    return make_strategy(ChatStrategy, clock=fixed_clock)


class TestRunChat:
    def test_shows_greeting_and_suggestions(self, chat, scheduler):
        console = _console("salir")
        assert run_chat(console, chat, scheduler) is False
        out = _output(console)
        assert "Asistente Fiscal - Modelo 100" in out
        assert "¡Hola! Soy tu asistente fiscal." in out
        assert "1. ¿Qué es el Modelo 100?" in out
        assert "Hasta luego." in out

    def test_number_picks_suggestion(self, chat, scheduler):
        console = _console("2")
        run_chat(console, chat, scheduler)
        assert chat.messages[1].content == "¿Cuáles son las deducciones que puedo aplicar?"
        assert chat.messages[2].role == Role.ASSISTANT
        assert "Deducciones por maternidad" in _output(console)

    def test_number_after_first_message_is_plain_text(self, chat, scheduler):
        console = _console("hola", "2")
        run_chat(console, chat, scheduler)
        assert chat.messages[3].content == "2"

    def test_reply_and_progress_printed(self, chat, scheduler):
        console = _console("¿Cuál es el plazo?")
        run_chat(console, chat, scheduler)
        out = _output(console)
        assert "Los plazos para presentar el Modelo 100 son:" in out
        assert "Progreso de la conversación: 30%" in out

    def test_user_message_printed_before_reply(self, chat, scheduler):
        console = _console("¿Cuál es el plazo?")
        run_chat(console, chat, scheduler)
        out = _output(console)
        assert "Yo: ¿Cuál es el plazo?" in out
        assert out.index("Yo: ¿Cuál es el plazo?") < out.index("Los plazos para presentar")

    def test_blank_line_ignored(self, chat, scheduler):
        console = _console("   ")
        run_chat(console, chat, scheduler)
        assert len(chat.messages) == 1


class TestCompletion:
    def test_complete_after_done_phrase(self, chat, scheduler, callbacks):
        console = _console("Ya estoy listo", "/completar")
        assert run_chat(console, chat, scheduler) is True
        callbacks[0].assert_called_once_with()
        out = _output(console)
        assert "/completar para continuar" in out
        assert "Hasta luego." not in out

    def test_complete_too_early(self, chat, scheduler, callbacks):
        console = _console("/completar")
        assert run_chat(console, chat, scheduler) is False
        callbacks[0].assert_not_called()
        assert "para completar" in _output(console)


class TestCommands:
    def test_attach_and_send(self, chat, scheduler, tmp_path):
        doc = tmp_path / "nomina.pdf"
        doc.write_bytes(b"%PDF-1.4")
        console = _console(f"/adjuntar {doc}", "")
        run_chat(console, chat, scheduler)
        sent = chat.messages[1]
        assert sent.content == ""
        assert sent.attachments[0].name == "nomina.pdf"
        assert sent.attachments[0].type == "application/pdf"
        assert "📎 nomina.pdf (8 bytes)" in _output(console)

    def test_attach_missing_file(self, chat, scheduler, tmp_path):
        console = _console(f"/adjuntar {tmp_path / 'nada.pdf'}")
        run_chat(console, chat, scheduler)
        assert "Archivo no encontrado" in _output(console)
        assert chat.attachments == []

    def test_remove_attachments(self, chat, scheduler, tmp_path):
        doc = tmp_path / "a.png"
        doc.write_bytes(b"png")
        console = _console(f"/adjuntar {doc}", "/quitar")
        run_chat(console, chat, scheduler)
        assert chat.attachments == []
        assert "Adjuntos eliminados." in _output(console)

    def test_save_transcript(self, chat, scheduler, tmp_path):
        console = _console("hola", "/guardar")
        run_chat(console, chat, scheduler, output_dir=tmp_path)
        saved = tmp_path / "Conversación-Modelo-100-2025-05-01.txt"
        assert saved.exists()
        assert "[10:30] Yo: hola" in saved.read_text(encoding="utf-8")
