"""Tests for the transcript and summary reports."""

from datetime import date, datetime
from decimal import Decimal

from asistente.models.catalog import get_form_type
from asistente.models.chat import ChatMessage
from asistente.models.enums import FormTypeId, MethodId, Role
from asistente.models.records import FilingDraft
from asistente.reports.summary import FilingSummaryGenerator
from asistente.reports.transcript import TranscriptGenerator, transcript_filename


def _messages():
    return [
        ChatMessage(id=1, role=Role.ASSISTANT, content="Hola", timestamp=datetime(2025, 5, 1, 9, 5)),
        ChatMessage(id=2, role=Role.USER, content="¿Plazo?", timestamp=datetime(2025, 5, 1, 9, 7)),
    ]


class TestTranscript:
    def test_filename(self):
        name = transcript_filename(get_form_type("modelo303"), date(2025, 1, 9))
        assert name == "Conversación-Modelo-303-2025-01-09.txt"

    def test_render_blocks(self):
        text = TranscriptGenerator().render(_messages())
        assert text == "[09:05] Asistente: Hola\n\n[09:07] Yo: ¿Plazo?"

    def test_write_creates_directory(self, tmp_path):
        target = tmp_path / "exports"
        path = TranscriptGenerator().write(_messages(), get_form_type("modelo100"), target, date(2025, 5, 1))
        assert path.parent == target
        assert path.read_text(encoding="utf-8").startswith("[09:05] Asistente: Hola")


class TestFilingSummary:
    def test_sections_and_amounts(self):
        draft = FilingDraft(
            form_type=FormTypeId.MODELO_303,
            source=MethodId.MANUAL,
            personal={"nif": "12345678A"},
            income={"iva_repercutido": Decimal("2100")},
            deductions={"other_deductions": Decimal("0")},
            result={"resultado": Decimal("1644.65")},
            labels={"nif": "NIF/NIE", "iva_repercutido": "IVA repercutido", "resultado": "Resultado (a ingresar)"},
        )
        text = FilingSummaryGenerator().render(draft)
        lines = text.splitlines()
        assert lines[0] == "Resumen - Modelo 303 (VAT return)"
        assert lines[1] == "=" * len(lines[0])
        assert "Método: Fill by hand" in text
        assert "Información personal" in text
        assert "NIF/NIE" in text and "12345678A" in text
        assert "2.100,00 €" in text
        assert "1.644,65 €" in text
        # unlabelled fields fall back to their key
        assert "other_deductions" in text
        assert "Notas" not in text

    def test_notes_only(self):
        draft = FilingDraft(form_type=FormTypeId.MODELO_100, source=MethodId.AI, notes=["Tengo dos pagadores"])
        text = FilingSummaryGenerator().render(draft)
        assert "Ingresos" not in text
        assert "- Tengo dos pagadores" in text
