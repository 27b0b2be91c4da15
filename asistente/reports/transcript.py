"""Chat transcript export."""

import logging
import re
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from asistente.models.catalog import TaxFormType
from asistente.models.chat import ChatMessage

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"


def transcript_filename(form: TaxFormType, on: date) -> str:
    """``Conversación-Modelo-100-2025-05-01.txt`` for Modelo 100 on that day."""
    slug = re.sub(r"\s+", "-", form.display_name)
    return f"Conversación-{slug}-{on.isoformat()}.txt"


class TranscriptGenerator:
    """Renders a chat as ``[HH:MM] Sender: content`` blocks."""

    def __init__(self) -> None:
        self.env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)))

    def render(self, messages: Sequence[ChatMessage]) -> str:
        template = self.env.get_template("transcript.txt")
        return template.render(messages=messages)

    def write(
        self,
        messages: Sequence[ChatMessage],
        form: TaxFormType,
        directory: Path,
        on: date,
    ) -> Path:
        """Write the transcript into *directory* and return the file path."""
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / transcript_filename(form, on)
        path.write_text(self.render(messages), encoding="utf-8")
        logger.info("Transcript with %d message(s) written to %s", len(messages), path)
        return path
