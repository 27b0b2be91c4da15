"""Filing summary shown on the last wizard step."""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from asistente.models.catalog import METHODS, get_form_type
from asistente.models.forms import format_eur
from asistente.models.records import FilingDraft

TEMPLATE_DIR = Path(__file__).parent / "templates"


class FilingSummaryGenerator:
    """Generates a human-readable summary of a filing draft."""

    def __init__(self) -> None:
        self.env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)))
        self.env.filters["eur"] = format_eur

    def render(self, draft: FilingDraft) -> str:
        """Render the summary for *draft*."""
        form = get_form_type(draft.form_type)
        template = self.env.get_template("summary.txt")
        return template.render(
            title=f"Resumen - {form.display_name} ({form.description})",
            method=METHODS[draft.source].title,
            personal=draft.personal,
            income=draft.income,
            deductions=draft.deductions,
            result=draft.result,
            notes=draft.notes,
            label=draft.label,
        )
