"""Top-level sections: form filling, profile, filing history and support.

Every section is opened through `WizardController.select_section`, so the
active section is tracked in one place and form-filling progress survives a
visit to any other section.
"""

from collections.abc import Callable

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from asistente.models.enums import SectionId
from asistente.models.forms import PERSONAL_LABELS, format_eur
from asistente.reports.summary import FilingSummaryGenerator
from asistente.sections import ALL, SUPPORT_EMAIL, SUPPORT_PHONE, FaqItem, Filing
from asistente.wizard import WizardSession, current_draft, run_wizard

SECTION_LABELS: dict[SectionId, str] = {
    SectionId.FORM: "Rellenar formulario",
    SectionId.PROFILE: "Mi perfil",
    SectionId.HISTORY: "Historial de declaraciones",
    SectionId.SUPPORT: "Ayuda y soporte",
}

EXIT = "salir"

PROFILE_LABELS: dict[str, str] = {**PERSONAL_LABELS, "country": "País"}

CONTACT_LABELS: dict[str, str] = {
    "name": "Nombre",
    "email": "Email",
    "subject": "Asunto",
    "message": "Mensaje",
}


def history_table(filings: list[Filing]) -> Table:
    table = Table(title="Historial de declaraciones")
    table.add_column("Id", style="cyan")
    table.add_column("Modelo")
    table.add_column("Año")
    table.add_column("Estado")
    table.add_column("Presentada")
    table.add_column("Importe", justify="right")
    for f in filings:
        table.add_row(
            f.id,
            f.type,
            f.year,
            f.status.value,
            f.date_submitted.isoformat() if f.date_submitted else "-",
            format_eur(f.amount) if f.amount is not None else "-",
        )
    return table


def print_faq(console: Console, items: list[FaqItem]) -> None:
    if not items:
        console.print("No FAQ matches your search. Please try different keywords or contact us directly.")
        console.print(f"  {SUPPORT_EMAIL}  |  {SUPPORT_PHONE}")
        return
    for item in items:
        console.print(f"[bold]{item.question}[/bold]")
        console.print(f"  {item.answer}\n")


def _prompt_until_valid(
    console: Console,
    labels: dict[str, str],
    values: dict[str, str],
    submit: Callable[..., dict[str, str]],
) -> None:
    """Prompt every field, then only the rejected ones, until *submit* accepts."""
    pending = list(labels)
    while pending:
        for name in pending:
            values[name] = Prompt.ask(labels[name], default=values.get(name, ""), console=console)
        errors = submit(**values)
        for name, message in errors.items():
            console.print(f"[red]{labels.get(name, name)}: {message}[/red]")
        pending = [name for name in errors if name in labels]


# ---------------------------------------------------------------------------
# Section runners
# ---------------------------------------------------------------------------


def run_form(session: WizardSession) -> None:
    """Run the wizard once; later visits show the finished summary."""
    if not session.finished:
        run_wizard(session)
        return
    text = FilingSummaryGenerator().render(current_draft(session.controller))
    session.console.print(Panel(text, title="[bold cyan]Formulario ya completado[/bold cyan]", border_style="cyan"))


def run_profile(session: WizardSession, edit: bool | None = None) -> None:
    console = session.console
    profile = session.profile

    def show() -> None:
        table = Table(title="Mi perfil")
        table.add_column("Campo")
        table.add_column("Valor")
        for name, value in profile.info.model_dump().items():
            table.add_row(PROFILE_LABELS[name], value)
        console.print(table)

    show()
    if edit is None:
        edit = Confirm.ask("¿Editar tu perfil?", default=False, console=console)
    if not edit:
        return
    _prompt_until_valid(console, PROFILE_LABELS, profile.info.model_dump(), profile.update)
    show()


def run_history(session: WizardSession) -> None:
    console = session.console
    history = session.history
    search = Prompt.ask("Buscar (id o modelo)", default="", console=console)
    year = Prompt.ask("Año", choices=[ALL, *history.years], default=ALL, console=console)
    form_type = Prompt.ask("Modelo", choices=[ALL, *history.types], default=ALL, console=console)
    filings = history.filter(search=search, year=year, form_type=form_type)
    if not filings:
        console.print("No tax filings found")
        return
    console.print(history_table(filings))


def run_support(session: WizardSession, query: str | None = None, contact: bool | None = None) -> None:
    console = session.console
    if query is None:
        query = Prompt.ask("Buscar en las preguntas frecuentes", default="", console=console)
    print_faq(console, session.support.search(query))
    if contact is None:
        contact = Confirm.ask("¿Quieres contactar con soporte?", default=False, console=console)
    if contact:
        _prompt_until_valid(console, CONTACT_LABELS, {}, session.support.contact)


SECTION_RUNNERS: dict[SectionId, Callable[..., None]] = {
    SectionId.FORM: run_form,
    SectionId.PROFILE: run_profile,
    SectionId.HISTORY: run_history,
    SectionId.SUPPORT: run_support,
}


def open_section(session: WizardSession, section: SectionId | str, **options) -> None:
    session.controller.select_section(section)
    SECTION_RUNNERS[session.controller.active_section](session, **options)


def run_menu(session: WizardSession) -> None:
    """Section menu loop; ends when the user picks 'salir'."""
    console = session.console
    while True:
        table = Table(title="Asistente Fiscal")
        table.add_column("Id", style="cyan")
        table.add_column("Sección")
        for section, label in SECTION_LABELS.items():
            marker = " (actual)" if section == session.controller.active_section else ""
            table.add_row(section.value, f"{label}{marker}")
        table.add_row(EXIT, "Salir")
        console.print(table)

        choice = Prompt.ask(
            "Sección",
            choices=[s.value for s in SECTION_LABELS] + [EXIT],
            default=SectionId.FORM.value,
            console=console,
        )
        if choice == EXIT:
            return
        open_section(session, choice)
