"""Interactive step-by-step onboarding wizard.

Walks the user through the six form-filling steps:
  Paso 1 - Tipo de formulario (modelo100, modelo303, ...)
  Paso 2 - Método de cumplimentación (manual, chat, subida, consulta por DNI)
  Paso 3-5 - Revisión de datos personales, ingresos y deducciones
  Paso 6 - Resumen (opcionalmente guardado en un archivo)
"""

from __future__ import annotations

import mimetypes
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn
from rich.prompt import Confirm, Prompt
from rich.rule import Rule
from rich.table import Table

from asistente.chat import run_chat
from asistente.config import SimulationSettings, make_rng
from asistente.controller import STEP_LABELS, STEPS, WizardController
from asistente.exceptions import OnboardingError
from asistente.models.catalog import FORM_TYPES, METHODS
from asistente.models.enums import LookupState, ManualTab, MethodId, NotificationLevel, StepId, UploadStatus
from asistente.models.forms import PERSONAL_LABELS, format_eur, help_text
from asistente.models.records import FilingDraft
from asistente.notifications import Notification, Notifier
from asistente.reports.summary import FilingSummaryGenerator
from asistente.sections import History, Profile, Support
from asistente.selector import MethodSelector
from asistente.strategies import ChatStrategy, IdLookupStrategy, ManualFormStrategy, UploadFile, UploadStrategy
from asistente.strategies.lookup import LOOKUP_LABELS
from asistente.strategies.manual import TAB_LABELS, TABS
from asistente.timers import Scheduler

BANNER = "[bold]Asistente Fiscal[/bold]\nTu declaración, paso a paso."

_NOTE_STYLES = {
    NotificationLevel.INFO: "dim",
    NotificationLevel.SUCCESS: "green",
    NotificationLevel.ERROR: "red",
}


# ---------------------------------------------------------------------------
# Session wiring
# ---------------------------------------------------------------------------


@dataclass
class WizardSession:
    """Everything one run shares: clock, settings, randomness and section state."""

    console: Console
    settings: SimulationSettings = field(default_factory=SimulationSettings)
    seed: int | None = None
    speed: float = 1.0
    output_dir: Path = Path(".")

    def __post_init__(self) -> None:
        self.scheduler = Scheduler()
        self.rng = make_rng(self.seed)
        self.notifier = Notifier()
        self.notifier.subscribe(self._print_notification)
        self.controller = WizardController(self.notifier)
        self.selector = MethodSelector(
            self.controller,
            scheduler=self.scheduler,
            settings=self.settings,
            rng=self.rng,
        )
        self.profile = Profile(notifier=self.notifier)
        self.history = History()
        self.support = Support(notifier=self.notifier)
        self.finished = False

    def _print_notification(self, note: Notification) -> None:
        style = _NOTE_STYLES[note.level]
        text = note.title if not note.description else f"{note.title} - {note.description}"
        self.console.print(f"[{style}]{text}[/{style}]")

    def wait(self, description: str, progress: Callable[[], float] | None = None) -> None:
        """Run pending timers, drawing a progress bar when *progress* is given."""
        if progress is None:
            with self.console.status(description):
                self.scheduler.run_until_idle(speed=self.speed)
            return
        with Progress(
            TextColumn("{task.description}"),
            BarColumn(),
            TextColumn("{task.percentage:>3.0f}%"),
            console=self.console,
            transient=True,
        ) as bar:
            task = bar.add_task(description, total=100)
            self.scheduler.run_until_idle(
                on_step=lambda: bar.update(task, completed=progress()),
                speed=self.speed,
            )


# ---------------------------------------------------------------------------
# Step header
# ---------------------------------------------------------------------------


def _show_step_header(controller: WizardController, console: Console) -> None:
    step = controller.active_step
    console.print()
    console.print(
        Rule(
            f"Paso {controller.step_index + 1} de {len(STEPS)}: {STEP_LABELS[step]}  ({controller.progress_percent}%)",
            style="bold cyan",
        )
    )
    console.print()


# ---------------------------------------------------------------------------
# Paso 1 y 2 - Selección de formulario y método
# ---------------------------------------------------------------------------


def _choose_form_type(session: WizardSession) -> None:
    console = session.console
    table = Table(title="Formularios disponibles")
    table.add_column("Id", style="cyan")
    table.add_column("Modelo")
    table.add_column("Descripción")
    for form in FORM_TYPES.values():
        table.add_row(form.id.value, form.display_name, form.description)
    console.print(table)

    choice = Prompt.ask(
        "Formulario",
        choices=[f.value for f in FORM_TYPES],
        default="modelo100",
        console=console,
    )
    session.selector.select_form_type(choice)
    session.selector.continue_()


def _choose_method(session: WizardSession) -> None:
    """Loop over the method grid until a strategy finishes."""
    console = session.console
    selector = session.selector
    while session.controller.active_step == StepId.FORM_METHOD:
        table = Table(title="¿Cómo quieres rellenar el formulario?")
        table.add_column("Id", style="cyan")
        table.add_column("Método")
        table.add_column("Descripción")
        for method in METHODS.values():
            table.add_row(method.id.value, method.title, method.description)
        console.print(table)

        choice = Prompt.ask(
            "Método",
            choices=[m.value for m in METHODS],
            default="manual",
            console=console,
        )
        strategy = selector.select_method(choice)
        try:
            _RUNNERS[strategy.method](session, strategy)
        except OnboardingError as exc:
            console.print(f"[bold red]Error:[/bold red] {exc}")
            selector.cancel()
            continue
        if selector.strategy is not None:
            # Runner returned without finishing
            selector.cancel()


# ---------------------------------------------------------------------------
# Strategy runners
# ---------------------------------------------------------------------------


def _prompt_fields(
    console: Console,
    fields: dict[str, str],
    values: dict[str, str],
    show_help: bool = False,
    on_change: Callable[[dict[str, str]], None] | None = None,
) -> dict[str, str]:
    for name, label in fields.items():
        if show_help:
            console.print(f"[dim]{help_text(name)}[/dim]")
        values[name] = Prompt.ask(label, default=values.get(name, ""), console=console)
        if on_change is not None:
            on_change(values)
    return values


def _stored_values(strategy: ManualFormStrategy, tab: ManualTab) -> dict[str, str]:
    """Previously submitted values of *tab*, as prompt defaults."""
    if tab == ManualTab.PERSONAL:
        return strategy.personal.model_dump() if strategy.personal else {}
    stored = strategy.income if tab == ManualTab.INCOME else strategy.deductions
    return {name: str(value) for name, value in stored.items() if value}


def _tab_navigation(session: WizardSession, strategy: ManualFormStrategy, submitted: ManualTab) -> None:
    """After a tab is stored: move on, go back one tab, or save progress."""
    console = session.console
    if submitted == ManualTab.PERSONAL:
        label, choices = "\\[s]iguiente / \\[g]uardar progreso", ["s", "g"]
    else:
        label, choices = "\\[s]iguiente / \\[a]nterior / \\[g]uardar progreso", ["s", "a", "g"]
    while True:
        answer = Prompt.ask(
            label,
            choices=choices,
            default="s",
            console=console,
        )
        if answer == "g":
            strategy.save_progress()
            continue
        if answer == "a":
            strategy.go_to_tab(TABS[TABS.index(submitted) - 1])
        return


def _run_manual(session: WizardSession, strategy: ManualFormStrategy) -> None:
    console = session.console
    console.print(Panel(f"[bold]{strategy.title}[/bold]", border_style="cyan"))

    def preview(values: dict[str, str]) -> None:
        for name, value in strategy.preview_derived(values).items():
            console.print(f"[bold]{strategy.field_set.derived[name]}:[/bold] {format_eur(value)}")

    while not strategy.completed:
        tab = strategy.active_tab
        console.print(f"\n[bold]{TAB_LABELS[tab]}[/bold]")
        on_change = None
        if tab == ManualTab.PERSONAL:
            fields, show_help = PERSONAL_LABELS, False
        elif tab == ManualTab.INCOME:
            fields, show_help = strategy.field_set.income, True
            if strategy.field_set.derived:
                on_change = preview
        else:
            fields, show_help = strategy.field_set.deductions, True

        values = _stored_values(strategy, tab)
        pending = dict(fields)
        while True:
            _prompt_fields(console, pending, values, show_help, on_change)
            if strategy.submit(values):
                break
            for name, message in strategy.errors.items():
                console.print(f"[red]{fields.get(name, name)}: {message}[/red]")
            pending = {name: fields[name] for name in strategy.errors if name in fields}

        if not strategy.completed:
            console.print(f"[dim]Completado: {strategy.progress}%[/dim]")
            _tab_navigation(session, strategy, tab)


def _run_chat(session: WizardSession, strategy: ChatStrategy) -> None:
    run_chat(session.console, strategy, session.scheduler, session.speed, session.output_dir)


def _upload_file_from_path(raw: str) -> UploadFile | None:
    path = Path(raw.strip().strip("'\""))
    if not path.is_file():
        return None
    mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return UploadFile(name=path.name, size=path.stat().st_size, mime_type=mime)


def _run_upload(session: WizardSession, strategy: UploadStrategy) -> None:
    console = session.console
    console.print(Panel(f"[bold]Subir {strategy.title}[/bold]\nPDF, JPG o PNG", border_style="cyan"))
    while strategy.file is None:
        raw = Prompt.ask("Ruta del documento (vacío para volver)", default="", console=console)
        if not raw:
            strategy.cancel()
            return
        file = _upload_file_from_path(raw)
        if file is None:
            console.print(f"[red]Archivo no encontrado: {raw}[/red]")
            continue
        rejection = strategy.select_file(file)
        if rejection:
            console.print(f"[red]{rejection}[/red]")
    console.print(f"[dim]{strategy.file.name} ({strategy.file.size_label})[/dim]")

    strategy.upload()
    while True:
        session.wait("Subiendo tu documento...", lambda: strategy.progress)
        if strategy.status == UploadStatus.SUCCESS:
            break
        console.print(f"[red]{strategy.error}[/red]")
        if not Confirm.ask("¿Intentar de nuevo?", default=True, console=console):
            strategy.remove_file()
            return
        strategy.retry()

    _show_draft(console, strategy.draft())
    if Confirm.ask("¿Continuar con los datos extraídos?", default=True, console=console):
        strategy.confirm()
    else:
        strategy.remove_file()


def _run_lookup(session: WizardSession, strategy: IdLookupStrategy) -> None:
    console = session.console
    console.print(Panel(f"[bold]{strategy.title}[/bold]", border_style="cyan"))
    while True:
        document = Prompt.ask("Número de DNI/NIE", console=console)
        birth = Prompt.ask("Fecha de nacimiento (AAAA-MM-DD)", console=console)
        consent = Confirm.ask("¿Aceptas la consulta a la Agencia Tributaria?", default=True, console=console)
        errors = strategy.lookup(document, birth, consent)
        for message in errors.values():
            console.print(f"[red]{message}[/red]")
        if errors:
            continue

        session.wait("Consultando la Agencia Tributaria...", lambda: strategy.progress)
        if strategy.state == LookupState.SUCCESS:
            break
        console.print(f"[red]{strategy.error}[/red]")
        if not Confirm.ask("¿Intentar de nuevo?", default=True, console=console):
            strategy.cancel()
            return
        strategy.try_again()

    _show_draft(console, strategy.draft())
    if Confirm.ask("¿Quieres editar tus datos de contacto?", default=False, console=console):
        strategy.toggle_edit()
        personal = strategy.tax_data.personal_info.model_dump()
        pending = [name for name in personal if not strategy.is_field_disabled(name)]
        updates: dict[str, str] = {}
        while pending:
            for name in pending:
                updates[name] = Prompt.ask(LOOKUP_LABELS[name], default=updates.get(name, personal[name]), console=console)
            errors = strategy.update_personal_info(**updates)
            for name, message in errors.items():
                console.print(f"[red]{LOOKUP_LABELS.get(name, name)}: {message}[/red]")
            pending = [name for name in errors if name in updates]
        strategy.save_edits()
    strategy.confirm()


_RUNNERS: dict[MethodId, Callable] = {
    MethodId.MANUAL: _run_manual,
    MethodId.AI: _run_chat,
    MethodId.UPLOAD: _run_upload,
    MethodId.LOOKUP: _run_lookup,
}


# ---------------------------------------------------------------------------
# Pasos 3-5 - Revisión
# ---------------------------------------------------------------------------


def current_draft(controller: WizardController) -> FilingDraft:
    """The recorded draft, or an empty one for the chosen form and method."""
    return controller.draft or FilingDraft(
        form_type=controller.selected_form_type,
        source=controller.selected_method,
    )


def _section_table(title: str, draft: FilingDraft, values: dict, money: bool) -> Table:
    table = Table(title=title)
    table.add_column("Campo")
    table.add_column("Valor", justify="right" if money else "left")
    for name, value in values.items():
        table.add_row(draft.label(name), format_eur(value) if money else str(value))
    return table


def _show_draft(console: Console, draft: FilingDraft) -> None:
    if draft.personal:
        console.print(_section_table("Información personal", draft, draft.personal, money=False))
    if draft.income:
        console.print(_section_table("Ingresos", draft, draft.income, money=True))
    if draft.deductions:
        console.print(_section_table("Deducciones", draft, draft.deductions, money=True))
    if draft.result:
        console.print(_section_table("Resultado", draft, draft.result, money=True))


def _review_step(session: WizardSession) -> None:
    console = session.console
    controller = session.controller
    draft = current_draft(controller)
    step = controller.active_step
    sections: dict[StepId, tuple[dict, bool]] = {
        StepId.PERSONAL: (draft.personal, False),
        StepId.INCOME: ({**draft.income, **draft.result}, True),
        StepId.DEDUCTIONS: (draft.deductions, True),
    }
    values, money = sections[step]
    if values:
        console.print(_section_table(STEP_LABELS[step], draft, values, money))
    else:
        console.print("[dim]No hay datos para esta sección.[/dim]")
        for note in draft.notes:
            console.print(f"[dim]- {note}[/dim]")

    choices = ["c", "a"] if step != StepId.PERSONAL else ["c"]
    answer = Prompt.ask("\\[c]ontinuar / \\[a]trás", choices=choices, default="c", console=console)
    if answer == "a":
        controller.on_previous()
    else:
        controller.on_next()


# ---------------------------------------------------------------------------
# Paso 6 - Resumen
# ---------------------------------------------------------------------------


def _summary_step(session: WizardSession) -> bool:
    """Show the summary; returns False when the user steps back."""
    console = session.console
    controller = session.controller
    draft = current_draft(controller)
    text = FilingSummaryGenerator().render(draft)
    console.print(Panel(text, title="[bold cyan]Resumen[/bold cyan]", border_style="cyan"))

    if Confirm.ask("¿Volver al paso anterior?", default=False, console=console):
        controller.on_previous()
        return False
    if Confirm.ask("¿Guardar el resumen en un archivo?", default=False, console=console):
        form = FORM_TYPES[draft.form_type]
        slug = re.sub(r"\s+", "-", form.display_name)
        session.output_dir.mkdir(parents=True, exist_ok=True)
        path = session.output_dir / f"Resumen-{slug}.txt"
        path.write_text(text, encoding="utf-8")
        console.print(f"[dim]Resumen guardado en {path}[/dim]")
    return True


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


def run_wizard(session: WizardSession) -> WizardController:
    """Main wizard orchestration, called from cli.py."""
    console = session.console
    controller = session.controller
    console.print(Panel(BANNER, title="[bold cyan]Asistente Fiscal[/bold cyan]", border_style="cyan"))

    _show_step_header(controller, console)
    _choose_form_type(session)

    _show_step_header(controller, console)
    _choose_method(session)

    while True:
        _show_step_header(controller, console)
        if controller.active_step == StepId.SUMMARY:
            if _summary_step(session):
                break
        else:
            _review_step(session)

    draft = controller.draft
    total = sum((draft.income.values() if draft else []), Decimal("0"))
    console.print()
    console.print(
        Panel(
            f"[bold]Formulario:[/bold] {FORM_TYPES[controller.selected_form_type].display_name}\n"
            f"[bold]Método:[/bold] {METHODS[controller.selected_method].title}\n"
            f"[bold]Ingresos declarados:[/bold] {format_eur(total)}\n\n"
            "[bold green]¡Asistente completado![/bold green]",
            title="[bold cyan]Asistente Fiscal - Fin[/bold cyan]",
            border_style="cyan",
        )
    )
    session.finished = True
    return controller
