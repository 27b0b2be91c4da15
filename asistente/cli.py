"""Typer CLI interface for Asistente Fiscal."""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from asistente.config import SimulationSettings, load_settings
from asistente.exceptions import OnboardingError, SettingsError

BANNER = r"""
   ___________
  |  MODELO   |
  |   100     |
  |  _______  |
  | |  €€€  | |
  | |_______| |
  |___________|

  Asistente Fiscal
  "Tu declaración, paso a paso."
"""

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def show_banner() -> None:
    typer.echo(BANNER)


def configure_logging(level: str) -> None:
    """Route every ``asistente`` logger through a Rich handler on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


app = typer.Typer(
    name="asistente",
    help="Asistente Fiscal: onboarding wizard for Spanish tax forms.",
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
        case_sensitive=False,
    ),
) -> None:
    """Asistente Fiscal: onboarding wizard for Spanish tax forms."""
    if log_level.upper() not in LOG_LEVELS:
        typer.echo(f"Error: invalid log level {log_level!r}. Choose from {', '.join(LOG_LEVELS)}.", err=True)
        raise typer.Exit(1)
    configure_logging(log_level)
    if ctx.invoked_subcommand is None:
        show_banner()
        raise typer.Exit()


def _load_settings_or_exit(path: Path | None) -> SimulationSettings:
    try:
        return load_settings(path)
    except SettingsError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)


SETTINGS_OPTION = typer.Option(
    None,
    "--settings",
    envvar="ASISTENTE_SETTINGS",
    help="JSON file overriding simulation delays and success rates",
)
SEED_OPTION = typer.Option(
    None,
    "--seed",
    envvar="ASISTENTE_SEED",
    help="Seed for the simulated outcomes (reproducible runs)",
)
SPEED_OPTION = typer.Option(
    1.0,
    "--speed",
    min=0.0,
    help="Real-time factor for simulated delays (0 = instant)",
)
OUTPUT_OPTION = typer.Option(
    Path("."),
    "--output-dir",
    "-o",
    help="Directory for saved transcripts and summaries",
)


@app.command()
def wizard(
    settings: Path | None = SETTINGS_OPTION,
    seed: int | None = SEED_OPTION,
    speed: float = SPEED_OPTION,
    output_dir: Path = OUTPUT_OPTION,
) -> None:
    """Interactive step-by-step onboarding wizard."""
    from asistente.wizard import WizardSession, run_wizard

    session = WizardSession(
        console=Console(),
        settings=_load_settings_or_exit(settings),
        seed=seed,
        speed=speed,
        output_dir=output_dir,
    )
    try:
        run_wizard(session)
    except OnboardingError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)


@app.command()
def chat(
    form: str = typer.Option("modelo100", "--form", "-f", help="Form type id, e.g. modelo100"),
    settings: Path | None = SETTINGS_OPTION,
    seed: int | None = SEED_OPTION,
    speed: float = SPEED_OPTION,
    output_dir: Path = OUTPUT_OPTION,
) -> None:
    """Chat with the tax assistant about one form."""
    from asistente.chat import run_chat
    from asistente.config import make_rng
    from asistente.strategies import ChatStrategy
    from asistente.timers import Scheduler

    scheduler = Scheduler()
    try:
        strategy = ChatStrategy(
            form,
            scheduler=scheduler,
            settings=_load_settings_or_exit(settings),
            rng=make_rng(seed),
        )
    except OnboardingError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    console = Console()
    if run_chat(console, strategy, scheduler, speed, output_dir):
        console.print("\n[bold green]Asistente completado.[/bold green]")
    strategy.dispose()


@app.command()
def forms() -> None:
    """List the supported tax forms and filling methods."""
    from asistente.models.catalog import FORM_TYPES, METHODS

    console = Console()
    table = Table(title="Formularios")
    table.add_column("Id", style="cyan")
    table.add_column("Modelo")
    table.add_column("Descripción")
    for entry in FORM_TYPES.values():
        table.add_row(entry.id.value, entry.display_name, entry.description)
    console.print(table)

    table = Table(title="Métodos")
    table.add_column("Id", style="cyan")
    table.add_column("Método")
    table.add_column("Descripción")
    for method in METHODS.values():
        table.add_row(method.id.value, method.title, method.description)
    console.print(table)


@app.command()
def history(
    search: str = typer.Option("", "--search", "-s", help="Match filing id or form type"),
    year: str = typer.Option("all", "--year", "-y", help="Tax year, or 'all'"),
    form_type: str = typer.Option("all", "--type", "-t", help="Form name (e.g. 'Modelo 100'), or 'all'"),
) -> None:
    """Show previous filings."""
    from asistente.menu import history_table
    from asistente.sections import History

    filings = History().filter(search=search, year=year, form_type=form_type)
    if not filings:
        typer.echo("No tax filings found")
        return
    Console().print(history_table(filings))


@app.command()
def faq(
    query: str = typer.Argument("", help="Text to search in questions and answers"),
) -> None:
    """Search the frequently asked questions."""
    from asistente.menu import print_faq
    from asistente.sections import Support

    print_faq(Console(), Support().search(query))


@app.command()
def profile(
    edit: bool = typer.Option(False, "--edit", "-e", help="Edit the profile fields interactively"),
) -> None:
    """Show (and optionally edit) your profile."""
    from asistente.menu import open_section
    from asistente.models.enums import SectionId
    from asistente.wizard import WizardSession

    open_section(WizardSession(console=Console()), SectionId.PROFILE, edit=edit)


@app.command()
def support(
    query: str = typer.Argument("", help="Text to search in questions and answers"),
    contact: bool = typer.Option(False, "--contact", "-c", help="Send a message to the support team"),
) -> None:
    """Search the FAQ and contact the support team."""
    from asistente.menu import open_section
    from asistente.models.enums import SectionId
    from asistente.wizard import WizardSession

    open_section(WizardSession(console=Console()), SectionId.SUPPORT, query=query, contact=contact)


@app.command()
def menu(
    settings: Path | None = SETTINGS_OPTION,
    seed: int | None = SEED_OPTION,
    speed: float = SPEED_OPTION,
    output_dir: Path = OUTPUT_OPTION,
) -> None:
    """Browse every section: form, profile, history and support."""
    from asistente.menu import run_menu
    from asistente.wizard import WizardSession

    session = WizardSession(
        console=Console(),
        settings=_load_settings_or_exit(settings),
        seed=seed,
        speed=speed,
        output_dir=output_dir,
    )
    try:
        run_menu(session)
    except OnboardingError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
