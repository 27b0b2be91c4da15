"""Interactive chat REPL over the rule-based tax assistant."""

import mimetypes
from pathlib import Path

from rich.console import Console
from rich.panel import Panel

from asistente.exceptions import OnboardingError
from asistente.models.chat import ChatMessage
from asistente.models.enums import Role
from asistente.strategies.chat import ChatStrategy
from asistente.timers import Scheduler

EXIT_COMMANDS = {"salir", "exit", "quit"}

HELP_TEXT = (
    "[dim]Comandos: /adjuntar <ruta>  /quitar  /guardar  /completar  "
    "(escribe 'salir' para terminar)[/dim]"
)


def print_message(console: Console, message: ChatMessage) -> None:
    style = "bold cyan" if message.role == Role.USER else "bold green"
    stamp = message.timestamp.strftime("%H:%M")
    console.print(f"[dim]\\[{stamp}][/dim] [{style}]{message.sender}:[/{style}] {message.content}", highlight=False)
    for attachment in message.attachments:
        console.print(f"    [dim]📎 {attachment.name} ({attachment.size} bytes)[/dim]")


def _attach(console: Console, strategy: ChatStrategy, raw_path: str) -> None:
    path = Path(raw_path.strip().strip("'\""))
    if not path.is_file():
        console.print(f"[red]Archivo no encontrado: {path}[/red]")
        return
    mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    strategy.add_attachment(path.name, path.stat().st_size, mime)


def run_chat(
    console: Console,
    strategy: ChatStrategy,
    scheduler: Scheduler,
    speed: float = 0.0,
    output_dir: Path = Path("."),
) -> bool:
    """Run the chat until the user completes it or leaves.

    Returns True when the chat was completed.
    """
    console.print(
        f"\n[bold green]Asistente Fiscal - {strategy.form.display_name}[/bold green]  {HELP_TEXT}\n"
    )
    for message in strategy.messages:
        print_message(console, message)
    if strategy.show_suggestions:
        console.print("\n[bold]Preguntas sugeridas:[/bold]")
        for number, question in enumerate(strategy.suggested_questions, start=1):
            console.print(f"  [cyan]{number}.[/cyan] {question}")
    console.print()

    while not strategy.completed:
        try:
            user_input = console.input("[bold cyan]> [/bold cyan]")
        except (EOFError, KeyboardInterrupt):
            break

        stripped = user_input.strip()
        if stripped.lower() in EXIT_COMMANDS:
            break

        if stripped.startswith("/adjuntar"):
            _attach(console, strategy, stripped[len("/adjuntar"):])
            continue
        if stripped == "/quitar":
            for attachment in list(strategy.attachments):
                strategy.remove_attachment(attachment.id)
            console.print("[dim]Adjuntos eliminados.[/dim]")
            continue
        if stripped == "/guardar":
            path = strategy.export_transcript(output_dir)
            console.print(f"[dim]Conversación guardada en {path}[/dim]")
            continue
        if stripped == "/completar":
            try:
                strategy.complete()
            except OnboardingError:
                console.print("[yellow]Dime cuándo has terminado (por ejemplo, 'listo') para completar.[/yellow]")
            continue

        if strategy.show_suggestions and stripped.isdigit():
            index = int(stripped) - 1
            if 0 <= index < len(strategy.suggested_questions):
                stripped = strategy.suggested_questions[index]
                console.print(f"[dim]{stripped}[/dim]")

        sent = strategy.send_message(stripped)
        if sent is None:
            continue
        print_message(console, sent)
        with console.status("El asistente está escribiendo..."):
            scheduler.run_until_idle(speed=speed)
        print_message(console, strategy.messages[-1])
        console.print(f"[dim]Progreso de la conversación: {strategy.progress:.0f}%[/dim]\n")
        if strategy.completion_offered:
            console.print(
                Panel(
                    "Escribe [bold]/completar[/bold] para continuar con el siguiente paso.",
                    border_style="green",
                )
            )

    if not strategy.completed:
        console.print("\n[dim]Hasta luego.[/dim]")
    return strategy.completed
