"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Las mismas líneas `[INFO]`/`[WARN]`/`[ERROR]` sirven al setup y al launcher.
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from core.domain.models import ReconcileAction, ReconcileResult

console = Console(highlight=False)
error_console = Console(stderr=True, highlight=False)


def _line(level: str, style: str, message: str) -> Text:
    # Text.assemble evita que corchetes del mensaje se interpreten como markup.
    return Text.assemble((f"[{level}]", style), " ", message)


def log_info(message: str) -> None:
    console.print(_line("INFO", "green", message))


def log_warn(message: str) -> None:
    console.print(_line("WARN", "bold yellow", message))


def log_error(message: str) -> None:
    error_console.print(_line("ERROR", "red", message))


_ACTION_LABELS = {
    ReconcileAction.SETUP_PERFORMED: "first-run setup performed",
    ReconcileAction.DATABASE_CREATED: "database registered",
    ReconcileAction.DATABASE_PRESENT: "database already registered",
}


def build_summary_panel(*, result: ReconcileResult, url: str, admin_email: str) -> Panel:
    """Panel final: qué se hizo y cómo entrar."""

    body = Text()
    body.append("Result: ", style="bold")
    body.append(_ACTION_LABELS[result.action] + "\n")
    body.append("Database: ", style="bold")
    body.append(result.database_name)
    if result.database_id is not None:
        body.append(f" (id {result.database_id})", style="dim")
    body.append("\nAccess Metabase at: ", style="bold")
    body.append(url, style="cyan")
    body.append("\nLogin with: ", style="bold")
    body.append(admin_email)
    return Panel(body, title=Text("Metabase setup", style="bold green"), border_style="green")


def build_launch_panel(*, url: str, admin_email: str | None) -> Panel:
    body = Text()
    body.append("Access at: ", style="bold")
    body.append(url, style="cyan")
    if admin_email:
        body.append("\nAdmin email: ", style="bold")
        body.append(admin_email)
    body.append("\nPress Ctrl+C to stop", style="dim")
    return Panel(body, title=Text("Starting Metabase", style="bold cyan"), border_style="cyan")
