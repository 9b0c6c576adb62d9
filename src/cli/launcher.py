"""CLI `metabase-run`: arranca Metabase en local con la config del `.env`."""

from __future__ import annotations

import typer

from adapters.metabase_launcher import LauncherSettings, launch
from cli.ui_components import build_launch_panel, console, log_error, log_warn
from core.config import load_from_env_file
from core.errors import SetupError

app = typer.Typer(add_completion=False, help="Start Metabase locally (embedded H2 application database).")


@app.command()
def start() -> None:
    """Start Metabase in the foreground; exits with its exit code."""

    try:
        settings = load_from_env_file(LauncherSettings)
        console.print(build_launch_panel(url=settings.metabase_url, admin_email=settings.mb_admin_email))
        code = launch(settings)
    except SetupError as exc:
        log_error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    except KeyboardInterrupt:
        log_warn("Metabase stopped")
        raise typer.Exit(code=130) from None

    raise typer.Exit(code=code)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
