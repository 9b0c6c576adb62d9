"""CLI `metabase-setup`.

Sin flags ni subcomandos: lee `./.env`, espera a Metabase y reconcilia.
Exit 0 en éxito; cualquier `SetupError` sale con su `exit_code`.
"""

from __future__ import annotations

import typer

from adapters.http_client import build_client
from cli.ui_components import build_summary_panel, console, log_error, log_info, log_warn
from core.config import load_settings
from core.errors import SetupError
from core.services.readiness import wait_until_ready
from core.services.setup_reconciler import SetupHooks, reconcile

app = typer.Typer(
    add_completion=False,
    help="Configure the admin account and the Supabase connection of a local Metabase (idempotent).",
)


@app.command()
def setup() -> None:
    """Run first-run setup or make sure the database connection is registered."""

    log_info("Starting Metabase setup...")
    try:
        settings = load_settings()
        with build_client(settings) as client:
            log_info("Waiting for Metabase to be ready...")
            wait_until_ready(
                client,
                max_wait=settings.metabase_max_wait_seconds,
                interval=settings.metabase_wait_interval_seconds,
            )
            log_info("Metabase is ready")
            result = reconcile(client, settings, SetupHooks(info=log_info, warning=log_warn))
    except SetupError as exc:
        log_error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    except KeyboardInterrupt:
        log_warn("Operation interrupted by user")
        raise typer.Exit(code=130) from None

    log_info("Setup completed successfully!")
    console.print(
        build_summary_panel(
            result=result,
            url=settings.metabase_url,
            admin_email=settings.mb_admin_email,
        )
    )


def run() -> None:
    app()


if __name__ == "__main__":
    run()
