"""Entrypoint de la CLI (Typer).

Por qué la CLI traduce errores a códigos de salida:
- El Core solo lanza excepciones tipadas (`DeployError`); aquí se decide qué
  ve el operador y con qué código termina el proceso.

Códigos:
- 0: apagado tras SIGINT (limpio o forzado; el forzado deja un warning)
- 1: fallo de arranque (plantilla, estáticos, TLS, bind)
- 2: configuración inválida
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from cli import doctor
from cli.ui_components import build_config_table, print_banner
from core.config import build_server_config, load_settings
from core.errors import ConfigError, StartupError
from core.logs import configure_logging
from core.services.lifecycle import ServerLifecycle

app = typer.Typer(no_args_is_help=True, help="Minimal HTTPS server for a static page and its assets.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)

logger = logging.getLogger("cli")


@app.command()
def serve(
    addr: Optional[str] = typer.Option(None, "--addr", help="HTTP network address (default ':4000')."),
    wait: Optional[str] = typer.Option(
        None,
        "--wait",
        help="Duration to wait for existing connections to finish on shutdown (e.g. 15s, 1m).",
    ),
    cert_file: Optional[Path] = typer.Option(None, "--cert-file", help="TLS certificate file."),
    key_file: Optional[Path] = typer.Option(None, "--key-file", help="TLS key file."),
    template: Optional[Path] = typer.Option(None, "--template", help="Page template file."),
    static_dir: Optional[Path] = typer.Option(None, "--static-dir", help="Static assets directory."),
    no_tls: bool = typer.Option(False, "--no-tls", help="Serve plain HTTP (development only)."),
    access_log: Optional[bool] = typer.Option(
        None,
        "--access-log/--no-access-log",
        help="Log one line per request.",
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Skip banner and configuration table."),
) -> None:
    """Serve the page and the static directory until interrupted (Ctrl+C)."""

    try:
        settings = load_settings()
        config = build_server_config(
            settings,
            addr=addr,
            wait=wait,
            cert_file=cert_file,
            key_file=key_file,
            template_path=template,
            static_dir=static_dir,
            tls=not no_tls,
            access_log=access_log,
        )
    except ConfigError as exc:
        _err_console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(code=exc.exit_code)

    configure_logging(settings.log_level)
    if not quiet:
        print_banner(_console)
        _console.print(build_config_table(config))

    lifecycle = ServerLifecycle(config)
    try:
        asyncio.run(lifecycle.run())
    except StartupError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=exc.exit_code)
    except KeyboardInterrupt:
        # Plataformas sin add_signal_handler: el apagado ya se hizo al cancelar.
        pass

    logger.info("shutting down...")
    raise typer.Exit(code=0)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
