"""Doctor command for deployment diagnostics."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, Optional

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from adapters.page_renderer import TemplatePageRenderer
from adapters.static_files import StaticContentProvider
from adapters.tls import build_ssl_context
from core.config import load_settings, parse_listen_address
from core.errors import ConfigError, DeployError
from core.resources_loader import resolve_ui_path

app = typer.Typer(no_args_is_help=True, help="Deployment diagnostics and configuration checks.")

_console = Console()
_err_console = Console(stderr=True)


def _check(action: Callable[[], str]) -> tuple[bool, str]:
    try:
        return True, action()
    except DeployError as exc:
        return False, str(exc)


async def _check_http(url: str, *, verify: bool) -> tuple[bool, str]:
    try:
        async with build_async_client(verify=verify) as client:
            response = await client.get(url)
        return response.status_code < 400, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc) or exc.__class__.__name__


@app.command()
def run(
    addr: Optional[str] = typer.Option(None, "--addr", help="Address to validate."),
    cert_file: Optional[Path] = typer.Option(None, "--cert-file", help="TLS certificate file."),
    key_file: Optional[Path] = typer.Option(None, "--key-file", help="TLS key file."),
    template: Optional[Path] = typer.Option(None, "--template", help="Page template file."),
    static_dir: Optional[Path] = typer.Option(None, "--static-dir", help="Static assets directory."),
    check_url: Optional[str] = typer.Option(None, "--check-url", help="Request this URL on a running server."),
    insecure: bool = typer.Option(False, "--insecure", "-k", help="Skip TLS verification for --check-url."),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    try:
        settings = load_settings()
    except ConfigError as exc:
        _err_console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(code=exc.exit_code)
    address = settings.addr if addr is None else addr
    cert = cert_file or settings.cert_file
    key = key_file or settings.key_file
    template_path = resolve_ui_path(template or settings.template_path)
    static_path = resolve_ui_path(static_dir or settings.static_dir)

    table = Table(title="Test Deploy Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    failures = 0

    def add(name: str, ok: bool, detail: str, *, optional: bool = False) -> None:
        nonlocal failures
        if ok:
            status = "OK"
        elif optional:
            status = "OPTIONAL"
        else:
            status = "FAIL"
            failures += 1
        table.add_row(name, status, detail)

    def _address() -> str:
        host, port = parse_listen_address(address)
        return f"{host or '*'}:{port}"

    ok, detail = _check(_address)
    add("Address", ok, detail)

    def _template() -> str:
        TemplatePageRenderer(template_path).validate()
        return str(template_path)

    ok, detail = _check(_template)
    add("Template", ok, detail)

    def _static() -> str:
        StaticContentProvider(static_path).check_root()
        return str(static_path)

    ok, detail = _check(_static)
    add("Static directory", ok, detail)

    if cert is None or key is None:
        add("TLS material", False, "No --cert-file/--key-file -> only --no-tls will start", optional=True)
    else:

        def _tls() -> str:
            build_ssl_context(cert, key, ecdh_curve=settings.ecdh_curve)
            return f"{cert} + {key}"

        ok, detail = _check(_tls)
        add("TLS material", ok, detail)

    if check_url:
        ok, detail = asyncio.run(_check_http(check_url, verify=not insecure))
        add("HTTP check", ok, detail)

    _console.print(table)

    if failures:
        _console.print(f"\n[red]{failures} check(s) failed.[/red] `serve` would exit with code 1.")
        raise typer.Exit(code=1)
