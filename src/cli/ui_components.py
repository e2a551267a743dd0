"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en `serve` y `doctor`.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import APP_NAME, APP_VERSION
from core.domain.durations import format_duration
from core.domain.models import ServerConfig


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Por qué aquí:
    - Permite desactivar banner en modos no interactivos (`--quiet`).
    """

    title = Text(f"{APP_NAME} v{APP_VERSION}", style="bold cyan")
    subtitle = Text("Página estática • Assets • TLS", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_config_table(config: ServerConfig) -> Table:
    """Tabla con la configuración efectiva (inmutable) del servidor."""

    table = Table(title="Server configuration")
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    table.add_row("Address", f"{config.scheme}://{config.address}")
    if config.tls_enabled:
        table.add_row("Certificate", str(config.cert_file))
        table.add_row("Key", str(config.key_file))
        table.add_row("ECDH curve", config.ecdh_curve or "OpenSSL default")
    else:
        table.add_row("TLS", "[yellow]disabled[/yellow]")
    table.add_row("Template", str(config.template_path))
    table.add_row("Static", f"{config.static_prefix} -> {config.static_dir}")
    table.add_row(
        "Timeouts",
        "read {} / write {} / idle {}".format(
            format_duration(config.read_timeout),
            format_duration(config.write_timeout),
            format_duration(config.idle_timeout),
        ),
    )
    table.add_row("Shutdown grace", format_duration(config.shutdown_grace))
    return table
