"""Configuración de logging (stdlib + Rich).

Por qué dos handlers:
- Los mensajes informativos van a stdout y los avisos/errores a stderr, así
  un operador puede redirigir solo los errores.
- Los loggers de aiohttp (`aiohttp.access`, `aiohttp.server`) heredan estos
  handlers vía el root logger.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(
    level: str | int = "INFO",
    *,
    stdout: Console | None = None,
    stderr: Console | None = None,
) -> None:
    """Instala los handlers en el root logger (idempotente)."""

    info_handler = RichHandler(
        console=stdout or Console(),
        show_path=False,
        markup=False,
    )
    info_handler.addFilter(lambda record: record.levelno < logging.WARNING)

    error_handler = RichHandler(
        console=stderr or Console(stderr=True),
        show_path=True,
        markup=False,
        rich_tracebacks=True,
    )
    error_handler.setLevel(logging.WARNING)

    root = logging.getLogger()
    root.handlers[:] = [info_handler, error_handler]
    root.setLevel(level.upper() if isinstance(level, str) else level)
