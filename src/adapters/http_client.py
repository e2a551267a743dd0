"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts y headers para las comprobaciones contra un servidor
  en marcha (`doctor --check-url`).
- Con certificados autofirmados hay que poder desactivar la verificación TLS
  o apuntar a un CA propio sin repetir la lógica en cada llamada.
"""

from __future__ import annotations

import ssl
from pathlib import Path

import httpx

from core.config import APP_VERSION

DEFAULT_TIMEOUT_SECONDS = 5.0


def build_async_client(
    *,
    verify: bool | Path = True,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    extra_headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros.

    `verify` acepta un bool o la ruta a un bundle CA (PEM).
    """

    headers: dict[str, str] = {
        "User-Agent": f"test-deploy/{APP_VERSION}",
        "Accept": "text/html,*/*;q=0.8",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        follow_redirects=False,
        headers=headers,
        verify=ssl.create_default_context(cafile=str(verify)) if isinstance(verify, Path) else verify,
    )
