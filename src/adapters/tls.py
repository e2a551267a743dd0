"""Contexto TLS del servidor.

Preferencias:
- `OP_CIPHER_SERVER_PREFERENCE`: el servidor elige el cipher suite.
- Curvas: si no se configura `ecdh_curve`, OpenSSL ya ofrece X25519 antes que
  P-256. `set_ecdh_curve` admite una sola curva, así que solo se usa cuando el
  operador la pide explícitamente.
- Versiones y ciphers concretos se delegan en los defaults de OpenSSL.
"""

from __future__ import annotations

import ssl
from pathlib import Path

from core.errors import TLSConfigError


def build_ssl_context(
    cert_file: Path,
    key_file: Path,
    *,
    ecdh_curve: str | None = None,
) -> ssl.SSLContext:
    for label, path in (("certificate", cert_file), ("key", key_file)):
        if not Path(path).is_file():
            raise TLSConfigError(f"TLS {label} file not found: {path}")

    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.options |= ssl.OP_CIPHER_SERVER_PREFERENCE
    if ecdh_curve:
        try:
            context.set_ecdh_curve(ecdh_curve)
        except ValueError as exc:
            raise TLSConfigError(f"unknown ECDH curve {ecdh_curve!r}") from exc

    try:
        context.load_cert_chain(certfile=str(cert_file), keyfile=str(key_file))
    except (ssl.SSLError, OSError) as exc:
        raise TLSConfigError(f"cannot load certificate/key: {exc}") from exc
    return context
