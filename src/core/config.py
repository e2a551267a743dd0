"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Un único punto donde flags + entorno se funden en un `ServerConfig`
  inmutable que luego se pasa por referencia (sin singletons globales).
"""

from __future__ import annotations

import os
import socket
import sys
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.durations import parse_duration
from core.domain.models import ServerConfig
from core.errors import ConfigError
from core.resources_loader import resolve_ui_path

APP_NAME = "Test Deploy"
APP_VERSION = "1.0.0"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "test-deploy"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "test-deploy"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "test-deploy"
    return Path.home() / ".config" / "test-deploy"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Valores por defecto del servidor, sobreescribibles por entorno.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core.
    - Los flags de la CLI tienen prioridad; esto solo aporta defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="TEST_DEPLOY_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    addr: str = Field(
        default=":4000",
        description="Dirección de escucha (host:port).",
    )
    shutdown_grace_seconds: float = Field(
        default=15.0,
        ge=0,
        description="Espera máxima para conexiones en vuelo al apagar.",
    )
    cert_file: Path | None = Field(default=None, description="Certificado TLS.")
    key_file: Path | None = Field(default=None, description="Clave TLS.")
    ecdh_curve: str | None = Field(
        default=None,
        description="Curva ECDH (p.ej. 'prime256v1'); vacío = defaults de OpenSSL.",
    )

    template_path: Path = Field(default=Path("ui/html/index.html"))
    static_dir: Path = Field(default=Path("ui/static"))

    read_timeout_seconds: float = Field(default=5.0, gt=0)
    write_timeout_seconds: float = Field(default=10.0, gt=0)
    idle_timeout_seconds: float = Field(default=60.0, gt=0)

    access_log: bool = Field(default=True)
    log_level: str = Field(default="INFO", description="Nivel de logging (DEBUG/INFO/...).")

    @field_validator(
        "shutdown_grace_seconds",
        "read_timeout_seconds",
        "write_timeout_seconds",
        "idle_timeout_seconds",
        mode="before",
    )
    @classmethod
    def _accept_go_durations(cls, value: object) -> object:
        # Permite TEST_DEPLOY_SHUTDOWN_GRACE_SECONDS=1m30s además de números.
        if isinstance(value, str):
            return parse_duration(value)
        return value

    @field_validator("cert_file", "key_file", "ecdh_curve", mode="before")
    @classmethod
    def _empty_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"unknown log level {value!r} (expected one of {', '.join(_LOG_LEVELS)})")
        return level


def load_settings() -> AppSettings:
    """Lee `AppSettings` del entorno y `.env`.

    Un valor inválido (p.ej. `TEST_DEPLOY_SHUTDOWN_GRACE_SECONDS=abc`) se
    reporta como `ConfigError` para que la CLI salga con código 2.
    """

    try:
        return AppSettings()
    except ValidationError as exc:
        messages = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigError(f"invalid environment settings: {messages}") from exc


def parse_listen_address(addr: str, *, tls: bool = True) -> tuple[str | None, int]:
    """Divide una dirección estilo `host:port`.

    Formatos aceptados:
    - `:4000` (todas las interfaces)
    - `127.0.0.1:8443`, `localhost:80`
    - `[::1]:8443`
    - `:https` (nombre de servicio)
    - `""` -> 443 con TLS, 80 sin TLS
    """

    text = addr.strip()
    if not text:
        return None, 443 if tls else 80

    if text.startswith("["):
        end = text.find("]")
        if end == -1 or not text[end + 1 :].startswith(":"):
            raise ConfigError(f"invalid address {addr!r}: expected [host]:port")
        host = text[1:end]
        port_text = text[end + 2 :]
    else:
        host, sep, port_text = text.rpartition(":")
        if not sep:
            raise ConfigError(f"invalid address {addr!r}: missing port")
        if ":" in host:
            raise ConfigError(f"invalid address {addr!r}: IPv6 hosts must use brackets")

    if not port_text:
        raise ConfigError(f"invalid address {addr!r}: missing port")
    if port_text.isdigit():
        port = int(port_text)
    else:
        try:
            port = socket.getservbyname(port_text, "tcp")
        except OSError as exc:
            raise ConfigError(f"invalid address {addr!r}: unknown port {port_text!r}") from exc
    if not 0 <= port <= 65535:
        raise ConfigError(f"invalid address {addr!r}: port out of range")

    return (host or None), port


def build_server_config(
    settings: AppSettings | None = None,
    *,
    addr: str | None = None,
    wait: str | float | None = None,
    cert_file: Path | None = None,
    key_file: Path | None = None,
    template_path: Path | None = None,
    static_dir: Path | None = None,
    tls: bool = True,
    access_log: bool | None = None,
) -> ServerConfig:
    """Funde settings + overrides de la CLI en un `ServerConfig` inmutable.

    Los overrides con valor None no pisan los settings.
    """

    settings = settings or load_settings()
    address = settings.addr if addr is None else addr
    host, port = parse_listen_address(address, tls=tls)

    if wait is None:
        grace = settings.shutdown_grace_seconds
    else:
        try:
            grace = parse_duration(wait)
        except ValueError as exc:
            raise ConfigError(f"invalid --wait value: {exc}") from exc

    template = template_path if template_path is not None else settings.template_path
    static = static_dir if static_dir is not None else settings.static_dir

    try:
        return ServerConfig(
            address=address,
            host=host,
            port=port,
            tls_enabled=tls,
            cert_file=cert_file if cert_file is not None else settings.cert_file,
            key_file=key_file if key_file is not None else settings.key_file,
            ecdh_curve=settings.ecdh_curve,
            template_path=resolve_ui_path(template),
            static_dir=resolve_ui_path(static),
            read_timeout=settings.read_timeout_seconds,
            write_timeout=settings.write_timeout_seconds,
            idle_timeout=settings.idle_timeout_seconds,
            shutdown_grace=grace,
            access_log=settings.access_log if access_log is None else access_log,
        )
    except ValidationError as exc:
        messages = "; ".join(err["msg"] for err in exc.errors())
        raise ConfigError(f"invalid server configuration: {messages}") from exc
