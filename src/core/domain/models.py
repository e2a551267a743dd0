"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- La configuración del servidor es inmutable durante toda la vida del proceso;
  `frozen=True` lo garantiza sin código extra.
- Validación en el borde: la CLI y `AppSettings` construyen estos modelos y el
  resto del código puede confiar en sus valores.

Nota:
- Estos modelos describen *qué* es el servidor, no *cómo* se levanta.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict


class LifecycleState(str, Enum):
    """Estados del ciclo de vida del servidor."""

    STARTING = "starting"
    SERVING = "serving"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


class ServerConfig(BaseModel):
    """Configuración efectiva del servidor.

    Se crea una sola vez al arrancar (flags + entorno) y se pasa por
    referencia a los componentes que la necesitan.
    """

    model_config = ConfigDict(frozen=True)

    address: str = Field(
        ...,
        description="Dirección tal y como se recibió (p.ej. ':4000').",
    )
    host: str | None = Field(
        default=None,
        description="Host de escucha; None significa todas las interfaces.",
    )
    port: int = Field(
        ...,
        ge=0,
        le=65535,
        description="Puerto TCP (0 = efímero, útil en tests).",
    )

    tls_enabled: bool = Field(
        default=True,
        description="Si es False se sirve HTTP plano (solo desarrollo).",
    )
    cert_file: Path | None = Field(
        default=None,
        description="Certificado TLS (PEM).",
    )
    key_file: Path | None = Field(
        default=None,
        description="Clave privada TLS (PEM).",
    )
    ecdh_curve: str | None = Field(
        default=None,
        description="Curva ECDH preferida; None usa el orden por defecto de OpenSSL.",
    )

    template_path: Path = Field(
        default=Path("ui/html/index.html"),
        description="Plantilla de la página principal.",
    )
    static_dir: Path = Field(
        default=Path("ui/static"),
        description="Raíz de los estáticos.",
    )
    static_prefix: str = Field(
        default="/static/",
        description="Prefijo URL bajo el que se montan los estáticos.",
    )

    read_timeout: float = Field(default=5.0, gt=0, description="Segundos para leer el cuerpo del request.")
    write_timeout: float = Field(default=10.0, gt=0, description="Segundos para producir la respuesta.")
    idle_timeout: float = Field(default=60.0, gt=0, description="Keep-alive máximo entre requests.")
    shutdown_grace: float = Field(
        default=15.0,
        ge=0,
        description="Tiempo de gracia para requests en vuelo durante el apagado.",
    )

    access_log: bool = Field(default=True, description="Emitir una línea de log por request.")

    @model_validator(mode="after")
    def _check_tls_material(self) -> "ServerConfig":
        if self.tls_enabled and (self.cert_file is None or self.key_file is None):
            raise ValueError("TLS requires both cert_file and key_file")
        if not (self.static_prefix.startswith("/") and self.static_prefix.endswith("/")):
            raise ValueError("static_prefix must start and end with '/'")
        return self

    @property
    def scheme(self) -> str:
        return "https" if self.tls_enabled else "http"


class ShutdownOutcome(BaseModel):
    """Resultado del apagado ordenado.

    Por qué existe:
    - Distingue un apagado limpio de uno forzado (requests cancelados al
      vencer el plazo), algo que antes no era visible para el operador.
    """

    inflight_at_start: int = Field(default=0, ge=0)
    cancelled: int = Field(default=0, ge=0)
    elapsed_seconds: float = Field(default=0.0, ge=0)

    @property
    def clean(self) -> bool:
        return self.cancelled == 0
