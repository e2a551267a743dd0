"""Taxonomía de errores.

Por qué aquí:
- El Core define *qué* puede fallar; la CLI decide el código de salida.
- Los adaptadores (aiohttp/Jinja2/ssl) traducen sus excepciones a estas clases
  para que el resto del código no dependa de librerías concretas.
"""

from __future__ import annotations


class DeployError(Exception):
    """Base de todos los errores propios del servidor."""

    exit_code: int = 1


class ConfigError(DeployError):
    """Valor de configuración inválido (dirección, duración, rutas)."""

    exit_code = 2


class StartupError(DeployError):
    """Fallo detectado antes de aceptar conexiones."""


class TemplateLoadError(StartupError):
    """La plantilla de la página no existe o no se puede parsear."""


class StaticRootError(StartupError):
    """El directorio de estáticos no existe o no es un directorio."""


class TLSConfigError(StartupError):
    """Certificado/clave ausentes o inválidos."""


class BindError(StartupError):
    """No se pudo escuchar en la dirección configurada."""


class AssetError(LookupError):
    """Error por request al resolver un estático."""


class AssetNotFound(AssetError):
    pass


class AssetForbidden(AssetError):
    pass
