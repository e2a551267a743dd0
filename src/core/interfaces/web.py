"""Contratos de los componentes que sirven contenido.

Por qué Protocol:
- El router solo necesita "algo que renderice la página" y "algo que resuelva
  estáticos"; los tests pueden sustituirlos sin herencia.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class PageRenderer(Protocol):
    """Produce el HTML de la página principal."""

    def validate(self) -> None:
        """Falla con `TemplateLoadError` si la plantilla no es utilizable."""

        ...

    def render(self) -> str:
        ...


@runtime_checkable
class ContentProvider(Protocol):
    """Resuelve una ruta relativa (sin prefijo) a un fichero en disco."""

    def check_root(self) -> None:
        ...

    def resolve(self, relative_path: str) -> Path:
        """Devuelve la ruta o lanza `AssetNotFound` / `AssetForbidden`."""

        ...
