"""Localización y validación de los recursos de UI.

Este módulo vive en `core/` porque:
- centraliza *dónde* están la plantilla y los estáticos sin acoplarse a la CLI
- fija la regla "los recursos obligatorios se validan al arrancar, no en el
  primer request".
"""

from __future__ import annotations

from pathlib import Path

from core.interfaces.web import ContentProvider, PageRenderer


def _project_root() -> Path:
    # core/resources_loader.py -> core -> src -> <project_root>
    return Path(__file__).resolve().parents[2]


def resolve_ui_path(path: Path) -> Path:
    """Resuelve una ruta de UI relativa.

    Orden:
    1) tal cual (relativa al cwd)
    2) <project_root>/<path> (el `ui/` que acompaña al repo)

    Las rutas absolutas no se tocan. Si no existe en ningún sitio se devuelve
    la primera candidata para que el error de validación la nombre.
    """

    if path.is_absolute():
        return path
    candidates = [Path.cwd() / path, _project_root() / path]
    for p in candidates:
        if p.exists():
            return p
    return candidates[0]


def validate_startup_resources(renderer: PageRenderer, provider: ContentProvider) -> None:
    """Falla con `StartupError` si la plantilla o la raíz de estáticos no sirven."""

    renderer.validate()
    provider.check_root()
