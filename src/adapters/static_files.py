"""Proveedor de estáticos.

Reglas:
- La ruta llega ya sin el prefijo `/static/`.
- Segmentos `..`, rutas absolutas o bytes NUL -> `AssetForbidden` (403).
- Todo lo que tras resolver symlinks quede fuera de la raíz -> `AssetForbidden`.
- Inexistente o no-fichero -> `AssetNotFound` (404).
- Un directorio sirve su `index.html` si existe; no hay listado.
- Sin caché: se consulta el disco en cada request.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath, PureWindowsPath

from core.errors import AssetForbidden, AssetNotFound, StaticRootError


class StaticContentProvider:
    def __init__(self, root: Path, *, index_file: str = "index.html") -> None:
        self.root = Path(root).resolve()
        self.index_file = index_file

    def check_root(self) -> None:
        if not self.root.is_dir():
            raise StaticRootError(f"static directory not found: {self.root}")

    def resolve(self, relative_path: str) -> Path:
        if "\x00" in relative_path:
            raise AssetForbidden(relative_path)

        rel = PurePosixPath(relative_path)
        if rel.is_absolute() or PureWindowsPath(relative_path).anchor:
            raise AssetForbidden(relative_path)
        if ".." in rel.parts or "\\" in relative_path:
            raise AssetForbidden(relative_path)

        candidate = self.root.joinpath(*rel.parts)
        try:
            resolved = candidate.resolve(strict=True)
        except (OSError, RuntimeError) as exc:
            # RuntimeError: bucle de symlinks en Python < 3.13.
            raise AssetNotFound(relative_path) from exc

        try:
            resolved.relative_to(self.root)
        except ValueError as exc:
            raise AssetForbidden(relative_path) from exc

        if resolved.is_dir():
            index = resolved / self.index_file
            if index.is_file():
                return index
            raise AssetNotFound(relative_path)
        if not resolved.is_file():
            raise AssetNotFound(relative_path)
        return resolved
