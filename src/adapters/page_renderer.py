"""Render de la página principal (Jinja2).

Por qué está en adapters:
- Jinja2 es un detalle de infraestructura; el Core solo conoce `PageRenderer`.

Diseño:
- `validate()` se llama al arrancar: una plantilla ausente o mal formada
  aborta el proceso antes de aceptar conexiones.
- `render()` se llama en cada request sin contexto. Con `auto_reload=True`
  Jinja2 vuelve a leer el fichero si cambió en disco.
- `keep_trailing_newline=True` para que una plantilla sin expresiones se sirva
  byte a byte igual que el fichero.
- Solo `{{ ... }}` es sintaxis activa. Bloques y comentarios usan
  `{{% %}}` y `{{/* */}}`, así que `{%` o `{#` dentro de CSS/JS se sirven
  tal cual.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateError, TemplateNotFound, select_autoescape

from core.errors import TemplateLoadError


class TemplatePageRenderer:
    def __init__(self, template_path: Path) -> None:
        self.template_path = Path(template_path)
        self._env = Environment(
            loader=FileSystemLoader(str(self.template_path.parent)),
            autoescape=select_autoescape(["html", "xml"]),
            auto_reload=True,
            keep_trailing_newline=True,
            block_start_string="{{%",
            block_end_string="%}}",
            comment_start_string="{{/*",
            comment_end_string="*/}}",
        )

    def validate(self) -> None:
        if not self.template_path.is_file():
            raise TemplateLoadError(f"template not found: {self.template_path}")
        try:
            self._env.get_template(self.template_path.name)
        except TemplateNotFound as exc:
            raise TemplateLoadError(f"template not found: {self.template_path}") from exc
        except TemplateError as exc:
            raise TemplateLoadError(f"template {self.template_path} is malformed: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise TemplateLoadError(f"template {self.template_path} is not valid UTF-8: {exc}") from exc
        except OSError as exc:
            raise TemplateLoadError(f"cannot read template {self.template_path}: {exc}") from exc

    def render(self) -> str:
        """Renderiza la plantilla sin datos (lanza `jinja2.TemplateError`, `UnicodeDecodeError` u `OSError`)."""

        return self._env.get_template(self.template_path.name).render()
