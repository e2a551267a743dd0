"""Router HTTP (aiohttp).

Solo dos rutas:
- `GET /`          -> página principal (`PageRenderer`)
- `GET /static/*`  -> estáticos (`ContentProvider`), sin el prefijo

Cualquier otra ruta es 404 y un método distinto en una ruta conocida es 405
(comportamiento por defecto del router de aiohttp). `HEAD /` también es 405;
los estáticos sí aceptan HEAD.

Cada handler se envuelve con los plazos de lectura/escritura y con el
contador de requests en vuelo que usa el apagado ordenado. El plazo de
escritura cubre también el envío de ficheros: aiohttp transmite un
`FileResponse` después de que el handler retorna, así que
`DeadlineFileResponse` aplica lo que queda del plazo a ese envío y, si se
agota, cierra la conexión.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable

from aiohttp import web
from jinja2 import TemplateError

from adapters.page_renderer import TemplatePageRenderer
from adapters.static_files import StaticContentProvider
from core.domain.models import ServerConfig
from core.errors import AssetForbidden, AssetNotFound
from core.interfaces.web import ContentProvider, PageRenderer

logger = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


class InflightTracker:
    """Cuenta requests activos y los cancelados por un apagado forzado."""

    def __init__(self) -> None:
        self.active = 0
        self.cancelled = 0
        self._tasks: set[asyncio.Task] = set()

    def enter(self) -> None:
        self.active += 1
        task = asyncio.current_task()
        if task is not None:
            self._tasks.add(task)

    def leave(self) -> None:
        self.active -= 1
        task = asyncio.current_task()
        if task is not None:
            self._tasks.discard(task)

    async def drain(self, timeout: float = 1.0) -> None:
        """Espera a que los handlers ya cancelados terminen de desenrollarse.

        aiohttp cancela las tareas al vencer el plazo pero no las espera; sin
        esto `cancelled` podría leerse antes de actualizarse.
        """

        pending = {task for task in self._tasks if not task.done()}
        if pending:
            await asyncio.wait(pending, timeout=timeout)


CONFIG_KEY = web.AppKey("config", ServerConfig)
RENDERER_KEY = web.AppKey("renderer", PageRenderer)
PROVIDER_KEY = web.AppKey("provider", ContentProvider)
TRACKER_KEY = web.AppKey("tracker", InflightTracker)

# Instante (reloj del loop) en que vence `write_timeout` para el request.
WRITE_DEADLINE = "write_deadline"


class DeadlineFileResponse(web.FileResponse):
    """`FileResponse` cuyo envío termina antes de `deadline` o corta la conexión."""

    def __init__(self, path: Path, *, deadline: float | None = None, **kwargs: Any) -> None:
        super().__init__(path, **kwargs)
        self.deadline = deadline

    async def prepare(self, request: web.BaseRequest):
        if self.deadline is None:
            return await super().prepare(request)
        remaining = max(self.deadline - asyncio.get_running_loop().time(), 0.0)
        try:
            return await asyncio.wait_for(super().prepare(request), timeout=remaining)
        except asyncio.TimeoutError:
            logger.error("%s %s exceeded write timeout while sending file", request.method, request.path)
            if request.transport is not None:
                request.transport.close()
            raise ConnectionResetError("write timeout sending file") from None


async def home(request: web.Request) -> web.Response:
    renderer = request.app[RENDERER_KEY]
    try:
        html = renderer.render()
    except (TemplateError, UnicodeDecodeError, OSError):
        logger.exception("cannot render page template")
        raise web.HTTPInternalServerError()
    return web.Response(text=html, content_type="text/html", charset="utf-8")


async def static_asset(request: web.Request) -> web.StreamResponse:
    provider = request.app[PROVIDER_KEY]
    relative = request.match_info["path"]
    try:
        path = provider.resolve(relative)
    except AssetForbidden:
        logger.warning("rejected static path %r from %s", relative, request.remote)
        raise web.HTTPForbidden()
    except AssetNotFound:
        raise web.HTTPNotFound()
    return DeadlineFileResponse(path, deadline=request.get(WRITE_DEADLINE))


def with_deadlines(handler: Handler, config: ServerConfig, tracker: InflightTracker) -> Handler:
    """Aplica `read_timeout`/`write_timeout` y registra el request en `tracker`."""

    @functools.wraps(handler)
    async def guarded(request: web.Request) -> web.StreamResponse:
        tracker.enter()
        try:
            request[WRITE_DEADLINE] = asyncio.get_running_loop().time() + config.write_timeout
            if request.body_exists:
                try:
                    await asyncio.wait_for(request.read(), timeout=config.read_timeout)
                except asyncio.TimeoutError:
                    raise web.HTTPRequestTimeout() from None
            try:
                return await asyncio.wait_for(handler(request), timeout=config.write_timeout)
            except asyncio.TimeoutError:
                logger.error(
                    "%s %s exceeded write timeout (%gs)",
                    request.method,
                    request.path,
                    config.write_timeout,
                )
                raise web.HTTPServiceUnavailable() from None
        except asyncio.CancelledError:
            tracker.cancelled += 1
            raise
        finally:
            tracker.leave()

    return guarded


def build_app(
    config: ServerConfig,
    *,
    renderer: PageRenderer | None = None,
    provider: ContentProvider | None = None,
    tracker: InflightTracker | None = None,
) -> web.Application:
    """Construye la aplicación con sus dos rutas.

    No valida recursos: eso lo hace el ciclo de vida antes de escuchar.
    Los tests pueden añadir rutas extra antes de arrancar (`app.router`).
    """

    renderer = renderer or TemplatePageRenderer(config.template_path)
    provider = provider or StaticContentProvider(config.static_dir)
    tracker = tracker or InflightTracker()

    app = web.Application()
    app[CONFIG_KEY] = config
    app[RENDERER_KEY] = renderer
    app[PROVIDER_KEY] = provider
    app[TRACKER_KEY] = tracker

    app.router.add_get("/", with_deadlines(home, config, tracker), allow_head=False)
    app.router.add_get(
        config.static_prefix + "{path:.*}",
        with_deadlines(static_asset, config, tracker),
    )
    return app
