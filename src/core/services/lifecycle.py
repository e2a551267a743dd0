"""Ciclo de vida del servidor.

Estados: Starting -> Serving -> ShuttingDown -> Stopped.

Diseño:
- `start()` valida recursos, construye TLS y hace bind *antes* de devolver el
  control; cualquier fallo llega al llamador como `StartupError` en lugar de
  perderse en una tarea de fondo.
- `run()` espera a SIGINT (o `request_shutdown()`) y ejecuta el apagado.
- El apagado delega en `AppRunner.cleanup()`: deja de aceptar, cierra
  keep-alives ociosos, espera hasta `shutdown_grace` a los requests en vuelo y
  cancela el resto.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import time
from typing import Any

from aiohttp import web

from adapters.tls import build_ssl_context
from adapters.web_app import PROVIDER_KEY, RENDERER_KEY, TRACKER_KEY, InflightTracker, build_app
from core.config import APP_NAME, APP_VERSION
from core.domain.durations import format_duration
from core.domain.models import LifecycleState, ServerConfig, ShutdownOutcome
from core.errors import BindError
from core.resources_loader import validate_startup_resources

logger = logging.getLogger(__name__)


class ServerLifecycle:
    """Dueño exclusivo del listener durante la vida del proceso."""

    def __init__(self, config: ServerConfig, *, app: web.Application | None = None) -> None:
        self.config = config
        self.state = LifecycleState.STARTING
        self.addresses: list[Any] = []
        self._app = app
        self._runner: web.AppRunner | None = None
        self._tracker: InflightTracker | None = None
        self._outcome: ShutdownOutcome | None = None
        self._serving = asyncio.Event()
        self._shutdown_requested = asyncio.Event()

    async def start(self) -> None:
        if self.state is not LifecycleState.STARTING:
            raise RuntimeError(f"cannot start a server in state {self.state.value!r}")

        app = self._app if self._app is not None else build_app(self.config)
        validate_startup_resources(app[RENDERER_KEY], app[PROVIDER_KEY])

        ssl_context = None
        if self.config.tls_enabled:
            ssl_context = build_ssl_context(
                self.config.cert_file,
                self.config.key_file,
                ecdh_curve=self.config.ecdh_curve,
            )

        runner = web.AppRunner(
            app,
            access_log=logging.getLogger("aiohttp.access") if self.config.access_log else None,
            keepalive_timeout=self.config.idle_timeout,
            shutdown_timeout=self.config.shutdown_grace,
        )
        await runner.setup()
        site = web.TCPSite(runner, host=self.config.host, port=self.config.port, ssl_context=ssl_context)
        try:
            await site.start()
        except OSError as exc:
            await runner.cleanup()
            raise BindError(f"cannot listen on {self.config.address!r}: {exc}") from exc

        self._runner = runner
        self._tracker = app[TRACKER_KEY]
        self.addresses = list(runner.addresses)
        self.state = LifecycleState.SERVING
        self._serving.set()
        logger.info("%s v%s listening on %s", APP_NAME, APP_VERSION, self.config.address)

    async def wait_serving(self) -> None:
        await self._serving.wait()

    def request_shutdown(self) -> None:
        self._shutdown_requested.set()

    def _on_interrupt(self) -> None:
        logger.info("interrupt received")
        self.request_shutdown()

    def _install_signal_handler(self, loop: asyncio.AbstractEventLoop) -> bool:
        # Solo SIGINT: SIGTERM/SIGQUIT conservan su comportamiento por defecto.
        try:
            loop.add_signal_handler(signal.SIGINT, self._on_interrupt)
        except (NotImplementedError, RuntimeError):
            # Windows o hilo secundario: asyncio.run() convierte Ctrl+C en cancelación.
            return False
        return True

    async def shutdown(self) -> ShutdownOutcome:
        if self._outcome is not None:
            return self._outcome
        if self._runner is None or self._tracker is None:
            self.state = LifecycleState.STOPPED
            self._outcome = ShutdownOutcome()
            return self._outcome

        self.state = LifecycleState.SHUTTING_DOWN
        tracker = self._tracker
        inflight = tracker.active
        cancelled_before = tracker.cancelled
        logger.info(
            "shutting down (grace %s, %d request(s) in flight)",
            format_duration(self.config.shutdown_grace),
            inflight,
        )

        started = time.monotonic()
        await self._runner.cleanup()
        await tracker.drain()
        self._outcome = ShutdownOutcome(
            inflight_at_start=inflight,
            cancelled=tracker.cancelled - cancelled_before,
            elapsed_seconds=time.monotonic() - started,
        )
        self._runner = None
        self.state = LifecycleState.STOPPED

        if not self._outcome.clean:
            logger.warning(
                "grace period expired, %d request(s) were cancelled",
                self._outcome.cancelled,
            )
        return self._outcome

    async def run(self) -> ShutdownOutcome:
        """Arranca, espera la señal de parada y apaga; devuelve el resultado."""

        loop = asyncio.get_running_loop()
        installed = self._install_signal_handler(loop)
        try:
            await self.start()
            await self._shutdown_requested.wait()
        except asyncio.CancelledError:
            await self.shutdown()
            raise
        finally:
            if installed:
                loop.remove_signal_handler(signal.SIGINT)
        return await self.shutdown()
