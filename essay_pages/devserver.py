"""Local preview server with debounced rebuilds and live reload.

The dev server wraps the regular build: a watchdog observer reports source
changes onto an asyncio queue, :class:`RebuildScheduler` coalesces bursts of
changes into one full rebuild at a time, and every browser tab connected to
``/__livereload`` receives a ``reload`` server-sent event once a rebuild
succeeds. A failed rebuild is logged and the last good output keeps being
served.

Example
-------
>>> from pathlib import Path
>>> from essay_pages.devserver import serve
>>> serve(Path("site.yaml"), host="127.0.0.1", port=8000)  # doctest: +SKIP
"""

from __future__ import annotations

import asyncio
import logging
import os
import typing as typ
from pathlib import Path

import uvicorn
from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.responses import (
    FileResponse,
    HTMLResponse,
    PlainTextResponse,
    Response,
    StreamingResponse,
)
from starlette.routing import Mount, Route
from starlette.staticfiles import StaticFiles
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ._constants import LIVE_RELOAD_PATH
from .collector import BuildResult, build_site
from .config import load_site_config
from .fileio import TEMP_SUFFIX

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from starlette.requests import Request
    from starlette.types import Scope

LOGGER = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.12
IGNORED_DIR_NAMES = frozenset({".git", "node_modules", "__pycache__"})
IGNORED_EVENT_TYPES = frozenset({"opened", "closed_no_write"})
LIVE_RELOAD_SNIPPET = (
    "<script>\n"
    "(() => {\n"
    f"  const source = new EventSource('{LIVE_RELOAD_PATH}');\n"
    "  source.onmessage = (event) => { if (event.data === 'reload') location.reload(); };\n"
    "})();\n"
    "</script>"
)


def inject_live_reload(html: str) -> str:
    """Insert the live-reload script before ``</body>``, or append it."""
    if "</body>" in html:
        return html.replace("</body>", f"{LIVE_RELOAD_SNIPPET}\n</body>", 1)
    return f"{html}\n{LIVE_RELOAD_SNIPPET}"


class LiveReloadStaticFiles(StaticFiles):
    """Serve the build output uncached, with the reload script in HTML pages.

    Directories map to their ``index.html``. Paths that resolve outside the
    output directory, including through symlinks, are answered with 403.
    """

    def escapes_root(self, path: str) -> bool:
        """Return True when ``path`` resolves outside the served directory."""
        root = Path(typ.cast("str", self.directory)).resolve()
        full = (root / path).resolve()
        return full != root and root not in full.parents

    async def get_response(self, path: str, scope: Scope) -> Response:
        if self.escapes_root(path):
            response: Response = PlainTextResponse("Forbidden", status_code=403)
        else:
            try:
                response = await super().get_response(path, scope)
            except HTTPException as exc:
                if exc.status_code != 404:
                    raise
                response = PlainTextResponse("Not found", status_code=404)
            if isinstance(response, FileResponse) and response.media_type == "text/html":
                html = await asyncio.to_thread(
                    Path(response.path).read_text, encoding="utf-8"
                )
                response = HTMLResponse(inject_live_reload(html))
        response.headers["Cache-Control"] = "no-store"
        return response


class ReloadBroadcaster:
    """Fan reload notifications out to every connected live-reload client."""

    def __init__(self) -> None:
        self._clients: set[asyncio.Queue[str]] = set()

    @property
    def client_count(self) -> int:
        """Return the number of connected clients."""
        return len(self._clients)

    def subscribe(self) -> asyncio.Queue[str]:
        """Register a client and return the queue it should read from."""
        queue: asyncio.Queue[str] = asyncio.Queue()
        self._clients.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[str]) -> None:
        """Forget a disconnected client."""
        self._clients.discard(queue)

    def publish(self, message: str = "reload") -> int:
        """Send ``message`` to all clients, returning how many were notified."""
        for queue in self._clients:
            queue.put_nowait(message)
        return len(self._clients)


class RebuildScheduler:
    """Coalesce change notifications and run rebuilds sequentially."""

    def __init__(
        self,
        rebuild: cabc.Callable[[], object],
        broadcaster: ReloadBroadcaster,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        """Initialize the scheduler.

        Parameters
        ----------
        rebuild : Callable[[], object]
            Blocking full rebuild; runs in a worker thread.
        broadcaster : ReloadBroadcaster
            Receives ``"reload"`` after each successful rebuild.
        debounce_seconds : float, optional
            Quiet period that must pass after the latest change before a
            rebuild starts.
        """
        self._rebuild = rebuild
        self._broadcaster = broadcaster
        self._debounce_seconds = debounce_seconds
        self.queue: asyncio.Queue[Path] = asyncio.Queue()
        self.completed = 0
        self.failed = 0

    def notify(self, path: Path) -> None:
        """Record a change; safe to call only from the event loop thread."""
        self.queue.put_nowait(path)

    async def run(self) -> None:
        """Wait for changes forever, rebuilding once per burst."""
        while True:
            changed = await self.queue.get()
            await self._drain()
            LOGGER.debug("Change detected at %s; rebuilding", changed)
            await self.rebuild_once()

    async def _drain(self) -> None:
        """Swallow further notifications until the debounce window is quiet."""
        while True:
            try:
                await asyncio.wait_for(self.queue.get(), timeout=self._debounce_seconds)
            except TimeoutError:
                return

    async def rebuild_once(self) -> bool:
        """Run one rebuild, broadcasting a reload only when it succeeds."""
        try:
            await asyncio.to_thread(self._rebuild)
        except Exception:
            self.failed += 1
            LOGGER.exception("Rebuild failed; serving the last successful build")
            return False
        self.completed += 1
        notified = self._broadcaster.publish("reload")
        LOGGER.debug("Reload sent to %d client(s)", notified)
        return True


class SourceChangeHandler(FileSystemEventHandler):
    """Forward relevant watchdog events onto an asyncio queue."""

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        queue: asyncio.Queue[Path],
        ignored_roots: cabc.Iterable[Path] = (),
    ) -> None:
        super().__init__()
        self._loop = loop
        self._queue = queue
        self._ignored_roots = [root.resolve() for root in ignored_roots]

    def is_ignored(self, raw_path: str | bytes) -> bool:
        """Return True for output files, VCS/tool directories, and temp files."""
        if not raw_path:
            return True
        path = Path(os.fsdecode(raw_path))
        if IGNORED_DIR_NAMES.intersection(path.parts):
            return True
        if path.name.startswith(".") and path.name.endswith(TEMP_SUFFIX):
            return True
        resolved = path.resolve()
        return any(
            resolved == root or root in resolved.parents for root in self._ignored_roots
        )

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type in IGNORED_EVENT_TYPES:
            return
        candidates = [event.src_path, getattr(event, "dest_path", "")]
        for raw_path in candidates:
            if not self.is_ignored(raw_path):
                path = Path(os.fsdecode(raw_path))
                self._loop.call_soon_threadsafe(self._queue.put_nowait, path)
                return


def create_app(output_dir: Path, broadcaster: ReloadBroadcaster) -> Starlette:
    """Build the Starlette app serving ``output_dir`` with live reload.

    Parameters
    ----------
    output_dir : Path
        Build output directory to serve.
    broadcaster : ReloadBroadcaster
        Source of reload notifications for ``/__livereload`` streams.
    """

    async def livereload(request: Request) -> Response:
        queue = broadcaster.subscribe()

        async def _events() -> cabc.AsyncIterator[str]:
            try:
                yield "retry: 300\n\n"
                while True:
                    message = await queue.get()
                    yield f"data: {message}\n\n"
            finally:
                broadcaster.unsubscribe(queue)

        return StreamingResponse(
            _events(),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache, no-transform"},
        )

    # The output directory may not exist until the first build finishes.
    files = LiveReloadStaticFiles(directory=output_dir, html=True, check_dir=False)
    routes = [
        Route(LIVE_RELOAD_PATH, livereload),
        Mount("/", app=files, name="output"),
    ]
    return Starlette(routes=routes)


class DevServer:
    """Serve the build output, rebuilding and reloading on source changes."""

    def __init__(
        self,
        config_path: Path,
        *,
        host: str = "127.0.0.1",
        port: int = 8000,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self.config_path = config_path
        self.host = host
        self.port = port
        self.site = load_site_config(config_path)
        self.broadcaster = ReloadBroadcaster()
        self.scheduler = RebuildScheduler(
            self.rebuild, self.broadcaster, debounce_seconds=debounce_seconds
        )
        self.app = create_app(self.site.output_dir, self.broadcaster)

    def rebuild(self) -> BuildResult:
        """Run a full build, re-reading the configuration file."""
        result = build_site(self.config_path)
        LOGGER.info("Generated %d post(s) to %s", len(result.posts), self.site.output_dir)
        return result

    def _watch_roots(self) -> list[Path]:
        roots = [self.site.root]
        content_dir = self.site.content_dir.resolve()
        if self.site.root not in content_dir.parents:
            roots.append(content_dir)
        return roots

    async def serve(self) -> None:
        """Build once, then watch, rebuild, and serve until interrupted.

        Raises
        ------
        ContentError
            If the initial build fails; later failures are only logged.
        """
        self.rebuild()
        loop = asyncio.get_running_loop()
        handler = SourceChangeHandler(
            loop=loop,
            queue=self.scheduler.queue,
            ignored_roots=[self.site.output_dir],
        )
        observer = Observer()
        for root in self._watch_roots():
            observer.schedule(handler, str(root), recursive=True)
        observer.start()
        scheduler_task = asyncio.create_task(self.scheduler.run())
        server = uvicorn.Server(
            uvicorn.Config(
                self.app,
                host=self.host,
                port=self.port,
                log_level="info",
                timeout_graceful_shutdown=1,
            )
        )
        LOGGER.info("Dev server running at http://%s:%s", self.host, self.port)
        try:
            await server.serve()
        finally:
            scheduler_task.cancel()
            observer.stop()
            observer.join(timeout=5.0)


def serve(config_path: Path, *, host: str = "127.0.0.1", port: int = 8000) -> None:
    """Run the dev server for ``config_path`` until interrupted."""
    asyncio.run(DevServer(config_path, host=host, port=port).serve())


__all__ = [
    "LIVE_RELOAD_SNIPPET",
    "DevServer",
    "LiveReloadStaticFiles",
    "RebuildScheduler",
    "ReloadBroadcaster",
    "SourceChangeHandler",
    "create_app",
    "inject_live_reload",
    "serve",
]
