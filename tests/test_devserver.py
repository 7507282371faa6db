"""Tests for the live-reload dev server.

The Starlette app is exercised with ``TestClient`` for plain file serving and
driven directly over ASGI for the never-ending server-sent event stream. The
scheduler and watcher scenarios run inside ``asyncio.run`` with short
debounce windows.
"""

from __future__ import annotations

import asyncio
import logging
import os
import typing as typ

import pytest
from starlette.testclient import TestClient
from watchdog.events import (
    DirModifiedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileOpenedEvent,
)

from essay_pages.devserver import (
    LIVE_RELOAD_SNIPPET,
    DevServer,
    RebuildScheduler,
    ReloadBroadcaster,
    SourceChangeHandler,
    create_app,
    inject_live_reload,
)
from essay_pages.errors import MalformedFrontMatter

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from conftest import SiteBuilder


async def _wait_until(predicate: cabc.Callable[[], bool], timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            msg = "condition not reached before timeout"
            raise AssertionError(msg)
        await asyncio.sleep(0.01)


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    out = tmp_path / "build"
    (out / "essays" / "hello").mkdir(parents=True)
    (out / "index.html").write_text(
        "<html><body><p>home</p></body></html>", encoding="utf-8"
    )
    (out / "essays" / "hello" / "index.html").write_text(
        "<html><body>essay</body></html>", encoding="utf-8"
    )
    (out / "styles.css").write_text("body {}", encoding="utf-8")
    (out / "rss.xml").write_text("<rss/>", encoding="utf-8")
    return out


def test_inject_live_reload() -> None:
    html = inject_live_reload("<html><body>x</body></html>")
    assert html.endswith(f"{LIVE_RELOAD_SNIPPET}\n</body></html>")
    assert "EventSource('/__livereload')" in LIVE_RELOAD_SNIPPET
    fragment = inject_live_reload("<p>no body</p>")
    assert fragment == f"<p>no body</p>\n{LIVE_RELOAD_SNIPPET}"


def test_attachment_names_with_url_delimiters(output_dir: Path) -> None:
    folder = output_dir / "essays" / "hello"
    (folder / "notes#1.txt").write_text("hash", encoding="utf-8")
    (folder / "what?.txt").write_text("question", encoding="utf-8")
    client = TestClient(create_app(output_dir, ReloadBroadcaster()))

    hashed = client.get("/essays/hello/notes%231.txt")
    assert hashed.status_code == 200, "percent-encoded '#' is part of the name"
    assert hashed.text == "hash"
    assert hashed.headers["cache-control"] == "no-store"

    questioned = client.get("/essays/hello/what%3F.txt")
    assert questioned.status_code == 200, "percent-encoded '?' is part of the name"
    assert questioned.text == "question"


def test_query_strings_are_ignored(output_dir: Path) -> None:
    client = TestClient(create_app(output_dir, ReloadBroadcaster()))
    css = client.get("/styles.css?v=2")
    assert css.status_code == 200
    assert css.text == "body {}"


def test_symlink_escape_is_rejected(output_dir: Path, tmp_path: Path) -> None:
    secret = tmp_path / "secret.txt"
    secret.write_text("nope", encoding="utf-8")
    os.symlink(secret, output_dir / "leak.txt")
    client = TestClient(create_app(output_dir, ReloadBroadcaster()))
    response = client.get("/leak.txt")
    assert response.status_code == 403
    assert "nope" not in response.text


def test_serves_html_with_live_reload(output_dir: Path) -> None:
    client = TestClient(create_app(output_dir, ReloadBroadcaster()))

    home = client.get("/")
    assert home.status_code == 200
    assert home.headers["content-type"].startswith("text/html")
    assert home.headers["cache-control"] == "no-store"
    assert LIVE_RELOAD_SNIPPET in home.text
    assert home.text.index(LIVE_RELOAD_SNIPPET) < home.text.index("</body>")

    essay = client.get("/essays/hello/")
    assert essay.status_code == 200
    assert "essay" in essay.text
    assert LIVE_RELOAD_SNIPPET in essay.text

    assert client.get("/essays/hello").status_code == 200, "directory without slash"


def test_serves_static_files_untouched(output_dir: Path) -> None:
    client = TestClient(create_app(output_dir, ReloadBroadcaster()))
    css = client.get("/styles.css")
    assert css.status_code == 200
    assert css.text == "body {}"
    assert css.headers["content-type"].startswith("text/css")
    assert css.headers["cache-control"] == "no-store"
    rss = client.get("/rss.xml")
    assert "xml" in rss.headers["content-type"]
    assert LIVE_RELOAD_SNIPPET not in rss.text


def test_missing_files_are_404(output_dir: Path) -> None:
    client = TestClient(create_app(output_dir, ReloadBroadcaster()))
    missing = client.get("/nope.html")
    assert missing.status_code == 404
    assert missing.headers["cache-control"] == "no-store"
    assert client.get("/essays/missing/").status_code == 404


def test_live_reload_stream(output_dir: Path) -> None:
    broadcaster = ReloadBroadcaster()
    app = create_app(output_dir, broadcaster)

    async def _scenario() -> tuple[list[dict[str, typ.Any]], int]:
        sent: asyncio.Queue[dict[str, typ.Any]] = asyncio.Queue()
        disconnected = asyncio.Event()

        async def receive() -> dict[str, typ.Any]:
            await disconnected.wait()
            return {"type": "http.disconnect"}

        async def send(message: dict[str, typ.Any]) -> None:
            await sent.put(message)

        scope = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": "GET",
            "scheme": "http",
            "path": "/__livereload",
            "raw_path": b"/__livereload",
            "query_string": b"",
            "root_path": "",
            "headers": [],
            "client": ("testclient", 50000),
            "server": ("testserver", 80),
        }
        task = asyncio.create_task(app(scope, receive, send))
        messages = [
            await asyncio.wait_for(sent.get(), 1.0),
            await asyncio.wait_for(sent.get(), 1.0),
        ]
        await _wait_until(lambda: broadcaster.client_count == 1)
        assert broadcaster.publish("reload") == 1
        messages.append(await asyncio.wait_for(sent.get(), 1.0))
        disconnected.set()
        await asyncio.wait_for(task, 1.0)
        return messages, broadcaster.client_count

    messages, remaining = asyncio.run(_scenario())

    start, retry, reload = messages
    assert start["status"] == 200
    headers = dict(start["headers"])
    assert headers[b"content-type"].startswith(b"text/event-stream")
    assert retry["body"] == b"retry: 300\n\n"
    assert reload["body"] == b"data: reload\n\n"
    assert remaining == 0, "disconnected clients are unsubscribed"


def test_scheduler_coalesces_bursts_into_one_rebuild(tmp_path: Path) -> None:
    calls: list[int] = []

    async def _scenario() -> tuple[list[str], RebuildScheduler]:
        broadcaster = ReloadBroadcaster()
        client = broadcaster.subscribe()
        scheduler = RebuildScheduler(
            lambda: calls.append(1), broadcaster, debounce_seconds=0.05
        )
        task = asyncio.create_task(scheduler.run())
        for name in ("a.md", "b.md", "c.md"):
            scheduler.notify(tmp_path / name)
        await _wait_until(lambda: scheduler.completed == 1)
        await asyncio.sleep(0.15)
        scheduler.notify(tmp_path / "d.md")
        await _wait_until(lambda: scheduler.completed == 2)
        task.cancel()
        messages = []
        while not client.empty():
            messages.append(client.get_nowait())
        return messages, scheduler

    messages, scheduler = asyncio.run(_scenario())

    assert len(calls) == 2, "three quick changes should trigger one rebuild"
    assert messages == ["reload", "reload"]
    assert scheduler.failed == 0


def test_failed_rebuild_is_logged_and_not_broadcast(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    def _explode() -> None:
        msg = "bad front matter"
        raise MalformedFrontMatter(msg)

    async def _scenario() -> tuple[bool, asyncio.Queue[str], RebuildScheduler]:
        broadcaster = ReloadBroadcaster()
        client = broadcaster.subscribe()
        scheduler = RebuildScheduler(_explode, broadcaster, debounce_seconds=0.01)
        ok = await scheduler.rebuild_once()
        return ok, client, scheduler

    with caplog.at_level(logging.ERROR, logger="essay_pages.devserver"):
        ok, client, scheduler = asyncio.run(_scenario())

    assert ok is False
    assert client.empty(), "no reload after a failed rebuild"
    assert scheduler.failed == 1
    assert "Rebuild failed" in caplog.text
    assert "bad front matter" in caplog.text


def test_change_handler_filters_events(tmp_path: Path) -> None:
    content = tmp_path / "categories" / "essays" / "hello"
    output = tmp_path / "build"
    content.mkdir(parents=True)
    output.mkdir()

    async def _scenario() -> list[Path]:
        queue: asyncio.Queue[Path] = asyncio.Queue()
        handler = SourceChangeHandler(
            loop=asyncio.get_running_loop(), queue=queue, ignored_roots=[output]
        )
        handler.on_any_event(FileModifiedEvent(str(content / "content.md")))
        handler.on_any_event(FileModifiedEvent(str(output / "index.html")))
        handler.on_any_event(FileModifiedEvent(str(tmp_path / ".git" / "HEAD")))
        handler.on_any_event(
            FileModifiedEvent(str(content / ".index.html.42.abc.tmp"))
        )
        handler.on_any_event(FileOpenedEvent(str(content / "content.md")))
        handler.on_any_event(
            FileMovedEvent(
                str(content / ".content.md.1.ff.tmp"), str(content / "figure.png")
            )
        )
        handler.on_any_event(DirModifiedEvent(str(content)))
        await asyncio.sleep(0.05)
        received = []
        while not queue.empty():
            received.append(queue.get_nowait())
        return received

    received = asyncio.run(_scenario())

    assert received == [content / "content.md", content / "figure.png", content]


def test_dev_server_rebuild_writes_output(site: SiteBuilder) -> None:
    config = site.write_config()
    site.add_essay("essays", "hello")
    server = DevServer(config)
    result = server.rebuild()
    assert [post.slug for post in result.posts] == ["hello"]
    client = TestClient(server.app)
    page = client.get("/essays/hello/")
    assert page.status_code == 200
    assert LIVE_RELOAD_SNIPPET in page.text


def test_initial_build_failure_is_fatal(site: SiteBuilder) -> None:
    config = site.write_config()
    site.add_post("essays", "broken", "missing front matter\n")
    server = DevServer(config)
    with pytest.raises(MalformedFrontMatter):
        asyncio.run(server.serve())
    assert not site.output_dir.exists()
