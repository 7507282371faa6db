"""Cyclopts CLI entrypoint for building and previewing the essay site.

The ``essays`` console script defined here compiles every
``<category>/<post>/content.md`` under the configured content directory into
static pages, a JSON post index, and an RSS feed. ``essays serve`` runs the
same build, then serves the output locally and rebuilds on change with
browser live reload.

Examples
--------
Build the site described by ``site.yaml`` in the working directory:

>>> from essay_pages.cli import main
>>> main()  # doctest: +SKIP

Preview a site on a custom port:

>>> from essay_pages.cli import app
>>> app(["serve", "--config", "site.yaml", "--port", "4000"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .collector import build_site
from .devserver import serve as run_dev_server

DEFAULT_CONFIG = Path("site.yaml")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

app = App(name="essays", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


@app.command(help="Compile essays into pages, the post index, and the RSS feed.")
def build(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
) -> None:
    """Build the whole site once.

    Parameters
    ----------
    config : Path, optional
        Path to the ``site.yaml`` configuration file (overridable via
        ``INPUT_CONFIG``).

    Raises
    ------
    ContentError
        If any document is malformed or two documents share an output path.
        Nothing is written in that case.
    """
    result = build_site(config)
    for path in result.written:
        print(f"wrote {_format_path(path)}")
    print(f"Generated {len(result.posts)} post(s)")


@app.command(help="Serve the built site locally and rebuild on change.")
def serve(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
    host: typ.Annotated[
        str, Parameter(help="Interface to bind", env_var="INPUT_HOST")
    ] = "127.0.0.1",
    port: typ.Annotated[
        int, Parameter(help="Port to listen on", env_var="INPUT_PORT")
    ] = 8000,
    verbose: typ.Annotated[
        bool, Parameter(help="Log rebuild details at debug level")
    ] = False,
) -> None:
    """Run the live-reload preview server until interrupted."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT
    )
    run_dev_server(config, host=host, port=port)


def main() -> None:
    """Invoke the Cyclopts application that powers the ``essays`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()


__all__ = ["app", "build", "main", "serve"]
