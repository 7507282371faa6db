"""Compile a directory of Markdown essays into a static site.

This package exposes the CLI entry points used by ``essays build`` and
``essays serve``.

Exports
-------
- ``app``: Cyclopts application holding the subcommands.
- ``main``: Convenience function that invokes the app.

Examples
--------
>>> from essay_pages import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
