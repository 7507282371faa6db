"""Shared fixtures for building small essay sites on disk."""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def essay_source(
    *,
    title: str = "Hello",
    description: str = "A short essay",
    date: str = "2026-01-01",
    body: str = "## First\ntext\n",
    **extra: str,
) -> str:
    """Return a ``content.md`` document with front matter and ``body``."""
    lines = [f"title: {title}", f"description: {description}", f"date: {date}"]
    lines.extend(f"{key}: {value}" for key, value in extra.items())
    return "---\n" + "\n".join(lines) + "\n---\n\n" + body


class SiteBuilder:
    """Write a site config plus category/post directories under a root."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.content_dir = root / "categories"
        self.output_dir = root / "build"

    @property
    def config_path(self) -> Path:
        return self.root / "site.yaml"

    def write_config(
        self,
        categories: cabc.Sequence[str] = ("essays",),
        *,
        url: str = "https://example.com/",
    ) -> Path:
        entries = "\n".join(
            f"  - slug: {slug}\n    name: {slug.title()}" for slug in categories
        )
        self.config_path.write_text(
            "site:\n"
            "  title: Field Notes\n"
            f"  url: {url}\n"
            "  description: Long-form essays\n"
            "paths:\n"
            "  content_dir: categories\n"
            "  output_dir: build\n"
            f"categories:\n{entries}\n",
            encoding="utf-8",
        )
        for slug in categories:
            (self.content_dir / slug).mkdir(parents=True, exist_ok=True)
        return self.config_path

    def add_post(self, category: str, slug: str, source: str) -> Path:
        post_dir = self.content_dir / category / slug
        post_dir.mkdir(parents=True, exist_ok=True)
        (post_dir / "content.md").write_text(source, encoding="utf-8")
        return post_dir

    def add_essay(self, category: str, dirname: str, /, **fields: str) -> Path:
        """Add a post; ``fields`` may set front matter ``slug`` or ``category``."""
        return self.add_post(category, dirname, essay_source(**fields))


@pytest.fixture
def site(tmp_path: Path) -> SiteBuilder:
    """Return a builder rooted in a per-test temporary directory."""
    return SiteBuilder(tmp_path)


@pytest.fixture
def make_essay() -> cabc.Callable[..., str]:
    """Return the ``content.md`` source factory."""
    return essay_source
