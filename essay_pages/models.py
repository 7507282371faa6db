"""Corpus-level records: source documents and their post index entries."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt  # noqa: TC003 - used for runtime type metadata
from pathlib import Path  # noqa: TC003 - used for runtime type metadata

import msgspec


@dc.dataclass(slots=True, frozen=True)
class Document:
    """An essay identified by its category slug and post slug.

    Attributes
    ----------
    category_slug : str
        Slug of the configured category the essay lives under.
    slug : str
        Post slug; the directory name unless front matter overrides it.
    title : str
        Essay title.
    description : str
        Essay summary.
    date : datetime.date
        Publication date.
    category : str
        Category label shown in the post index.
    category_order : int
        Display order of the category.
    number_chapters : bool
        Prefix chapter labels with ordinals.
    show_contents : bool
        Render the table-of-contents aside.
    body : str
        Markdown body without front matter.
    source : Path
        Path of the ``content.md`` file.
    """

    category_slug: str
    slug: str
    title: str
    description: str
    date: dt.date
    category: str
    category_order: int
    number_chapters: bool
    show_contents: bool
    body: str
    source: Path

    @property
    def url_path(self) -> str:
        """Return the site-relative directory URL, e.g. ``essays/intro/``."""
        return f"{self.category_slug}/{self.slug}/"


class PostIndexEntry(msgspec.Struct, rename="camel", frozen=True):
    """One row of ``posts.json``, serialised with camelCase keys."""

    title: str
    date: str
    pretty_date: str
    description: str
    category: str
    category_slug: str
    category_order: int
    slug: str
    url_path: str
    number_chapters: bool
    show_contents: bool


__all__ = ["Document", "PostIndexEntry"]
