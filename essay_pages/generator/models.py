"""Shared dataclasses used by the page assembly pipeline."""

from __future__ import annotations

import dataclasses as dc

from markupsafe import Markup


@dc.dataclass(slots=True)
class TocEntry:
    """Table-of-contents entry mirroring one chapter or subsection.

    Attributes
    ----------
    label : Markup
        Rendered inline HTML label (numbered for chapters when requested).
    anchor : str
        Anchor id the entry links to.
    level : int
        Heading level of the target (2 for chapters).
    children : list[TocEntry]
        Nested entries; depth matches the subsection tree.
    """

    label: Markup
    anchor: str
    level: int
    children: list[TocEntry] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class ChapterModel:
    """Structured data passed to the chapter section of the page template.

    Attributes
    ----------
    anchor : str
        Chapter anchor used as the ``<section>`` id.
    heading_html : Markup
        Rendered chapter heading, including its ordinal when numbered.
    body_html : Markup
        Rendered chapter blocks.
    """

    anchor: str
    heading_html: Markup
    body_html: Markup


__all__ = ["ChapterModel", "TocEntry"]
