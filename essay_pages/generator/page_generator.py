r"""Assemble full essay pages from a document outline.

This module turns a :class:`~essay_pages.markdown_parser.Outline` into the
final HTML page: it renders the intro and each chapter with
:class:`HtmlContentRenderer`, mirrors the outline into a nested table of
contents, and feeds everything to the ``essay_page.jinja`` template. The output
depends only on the document and site configuration, so rebuilding an
unchanged essay yields byte-identical HTML.

Example
-------
>>> import datetime as dt
>>> from pathlib import Path
>>> from essay_pages.config import CategoryConfig, SiteConfig
>>> from essay_pages.generator import PageAssembler
>>> from essay_pages.markdown_parser import parse_outline
>>> from essay_pages.models import Document
>>> site = SiteConfig("Field Notes", "", "", [CategoryConfig("essays", "Essays", 0)])
>>> doc = Document("essays", "hello", "Hello", "A test", dt.date(2026, 1, 1),
...                "Essays", 0, False, True, "## First\ntext", Path("content.md"))
>>> html = PageAssembler(site).render(doc, parse_outline(doc.body))
>>> 'id="chapter-first"' in html
True
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup

from essay_pages.feeds import format_pretty_date
from essay_pages.generator.inline import render_inline
from essay_pages.generator.models import ChapterModel, TocEntry
from essay_pages.generator.renderer import HtmlContentRenderer
from essay_pages.markdown_parser import CodeBlock

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from essay_pages.config import SiteConfig
    from essay_pages.markdown_parser import Chapter, Outline, Subsection
    from essay_pages.models import Document

ASSET_PREFIX = "../../"


def _chapter_label(chapter: Chapter, index: int, *, number_chapters: bool) -> Markup:
    """Return the rendered chapter title, prefixed with ``"N. "`` when numbered."""
    label = render_inline(chapter.title)
    if number_chapters:
        label = f"{index}. {label}"
    return Markup(label)  # noqa: S704 - render_inline escapes its input


def _subsection_entries(nodes: cabc.Sequence[Subsection]) -> list[TocEntry]:
    return [
        TocEntry(
            label=Markup(render_inline(node.title)),  # noqa: S704
            anchor=node.anchor,
            level=min(node.level, 6),
            children=_subsection_entries(node.children),
        )
        for node in nodes
    ]


def build_toc(outline: Outline, *, number_chapters: bool = False) -> list[TocEntry]:
    """Mirror ``outline`` into nested table-of-contents entries.

    Parameters
    ----------
    outline : Outline
        Structured document produced by
        :func:`essay_pages.markdown_parser.parse_outline`.
    number_chapters : bool, optional
        Prefix chapter labels with their 1-based ordinal.

    Returns
    -------
    list[TocEntry]
        One entry per chapter; each subsection becomes a child entry at the
        same depth it has in the chapter's subsection tree.
    """
    return [
        TocEntry(
            label=_chapter_label(chapter, index, number_chapters=number_chapters),
            anchor=chapter.anchor,
            level=2,
            children=_subsection_entries(chapter.subsections),
        )
        for index, chapter in enumerate(outline.chapters, start=1)
    ]


def _has_code(outline: Outline) -> bool:
    blocks = [*outline.intro]
    for chapter in outline.chapters:
        blocks.extend(chapter.blocks)
    return any(isinstance(block, CodeBlock) for block in blocks)


class PageAssembler:
    """Render essay pages from documents and their outlines."""

    def __init__(
        self,
        site: SiteConfig,
        *,
        templates_dir: Path | None = None,
        renderer: HtmlContentRenderer | None = None,
    ) -> None:
        """Initialize the assembler with site settings and template context.

        Parameters
        ----------
        site : SiteConfig
            Provides the site title used in the page title and home link, and
            the Pygments style for code blocks.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package
            templates.
        renderer : HtmlContentRenderer, optional
            Block renderer; one is created from ``site.pygments_style`` when
            omitted.
        """
        self.site = site
        self.renderer = renderer or HtmlContentRenderer(site.pygments_style)
        default_templates = Path(__file__).resolve().parents[1] / "templates"
        self.templates_dir = templates_dir or default_templates
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template("essay_page.jinja")

    def render(self, document: Document, outline: Outline) -> str:
        """Return the full HTML page for ``document``.

        Parameters
        ----------
        document : Document
            Validated essay metadata (title, description, date, flags).
        outline : Outline
            Structured body of the same document.

        Returns
        -------
        str
            Complete HTML document ending with a newline. The contents aside
            is present only when ``document.show_contents`` is set.
        """
        chapters = [
            ChapterModel(
                anchor=chapter.anchor,
                heading_html=_chapter_label(
                    chapter, index, number_chapters=document.number_chapters
                ),
                body_html=Markup(self.renderer.blocks(chapter.blocks)),  # noqa: S704
            )
            for index, chapter in enumerate(outline.chapters, start=1)
        ]
        toc = (
            build_toc(outline, number_chapters=document.number_chapters)
            if document.show_contents
            else None
        )
        context = {
            "document": document,
            "site": self.site,
            "title_html": Markup(render_inline(document.title)),  # noqa: S704
            "description_html": Markup(render_inline(document.description)),  # noqa: S704
            "pretty_date": format_pretty_date(document.date),
            "intro_html": Markup(self.renderer.blocks(outline.intro)),  # noqa: S704
            "chapters": chapters,
            "toc": toc,
            "pygments_css": (
                Markup(self.renderer.stylesheet) if _has_code(outline) else ""  # noqa: S704
            ),
            "asset_prefix": ASSET_PREFIX,
        }
        html = self.template.render(**context)
        if not html.endswith("\n"):
            html += "\n"
        return html


__all__ = ["PageAssembler", "build_toc"]
