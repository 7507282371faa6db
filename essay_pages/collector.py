"""Compile every essay in the corpus and publish pages, index, and feed.

:class:`CorpusCollector` walks the configured categories in order, compiles
each ``<category>/<post>/content.md`` into a page, and then writes the
outputs. Compilation finishes for the whole corpus before anything is
written, so a malformed document or a duplicate output path aborts the build
without publishing any page. Pages, the post index, and the RSS feed are
written atomically.

Typical usage pairs the loader with the collector:

>>> from pathlib import Path
>>> from essay_pages.collector import build_site
>>> result = build_site(Path("site.yaml"))  # doctest: +SKIP
>>> [post.url_path for post in result.posts][:1]  # doctest: +SKIP
['essays/hello/']
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from ._constants import (
    DOCUMENT_FILENAME,
    IGNORED_ATTACHMENTS,
    PAGE_FILENAME,
    POST_INDEX_PATH,
    RSS_PATH,
)
from .config import load_site_config
from .errors import DuplicateOutputPath, MissingCategoryDirectory
from .feeds import RssFeedBuilder, build_index_entry, encode_post_index, sort_entries
from .fileio import copy_attachments, copy_if_exists, write_atomic
from .front_matter import parse_front_matter, validate_front_matter
from .generator import PageAssembler
from .markdown_parser import parse_outline
from .models import Document, PostIndexEntry

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .config import CategoryConfig, SiteConfig


@dc.dataclass(slots=True)
class CompiledDocument:
    """A rendered page waiting to be written."""

    document: Document
    html: str
    source_dir: Path


@dc.dataclass(slots=True)
class BuildResult:
    """Outcome of a full build.

    Attributes
    ----------
    posts : list[PostIndexEntry]
        Post index entries, newest first.
    written : list[Path]
        Every file written or copied, in write order.
    """

    posts: list[PostIndexEntry]
    written: list[Path]


def load_document(path: Path, category: CategoryConfig, *, slug: str) -> Document:
    """Read and validate one ``content.md`` into a :class:`Document`.

    Parameters
    ----------
    path : Path
        Location of the document source.
    category : CategoryConfig
        Category the document's directory belongs to.
    slug : str
        Directory name, used unless the front matter sets ``slug``.

    Raises
    ------
    ContentError
        Any front matter error; see :mod:`essay_pages.errors`.
    """
    parsed = parse_front_matter(path.read_text(encoding="utf-8"), path)
    meta = validate_front_matter(parsed.meta, path)
    return Document(
        category_slug=category.slug,
        slug=meta.slug or slug,
        title=meta.title,
        description=meta.description,
        date=meta.date,
        category=meta.category or category.name,
        category_order=category.order,
        number_chapters=meta.number_chapters,
        show_contents=meta.show_contents,
        body=parsed.body,
        source=path,
    )


class CorpusCollector:
    """Build pages, the post index, and the RSS feed for a site."""

    def __init__(
        self, site: SiteConfig, *, assembler: PageAssembler | None = None
    ) -> None:
        """Initialize the collector.

        Parameters
        ----------
        site : SiteConfig
            Parsed site configuration (categories, paths, feed settings).
        assembler : PageAssembler, optional
            Page assembler to use; one is built from ``site`` when omitted.
        """
        self.site = site
        self.assembler = assembler or PageAssembler(site)
        self.feed_builder = RssFeedBuilder(site)

    def run(self) -> BuildResult:
        """Compile the corpus, then write every output.

        Returns
        -------
        BuildResult
            Sorted post index entries and the list of written paths.

        Raises
        ------
        ContentError
            On the first malformed document, missing category directory, or
            duplicate output path; nothing is written in that case.
        OSError
            If copying attachments or writing outputs fails.
        """
        compiled = self.compile()
        written = self._copy_static_assets()
        for item in compiled:
            written.extend(self._write_document(item))

        posts = sort_entries(build_index_entry(item.document) for item in compiled)
        output_dir = self.site.output_dir
        written.append(
            write_atomic(output_dir / POST_INDEX_PATH, encode_post_index(posts))
        )
        written.append(
            write_atomic(output_dir / RSS_PATH, self.feed_builder.render(posts))
        )
        return BuildResult(posts=posts, written=written)

    def compile(self) -> list[CompiledDocument]:
        """Parse, validate, and render every document without writing anything.

        Raises
        ------
        MissingCategoryDirectory
            If a configured category has no directory under ``content_dir``.
        DuplicateOutputPath
            If two documents resolve to the same ``category/slug`` pair.
        """
        compiled: list[CompiledDocument] = []
        seen: dict[str, Path] = {}
        for category in self.site.categories:
            for post_dir in self._post_dirs(category):
                source = post_dir / DOCUMENT_FILENAME
                if not source.is_file():
                    continue
                document = load_document(source, category, slug=post_dir.name)
                if document.url_path in seen:
                    raise DuplicateOutputPath(document.url_path, path=source)
                seen[document.url_path] = source
                html = self.assembler.render(document, parse_outline(document.body))
                compiled.append(
                    CompiledDocument(document=document, html=html, source_dir=post_dir)
                )
        return compiled

    def _post_dirs(self, category: CategoryConfig) -> list[Path]:
        category_dir = self.site.content_dir / category.slug
        if not category_dir.is_dir():
            raise MissingCategoryDirectory(category_dir)
        return sorted(entry for entry in category_dir.iterdir() if entry.is_dir())

    def _copy_static_assets(self) -> list[Path]:
        written: list[Path] = []
        for name in self.site.static_assets:
            destination = self.site.output_dir / name
            if copy_if_exists(self.site.root / name, destination):
                written.append(destination)
        return written

    def _write_document(self, item: CompiledDocument) -> list[Path]:
        output_dir = self.site.output_dir / item.document.url_path
        written = copy_attachments(
            item.source_dir, output_dir, exclude=IGNORED_ATTACHMENTS
        )
        written.append(write_atomic(output_dir / PAGE_FILENAME, item.html))
        return written


def build_site(config_path: Path) -> BuildResult:
    """Load ``config_path`` and run a full build."""
    return CorpusCollector(load_site_config(config_path)).run()


__all__ = [
    "BuildResult",
    "CompiledDocument",
    "CorpusCollector",
    "build_site",
    "load_document",
]
