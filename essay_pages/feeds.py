"""Date formatting, the JSON post index, and the RSS feed.

The collector hands this module the sorted post index entries; it produces the
``posts.json`` payload read by the homepage script and an RSS 2.0 document
whose items appear in the same order.

Example
-------
>>> import datetime as dt
>>> from essay_pages.feeds import format_pretty_date, format_rfc822_date
>>> format_pretty_date(dt.date(2026, 1, 1))
'January 1, 2026'
>>> format_rfc822_date(dt.date(2026, 1, 1))
'Thu, 01 Jan 2026 00:00:00 GMT'
"""

from __future__ import annotations

import datetime as dt
import typing as typ
from email.utils import format_datetime
from pathlib import Path

import msgspec
from jinja2 import Environment, FileSystemLoader

from .models import Document, PostIndexEntry

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .config import SiteConfig

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def format_pretty_date(date: dt.date) -> str:
    """Return a long-form English date such as ``January 1, 2026``."""
    return f"{MONTH_NAMES[date.month - 1]} {date.day}, {date.year}"


def format_rfc822_date(date: dt.date) -> str:
    """Return the RFC 822 timestamp for midnight UTC on ``date``."""
    midnight = dt.datetime.combine(date, dt.time(), tzinfo=dt.UTC)
    return format_datetime(midnight, usegmt=True)


def build_index_entry(document: Document) -> PostIndexEntry:
    """Project a compiled document onto its post index entry."""
    return PostIndexEntry(
        title=document.title,
        date=document.date.isoformat(),
        pretty_date=format_pretty_date(document.date),
        description=document.description,
        category=document.category,
        category_slug=document.category_slug,
        category_order=document.category_order,
        slug=document.slug,
        url_path=document.url_path,
        number_chapters=document.number_chapters,
        show_contents=document.show_contents,
    )


def sort_entries(entries: cabc.Iterable[PostIndexEntry]) -> list[PostIndexEntry]:
    """Return entries newest first; equal dates keep their encounter order."""
    return sorted(entries, key=lambda entry: entry.date, reverse=True)


def encode_post_index(entries: cabc.Sequence[PostIndexEntry]) -> bytes:
    """Serialise entries as indented JSON with a trailing newline."""
    payload = msgspec.json.encode(list(entries))
    return msgspec.json.format(payload, indent=2) + b"\n"


class RssFeedBuilder:
    """Render the RSS 2.0 feed for a sorted list of post index entries."""

    def __init__(self, site: SiteConfig, *, templates_dir: Path | None = None) -> None:
        """Initialize the builder and its Jinja environment.

        Parameters
        ----------
        site : SiteConfig
            Provides the channel title, description, language, and the base
            URL used to build absolute item links.
        templates_dir : Path, optional
            Directory containing ``rss.xml.jinja``; defaults to the package
            templates.
        """
        self.site = site
        self.templates_dir = templates_dir or Path(__file__).parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.template = self.env.get_template("rss.xml.jinja")

    def render(self, entries: cabc.Sequence[PostIndexEntry]) -> str:
        """Return the feed XML with one item per entry, in the given order."""
        items = [
            {
                "title": entry.title,
                "link": self._absolute_link(entry.url_path),
                "pub_date": format_rfc822_date(dt.date.fromisoformat(entry.date)),
                "description": entry.description,
            }
            for entry in entries
        ]
        return self.template.render(
            site=self.site, site_link=f"{self.site.base_url}/", items=items
        )

    def _absolute_link(self, url_path: str) -> str:
        return f"{self.site.base_url}/{url_path}"


__all__ = [
    "RssFeedBuilder",
    "build_index_entry",
    "encode_post_index",
    "format_pretty_date",
    "format_rfc822_date",
    "sort_entries",
]
