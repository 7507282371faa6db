r"""Split essay sources into front matter and Markdown body.

Every ``content.md`` starts with a ``---`` delimited block of ``key: value``
lines. This module separates that block from the body, then validates the
loose key/value mapping into a :class:`DocumentMeta` record so the rest of the
pipeline never checks for field presence again.

Example
-------
>>> from essay_pages.front_matter import parse_front_matter, validate_front_matter
>>> parsed = parse_front_matter(
...     "---\ntitle: Hello\ndescription: A test\ndate: 2026-01-01\n---\n\n## First\n"
... )
>>> parsed.body
'## First\n'
>>> validate_front_matter(parsed.meta).title
'Hello'
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import re
import typing as typ

from .errors import (
    InvalidBooleanFlag,
    InvalidDate,
    InvalidFrontMatterLine,
    InvalidSlug,
    MalformedFrontMatter,
    MissingField,
)

if typ.TYPE_CHECKING:
    from pathlib import Path

DELIMITER = "---"
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
LEADING_BLANK_LINES = re.compile(r"^(?:[ \t]*\n)+")
SLUG_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


@dc.dataclass(slots=True)
class FrontMatter:
    """Raw front matter mapping alongside the remaining Markdown body."""

    meta: dict[str, str]
    body: str


@dc.dataclass(slots=True, frozen=True)
class DocumentMeta:
    """Validated front matter for a single essay.

    Attributes
    ----------
    title : str
        Non-empty essay title.
    description : str
        Non-empty summary shown under the title and in feeds.
    date : datetime.date
        Publication date (no time component).
    category : str | None
        Optional category label overriding the configured category name.
    slug : str | None
        Optional output slug overriding the source directory name.
    number_chapters : bool
        Prefix chapter headings and contents entries with ``"N. "``.
    show_contents : bool
        Render the table-of-contents aside.
    """

    title: str
    description: str
    date: dt.date
    category: str | None = None
    slug: str | None = None
    number_chapters: bool = False
    show_contents: bool = True


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


def parse_front_matter(text: str, path: Path | str | None = None) -> FrontMatter:
    """Split ``text`` into its front matter mapping and Markdown body.

    Parameters
    ----------
    text : str
        Full document source.
    path : Path or str, optional
        Source location used in error messages.

    Returns
    -------
    FrontMatter
        Parsed key/value mapping (quotes stripped) and the body with leading
        blank lines removed.

    Raises
    ------
    MalformedFrontMatter
        If the text does not open with a ``---`` line or never closes it.
    InvalidFrontMatterLine
        If a non-blank line inside the block lacks a ``key: value`` separator.
    """
    source = text.replace("\r\n", "\n")
    lines = source.split("\n")
    if not lines or lines[0].rstrip() != DELIMITER:
        location = f" in {path}" if path else ""
        msg = f"Missing front matter{location}"
        raise MalformedFrontMatter(msg, path=path)

    try:
        end = next(
            idx for idx in range(1, len(lines)) if lines[idx].rstrip() == DELIMITER
        )
    except StopIteration:
        location = f" in {path}" if path else ""
        msg = f"Unterminated front matter{location}"
        raise MalformedFrontMatter(msg, path=path) from None

    meta: dict[str, str] = {}
    for line in lines[1:end]:
        if not line.strip():
            continue
        key, sep, value = line.partition(":")
        key = key.strip()
        if not sep or not key:
            raise InvalidFrontMatterLine(line, path=path)
        meta[key] = _strip_quotes(value.strip())

    body = "\n".join(lines[end + 1 :])
    return FrontMatter(meta=meta, body=LEADING_BLANK_LINES.sub("", body))


def require_field(
    meta: typ.Mapping[str, str], field: str, path: Path | str | None = None
) -> str:
    """Return the stripped value of ``field`` or raise :class:`MissingField`."""
    value = meta.get(field)
    if value is None or not value.strip():
        raise MissingField(field, path=path)
    return value.strip()


def parse_boolean_flag(
    value: str | None,
    field: str,
    path: Path | str | None = None,
    *,
    default: bool,
) -> bool:
    """Interpret a ``true``/``false`` flag, falling back to ``default`` when unset.

    Raises
    ------
    InvalidBooleanFlag
        If ``value`` is set to anything other than ``true`` or ``false``
        (case-insensitive).
    """
    if value is None or not value.strip():
        return default
    match value.strip().lower():
        case "true":
            return True
        case "false":
            return False
        case _:
            raise InvalidBooleanFlag(field, value, path=path)


def parse_date(value: str, path: Path | str | None = None) -> dt.date:
    """Parse an ISO ``YYYY-MM-DD`` calendar date or raise :class:`InvalidDate`."""
    candidate = value.strip()
    if not ISO_DATE_PATTERN.match(candidate):
        raise InvalidDate(value, path=path)
    try:
        return dt.date.fromisoformat(candidate)
    except ValueError as exc:
        raise InvalidDate(value, path=path) from exc


def _optional(meta: typ.Mapping[str, str], field: str) -> str | None:
    value = meta.get(field)
    if value is None:
        return None
    return value.strip() or None


def validate_front_matter(
    meta: typ.Mapping[str, str], path: Path | str | None = None
) -> DocumentMeta:
    """Validate a raw front matter mapping into a :class:`DocumentMeta`.

    Parameters
    ----------
    meta : Mapping[str, str]
        Key/value pairs produced by :func:`parse_front_matter`.
    path : Path or str, optional
        Source location used in error messages.

    Returns
    -------
    DocumentMeta
        Typed record with required fields present and flags resolved.

    Raises
    ------
    MissingField
        If ``title``, ``description``, or ``date`` is absent or blank.
    InvalidDate
        If ``date`` is not a valid calendar date.
    InvalidSlug
        If ``slug`` is set but is not a single path segment.
    InvalidBooleanFlag
        If ``numberChapters`` or ``showContents`` is malformed.
    """
    title = require_field(meta, "title", path)
    description = require_field(meta, "description", path)
    date = parse_date(require_field(meta, "date", path), path)
    slug = _optional(meta, "slug")
    if slug is not None and not SLUG_PATTERN.match(slug):
        raise InvalidSlug(slug, path=path)
    return DocumentMeta(
        title=title,
        description=description,
        date=date,
        category=_optional(meta, "category"),
        slug=slug,
        number_chapters=parse_boolean_flag(
            meta.get("numberChapters"), "numberChapters", path, default=False
        ),
        show_contents=parse_boolean_flag(
            meta.get("showContents"), "showContents", path, default=True
        ),
    )


__all__ = [
    "DocumentMeta",
    "FrontMatter",
    "parse_boolean_flag",
    "parse_date",
    "parse_front_matter",
    "require_field",
    "validate_front_matter",
]
