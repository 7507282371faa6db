"""Exceptions raised while compiling the essay corpus.

Every error here is fatal to a build: the collector stops at the first
malformed document rather than publishing a partially consistent site. Each
exception keeps the offending source path (when known) so command-line output
points straight at the file to fix.

Examples
--------
>>> from pathlib import Path
>>> from essay_pages.errors import MissingField
>>> err = MissingField("title", path=Path("categories/essays/intro/content.md"))
>>> err.field
'title'
>>> str(err)
'Missing or invalid "title" in categories/essays/intro/content.md'
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path


def _location(path: Path | str | None) -> str:
    return f" in {path}" if path else ""


class ContentError(ValueError):
    """Base class for fatal content compilation errors."""

    def __init__(self, message: str, *, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = path


class MalformedFrontMatter(ContentError):
    """Raised when a document does not open or close its front matter block."""


class InvalidFrontMatterLine(ContentError):
    """Raised when a front matter line has no ``key: value`` separator."""

    def __init__(self, line: str, *, path: Path | str | None = None) -> None:
        msg = f'Invalid front matter line "{line}"{_location(path)}'
        super().__init__(msg, path=path)
        self.line = line


class MissingField(ContentError):
    """Raised when a required front matter field is absent or blank."""

    def __init__(self, field: str, *, path: Path | str | None = None) -> None:
        msg = f'Missing or invalid "{field}"{_location(path)}'
        super().__init__(msg, path=path)
        self.field = field


class InvalidBooleanFlag(ContentError):
    """Raised when a boolean front matter flag is neither ``true`` nor ``false``."""

    def __init__(
        self, field: str, value: str, *, path: Path | str | None = None
    ) -> None:
        msg = f'Invalid "{field}" value "{value}"{_location(path)}. Use true or false.'
        super().__init__(msg, path=path)
        self.field = field
        self.value = value


class InvalidDate(ContentError):
    """Raised when a date field is not a valid ``YYYY-MM-DD`` calendar date."""

    def __init__(self, value: str, *, path: Path | str | None = None) -> None:
        msg = f'Invalid date "{value}"{_location(path)}'
        super().__init__(msg, path=path)
        self.value = value


class InvalidSlug(ContentError):
    """Raised when a ``slug`` override is not a single URL path segment."""

    def __init__(self, value: str, *, path: Path | str | None = None) -> None:
        msg = (
            f'Invalid slug "{value}"{_location(path)}. '
            "Use a single path segment of letters, digits, '.', '_' or '-'."
        )
        super().__init__(msg, path=path)
        self.value = value


class DuplicateOutputPath(ContentError):
    """Raised when two documents resolve to the same output URL path."""

    def __init__(self, url_path: str, *, path: Path | str | None = None) -> None:
        msg = f'Duplicate generated URL path "{url_path}"{_location(path)}'
        super().__init__(msg, path=path)
        self.url_path = url_path


class MissingCategoryDirectory(ContentError):
    """Raised when a configured category has no source directory."""

    def __init__(self, path: Path | str) -> None:
        super().__init__(f"Category directory is missing: {path}", path=path)


__all__ = [
    "ContentError",
    "DuplicateOutputPath",
    "InvalidBooleanFlag",
    "InvalidDate",
    "InvalidFrontMatterLine",
    "InvalidSlug",
    "MalformedFrontMatter",
    "MissingCategoryDirectory",
    "MissingField",
]
