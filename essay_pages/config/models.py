"""Typed dataclasses describing essay site configuration structures."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

DEFAULT_STATIC_ASSETS: tuple[str, ...] = (
    "index.html",
    "index.js",
    "script.js",
    "styles.css",
    "theme.js",
    ".nojekyll",
    "CNAME",
)


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(slots=True, frozen=True)
class CategoryConfig:
    """A content category listed in the site configuration."""

    slug: str
    name: str
    order: int


@dc.dataclass(slots=True)
class SiteConfig:
    """Site-wide settings and the ordered category list for one build.

    Attributes
    ----------
    title : str
        Site title used in page titles, the home link, and the RSS channel.
    base_url : str
        Absolute site URL without a trailing slash (may be empty).
    description : str
        Site description for the RSS channel.
    language : str
        RSS channel language code.
    root : Path
        Directory holding the configuration file; static assets live here.
    content_dir : Path
        Directory containing one subdirectory per category.
    output_dir : Path
        Build output directory.
    categories : list[CategoryConfig]
        Categories in configuration order.
    static_assets : list[str]
        Root-relative files copied into the output when present.
    pygments_style : str
        Pygments style for highlighted code blocks.
    """

    title: str
    base_url: str
    description: str
    categories: list[CategoryConfig]
    root: Path = Path()
    content_dir: Path = Path("categories")
    output_dir: Path = Path("build")
    language: str = "en-us"
    static_assets: list[str] = dc.field(
        default_factory=lambda: list(DEFAULT_STATIC_ASSETS)
    )
    pygments_style: str = "monokai"


__all__ = [
    "DEFAULT_STATIC_ASSETS",
    "CategoryConfig",
    "SiteConfig",
    "SiteConfigError",
]
