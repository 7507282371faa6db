"""Load and validate site configuration YAML for essay builds.

This subpackage parses the project's ``site.yaml`` file, resolves the content
and output directories relative to it, and produces typed dataclasses
(:class:`SiteConfig`, :class:`CategoryConfig`) that the corpus collector
consumes. The primary entry point is :func:`load_site_config`, which rejects
missing or duplicate categories before any document is read.

Examples
--------
>>> from pathlib import Path
>>> from essay_pages.config import load_site_config
>>> site = load_site_config(Path("site.yaml"))  # doctest: +SKIP
"""

from .loader import load_site_config
from .models import (
    DEFAULT_STATIC_ASSETS,
    CategoryConfig,
    SiteConfig,
    SiteConfigError,
)

__all__ = [
    "DEFAULT_STATIC_ASSETS",
    "CategoryConfig",
    "SiteConfig",
    "SiteConfigError",
    "load_site_config",
]
