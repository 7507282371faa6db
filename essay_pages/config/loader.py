"""Load site configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .helpers import (
    _build_categories,
    _normalize_assets,
    _optional_str,
    _resolve_path,
)
from .models import DEFAULT_STATIC_ASSETS, SiteConfig


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing the site and its categories.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``site.yaml``). YAML 1.2 is a superset of JSON, so a JSON file works
        too. Relative paths inside the file resolve against its directory.

    Returns
    -------
    SiteConfig
        Parsed site settings with categories in configuration order.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    SiteConfigError
        If the categories list is missing, empty, malformed, or repeats a
        slug.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from essay_pages.config import load_site_config
    >>> config = load_site_config(Path("site.yaml"))  # doctest: +SKIP
    >>> [category.slug for category in config.categories]  # doctest: +SKIP
    ['essays', 'notes']
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    site = raw.get("site", {}) or {}
    paths = raw.get("paths", {}) or {}
    root = path.resolve().parent

    return SiteConfig(
        title=_optional_str(site.get("title")) or "Site",
        base_url=(_optional_str(site.get("url")) or "").rstrip("/"),
        description=_optional_str(site.get("description")) or "",
        language=_optional_str(site.get("language")) or "en-us",
        categories=_build_categories(raw.get("categories"), path),
        root=root,
        content_dir=_resolve_path(root, paths.get("content_dir"), "categories"),
        output_dir=_resolve_path(root, paths.get("output_dir"), "build"),
        static_assets=_normalize_assets(
            raw.get("static_assets"), DEFAULT_STATIC_ASSETS
        ),
        pygments_style=_optional_str(site.get("pygments_style")) or "monokai",
    )


__all__ = ["load_site_config"]
