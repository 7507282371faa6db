"""Utility helpers shared by the essay configuration loader."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from .models import CategoryConfig, SiteConfigError


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _require_str(value: object | None, field: str, source: Path) -> str:
    """Return a stripped non-empty string or raise :class:`SiteConfigError`."""
    if not isinstance(value, str) or not value.strip():
        msg = f'Missing or invalid "{field}" in {source}'
        raise SiteConfigError(msg)
    return value.strip()


def _resolve_path(root: Path, value: object | None, default: str) -> Path:
    """Resolve ``value`` against ``root`` unless it is already absolute."""
    path = Path(_optional_str(value) or default)
    return path if path.is_absolute() else root / path


def _normalize_assets(value: object | None, default: typ.Sequence[str]) -> list[str]:
    """Normalize the static asset list into non-empty relative names."""
    if value is None:
        return list(default)
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        msg = "static_assets must be a list of file names."
        raise SiteConfigError(msg)
    assets: list[str] = []
    for entry in value:
        text = _optional_str(entry)
        if text:
            assets.append(text)
    return assets


def _build_categories(
    raw: object | None, source: Path
) -> list[CategoryConfig]:
    """Build ordered CategoryConfig entries, rejecting duplicate slugs."""
    if not isinstance(raw, list) or not raw:
        msg = f'{source} must include a non-empty "categories" list.'
        raise SiteConfigError(msg)

    seen: set[str] = set()
    categories: list[CategoryConfig] = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            msg = f"Invalid category entry at index {index} in {source}"
            raise SiteConfigError(msg)
        slug = _require_str(entry.get("slug"), f"categories[{index}].slug", source)
        name = _optional_str(entry.get("name")) or slug
        order = entry.get("order", index)
        if not isinstance(order, int) or isinstance(order, bool):
            msg = f'Invalid "categories[{index}].order" in {source}'
            raise SiteConfigError(msg)
        if slug in seen:
            msg = f'Duplicate category slug "{slug}" in {source}'
            raise SiteConfigError(msg)
        seen.add(slug)
        categories.append(CategoryConfig(slug=slug, name=name, order=order))
    return categories


__all__ = [
    "_build_categories",
    "_normalize_assets",
    "_optional_str",
    "_require_str",
    "_resolve_path",
]
