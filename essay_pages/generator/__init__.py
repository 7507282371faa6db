"""Utilities for rendering essay outlines into HTML pages."""

from .inline import render_inline
from .models import ChapterModel, TocEntry
from .page_generator import PageAssembler, build_toc
from .renderer import HtmlContentRenderer

__all__ = [
    "ChapterModel",
    "HtmlContentRenderer",
    "PageAssembler",
    "TocEntry",
    "build_toc",
    "render_inline",
]
