"""Render outline blocks and syntax-highlighted code snippets to HTML."""

from __future__ import annotations

import re
import typing as typ
from html import escape

from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from essay_pages.generator.inline import render_inline
from essay_pages.markdown_parser import (
    BlockQuote,
    BulletList,
    CodeBlock,
    Heading,
    OrderedList,
    Paragraph,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from essay_pages.markdown_parser import Block

CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')


class HtmlContentRenderer:
    """Render Markdown blocks and code snippets with consistent styling."""

    def __init__(self, pygments_style: str = "monokai") -> None:
        """Initialize a renderer with the Pygments style used for code blocks.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style used for syntax highlighting. Defaults to
            ``"monokai"``.
        """
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def inline(self, text: str) -> str:
        """Render inline Markdown spans into an HTML fragment."""
        return render_inline(text)

    def blocks(self, blocks: cabc.Iterable[Block]) -> str:
        """Render ``blocks`` in order, joined by newlines."""
        return "\n".join(self.block(block) for block in blocks)

    def block(self, block: Block) -> str:
        """Render a single block into an HTML fragment.

        Parameters
        ----------
        block : Block
            Any block variant produced by
            :func:`essay_pages.markdown_parser.parse_outline`.

        Returns
        -------
        str
            HTML for the block alone; siblings never influence the output.
        """
        match block:
            case Paragraph(text=text):
                return f"<p>{self.inline(text)}</p>"
            case Heading(level=level, text=text, anchor=anchor):
                anchor_attr = f' id="{escape(anchor, quote=True)}"' if anchor else ""
                return f"<h{level}{anchor_attr}>{self.inline(text)}</h{level}>"
            case BulletList(items=items):
                return self._list("ul", items)
            case OrderedList(items=items, start=start):
                start_attr = f' start="{start}"' if start != 1 else ""
                return self._list(f"ol{start_attr}", items, closing="ol")
            case BlockQuote(paragraphs=paragraphs):
                inner = "\n".join(f"<p>{self.inline(text)}</p>" for text in paragraphs)
                return f"<blockquote>\n{inner}\n</blockquote>"
            case CodeBlock(code=code, language=language):
                return self.code_block(code, language).rstrip("\n")
            case _:  # pragma: no cover - exhaustive over Block
                msg = f"Unsupported block type: {type(block).__name__}"
                raise TypeError(msg)

    def _list(
        self, tag: str, items: cabc.Sequence[str], *, closing: str | None = None
    ) -> str:
        rendered = "\n".join(f"<li>{self.inline(item)}</li>" for item in items)
        return f"<{tag}>\n{rendered}\n</{closing or tag}>"

    def code_block(self, code: str, language: str | None = None) -> str:
        """Render ``code`` into highlighted HTML with an optional language tag.

        Parameters
        ----------
        code : str
            Source snippet to highlight.
        language : str, optional
            Pygments lexer name; defaults to ``"text"`` when not provided or
            when the lexer lookup fails.

        Returns
        -------
        str
            HTML containing the highlighted block with ``data-language``
            metadata applied.
        """
        lang = language or "text"
        try:
            lexer = get_lexer_by_name(lang)
        except ClassNotFound:
            lang = "text"
            lexer = get_lexer_by_name(lang)
        html = highlight(code, lexer, self._formatter)
        return self._attach_language_attribute(html, lang)

    @staticmethod
    def _attach_language_attribute(html: str, language: str) -> str:
        """Add a single language attribute to an already highlighted block."""
        safe_lang = escape(language or "text", quote=True)

        def _repl(match: re.Match[str]) -> str:
            return f'<div class="codehilite" data-language="{safe_lang}">'

        return CODEHILITE_OPEN_TAG.sub(_repl, html, 1)


__all__ = ["HtmlContentRenderer"]
