r"""Render inline Markdown spans (code, links, bold, italic) to HTML.

The text is escaped once up front, then code spans and whole link elements
are parked behind placeholder tokens so emphasis can never straddle a tag.
Link labels get their own emphasis pass before the anchor is parked.
Only ``http`` and ``https`` link targets become anchors; anything else stays
literal text.

Example
-------
>>> from essay_pages.generator.inline import render_inline
>>> render_inline("Use `<b>` and **care**")
'Use <code>&lt;b&gt;</code> and <strong>care</strong>'
"""

from __future__ import annotations

import re
from html import escape

CODE_SPAN_PATTERN = re.compile(r"`([^`\n]+)`")
LINK_PATTERN = re.compile(r"\[([^\[\]]+)\]\((https?://[^\s()<>\x00]+)\)")
BOLD_PATTERN = re.compile(r"\*\*(?=\S)(.+?)(?<=\S)\*\*", re.DOTALL)
ITALIC_PATTERN = re.compile(r"\*(?=[^\s*])(.+?)(?<=[^\s*])\*", re.DOTALL)
PLACEHOLDER_PATTERN = re.compile("\x00(\\d+)\x00")


def render_inline(text: str) -> str:
    """Convert inline Markdown in ``text`` to an HTML fragment.

    Parameters
    ----------
    text : str
        Raw inline text, possibly spanning several lines.

    Returns
    -------
    str
        HTML with ``&<>"'`` escaped exactly once, ``<code>`` for backtick
        spans, ``<a>`` for http(s) links, ``<strong>`` and ``<em>`` for
        emphasis.
    """
    stash: list[str] = []

    def _park(fragment: str) -> str:
        stash.append(fragment)
        return f"\x00{len(stash) - 1}\x00"

    def _restore(fragment: str) -> str:
        return PLACEHOLDER_PATTERN.sub(
            lambda match: stash[int(match.group(1))], fragment
        )

    html = escape(text.replace("\x00", ""), quote=True)
    html = CODE_SPAN_PATTERN.sub(
        lambda match: _park(f"<code>{match.group(1)}</code>"), html
    )

    def _link(match: re.Match[str]) -> str:
        label, href = match.groups()
        # Emphasis stays inside the anchor; the whole element is parked.
        return _park(f'<a href="{href}">{_restore(_emphasize(label))}</a>')

    html = LINK_PATTERN.sub(_link, html)
    return _restore(_emphasize(html))


def _emphasize(html: str) -> str:
    html = BOLD_PATTERN.sub(r"<strong>\1</strong>", html)
    return ITALIC_PATTERN.sub(r"<em>\1</em>", html)


__all__ = ["render_inline"]
