r"""Parse essay Markdown into an outline of chapters and subsections.

This module powers the essay compiler by scanning Markdown line by line into
block elements, splitting them into an untitled intro plus ordered chapters
(one per ``##`` heading), and nesting deeper headings into a subsection tree.
Every heading receives an anchor id that is unique within the document, so
the table of contents and in-page links stay stable across builds.

Example
-------
>>> from essay_pages.markdown_parser import parse_outline
>>> outline = parse_outline("## First\ntext\n\n### Detail\nMore")
>>> outline.chapters[0].anchor
'chapter-first'
>>> outline.chapters[0].subsections[0].anchor
'section-detail'
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

HEADING_PATTERN = re.compile(r"^ {0,3}(?P<marks>#{1,6})(?:[ \t]+(?P<text>.*?))?[ \t]*$")
CLOSING_HASHES_PATTERN = re.compile(r"(?:^|[ \t]+)#+$")
BULLET_PATTERN = re.compile(r"^ {0,3}[-*+][ \t]+(?P<text>.*)$")
ORDERED_PATTERN = re.compile(r"^ {0,3}(?P<number>\d{1,9})\.[ \t]+(?P<text>.*)$")
QUOTE_PATTERN = re.compile(r"^ {0,3}>[ ]?(?P<text>.*)$")
FENCE_OPEN_PATTERN = re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})[ \t]*(?P<info>.*)$")
FENCE_CLOSE_PATTERN = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})[ \t]*$")
LANGUAGE_PATTERN = re.compile(r"[A-Za-z0-9_+#.-]+")
NUMBERING_PATTERN = re.compile(r"^\d+\.\s+")


@dc.dataclass(slots=True, frozen=True)
class Paragraph:
    """Run of wrapped text lines rendered as one paragraph."""

    text: str


@dc.dataclass(slots=True, frozen=True)
class BulletList:
    """Unordered list with one string per item."""

    items: tuple[str, ...]


@dc.dataclass(slots=True, frozen=True)
class OrderedList:
    """Ordered list with one string per item and the first item's number."""

    items: tuple[str, ...]
    start: int = 1


@dc.dataclass(slots=True, frozen=True)
class BlockQuote:
    """Quoted text split into paragraphs."""

    paragraphs: tuple[str, ...]


@dc.dataclass(slots=True, frozen=True)
class CodeBlock:
    """Fenced code kept verbatim, with the optional language tag."""

    code: str
    language: str | None = None


@dc.dataclass(slots=True, frozen=True)
class Heading:
    """Heading rendered inline with its document-unique anchor id."""

    level: int
    text: str
    anchor: str = ""


Block = Paragraph | BulletList | OrderedList | BlockQuote | CodeBlock | Heading


@dc.dataclass(slots=True)
class Subsection:
    """Heading of level three or deeper nested under a chapter.

    Attributes
    ----------
    title : str
        Heading text as written (inline Markdown intact).
    anchor : str
        Unique anchor id within the document.
    level : int
        Heading level between 3 and 6; always greater than the parent's.
    children : list[Subsection]
        Deeper headings that follow before the next heading of equal or
        shallower level.
    """

    title: str
    anchor: str
    level: int
    children: list[Subsection] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class Chapter:
    """Second-level heading, its content blocks, and its subsection tree.

    Attributes
    ----------
    title : str
        Heading text with any leading ``"N. "`` numbering removed.
    anchor : str
        Unique ``chapter-`` anchor id within the document.
    blocks : list[Block]
        Content blocks following the heading (the heading itself excluded).
    subsections : list[Subsection]
        Top-level subsections of this chapter.
    """

    title: str
    anchor: str
    blocks: list[Block] = dc.field(default_factory=list)
    subsections: list[Subsection] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class Outline:
    """Intro blocks followed by the ordered chapters of one document."""

    intro: list[Block] = dc.field(default_factory=list)
    chapters: list[Chapter] = dc.field(default_factory=list)

    def anchors(self) -> list[str]:
        """Return every anchor id in document order."""
        found = [block.anchor for block in self.intro if isinstance(block, Heading)]
        for chapter in self.chapters:
            found.append(chapter.anchor)
            found.extend(
                block.anchor for block in chapter.blocks if isinstance(block, Heading)
            )
        return found


def slugify(value: str) -> str:
    """Convert heading text into a lowercase hyphen-separated slug.

    Characters other than ASCII letters, digits, whitespace, and hyphens are
    dropped; whitespace runs become single hyphens and hyphen runs collapse.

    Examples
    --------
    >>> slugify("Hello, World!")
    'hello-world'
    >>> slugify("a -- b")
    'a-b'
    """
    slug = re.sub(r"[^a-z0-9\s-]", "", value.lower()).strip()
    slug = re.sub(r"\s+", "-", slug)
    return re.sub(r"-+", "-", slug)


def _strip_numbering(text: str) -> str:
    """Remove a leading ``"N. "`` ordinal from a heading."""
    return NUMBERING_PATTERN.sub("", text).strip()


def _unique_slug(base: str, used: set[str]) -> str:
    """Generate a unique slug, appending numeric suffixes when needed."""
    candidate = base
    suffix = 2
    while candidate in used:
        candidate = f"{base}-{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate


def _heading_anchor(heading: Heading, line_number: int, used: set[str]) -> str:
    """Return a unique ``chapter-``/``section-`` anchor for ``heading``."""
    prefix = "chapter" if heading.level == 2 else "section"
    base = (
        slugify(_strip_numbering(heading.text))
        or slugify(heading.text)
        or str(line_number)
    )
    return _unique_slug(f"{prefix}-{base}", used)


def _match_fence(line: str) -> re.Match[str] | None:
    match = FENCE_OPEN_PATTERN.match(line)
    if match and match.group("fence").startswith("`") and "`" in match.group("info"):
        return None
    return match


def _is_boundary(line: str) -> bool:
    """Return True when ``line`` ends a paragraph or starts a new block."""
    return (
        not line.strip()
        or _match_fence(line) is not None
        or HEADING_PATTERN.match(line) is not None
        or QUOTE_PATTERN.match(line) is not None
        or BULLET_PATTERN.match(line) is not None
        or ORDERED_PATTERN.match(line) is not None
    )


def _heading_text(raw: str | None) -> str:
    text = (raw or "").strip()
    return CLOSING_HASHES_PATTERN.sub("", text).strip()


def _consume_fence(
    lines: cabc.Sequence[str], idx: int, opener: re.Match[str]
) -> tuple[CodeBlock, int]:
    """Consume a fenced code block verbatim, returning it and the next index."""
    fence = opener.group("fence")
    indent = len(opener.group("indent"))
    language = LANGUAGE_PATTERN.match(opener.group("info").strip())
    body: list[str] = []
    idx += 1
    while idx < len(lines):
        line = lines[idx]
        idx += 1
        closing = FENCE_CLOSE_PATTERN.match(line)
        if (
            closing
            and closing.group("fence")[0] == fence[0]
            and len(closing.group("fence")) >= len(fence)
        ):
            break
        stripped = len(line) - len(line.lstrip(" "))
        body.append(line[min(indent, stripped) :])
    code = CodeBlock(
        code="\n".join(body), language=language.group(0) if language else None
    )
    return code, idx


def _consume_paragraph(
    lines: cabc.Sequence[str], idx: int
) -> tuple[Paragraph, int]:
    collected = [lines[idx].strip()]
    idx += 1
    while idx < len(lines) and not _is_boundary(lines[idx]):
        collected.append(lines[idx].strip())
        idx += 1
    return Paragraph("\n".join(collected)), idx


def _consume_list(
    lines: cabc.Sequence[str], idx: int, pattern: re.Pattern[str]
) -> tuple[list[str], int]:
    """Collect contiguous same-kind items; plain lines continue the last item."""
    items: list[str] = []
    while idx < len(lines):
        line = lines[idx]
        match = pattern.match(line)
        if match:
            items.append(match.group("text").strip())
        elif _is_boundary(line):
            break
        else:
            items[-1] = f"{items[-1]}\n{line.strip()}".strip()
        idx += 1
    return items, idx


def _consume_quote(lines: cabc.Sequence[str], idx: int) -> tuple[BlockQuote, int]:
    paragraphs: list[list[str]] = [[]]
    while idx < len(lines):
        line = lines[idx]
        match = QUOTE_PATTERN.match(line)
        if match:
            text = match.group("text").strip()
            if text:
                paragraphs[-1].append(text)
            elif paragraphs[-1]:
                paragraphs.append([])
        elif _is_boundary(line):
            break
        else:
            paragraphs[-1].append(line.strip())
        idx += 1
    joined = tuple("\n".join(chunk) for chunk in paragraphs if chunk)
    return BlockQuote(joined), idx


def parse_blocks(lines: cabc.Sequence[str]) -> list[tuple[int, Block]]:
    """Tokenize Markdown lines into blocks paired with their 1-based start line.

    Parameters
    ----------
    lines : Sequence[str]
        Body lines without trailing newlines.

    Returns
    -------
    list[tuple[int, Block]]
        Blocks in document order. Headings carry an empty anchor; anchors are
        assigned by :func:`parse_outline`.
    """
    blocks: list[tuple[int, Block]] = []
    idx = 0
    while idx < len(lines):
        line = lines[idx]
        if not line.strip():
            idx += 1
            continue
        line_number = idx + 1
        block: Block
        if fence := _match_fence(line):
            block, idx = _consume_fence(lines, idx, fence)
        elif heading := HEADING_PATTERN.match(line):
            block = Heading(
                level=len(heading.group("marks")),
                text=_heading_text(heading.group("text")),
            )
            idx += 1
        elif QUOTE_PATTERN.match(line):
            block, idx = _consume_quote(lines, idx)
        elif BULLET_PATTERN.match(line):
            items, idx = _consume_list(lines, idx, BULLET_PATTERN)
            block = BulletList(tuple(items))
        elif ordered := ORDERED_PATTERN.match(line):
            items, idx = _consume_list(lines, idx, ORDERED_PATTERN)
            block = OrderedList(tuple(items), start=int(ordered.group("number")))
        else:
            block, idx = _consume_paragraph(lines, idx)
        blocks.append((line_number, block))
    return blocks


def parse_outline(markdown_text: str) -> Outline:
    """Structure a Markdown body into intro blocks and nested chapters.

    Parameters
    ----------
    markdown_text : str
        Markdown body with front matter already removed.

    Returns
    -------
    Outline
        Blocks preceding the first ``##`` heading land in ``intro``; each
        ``##`` heading opens a :class:`Chapter` whose deeper headings form its
        subsection tree. Anchor ids are unique within the returned outline.
    """
    lines = markdown_text.replace("\r\n", "\n").split("\n")
    used: set[str] = set()
    outline = Outline()
    active: Chapter | None = None
    stack: list[Subsection] = []

    for line_number, block in parse_blocks(lines):
        if isinstance(block, Heading):
            block = dc.replace(block, anchor=_heading_anchor(block, line_number, used))
            if block.level == 2:
                active = Chapter(
                    title=_strip_numbering(block.text) or block.text,
                    anchor=block.anchor,
                )
                outline.chapters.append(active)
                stack = []
                continue

        if active is None:
            outline.intro.append(block)
            continue

        active.blocks.append(block)
        if isinstance(block, Heading) and block.level >= 3:
            while stack and stack[-1].level >= block.level:
                stack.pop()
            subsection = Subsection(
                title=block.text, anchor=block.anchor, level=block.level
            )
            siblings = stack[-1].children if stack else active.subsections
            siblings.append(subsection)
            stack.append(subsection)

    return outline


__all__ = [
    "Block",
    "BlockQuote",
    "BulletList",
    "Chapter",
    "CodeBlock",
    "Heading",
    "OrderedList",
    "Outline",
    "Paragraph",
    "Subsection",
    "parse_blocks",
    "parse_outline",
    "slugify",
]
