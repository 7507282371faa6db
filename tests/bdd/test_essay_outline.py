"""Behaviour tests for chapter structure and the contents aside.

Each scenario renders a single essay page in memory with
:class:`essay_pages.generator.PageAssembler` and inspects it with
BeautifulSoup. The feature file lives at ``features/essay_outline.feature``.
"""

from __future__ import annotations

import datetime as dt
import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from pytest_bdd import given, parsers, scenarios, then, when

from essay_pages.config import CategoryConfig, SiteConfig
from essay_pages.generator import PageAssembler
from essay_pages.markdown_parser import parse_outline
from essay_pages.models import Document

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "essay_outline.feature"
)
scenarios(FEATURE_FILE)


@pytest.fixture
def scenario_state() -> dict[str, object]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


def _soup(scenario_state: dict[str, object]) -> BeautifulSoup:
    return typ.cast("BeautifulSoup", scenario_state["soup"])


@given("an essay body with a chapter, a subsection, and a sub-subsection")
def given_nested_body(scenario_state: dict[str, object]) -> None:
    scenario_state["body"] = (
        "## Tools\nWhat I use.\n\n### Editors\nText editors.\n\n#### Vim\nModal.\n"
    )


@given("an essay body with only introductory paragraphs")
def given_intro_only(scenario_state: dict[str, object]) -> None:
    scenario_state["body"] = "First thought.\n\nSecond thought.\n"


@given(parsers.parse('an essay body with two "{title}" subsections'))
def given_repeated_headings(scenario_state: dict[str, object], title: str) -> None:
    scenario_state["body"] = f"## Start\n### {title}\none\n\n### {title}\ntwo\n"


@when("I render the essay page")
def when_render(scenario_state: dict[str, object]) -> None:
    """Render the stored body through the page assembler."""
    body = typ.cast("str", scenario_state["body"])
    document = Document(
        category_slug="essays",
        slug="outline",
        title="Outline",
        description="Structure check",
        date=dt.date(2026, 1, 1),
        category="Essays",
        category_order=0,
        number_chapters=False,
        show_contents=True,
        body=body,
        source=Path("content.md"),
    )
    site = SiteConfig(
        title="Field Notes",
        base_url="",
        description="",
        categories=[CategoryConfig("essays", "Essays", 0)],
    )
    html = PageAssembler(site).render(document, parse_outline(body))
    scenario_state["soup"] = BeautifulSoup(html, "html.parser")


@then(parsers.parse('the contents lists chapter "{anchor}"'))
def then_chapter_listed(scenario_state: dict[str, object], anchor: str) -> None:
    links = [a["href"] for a in _soup(scenario_state).select("ol.toc-list > li > a")]
    assert links == [f"#{anchor}"]


@then(parsers.parse('"{anchor}" is nested at depth {depth:d}'))
def then_nested(scenario_state: dict[str, object], anchor: str, depth: int) -> None:
    link = _soup(scenario_state).select_one(f'aside.toc a[href="#{anchor}"]')
    assert link is not None, f"no contents link for {anchor}"
    container = link.find_parent("ol")
    assert f"depth-{depth}" in container["class"], container["class"]


@then(parsers.parse('the contents shows "{label}"'))
def then_contents_label(scenario_state: dict[str, object], label: str) -> None:
    labels = [a.get_text() for a in _soup(scenario_state).select("aside.toc a")]
    assert labels == [label]


@then(parsers.parse("the article contains {count:d} intro paragraphs"))
def then_intro_paragraphs(scenario_state: dict[str, object], count: int) -> None:
    paragraphs = _soup(scenario_state).select("article.essay-content > p")
    assert len(paragraphs) == count


@then(parsers.parse('the page contains anchors "{first}" and "{second}"'))
def then_anchors(scenario_state: dict[str, object], first: str, second: str) -> None:
    soup = _soup(scenario_state)
    assert soup.select_one(f"h3#{first}") is not None
    assert soup.select_one(f"h3#{second}") is not None
