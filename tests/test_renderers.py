import re
from pathlib import Path

from bookclub.protocols import ContentRenderer
from bookclub.renderers import MarkdownRenderer

TABLE_MD = """\
| Name | Score | Notes |
|:-----|:-----:|------:|
| Ada  | 10    | first |
| Bob  | 7     | second |
"""


def test_markdown_renderer_satisfies_protocol():
    renderer = MarkdownRenderer()
    assert isinstance(renderer, ContentRenderer)
    assert renderer.source_type == "markdown"
    assert renderer.can_render(Path("notes.md"))
    assert renderer.can_render(Path("NOTES.MD"))
    assert not renderer.can_render(Path("notes.txt"))


def test_tables_use_semantic_classes():
    html = MarkdownRenderer().render(TABLE_MD)
    assert '<table class="table">' in html
    assert '<thead class="table__head">' in html
    assert '<tbody class="table__body">' in html
    assert html.count('<tr class="table__row">') == 3
    assert html.count('<th class="table__cell table__cell--header">') == 3
    assert html.count('<td class="table__cell">') == 6
    assert "<th>Name</th>" not in html


def test_tables_never_carry_inline_style():
    html = MarkdownRenderer().render(TABLE_MD)
    assert "style=" not in html
    assert "align" not in html
    for tag in re.findall(r"<(?:table|thead|tbody|tr|th|td)\b[^>]*>", html):
        assert 'class="' in tag


def test_render_basic_markdown():
    html = MarkdownRenderer().render("# Title\n\nSome *text* and ~~old~~.\n")
    assert "<h1>Title</h1>" in html
    assert "<em>text</em>" in html
    assert "<del>old</del>" in html
    assert "<html" not in html


def test_headings_have_no_ids():
    html = MarkdownRenderer().render("## Overview\n")
    assert "id=" not in html


def test_raw_html_escaped_unless_allowed():
    source = "<div class=\"note\">hi</div>\n"
    assert "<div" not in MarkdownRenderer().render(source)
    assert "&lt;div" in MarkdownRenderer().render(source)
    assert '<div class="note">hi</div>' in MarkdownRenderer(allow_html=True).render(source)


def test_render_is_pure():
    renderer = MarkdownRenderer()
    first = renderer.render(TABLE_MD)
    renderer.render("# Something else\n")
    assert renderer.render(TABLE_MD) == first
