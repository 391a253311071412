"""Markdown rendering for bookclub.

Converts Markdown source documents to HTML fragments with mistune. Table
markup is rewritten to use the site's BEM-style classes instead of inline
presentation attributes, so styling lives entirely in style.css.

Key classes:
- MarkdownRenderer: Renders Markdown to an HTML fragment.

Key functions:
- semantic_tables: mistune plugin enabling tables with class-based markup.
"""

from __future__ import annotations

from pathlib import Path

import mistune
from mistune.plugins.table import table as _table_plugin

from .utils import is_markdown

TABLE_CLASS = "table"
HEAD_CLASS = "table__head"
BODY_CLASS = "table__body"
ROW_CLASS = "table__row"
CELL_CLASS = "table__cell"
HEADER_CELL_CLASS = "table__cell table__cell--header"


def _render_table(renderer, text: str) -> str:
    return f'<table class="{TABLE_CLASS}">\n{text}</table>\n'


def _render_table_head(renderer, text: str) -> str:
    # mistune emits header cells straight into the head, without a row token.
    return (
        f'<thead class="{HEAD_CLASS}">\n'
        f'<tr class="{ROW_CLASS}">\n{text}</tr>\n'
        "</thead>\n"
    )


def _render_table_body(renderer, text: str) -> str:
    return f'<tbody class="{BODY_CLASS}">\n{text}</tbody>\n'


def _render_table_row(renderer, text: str) -> str:
    return f'<tr class="{ROW_CLASS}">\n{text}</tr>\n'


def _render_table_cell(
    renderer, text: str, align: str | None = None, head: bool = False
) -> str:
    # Column alignment is discarded; cells never carry a style attribute.
    if head:
        return f'<th class="{HEADER_CELL_CLASS}">{text}</th>\n'
    return f'<td class="{CELL_CLASS}">{text}</td>\n'


def semantic_tables(md: mistune.Markdown) -> None:
    """Enable GFM tables and render them with CSS classes.

    Wraps mistune's own table plugin for parsing, then replaces its HTML
    render functions.

    Args:
        md: Markdown instance the plugin is being applied to.
    """
    _table_plugin(md)
    if md.renderer and md.renderer.NAME == "html":
        md.renderer.register("table", _render_table)
        md.renderer.register("table_head", _render_table_head)
        md.renderer.register("table_body", _render_table_body)
        md.renderer.register("table_row", _render_table_row)
        md.renderer.register("table_cell", _render_table_cell)


class MarkdownRenderer:
    """Renders Markdown content to an HTML fragment.

    Attributes:
        allow_html: Pass raw HTML found in the source through unescaped.
    """

    def __init__(self, allow_html: bool = False):
        self.allow_html = allow_html

    @property
    def source_type(self) -> str:
        """Return the source type identifier."""
        return "markdown"

    def can_render(self, path: Path) -> bool:
        """Check if this renderer can handle the given file.

        Args:
            path: Path to the source file.

        Returns:
            True if the file is a Markdown file.
        """
        return is_markdown(path)

    def render(self, content: str) -> str:
        """Render Markdown content to HTML.

        A fresh mistune instance is created per call so no parser state leaks
        between documents.

        Args:
            content: Markdown source content.

        Returns:
            Rendered HTML fragment.
        """
        renderer = mistune.HTMLRenderer(escape=not self.allow_html)
        markdown = mistune.create_markdown(
            renderer=renderer, plugins=["strikethrough", semantic_tables]
        )
        return markdown(content)
