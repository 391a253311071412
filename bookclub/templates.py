"""Index page synthesis for bookclub.

This module uses Jinja2 to assemble the aggregate ``index.html``: one
navigation button and one content container per converted document, in unit
order, plus references to the shared stylesheet and tab controller script.

Key classes:
- Tab: A document as it appears on the index page.
- IndexSynthesizer: Reads back generated fragments and writes the index page.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from .content import ConversionUnit
from .errors import MissingOutputError, OutputWriteError

_TEMPLATES_DIR = Path(__file__).parent / "templates"
INDEX_TEMPLATE = "index.html.jinja"

__all__ = ["IndexSynthesizer", "Tab"]


@dataclass
class Tab:
    """A navigation button and its content container.

    Attributes:
        id: Element id of the container and data-tab key of the button.
        label: Button text.
        content: Embedded HTML fragment, inserted without escaping.
    """

    id: str
    label: str
    content: Markup


class IndexSynthesizer:
    """Builds the tabbed aggregate page from converted fragments.

    Attributes:
        title: Page title and main heading.
        stylesheet: Relative URL of the stylesheet.
        script: Relative URL of the tab controller script.
        env: Jinja2 environment loading the packaged template.
    """

    def __init__(
        self,
        title: str,
        stylesheet: str = "style.css",
        script: str = "main.js",
    ):
        self.title = title
        self.stylesheet = stylesheet
        self.script = script
        self.env = Environment(
            loader=FileSystemLoader(str(_TEMPLATES_DIR)),
            autoescape=select_autoescape(["html", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
            enable_async=False,
        )

    def collect_tabs(self, units: Iterable[ConversionUnit]) -> list[Tab]:
        """Read back every generated fragment.

        All fragments are read before anything is rendered, so a missing one
        aborts synthesis without touching the existing index page.

        Args:
            units: Units in build order.

        Returns:
            Tabs in the same order.

        Raises:
            MissingOutputError: If a unit's fragment was never written.
        """
        tabs: list[Tab] = []
        for unit in units:
            if not unit.output_path.exists():
                raise MissingOutputError(unit.output_path)
            content = unit.output_path.read_text(encoding="utf-8")
            tabs.append(Tab(id=unit.tab_id, label=unit.display_label, content=Markup(content)))
        return tabs

    def render(self, tabs: list[Tab]) -> str:
        """Render the index page for the given tabs."""
        template = self.env.get_template(INDEX_TEMPLATE)
        return template.render(
            title=self.title,
            stylesheet=self.stylesheet,
            script=self.script,
            tabs=tabs,
        )

    def write(self, units: Iterable[ConversionUnit], index_path: Path) -> Path:
        """Synthesize the index page and write it in one go.

        Args:
            units: Converted units in build order.
            index_path: Destination of the aggregate page.

        Returns:
            The written path.

        Raises:
            MissingOutputError: If a fragment is missing.
            OutputWriteError: If the page cannot be written.
        """
        rendered = self.render(self.collect_tabs(units))
        try:
            index_path.parent.mkdir(parents=True, exist_ok=True)
            index_path.write_text(rendered, encoding="utf-8")
        except OSError as exc:
            raise OutputWriteError(index_path, exc) from exc
        print(f"✓ Generated {index_path}")
        return index_path
