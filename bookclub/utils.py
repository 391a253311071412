"""Utility functions for bookclub.

Key functions:
    tab_label: Convert a tab identifier to a navigation label.
    is_valid_tab_id: Check a tab identifier is usable as an HTML id.
    is_markdown: Check if a path is a Markdown file.
    ensure_clean_dir: Ensure a directory exists and is empty.
    display_path: Render a path relative to the project root when possible.
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path

TAB_ID_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")


def tab_label(tab_id: str) -> str:
    """Convert a tab identifier to a human-readable label.

    Hyphens and underscores become spaces and the first letter of each word
    is upper-cased. The rest of each word is kept as written, so acronyms
    survive.

    Args:
        tab_id: Tab identifier such as ``facilitator-guide``.

    Returns:
        Label string.

    Examples:
        >>> tab_label("facilitator-guide")
        'Facilitator Guide'

        >>> tab_label("meeting-10")
        'Meeting 10'

        >>> tab_label("dora-AI")
        'Dora AI'
    """
    words = re.split(r"[\s\-_]+", tab_id)
    return " ".join(word[:1].upper() + word[1:] for word in words if word)


def is_valid_tab_id(tab_id: str) -> bool:
    """Check a tab identifier can serve as an element id and a URL fragment."""
    return bool(TAB_ID_RE.match(tab_id))


def is_markdown(path: Path) -> bool:
    """Check if a path is a Markdown file.

    Args:
        path: Path to check.

    Returns:
        True if the file has .md extension (case-insensitive).
    """
    return path.suffix.lower() == ".md"


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty.

    If the directory exists, removes all contents. Creates the
    directory if it doesn't exist.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(str(path), ignore_errors=True)
        if path.exists():
            # Fallback for stubborn directories
            for item in path.rglob("*"):
                if item.is_file():
                    item.unlink()
            for item in sorted(
                [p for p in path.rglob("*") if p.is_dir()], reverse=True
            ):
                item.rmdir()
            path.rmdir()
    path.mkdir(parents=True, exist_ok=True)


def display_path(path: Path, project_root: Path) -> Path:
    """Return path relative to project_root, or unchanged if it lies outside."""
    try:
        return path.relative_to(project_root)
    except ValueError:
        return path
