from pathlib import Path

import pytest


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


CONFIG = """\
title: Test Club
output_dir: docs
documents:
  - source: content/overview.md
    tab: overview
  - source: content/guide.md
    tab: facilitator-guide
  - source: content/summary.md
    tab: visual-summary
    label: At a Glance
"""


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A complete project with three manifest documents and three meetings."""
    write(tmp_path / "bookclub.yaml", CONFIG)
    write(tmp_path / "content" / "overview.md", "# Overview\n\nWelcome!\n")
    write(
        tmp_path / "content" / "guide.md",
        "# Guide\n\n| Step | Notes |\n|:-----|------:|\n| 1 | Read |\n",
    )
    write(tmp_path / "content" / "summary.md", "# Summary\n\n- one\n- two\n")
    for number in (10, 2, 0):
        write(
            tmp_path / "meetings" / f"meeting{number}.md",
            f"# Meeting {number}\n\nNotes for meeting {number}.\n",
        )
    write(tmp_path / "meetings" / "agenda.md", "# Not a meeting\n")
    return tmp_path
