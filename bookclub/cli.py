"""Command-line interface for bookclub.

This module defines the CLI commands using Click framework.

Commands:
- new: Scaffold a new book club project.
- build: Build the site into the output directory.
- dev: Run development server with live reload.
- meeting: Create the next meeting document.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

import click
import questionary

from . import __version__
from .utils import display_path

# Path to the default template directory
_TEMPLATES_DIR = Path(__file__).parent / "templates" / "default"


@click.group()
@click.version_option(version=__version__, prog_name="bookclub")
def cli():
    """Book club microsite generator."""


@cli.command()
@click.argument("name")
def new(name: str):
    """Scaffold a new book club project."""
    target = Path(name).resolve()
    if target.exists() and any(target.iterdir()):
        raise click.ClickException(
            f"Refusing to initialize into non-empty directory: {target}"
        )
    _scaffold(target)
    click.echo(f"New book club site created at {target}")


@cli.command()
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    required=False,
    help="Write the site here instead of the configured output_dir",
)
def build(output_dir: Path | None):
    """Build the site into the output directory."""
    project_root = Path.cwd()
    from .build import BuildError, build_site

    override = output_dir.resolve() if output_dir is not None else None
    try:
        result = build_site(project_root, output_dir_override=override)
    except BuildError as exc:
        rel_path = display_path(exc.source_path, project_root)
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  File: {rel_path}", fg="yellow"), err=True)
        click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
        raise SystemExit(1) from None
    click.echo(f"Built {len(result.units)} documents into {result.output_dir}")


@cli.command()
@click.option(
    "--port",
    type=int,
    required=False,
    help="Port to run the dev server (overrides bookclub.yaml)",
)
@click.option(
    "--ws-port",
    type=int,
    required=False,
    help="Port for the live reload websocket server (overrides bookclub.yaml ws_port)",
)
def dev(port: int | None, ws_port: int | None):
    """Run dev server with live reload."""
    project_root = Path.cwd()
    from .server import DevServer

    server = DevServer(project_root, http_port=port, ws_port=ws_port)
    server.start()


@cli.command()
@click.option("--title", required=False, help="Heading for the new meeting")
def meeting(title: str | None):
    """Create the next meeting document."""
    project_root = Path.cwd()
    from .build import load_config, resolve_dir
    from .content import next_meeting_number

    meetings_dir = resolve_dir(project_root, load_config(project_root), "meetings_dir")
    number = next_meeting_number(meetings_dir)

    if title is None:
        title = questionary.text(
            "Meeting title:",
            default=f"Meeting {number}",
            validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
            style=_questionary_style(),
        ).ask()
        if title is None:
            raise click.Abort()

    target_path = meetings_dir / f"meeting{number}.md"
    if target_path.exists():
        raise click.ClickException(
            f"File already exists: {display_path(target_path, project_root)}"
        )

    meetings_dir.mkdir(parents=True, exist_ok=True)
    target_path.write_text(f"# {title.strip()}\n\n", encoding="utf-8")
    click.echo(f"Created {display_path(target_path, project_root)}")


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
            ("pointer", "fg:cyan bold"),
            ("highlighted", "fg:cyan bold"),
            ("selected", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()


def _scaffold(root: Path) -> None:
    """Create the directory structure and files for a new project.

    Args:
        root: Root directory for the new project.
    """
    for src_path in _TEMPLATES_DIR.rglob("*"):
        if src_path.is_dir():
            continue
        rel_path = src_path.relative_to(_TEMPLATES_DIR)
        dest_path = root / rel_path
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src_path, dest_path)

    _try_git_init(root)


def _try_git_init(root: Path) -> None:
    """Initialize a git repository if git is available."""
    if os.environ.get("BOOKCLUB_SKIP_GIT_INIT") == "1":
        return
    git_bin = shutil.which("git")
    if not git_bin:
        return
    try:
        subprocess.run(
            [git_bin, "init"],
            cwd=root,
            check=True,
            capture_output=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        # Non-fatal: user can run git init manually
        click.echo(f"Skipping git init: {exc}", err=True)
