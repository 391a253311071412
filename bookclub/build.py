"""Site building functionality for bookclub.

This module contains the build pipeline: it loads configuration, collects the
documents to convert, copies assets, converts each document to an HTML fragment
and synthesizes the tabbed index page.

The pipeline is strictly sequential and fail-fast. The first error raised by
any step propagates out of build_site; translating it into an exit code is the
caller's job.

Key functions:
- build_site: Main function to build the entire site.
- load_config: Loads site configuration from bookclub.yaml.
- convert_unit: Converts one source document to its HTML fragment.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .assets import AssetPipeline
from .content import (
    ConversionUnit,
    ManifestEntry,
    collect_units,
    parse_manifest,
    validate_units,
)
from .errors import (  # noqa: F401 - re-exported for callers of the build API
    BuildError,
    ConfigError,
    MissingOutputError,
    MissingSourceError,
    OutputWriteError,
    SourceReadError,
)
from .protocols import ContentRenderer
from .renderers import MarkdownRenderer
from .templates import IndexSynthesizer
from .utils import ensure_clean_dir

CONFIG_FILENAME = "bookclub.yaml"
INDEX_FILENAME = "index.html"

DEFAULT_CONFIG: dict[str, Any] = {
    "title": "DORA AI Paradox Book Club",
    "output_dir": "docs",
    "meetings_dir": "meetings",
    "assets_dir": "assets",
    "allow_html": False,
    "port": 3000,
    "documents": [
        {"source": "content/DORA_AI_Paradox.md", "tab": "overview"},
        {
            "source": "content/DORA_AI_Paradox_Facilitator_Guide.md",
            "tab": "facilitator-guide",
        },
        {
            "source": "content/The_AI_Paradox_Visual_Summary.md",
            "tab": "visual-summary",
        },
    ],
}


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        units: Converted units, in index order.
        output_dir: Directory where the site was built.
        index_path: Path of the aggregate page.
    """

    units: list[ConversionUnit]
    output_dir: Path
    index_path: Path


def load_config(project_root: Path) -> dict[str, Any]:
    """Load site configuration from bookclub.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        ConfigError: If the file is not valid YAML.
    """
    config_path = project_root / CONFIG_FILENAME
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(config_path, f"Invalid YAML: {exc}", exc) from exc
            if isinstance(loaded, dict):
                config.update(loaded)
    return config


def load_manifest(project_root: Path, config: dict[str, Any]) -> list[ManifestEntry]:
    """Parse the fixed document manifest from a loaded configuration."""
    return parse_manifest(config.get("documents"), project_root / CONFIG_FILENAME)


def resolve_dir(project_root: Path, config: dict[str, Any], key: str) -> Path:
    """Resolve a directory setting against the project root."""
    return project_root / str(config.get(key) or DEFAULT_CONFIG[key])


def convert_unit(unit: ConversionUnit, renderer: ContentRenderer) -> Path:
    """Convert one source document to its HTML fragment.

    The output file is overwritten unconditionally.

    Args:
        unit: Unit to convert.
        renderer: Renderer turning source text into HTML.

    Returns:
        Path of the written fragment.

    Raises:
        MissingSourceError: If the source document does not exist.
        SourceReadError: If the source document cannot be read.
        OutputWriteError: If the fragment cannot be written.
    """
    if not unit.source_path.is_file():
        raise MissingSourceError(unit.source_path)
    try:
        raw = unit.source_path.read_bytes()
    except OSError as exc:
        raise SourceReadError(unit.source_path, exc) from exc
    # Invalid UTF-8 decodes to U+FFFD.
    html = renderer.render(raw.decode("utf-8", errors="replace"))
    try:
        unit.output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(unit.output_path, "w", encoding="utf-8") as f:
            f.write(html)
    except OSError as exc:
        raise OutputWriteError(unit.output_path, exc) from exc
    print(f"✓ Converted {unit.source_path.name} to {unit.output_path.name}")
    return unit.output_path


def _check_clean_target(output_dir: Path, protected: list[Path], config_path: Path) -> None:
    """Refuse to wipe an output directory that holds project inputs."""
    target = output_dir.resolve()
    for path in protected:
        if path.resolve().is_relative_to(target):
            raise ConfigError(
                config_path,
                f"Refusing to clean {output_dir}: it contains {path}",
            )


def build_site(
    project_root: Path,
    clean_output: bool = True,
    output_dir_override: Path | None = None,
    renderer: ContentRenderer | None = None,
) -> BuildResult:
    """Build the entire static site.

    Args:
        project_root: Root directory of the project.
        clean_output: Whether to wipe the output directory before building.
        output_dir_override: Optional path to write the build output instead of config output_dir.
        renderer: Optional renderer; defaults to MarkdownRenderer.

    Returns:
        BuildResult containing the converted units and output locations.

    Raises:
        BuildError: On the first failing step; nothing after it runs.
    """
    config = load_config(project_root)
    config_path = project_root / CONFIG_FILENAME
    output_dir = output_dir_override or resolve_dir(project_root, config, "output_dir")
    index_path = output_dir / INDEX_FILENAME

    meetings_dir = resolve_dir(project_root, config, "meetings_dir")
    assets_dir = resolve_dir(project_root, config, "assets_dir")

    entries = load_manifest(project_root, config)
    units = collect_units(entries, project_root, meetings_dir, output_dir)
    validate_units(units, index_path, config_path)

    if clean_output:
        _check_clean_target(
            output_dir,
            [project_root, meetings_dir, assets_dir]
            + [unit.source_path.parent for unit in units],
            config_path,
        )
        ensure_clean_dir(output_dir)
    else:
        output_dir.mkdir(parents=True, exist_ok=True)

    # Generated files overwrite same-named assets.
    AssetPipeline(assets_dir, output_dir).run()

    renderer = renderer or MarkdownRenderer(allow_html=bool(config.get("allow_html")))
    print("Converting Markdown to HTML...")
    for unit in units:
        convert_unit(unit, renderer)

    synthesizer = IndexSynthesizer(str(config.get("title") or DEFAULT_CONFIG["title"]))
    synthesizer.write(units, index_path)
    return BuildResult(units=units, output_dir=output_dir, index_path=index_path)
