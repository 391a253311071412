"""Content discovery for bookclub.

Determines which documents a build converts and in what order. A build always
starts from a fixed manifest of top-level documents (from bookclub.yaml) and
appends every ``meetingN.md`` found in the meetings directory, ordered by N.

Key classes:
- ManifestEntry: One fixed document declared in the configuration.
- ConversionUnit: One source document, its output fragment and its tab.

Key functions:
- parse_manifest: Validate the ``documents`` configuration value.
- discover_meetings: Build units for meeting documents from a directory listing.
- collect_units: Full ordered unit sequence for a build.
- validate_units: Enforce unique tab ids and output paths.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ConfigError
from .protocols import DirectoryLister
from .utils import is_valid_tab_id, tab_label

MEETING_RE = re.compile(r"^meeting(\d+)\.md$")
OUTPUT_SUFFIX = ".html"


@dataclass(frozen=True)
class ManifestEntry:
    """A fixed document declared in the configuration.

    Attributes:
        source: Source path relative to the project root.
        tab: Tab identifier.
        label: Optional navigation label overriding the derived one.
    """

    source: str
    tab: str
    label: str | None = None


@dataclass(frozen=True)
class ConversionUnit:
    """One source-document-to-fragment mapping plus its navigation identity.

    Attributes:
        source_path: Markdown source file.
        output_path: Generated HTML fragment.
        tab_id: Shared key between the navigation button and the container.
        label: Explicit navigation label, if one was configured.
    """

    source_path: Path
    output_path: Path
    tab_id: str
    label: str | None = None

    @property
    def display_label(self) -> str:
        return self.label or tab_label(self.tab_id)


def parse_manifest(raw: Any, config_path: Path) -> list[ManifestEntry]:
    """Validate the ``documents`` configuration value.

    Args:
        raw: Value loaded from the configuration file.
        config_path: Configuration file, used for error context.

    Returns:
        Manifest entries in declaration order.

    Raises:
        ConfigError: If the value is not a list of ``{source, tab, label?}``
            mappings with string values.
    """
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigError(config_path, "'documents' must be a list")
    entries: list[ManifestEntry] = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ConfigError(config_path, f"documents[{index}] must be a mapping")
        source = item.get("source")
        tab = item.get("tab")
        label = item.get("label")
        if not isinstance(source, str) or not source:
            raise ConfigError(config_path, f"documents[{index}] is missing 'source'")
        if not isinstance(tab, str) or not tab:
            raise ConfigError(config_path, f"documents[{index}] is missing 'tab'")
        if label is not None and not isinstance(label, str):
            raise ConfigError(config_path, f"documents[{index}].label must be a string")
        entries.append(ManifestEntry(source=source, tab=tab, label=label))
    return entries


def list_directory(directory: Path) -> list[str]:
    """Default directory lister; a missing directory has no entries."""
    if not directory.is_dir():
        return []
    return [path.name for path in directory.iterdir() if path.is_file()]


def meeting_number(name: str, pattern: re.Pattern[str] = MEETING_RE) -> str | None:
    """Return the digits of a meeting filename, or None if it does not match."""
    match = pattern.match(name)
    return match.group(1) if match else None


def discover_meetings(
    directory: Path,
    output_dir: Path,
    lister: DirectoryLister | None = None,
    pattern: re.Pattern[str] = MEETING_RE,
) -> list[ConversionUnit]:
    """Build conversion units for the meeting documents in a directory.

    Names are ordered by their numeric value, so ``meeting10.md`` comes after
    ``meeting2.md``. Names with the same value (``meeting1.md`` and
    ``meeting01.md``) fall back to name order.

    Args:
        directory: Directory to scan.
        output_dir: Directory the fragments are written to.
        lister: Callable returning entry names; defaults to list_directory.
        pattern: Filename pattern whose first group is the meeting number.

    Returns:
        Units in meeting order. An empty or missing directory yields [].
    """
    names = (lister or list_directory)(directory)
    matched: list[tuple[int, str, str]] = []
    for name in names:
        number = meeting_number(name, pattern)
        if number is not None:
            matched.append((int(number), name, number))
    matched.sort()

    units: list[ConversionUnit] = []
    for _, name, number in matched:
        units.append(
            ConversionUnit(
                source_path=directory / name,
                output_path=output_dir / (Path(name).stem + OUTPUT_SUFFIX),
                tab_id=f"meeting-{number}",
            )
        )
    return units


def manifest_units(
    entries: Iterable[ManifestEntry], project_root: Path, output_dir: Path
) -> list[ConversionUnit]:
    """Build conversion units for the fixed manifest, keeping its order."""
    units: list[ConversionUnit] = []
    for entry in entries:
        source = project_root / entry.source
        units.append(
            ConversionUnit(
                source_path=source,
                output_path=output_dir / (source.stem + OUTPUT_SUFFIX),
                tab_id=entry.tab,
                label=entry.label,
            )
        )
    return units


def validate_units(
    units: Iterable[ConversionUnit], index_path: Path, config_path: Path
) -> None:
    """Check the unit sequence can be synthesized into one page.

    Raises:
        ConfigError: On an invalid or duplicate tab id, a duplicate output
            path, or an output path that would overwrite the index page.
    """
    seen_tabs: dict[str, Path] = {}
    seen_outputs: dict[Path, Path] = {}
    for unit in units:
        if not is_valid_tab_id(unit.tab_id):
            raise ConfigError(
                config_path, f"Invalid tab id '{unit.tab_id}' for {unit.source_path}"
            )
        if unit.tab_id in seen_tabs:
            raise ConfigError(
                config_path,
                f"Duplicate tab id '{unit.tab_id}' for {seen_tabs[unit.tab_id]} "
                f"and {unit.source_path}",
            )
        if unit.output_path == index_path:
            raise ConfigError(
                config_path, f"{unit.source_path} would overwrite {index_path.name}"
            )
        if unit.output_path in seen_outputs:
            raise ConfigError(
                config_path,
                f"{seen_outputs[unit.output_path]} and {unit.source_path} "
                f"both write {unit.output_path.name}",
            )
        seen_tabs[unit.tab_id] = unit.source_path
        seen_outputs[unit.output_path] = unit.source_path


def collect_units(
    entries: Iterable[ManifestEntry],
    project_root: Path,
    meetings_dir: Path,
    output_dir: Path,
    lister: DirectoryLister | None = None,
) -> list[ConversionUnit]:
    """Return the ordered unit sequence: manifest first, then meetings.

    Args:
        entries: Fixed manifest entries.
        project_root: Root the manifest sources are relative to.
        meetings_dir: Directory scanned for meeting documents.
        output_dir: Directory the fragments are written to.
        lister: Optional directory lister for discovery.

    Returns:
        List of ConversionUnit objects.
    """
    units = manifest_units(entries, project_root, output_dir)
    units.extend(discover_meetings(meetings_dir, output_dir, lister=lister))
    return units


def next_meeting_number(
    meetings_dir: Path, lister: DirectoryLister | None = None
) -> int:
    """Return the number the next meeting document should use."""
    numbers: list[int] = []
    for name in (lister or list_directory)(meetings_dir):
        number = meeting_number(name)
        if number is not None:
            numbers.append(int(number))
    return max(numbers) + 1 if numbers else 0
