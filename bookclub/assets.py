"""Static asset copying for bookclub.

Assets are copied verbatim; there is no minification or CSS processing. The
packaged defaults (``style.css`` and the ``main.js`` tab controller) are copied
first so the index page always has its stylesheet and script, then the
project's own assets directory is copied over them.

Key class:
- AssetPipeline: Copies default and project assets into the output directory.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from .errors import OutputWriteError

DEFAULT_ASSETS_DIR = Path(__file__).parent / "templates" / "default" / "assets"


class AssetPipeline:
    """Copies static assets into the output directory.

    Attributes:
        assets_dir (Path): Directory containing the project's assets.
        output_dir (Path): Directory where assets are written.
        default_assets_dir (Path): Packaged fallback assets.
    """

    def __init__(
        self,
        assets_dir: Path,
        output_dir: Path,
        default_assets_dir: Path = DEFAULT_ASSETS_DIR,
    ):
        self.assets_dir = assets_dir
        self.output_dir = output_dir
        self.default_assets_dir = default_assets_dir

    def run(self) -> list[Path]:
        """Copy default assets, then project assets.

        Returns:
            Destination paths, in copy order.

        Raises:
            OutputWriteError: If a file cannot be copied.
        """
        copied: list[Path] = []
        for source_dir in (self.default_assets_dir, self.assets_dir):
            copied.extend(self._copy_tree(source_dir))
        return copied

    def _copy_tree(self, source_dir: Path) -> list[Path]:
        if not source_dir.is_dir():
            return []
        copied: list[Path] = []
        for item in sorted(source_dir.rglob("*")):
            if item.is_dir():
                continue
            dest = self.output_dir / item.relative_to(source_dir)
            try:
                dest.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(item, dest)
            except OSError as exc:
                raise OutputWriteError(dest, exc) from exc
            copied.append(dest)
        return copied
