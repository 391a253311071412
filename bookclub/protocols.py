"""Protocol definitions for bookclub.

These protocols keep the build pipeline independent of the concrete Markdown
engine and of the filesystem, so either can be replaced in tests.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class ContentRenderer(Protocol):
    """Protocol for rendering source documents to HTML fragments.

    Implementations must be pure: the same input text always yields the same
    output, and no state is carried between calls.
    """

    @abstractmethod
    def can_render(self, path: Path) -> bool:
        """Check if this renderer can handle the given file.

        Args:
            path: Path to the source file.

        Returns:
            True if this renderer can process the file.
        """
        ...

    @abstractmethod
    def render(self, content: str) -> str:
        """Render source text to an HTML fragment.

        Args:
            content: Source content to render.

        Returns:
            HTML fragment without an <html>/<head> wrapper.
        """
        ...

    @property
    @abstractmethod
    def source_type(self) -> str:
        """Return the source type identifier (e.g., 'markdown')."""
        ...


@runtime_checkable
class DirectoryLister(Protocol):
    """Callable returning the entry names of a directory."""

    def __call__(self, directory: Path) -> Iterable[str]: ...
