"""Build errors for bookclub.

Every failure inside the build pipeline is a BuildError carrying the path it
concerns, so the CLI can point at the offending file. Errors are never handled
inside the pipeline; they propagate out of build_site and are translated to an
exit code by the CLI, or swallowed at the subprocess boundary by the dev server.

Classes:
- BuildError: Base error with file context.
- MissingSourceError: A manifest or meeting source document does not exist.
- SourceReadError: A source document exists but cannot be read.
- MissingOutputError: A generated fragment is absent when building the index.
- OutputWriteError: Writing a generated file failed.
- ConfigError: The configuration or the unit sequence is invalid.
"""

from __future__ import annotations

from pathlib import Path


class BuildError(Exception):
    """Error during site build with file context.

    Attributes:
        source_path: Path to the file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


class MissingSourceError(BuildError):
    def __init__(self, source_path: Path):
        super().__init__(source_path, "Source Markdown file not found")


class SourceReadError(BuildError):
    def __init__(self, source_path: Path, original_error: OSError):
        reason = original_error.strerror or str(original_error)
        super().__init__(source_path, f"Could not read source: {reason}", original_error)


class MissingOutputError(BuildError):
    """A fragment that should have been converted is not on disk."""

    def __init__(self, output_path: Path):
        super().__init__(
            output_path,
            "Generated HTML file not found; was the document converted?",
        )


class OutputWriteError(BuildError):
    def __init__(self, target_path: Path, original_error: OSError):
        reason = original_error.strerror or str(original_error)
        super().__init__(target_path, f"Could not write file: {reason}", original_error)


class ConfigError(BuildError):
    pass
