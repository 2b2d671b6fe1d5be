"""Exception hierarchy for the scaffolder.

Every error raised by the generation core derives from ``ScaffoldError`` so
that the orchestrator can catch the whole family at a single boundary.
Validation and directory-conflict errors are raised before anything touches
the filesystem; the rest are raised mid-generation and trigger a rollback.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class ScaffoldError(Exception):
    """Base class for all scaffolding failures."""


class ConfigValidationError(ScaffoldError):
    """Raised when the project name or the option set is invalid."""

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = list(errors)
        detail = "; ".join(self.errors) if self.errors else "invalid configuration"
        super().__init__(f"Invalid configuration: {detail}")


class DirectoryConflictError(ScaffoldError):
    """Raised when the destination directory already exists."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f'Directory "{self.path.name}" already exists at {self.path}')


class TemplateNotFoundError(ScaffoldError):
    """Raised when a required template subtree is missing on disk."""

    def __init__(
        self,
        path: str | Path,
        message: str | None = None,
        known_combinations: Sequence[str] = (),
    ) -> None:
        self.path = Path(path)
        self.known_combinations = list(known_combinations)
        text = message or f"Template directory not found: {self.path}"
        if self.known_combinations and message is None:
            text += f"\nAvailable template combinations: {', '.join(self.known_combinations)}"
        super().__init__(text)


class RenderError(ScaffoldError):
    """Raised when a parameterized template cannot be rendered."""

    def __init__(self, template: str | Path, message: str) -> None:
        self.template = str(template)
        super().__init__(f"Failed to render {self.template}: {message}")


class TemplateCollisionError(RenderError):
    """Raised when two templates would write the same output file."""

    def __init__(self, template: str | Path, output: str) -> None:
        self.output = output
        super().__init__(template, f"output path {output!r} is already produced by another template")


class FilesystemError(ScaffoldError):
    """Raised for I/O failures (permissions, disk space, ...) during generation."""

    def __init__(self, message: str, original: OSError | None = None) -> None:
        self.original = original
        super().__init__(message)
