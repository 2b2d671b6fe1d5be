"""Jinja2 template rendering and directory materialization.

Provides the ``TemplateRenderer`` class which walks a template directory,
renders every ``*.j2`` file against a ``TemplateContext`` and copies every
other file byte-for-byte into an output directory.  Each file is tagged as
static or parameterized once, when the directory is scanned.

Rendering is strict: a template that references a variable the context does
not define raises ``RenderError`` instead of producing an empty string.
"""

from __future__ import annotations

import asyncio
import shutil
from collections.abc import Callable, Collection, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)

from ..config import DEFAULT_TEMPLATES_DIR, TemplateContext
from ..errors import RenderError, TemplateCollisionError, TemplateNotFoundError

TEMPLATE_SUFFIX = ".j2"

# Predicate over a file's POSIX path relative to the scanned directory.
IncludeFilter = Callable[[str], bool]


# ---------------------------------------------------------------------------
# Template enumeration
# ---------------------------------------------------------------------------


class TemplateKind(str, Enum):
    STATIC = "static"
    PARAMETERIZED = "parameterized"


@dataclass(frozen=True)
class TemplateFile:
    """One file found under a template directory."""

    source: Path
    relative: str
    kind: TemplateKind

    @property
    def output(self) -> str:
        """Output path relative to the destination directory."""
        if self.kind is TemplateKind.PARAMETERIZED:
            return self.relative[: -len(TEMPLATE_SUFFIX)]
        return self.relative


def scan_templates(source: str | Path) -> list[TemplateFile]:
    """Return every file under *source*, sorted by relative path.

    Raises:
        TemplateNotFoundError: If *source* is not a directory.
    """
    root = Path(source)
    if not root.is_dir():
        raise TemplateNotFoundError(root)

    entries: list[TemplateFile] = []
    for path in root.rglob("*"):
        if not path.is_file():
            continue
        relative = path.relative_to(root).as_posix()
        kind = (
            TemplateKind.PARAMETERIZED
            if path.name.endswith(TEMPLATE_SUFFIX) and len(path.name) > len(TEMPLATE_SUFFIX)
            else TemplateKind.STATIC
        )
        entries.append(TemplateFile(source=path, relative=relative, kind=kind))

    entries.sort(key=lambda e: e.relative)
    return entries


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates and materializes template directories.

    Templates under ``template_dir`` are loaded through the environment's
    loader so that ``{% include %}`` works relative to the template root;
    files outside it are rendered from their text.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = DEFAULT_TEMPLATES_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([], default_for_string=False),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )

    # -- Single template rendering -----------------------------------------

    def render(self, template_path: str, context: Mapping[str, Any] | TemplateContext) -> str:
        """Render a template addressed relative to the template root."""
        try:
            template = self.env.get_template(template_path)
        except TemplateNotFound as exc:
            raise TemplateNotFoundError(self.template_dir / template_path) from exc
        except TemplateError as exc:
            raise RenderError(template_path, str(exc)) from exc
        return self._render_template(template, template_path, context)

    def render_file(self, entry: TemplateFile, context: Mapping[str, Any] | TemplateContext) -> str:
        """Render a scanned parameterized file."""
        try:
            name = entry.source.resolve().relative_to(self.template_dir.resolve()).as_posix()
        except ValueError:
            try:
                template = self.env.from_string(entry.source.read_text(encoding="utf-8"))
            except TemplateError as exc:
                raise RenderError(entry.source, str(exc)) from exc
            return self._render_template(template, str(entry.source), context)
        return self.render(name, context)

    def _render_template(
        self,
        template: Template,
        name: str,
        context: Mapping[str, Any] | TemplateContext,
    ) -> str:
        variables = context.as_template_vars() if isinstance(context, TemplateContext) else dict(context)
        try:
            return template.render(**variables)
        except TemplateError as exc:
            raise RenderError(name, str(exc)) from exc

    # -- Directory materialization -----------------------------------------

    async def materialize(
        self,
        source: str | Path,
        output_dir: str | Path,
        context: Mapping[str, Any] | TemplateContext,
        include: IncludeFilter | None = None,
        reserved: Collection[str] = (),
    ) -> list[str]:
        """Render or copy every file under *source* into *output_dir*.

        Args:
            source: Template directory to walk.
            output_dir: Destination directory; missing parents are created.
            context: Values available to ``*.j2`` templates.
            include: Optional predicate over each file's source-relative path;
                rejected files are skipped entirely.
            reserved: Output paths (relative to *output_dir*) already written
                earlier in the same generation.

        Returns:
            Output-relative POSIX paths, in the order they were written.

        Raises:
            TemplateNotFoundError: *source* does not exist.
            TemplateCollisionError: Two files would produce the same output.
            RenderError: A template failed to render.
        """
        entries = [
            e for e in scan_templates(source)
            if include is None or include(e.relative)
        ]

        seen: set[str] = set(reserved)
        for entry in entries:
            if entry.output in seen:
                raise TemplateCollisionError(entry.source, entry.output)
            seen.add(entry.output)

        out_base = Path(output_dir)
        written: list[str] = []
        for entry in entries:
            target = out_base / entry.output
            if entry.kind is TemplateKind.PARAMETERIZED:
                content = await asyncio.to_thread(self.render_file, entry, context)
                await asyncio.to_thread(_write_file, target, content)
            else:
                await asyncio.to_thread(_copy_file, entry.source, target)
            written.append(entry.output)

        return written


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _copy_file(source: Path, target: Path) -> None:
    """Synchronous helper: create parent dirs and copy bytes and mode bits."""
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy(source, target)
