"""Shared machinery for the frontend and backend component generators.

A component generator is an ordered list of ``TemplateSource`` entries
(template directory + inclusion filter) materialized one after the other
into the component's output directory.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from ..config import Database, GenerationMode, Orm, ProjectConfig, TemplateContext
from ..errors import ScaffoldError, TemplateNotFoundError
from ..utils import spinner
from .templates import TEMPLATE_SUFFIX, IncludeFilter, TemplateRenderer


@dataclass(frozen=True)
class TemplateSource:
    """A template directory plus the filter applied while materializing it."""

    path: Path
    include: IncludeFilter | None = None
    required: bool = True
    # Builds the error raised when a required directory is missing.
    on_missing: Callable[[Path], ScaffoldError] | None = None


@dataclass
class ComponentResult:
    """Files created by one component generator."""

    created_files: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Path predicates
# ---------------------------------------------------------------------------


def output_parts(relative: str) -> tuple[tuple[str, ...], str]:
    """Split a template-relative path into (directories, output stem).

    The stem is the file name without the ``.j2`` marker and without any
    extension: ``src/routes/auth.ts.j2`` -> (``("src", "routes")``, ``"auth"``).
    """
    path = PurePosixPath(relative)
    name = path.name
    if name.endswith(TEMPLATE_SUFFIX):
        name = name[: -len(TEMPLATE_SUFFIX)]
    stem = name.split(".", 1)[0] if not name.startswith(".") else name
    return path.parts[:-1], stem


RELATIONAL_ONLY_DIRS = ("prisma", "db")


def relational_filter(config: ProjectConfig) -> IncludeFilter:
    """Drop relational-database-only files unless the database is relational.

    The Prisma schema is additionally limited to the Prisma ORM.
    """

    def include(relative: str) -> bool:
        dirs, _ = output_parts(relative)
        if not dirs or dirs[0] not in RELATIONAL_ONLY_DIRS:
            return True
        if config.database != Database.POSTGRESQL:
            return False
        if dirs[0] == "prisma":
            return config.orm == Orm.PRISMA
        return config.orm == Orm.PG

    return include


# ---------------------------------------------------------------------------
# Generator base class
# ---------------------------------------------------------------------------


class ComponentGenerator:
    """Materializes one component (``client`` or ``server``) of a project.

    In full-stack mode the component is written to ``<project>/<component>``;
    when it is the only component requested it is written to the project root.
    """

    component: str = ""

    def __init__(
        self,
        config: ProjectConfig,
        context: TemplateContext,
        project_path: str | Path,
        renderer: TemplateRenderer,
    ) -> None:
        self.config = config
        self.context = context
        self.renderer = renderer
        project_path = Path(project_path)
        self.output_path = (
            project_path / self.component
            if config.mode == GenerationMode.FULL
            else project_path
        )

    @property
    def templates_root(self) -> Path:
        return self.renderer.template_dir

    def describe(self) -> str:
        return f"Generating {self.component}"

    def sources(self) -> list[TemplateSource]:
        raise NotImplementedError

    async def generate(self) -> ComponentResult:
        """Create the output directory and materialize every source in order."""
        result = ComponentResult()
        with spinner(self.describe()):
            await asyncio.to_thread(self.output_path.mkdir, parents=True, exist_ok=True)
            for source in self.sources():
                if not source.path.is_dir():
                    if source.required:
                        if source.on_missing is not None:
                            raise source.on_missing(source.path)
                        raise TemplateNotFoundError(source.path)
                    result.warnings.append(f"Optional templates not found, skipped: {source.path}")
                    continue
                files = await self.renderer.materialize(
                    source.path,
                    self.output_path,
                    self.context,
                    include=source.include,
                    reserved=result.created_files,
                )
                result.created_files.extend(files)
        return result
