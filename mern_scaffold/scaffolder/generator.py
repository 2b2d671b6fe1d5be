"""Main scaffolding orchestrator.

Takes a ``ProjectConfig`` and a destination root and generates the complete
project directory: client and/or server components, the shared directory,
root-level files, Docker files and CI/CD pipelines.

A run either completes or leaves nothing behind: any failure after the
project directory has been created removes the whole directory again.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..config import CicdProvider, GenerationMode, ModuleSystem, ProjectConfig, TemplateContext
from ..errors import DirectoryConflictError, FilesystemError, ScaffoldError
from ..utils import format_duration, print_error, print_success, print_warning, remove_tree, spinner
from .base import ComponentResult
from .client_gen import ClientGenerator
from .paths import cicd_template_path, docker_template_path, root_template_path
from .server_gen import ServerGenerator
from .templates import TEMPLATE_SUFFIX, TemplateRenderer


class GenerationState(str, Enum):
    IDLE = "idle"
    DIRECTORY_CHECK = "directory_check"
    SCAFFOLDING = "scaffolding"
    COMPONENT_GENERATION = "component_generation"
    ROOT_GENERATION = "root_generation"
    CICD_GENERATION = "cicd_generation"
    DONE = "done"
    FAILED = "failed"


@dataclass
class GenerationResult:
    """Accumulated output of one generation run."""

    success: bool
    project_path: Path
    created_files: list[str] = field(default_factory=list)
    created_directories: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    exception: ScaffoldError | None = field(default=None, repr=False)
    rolled_back: bool = False
    manual_cleanup_required: bool = False
    duration_seconds: float = 0.0

    def summary(self) -> str:
        """Return a human-readable summary of the result."""
        status = "[green]SUCCESS[/green]" if self.success else "[red]FAILED[/red]"
        lines = [
            f"Status: {status}",
            f"Path: {self.project_path}",
            f"Duration: {format_duration(self.duration_seconds)}",
            f"Files created: {len(self.created_files)}",
        ]
        if self.errors:
            lines.append(f"Errors: {len(self.errors)}")
            for err in self.errors[:5]:
                lines.append(f"  - {err[:200]}")
        if self.manual_cleanup_required:
            lines.append(f"Please manually remove: {self.project_path}")
        return "\n".join(lines)


class ProjectGenerator:
    """Coordinates a single generation run.

    The destination is ``destination_root / config.project_name``; nothing is
    resolved against the process working directory.  One instance owns its
    destination for the duration of ``generate()``.
    """

    def __init__(
        self,
        config: ProjectConfig,
        destination_root: str | Path,
        templates_root: str | Path | None = None,
    ) -> None:
        self.config = config
        self.context = TemplateContext.from_config(config)
        self.renderer = TemplateRenderer(templates_root)
        self.project_path = Path(destination_root).resolve() / config.project_name
        self.state = GenerationState.IDLE
        self._created_files: list[str] = []
        self._created_directories: list[str] = []
        self._warnings: list[str] = []
        self._created_root = False

    # -- Public API --------------------------------------------------------

    async def generate(self) -> GenerationResult:
        """Run the full generation process.

        Scaffolding errors never escape: they are recorded on the returned
        result after the partial project has been rolled back.  Anything
        else is rolled back and re-raised.
        """
        started = time.monotonic()
        try:
            self.state = GenerationState.DIRECTORY_CHECK
            if await asyncio.to_thread(self.project_path.exists):
                raise DirectoryConflictError(self.project_path)

            self.state = GenerationState.SCAFFOLDING
            with spinner("Creating project directory"):
                await asyncio.to_thread(self.project_path.mkdir, parents=True)
                self._created_root = True
                self._created_directories.append(self.config.project_name)

            self.state = GenerationState.COMPONENT_GENERATION
            if self.config.mode == GenerationMode.FULL:
                await self._generate_full_stack()
            elif self.config.mode == GenerationMode.FRONTEND:
                self._merge(await self._client().generate())
            else:
                self._merge(await self._server().generate())

            self.state = GenerationState.ROOT_GENERATION
            await self._generate_root_files()

            self.state = GenerationState.CICD_GENERATION
            await self._generate_cicd_files()
        except ScaffoldError as exc:
            return await self._fail(exc, started)
        except OSError as exc:
            return await self._fail(FilesystemError(str(exc), exc), started)
        except BaseException:
            self.state = GenerationState.FAILED
            await self.rollback()
            raise

        self.state = GenerationState.DONE
        result = self._result(True, started)
        print_success(f"Project created in {format_duration(result.duration_seconds)}")
        return result

    async def rollback(self) -> bool:
        """Remove everything this run created.

        The whole project directory goes in one recursive delete.  Returns
        ``False`` when there was nothing to remove (no directory created, or
        already rolled back).
        """
        if not self._created_root:
            return False
        removed = await asyncio.to_thread(remove_tree, self.project_path)
        self._created_root = False
        return removed

    # -- Steps -------------------------------------------------------------

    def _client(self) -> ClientGenerator:
        return ClientGenerator(self.config, self.context, self.project_path, self.renderer)

    def _server(self) -> ServerGenerator:
        return ServerGenerator(self.config, self.context, self.project_path, self.renderer)

    def _merge(self, result: ComponentResult, prefix: str = "") -> None:
        self._created_files.extend(f"{prefix}{f}" for f in result.created_files)
        self._warnings.extend(result.warnings)
        for warning in result.warnings:
            print_warning(warning)

    async def _generate_full_stack(self) -> None:
        """Client, then server, then the shared directory."""
        self._merge(await self._client().generate(), prefix="client/")
        self._created_directories.append("client")

        self._merge(await self._server().generate(), prefix="server/")
        self._created_directories.append("server")

        await self._generate_shared_directory()

    async def _generate_shared_directory(self) -> None:
        with spinner("Creating shared directory"):
            shared = self.project_path / "shared"
            for sub in ("types", "utils"):
                await asyncio.to_thread((shared / sub).mkdir, parents=True, exist_ok=True)

            if self.config.module_system == ModuleSystem.ES6:
                content = "// Shared types and utilities\nexport {};\n"
            else:
                content = "// Shared types and utilities\nmodule.exports = {};\n"
            index_name = f"index.{self.context.script_ext}"
            await asyncio.to_thread((shared / index_name).write_text, content, "utf-8")

            self._created_files.append(f"shared/{index_name}")
            self._created_directories.append("shared")

    async def _generate_root_files(self) -> None:
        """Root-level files, skipping any output a component already wrote."""
        already_written = set(self._created_files)

        def not_yet_written(relative: str) -> bool:
            output = relative[: -len(TEMPLATE_SUFFIX)] if relative.endswith(TEMPLATE_SUFFIX) else relative
            return output not in already_written

        with spinner("Generating root files"):
            files = await self.renderer.materialize(
                root_template_path(self.renderer.template_dir),
                self.project_path,
                self.context,
                include=not_yet_written,
            )
            self._created_files.extend(files)

            if self.config.docker:
                docker_path = docker_template_path("root", self.renderer.template_dir)
                if docker_path.is_dir():
                    files = await self.renderer.materialize(
                        docker_path,
                        self.project_path,
                        self.context,
                        reserved=self._created_files,
                    )
                    self._created_files.extend(files)
                else:
                    self._warnings.append(f"Optional templates not found, skipped: {docker_path}")

    async def _generate_cicd_files(self) -> None:
        if self.config.cicd == CicdProvider.NONE:
            return
        with spinner(f"Generating {self.config.cicd.value} CI/CD configuration"):
            files = await self.renderer.materialize(
                cicd_template_path(self.config.cicd, self.renderer.template_dir),
                self.project_path,
                self.context,
                reserved=self._created_files,
            )
            self._created_files.extend(files)

    # -- Failure handling --------------------------------------------------

    async def _fail(self, exc: ScaffoldError, started: float) -> GenerationResult:
        self.state = GenerationState.FAILED
        message = str(exc)
        print_error(f"Generation failed: {message}")

        result = self._result(False, started)
        result.errors.append(message)
        result.exception = exc

        if self._created_root:
            try:
                await self.rollback()
            except OSError as cleanup_exc:
                result.errors.append(f"Rollback failed: {cleanup_exc}")
                result.manual_cleanup_required = True
                print_error("Failed to clean up all files. Please manually remove:")
                print_error(f"  {self.project_path}")
            else:
                result.rolled_back = True
                print_warning(f"Removed partially created project at {self.project_path}")
        return result

    def _result(self, success: bool, started: float) -> GenerationResult:
        return GenerationResult(
            success=success,
            project_path=self.project_path,
            created_files=list(self._created_files),
            created_directories=list(self._created_directories),
            warnings=list(self._warnings),
            duration_seconds=time.monotonic() - started,
        )
