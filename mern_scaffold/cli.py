"""Command-line interface for mern-scaffold.

Usage::

    mern-scaffold create my-app
    mern-scaffold create my-api --mode backend --javascript --vanilla -y
    python -m mern_scaffold create my-app --dry-run

The generation itself lives in ``mern_scaffold.scaffolder``; this module
gathers the configuration, reports progress and runs the optional
post-generation steps (git, npm install, ``.env``).
"""

from __future__ import annotations

import argparse
import asyncio
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path

from rich.panel import Panel

from . import __version__
from .config import (
    AuthType,
    CicdProvider,
    ConfigOptions,
    Database,
    Frontend,
    GenerationMode,
    Orm,
    PaymentProvider,
    ProjectConfig,
    Settings,
    StateManagement,
    resolve_config,
    validate_options,
    validate_project_name,
)
from .errors import ConfigValidationError
from .prompts import confirm_generation, display_config_summary, prompt_project_name, run_project_prompts
from .scaffolder import GenerationResult, ProjectGenerator
from .utils import (
    console,
    print_error,
    print_info,
    print_success,
    print_title,
    print_warning,
    run_command,
    spinner,
)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


# ---------------------------------------------------------------------------
# Post-generation steps
# ---------------------------------------------------------------------------


@dataclass
class PostGenerationResult:
    """What the optional post-generation steps managed to do."""

    git_initialized: bool = False
    dependencies_installed: bool = False
    env_created: bool = False
    errors: list[str] = field(default_factory=list)


class CommandError(Exception):
    """Raised when git or npm exits with a non-zero status."""


async def _run_checked(cmd: list[str], cwd: Path, timeout: int) -> None:
    try:
        code, _, stderr = await run_command(cmd, cwd=cwd, timeout=timeout)
    except FileNotFoundError as exc:
        raise CommandError(f"{cmd[0]} is not installed or not on PATH") from exc
    if code != 0:
        raise CommandError(f"{' '.join(cmd)} failed: {stderr or f'exit code {code}'}")


async def init_git(project_path: Path, timeout: int) -> None:
    """Initialise a repository with an initial commit."""
    await _run_checked(["git", "init"], project_path, timeout)
    await _run_checked(["git", "add", "."], project_path, timeout)
    await _run_checked(
        ["git", "commit", "-m", "Initial commit from mern-scaffold"], project_path, timeout
    )


def install_targets(project_path: Path, config: ProjectConfig) -> list[Path]:
    """Directories that get their own ``npm install``."""
    if config.mode == GenerationMode.FULL:
        return [project_path, project_path / "client", project_path / "server"]
    return [project_path]


async def install_dependencies(project_path: Path, config: ProjectConfig, timeout: int) -> None:
    for target in install_targets(project_path, config):
        label = "root" if target == project_path else target.name
        with spinner(f"Installing {label} dependencies"):
            await _run_checked(["npm", "install"], target, timeout)


def create_env_file(project_path: Path, config: ProjectConfig) -> bool:
    """Copy the server's ``.env.example`` to ``.env`` if there is no ``.env`` yet."""
    if config.mode == GenerationMode.FRONTEND:
        return False
    server_path = project_path / "server" if config.mode == GenerationMode.FULL else project_path
    example = server_path / ".env.example"
    env = server_path / ".env"
    if not example.is_file() or env.exists():
        return False
    try:
        shutil.copyfile(example, env)
    except OSError:
        print_warning("Failed to create .env file automatically")
        return False
    return True


def print_manual_install(config: ProjectConfig) -> None:
    print_info("You can install dependencies manually:")
    print_info(f"  cd {config.project_name}")
    print_info("  npm install")
    if config.mode == GenerationMode.FULL:
        print_info("  cd client && npm install")
        print_info("  cd ../server && npm install")
    print_info("Or skip auto-install next time with --no-install")


async def run_post_generation(
    result: GenerationResult,
    config: ProjectConfig,
    settings: Settings,
) -> PostGenerationResult:
    """Run git/npm/.env steps for a successfully generated project.

    Nothing runs unless ``result.success`` is true.  Failures here are
    reported but never remove the generated project.
    """
    post = PostGenerationResult()
    if not result.success:
        return post

    project_path = result.project_path
    if config.git:
        try:
            with spinner("Initializing git repository"):
                await init_git(project_path, settings.command_timeout)
            post.git_initialized = True
        except CommandError as exc:
            post.errors.append(str(exc))
            print_warning(f"Git initialization skipped: {exc}")

    if config.install:
        try:
            await install_dependencies(project_path, config, settings.command_timeout)
            post.dependencies_installed = True
        except CommandError as exc:
            post.errors.append(str(exc))
            print_error("Failed to install dependencies")
            print_error(str(exc))
            print_warning(
                "Project structure was created successfully, but dependency installation failed."
            )
            print_manual_install(config)

    post.env_created = create_env_file(project_path, config)
    return post


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def error_suggestions(message: str) -> list[str]:
    """Map an error message to likely causes and remedies."""
    suggestions: list[str] = []
    lower = message.lower()

    if "template" in lower or "not found" in lower:
        suggestions.append("Missing template files - check package installation")
        suggestions.append("Try reinstalling: pip install --force-reinstall mern-scaffold")
    if "permission" in lower or "eacces" in lower or "eperm" in lower:
        suggestions.append("Permission error - check directory permissions")
        suggestions.append("Try running with appropriate permissions or choose a different location")
    if "space" in lower or "enospc" in lower or "disk" in lower:
        suggestions.append("Insufficient disk space")
        suggestions.append("Free up disk space and try again")
    if "exists" in lower or "already" in lower:
        suggestions.append("Choose a different project name or remove the existing directory")

    if not suggestions:
        suggestions.append("Check the error message above for details")
        suggestions.append("Verify your configuration and try again")
    return suggestions


def print_dry_run(config: ProjectConfig) -> None:
    print_title("Dry Run Summary")
    print_info("The following would be created:")
    if config.has_frontend:
        console.print(f"  Frontend: {config.frontend.value} with {config.language.value}")
    if config.has_backend:
        console.print(f"  Backend: Express with {config.database.value} ({config.orm.value})")
        console.print(f"  Authentication: {config.auth.value}")
    if config.docker:
        console.print("  Docker: Dockerfile + docker-compose.yml")
    if config.tailwind and config.has_frontend:
        console.print("  CSS: Tailwind CSS v4")
    if config.cicd != CicdProvider.NONE:
        console.print(f"  CI/CD: {config.cicd.value}")
    print_info("No files were created (dry run)")


def print_failure(result: GenerationResult, config: ProjectConfig) -> None:
    print_error("Failed to generate project")
    print_error(f"Project: {config.project_name}")
    print_error(f"Mode: {config.mode.value}")
    print_error(f"Path: {result.project_path}")
    for err in result.errors:
        print_error(f"  - {err}")
    if result.rolled_back:
        print_success(f"Removed {len(result.created_files)} partially created files")
    print_info("Common issues:")
    for suggestion in error_suggestions(" ".join(result.errors)):
        print_info(f"   - {suggestion}")


def print_complete(config: ProjectConfig, result: GenerationResult, post: PostGenerationResult) -> None:
    steps = [f"cd {config.project_name}"]
    if not post.dependencies_installed:
        steps.append("npm install")
    steps.append("npm run dev")
    body = "\n".join(f"  {s}" for s in steps)
    if post.env_created:
        body += "\n\n.env created from .env.example - review it before starting."
    console.print(
        Panel(
            f"[bold green]{config.project_name}[/bold green] is ready at {result.project_path}"
            f"\n\nNext steps:\n{body}",
            title="Project created",
            border_style="green",
        )
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def create_command(
    project_name: str | None,
    options: ConfigOptions,
    output_dir: Path,
    settings: Settings | None = None,
) -> int:
    """Run ``create`` end to end and return the process exit code."""
    settings = settings or Settings()

    try:
        if not project_name:
            project_name = prompt_project_name()
    except (KeyboardInterrupt, EOFError):
        print_info("Operation cancelled")
        return EXIT_INTERRUPTED

    name_check = validate_project_name(project_name)
    if not name_check.valid:
        print_error(f"Invalid project name: {project_name}")
        for err in name_check.errors:
            print_error(f"  - {err}")
        return EXIT_FAILURE

    if (output_dir / project_name).exists():
        print_error(f'Directory "{project_name}" already exists')
        return EXIT_FAILURE

    option_check = validate_options(options)
    if not option_check.valid:
        for err in option_check.errors:
            print_error(err)
        return EXIT_FAILURE
    for warning in option_check.warnings:
        print_warning(warning)

    if options.dry_run:
        print_info("Dry run mode - no files will be created")

    try:
        answers = run_project_prompts(options)
        config = resolve_config(project_name, answers)
    except ConfigValidationError as exc:
        for err in exc.errors:
            print_error(err)
        return EXIT_FAILURE
    except (KeyboardInterrupt, EOFError):
        print_info("Operation cancelled")
        return EXIT_INTERRUPTED

    display_config_summary(config)

    if options.dry_run:
        print_dry_run(config)
        return EXIT_OK

    if not options.yes:
        try:
            if not confirm_generation():
                print_info("Operation cancelled")
                return EXIT_OK
        except (KeyboardInterrupt, EOFError):
            print_info("Operation cancelled")
            return EXIT_INTERRUPTED

    print_title("Generating Project")
    generator = ProjectGenerator(config, output_dir, templates_root=settings.templates_dir)
    try:
        result = asyncio.run(generator.generate())
    except KeyboardInterrupt:
        print_warning("Generation interrupted - partially created project removed")
        return EXIT_INTERRUPTED

    if not result.success:
        print_failure(result, config)
        return EXIT_FAILURE

    try:
        post = asyncio.run(run_post_generation(result, config, settings))
    except KeyboardInterrupt:
        print_warning(f"Post-generation steps interrupted. The project was kept at {result.project_path}")
        return EXIT_INTERRUPTED

    print_complete(config, result, post)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mern-scaffold",
        description="CLI tool to scaffold production-ready MERN stack projects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  mern-scaffold create my-app\n"
            "  mern-scaffold create my-api --mode backend --javascript --vanilla -y\n"
            "  mern-scaffold create my-app --dry-run\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Create a new MERN project")
    create.add_argument("project_name", nargs="?", default=None, help="Project (and directory) name")
    create.add_argument("-m", "--mode", choices=[m.value for m in GenerationMode], default=None,
                        help="Generation mode: full, frontend, backend")
    create.add_argument("-t", "--typescript", action="store_true", default=None, help="Use TypeScript (default)")
    create.add_argument("-j", "--javascript", action="store_true", default=None, help="Use JavaScript")
    create.add_argument("-e", "--es6", action="store_true", default=None, help="Use ES6 modules (default)")
    create.add_argument("-v", "--vanilla", action="store_true", default=None, help="Use CommonJS modules")
    create.add_argument("-f", "--frontend", choices=[f.value for f in Frontend], default=None)
    create.add_argument("-d", "--database", choices=[d.value for d in Database], default=None)
    create.add_argument("--orm", choices=[o.value for o in Orm if o != Orm.NONE], default=None,
                        help="ORM/driver for PostgreSQL")
    create.add_argument("-a", "--auth", choices=[a.value for a in AuthType], default=None)
    create.add_argument("-s", "--state", choices=[s.value for s in StateManagement], default=None)
    create.add_argument("-p", "--payment", choices=[p.value for p in PaymentProvider], default=None)
    create.add_argument("--cicd", choices=[c.value for c in CicdProvider], default=None)
    create.add_argument("--tailwind", action=argparse.BooleanOptionalAction, default=None,
                        help="Include Tailwind CSS v4")
    create.add_argument("--docker", action=argparse.BooleanOptionalAction, default=None,
                        help="Include Docker configuration")
    create.add_argument("-g", "--git", action=argparse.BooleanOptionalAction, default=None,
                        help="Initialize a git repository")
    create.add_argument("-i", "--install", action=argparse.BooleanOptionalAction, default=None,
                        help="Install dependencies after generation")
    create.add_argument("-y", "--yes", action="store_true", help="Accept defaults for every unanswered option")
    create.add_argument("--dry-run", action="store_true", help="Preview without creating files")
    create.add_argument("-o", "--output", default=None,
                        help="Directory to create the project in (default: current directory)")
    return parser


def options_from_args(args: argparse.Namespace) -> ConfigOptions:
    values = {
        key: getattr(args, key)
        for key in ConfigOptions.model_fields
        if getattr(args, key, None) is not None
    }
    return ConfigOptions(**values)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``mern-scaffold``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    output_dir = Path(args.output) if args.output else settings.output_dir
    code = create_command(args.project_name, options_from_args(args), output_dir.resolve(), settings)
    sys.exit(code)


if __name__ == "__main__":
    main()
