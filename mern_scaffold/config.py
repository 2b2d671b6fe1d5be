"""Project configuration and template-context derivation.

A generation run starts from a loose set of answers (CLI flags or prompt
responses, see ``ConfigOptions``) and turns them into a canonical, frozen
``ProjectConfig``.  The ``TemplateContext`` adds the render-only fields the
templates use (display name, extension strings, convenience booleans).

All checks happen here, before the orchestrator touches the filesystem.
"""

from __future__ import annotations

import os
import re
from enum import Enum
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .errors import ConfigValidationError


DEFAULT_TEMPLATES_DIR = Path(__file__).parent / "scaffolder" / "templates"


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class GenerationMode(str, Enum):
    FULL = "full"
    FRONTEND = "frontend"
    BACKEND = "backend"


class Language(str, Enum):
    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"


class ModuleSystem(str, Enum):
    ES6 = "es6"
    VANILLA = "vanilla"


class Frontend(str, Enum):
    VITE = "vite"
    NEXTJS = "nextjs"


class Database(str, Enum):
    MONGODB = "mongodb"
    POSTGRESQL = "postgresql"


class Orm(str, Enum):
    MONGOOSE = "mongoose"
    PRISMA = "prisma"
    PG = "pg"
    NONE = "none"


class AuthType(str, Enum):
    JWT = "jwt"
    SESSION = "session"
    OAUTH = "oauth"
    PASSPORT = "passport"
    NONE = "none"


class StateManagement(str, Enum):
    ZUSTAND = "zustand"
    REDUX = "redux"
    CONTEXT = "context"
    NONE = "none"


class PaymentProvider(str, Enum):
    STRIPE = "stripe"
    PAYSTACK = "paystack"
    MOCK = "mock"
    NONE = "none"


class CicdProvider(str, Enum):
    GITHUB = "github"
    NONE = "none"


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


class ValidationResult(BaseModel):
    """Outcome of a name or option check."""

    valid: bool = True
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


# Node core modules cannot be used as new package names.
NODE_BUILTIN_MODULES: frozenset[str] = frozenset({
    "assert", "async_hooks", "buffer", "child_process", "cluster", "console",
    "constants", "crypto", "dgram", "diagnostics_channel", "dns", "domain",
    "events", "fs", "http", "http2", "https", "inspector", "module", "net",
    "os", "path", "perf_hooks", "process", "punycode", "querystring",
    "readline", "repl", "stream", "string_decoder", "sys", "timers", "tls",
    "trace_events", "tty", "url", "util", "v8", "vm", "wasi",
    "worker_threads", "zlib",
})

_BLACKLISTED_NAMES = ("node_modules", "favicon.ico")
_SPECIAL_CHARS_RE = re.compile(r"[~'!()*]")
MAX_PACKAGE_NAME_LENGTH = 214


def validate_project_name(name: str) -> ValidationResult:
    """Check *name* against the npm rules for new package names.

    The name doubles as the destination directory, so scoped names
    (``@scope/pkg``) are rejected as well.
    """
    errors: list[str] = []

    if name is None or name == "":
        return ValidationResult(valid=False, errors=["name length must be greater than zero"])

    if name.strip() != name:
        errors.append("name cannot contain leading or trailing spaces")
    if name.startswith("."):
        errors.append("name cannot start with a period")
    if name.startswith("_"):
        errors.append("name cannot start with an underscore")
    if name.lower() in _BLACKLISTED_NAMES:
        errors.append(f"{name} is a blacklisted name")
    if name.startswith("@") or "/" in name:
        errors.append("scoped names cannot be used as a project directory")
    elif quote(name, safe="") != name:
        errors.append("name can only contain URL-friendly characters")
    if name.lower() in NODE_BUILTIN_MODULES:
        errors.append(f"{name} is a core module name")
    if len(name) > MAX_PACKAGE_NAME_LENGTH:
        errors.append(f"name can no longer contain more than {MAX_PACKAGE_NAME_LENGTH} characters")
    if name.lower() != name:
        errors.append("name can no longer contain capital letters")
    if _SPECIAL_CHARS_RE.search(name):
        errors.append('name can no longer contain special characters ("~\'!()*")')

    return ValidationResult(valid=not errors, errors=errors)


# ---------------------------------------------------------------------------
# Raw options
# ---------------------------------------------------------------------------


class ConfigOptions(BaseModel):
    """Partial answer set gathered from CLI flags or interactive prompts.

    ``None`` means "not answered"; the prompt flow fills those in, or
    ``resolve_config`` falls back to the defaults.
    """

    mode: Optional[GenerationMode] = None
    typescript: Optional[bool] = None
    javascript: Optional[bool] = None
    es6: Optional[bool] = None
    vanilla: Optional[bool] = None
    frontend: Optional[Frontend] = None
    database: Optional[Database] = None
    orm: Optional[Orm] = None
    auth: Optional[AuthType] = None
    state: Optional[StateManagement] = None
    payment: Optional[PaymentProvider] = None
    cicd: Optional[CicdProvider] = None
    tailwind: Optional[bool] = None
    docker: Optional[bool] = None
    git: Optional[bool] = None
    install: Optional[bool] = None
    yes: bool = False
    dry_run: bool = False

    @property
    def language(self) -> Language | None:
        if self.javascript:
            return Language.JAVASCRIPT
        if self.typescript:
            return Language.TYPESCRIPT
        return None

    @property
    def module_system(self) -> ModuleSystem | None:
        if self.vanilla:
            return ModuleSystem.VANILLA
        if self.es6:
            return ModuleSystem.ES6
        return None


def validate_options(options: ConfigOptions) -> ValidationResult:
    """Check an option set for conflicts.

    Mutually exclusive flags are errors.  Options that the selected mode never
    reads only produce advisory warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if options.typescript and options.javascript:
        errors.append("Cannot use both --typescript and --javascript")
    if options.es6 and options.vanilla:
        errors.append("Cannot use both --es6 and --vanilla")
    if options.vanilla and options.typescript:
        warnings.append("--vanilla is ignored when using TypeScript (ES6 is auto-selected)")

    mode = options.mode or GenerationMode.FULL
    if mode == GenerationMode.FRONTEND:
        for flag in ("database", "orm", "auth", "payment"):
            if getattr(options, flag) is not None:
                warnings.append(f"--{flag} is ignored in frontend mode")
    elif mode == GenerationMode.BACKEND:
        for flag in ("frontend", "state", "tailwind"):
            if getattr(options, flag) is not None:
                warnings.append(f"--{flag} is ignored in backend mode")

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


# ---------------------------------------------------------------------------
# Canonical configuration
# ---------------------------------------------------------------------------


def resolve_orm(database: Any, orm: Any = None) -> Orm:
    """Pick the ORM/driver for *database*, honouring *orm* where it applies."""
    if database == Database.MONGODB:
        return Orm.MONGOOSE
    if database == Database.POSTGRESQL:
        if orm in (Orm.PRISMA, Orm.PG):
            return Orm(orm)
        return Orm.PRISMA
    return Orm.NONE


class ProjectConfig(BaseModel):
    """Canonical, fully resolved configuration for one generation run."""

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(..., description="Package and directory name")
    mode: GenerationMode = Field(default=GenerationMode.FULL)
    language: Language = Field(default=Language.TYPESCRIPT)
    module_system: ModuleSystem = Field(default=ModuleSystem.ES6)
    frontend: Frontend = Field(default=Frontend.VITE)
    database: Database = Field(default=Database.MONGODB)
    orm: Orm = Field(default=Orm.NONE, description="Derived from the database when unset")
    auth: AuthType = Field(default=AuthType.JWT)
    state: StateManagement = Field(default=StateManagement.ZUSTAND)
    payment: PaymentProvider = Field(default=PaymentProvider.NONE)
    docker: bool = Field(default=True)
    tailwind: bool = Field(default=True)
    git: bool = Field(default=True)
    cicd: CicdProvider = Field(default=CicdProvider.NONE)
    install: bool = Field(default=True)

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        # TypeScript templates only exist as ES modules.
        if data.get("language", Language.TYPESCRIPT) == Language.TYPESCRIPT:
            data["module_system"] = ModuleSystem.ES6
        data["orm"] = resolve_orm(data.get("database", Database.MONGODB), data.get("orm"))
        return data

    @field_validator("project_name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        result = validate_project_name(value)
        if not result.valid:
            raise ValueError("; ".join(result.errors))
        return value

    @property
    def has_frontend(self) -> bool:
        return self.mode in (GenerationMode.FULL, GenerationMode.FRONTEND)

    @property
    def has_backend(self) -> bool:
        return self.mode in (GenerationMode.FULL, GenerationMode.BACKEND)


def resolve_config(project_name: str, options: ConfigOptions | None = None) -> ProjectConfig:
    """Build a ``ProjectConfig`` from a project name and a raw option set.

    Raises:
        ConfigValidationError: If the name is not a valid package name or the
            options contain mutually exclusive flags.
    """
    options = options or ConfigOptions()

    name_check = validate_project_name(project_name)
    option_check = validate_options(options)
    errors = [f"Invalid project name: {e}" for e in name_check.errors] + option_check.errors
    if errors:
        raise ConfigValidationError(errors)

    values: dict[str, Any] = {"project_name": project_name}
    if options.language is not None:
        values["language"] = options.language
    if options.module_system is not None:
        values["module_system"] = options.module_system
    for key in (
        "mode", "frontend", "database", "orm", "auth", "state", "payment",
        "cicd", "tailwind", "docker", "git", "install",
    ):
        value = getattr(options, key)
        if value is not None:
            values[key] = value

    return ProjectConfig(**values)


# ---------------------------------------------------------------------------
# Template context
# ---------------------------------------------------------------------------


def capitalize_words(name: str) -> str:
    """``my-cool_app`` -> ``My Cool App``."""
    words = [w for w in re.split(r"[-_.\s]+", name) if w]
    return " ".join(w[0].upper() + w[1:] for w in words)


class TemplateContext(ProjectConfig):
    """``ProjectConfig`` plus the derived fields templates render against."""

    project_name_capitalized: str
    is_typescript: bool
    is_es6: bool
    script_ext: str
    react_ext: str

    @classmethod
    def from_config(cls, config: ProjectConfig) -> "TemplateContext":
        is_typescript = config.language == Language.TYPESCRIPT
        return cls(
            **config.model_dump(),
            project_name_capitalized=capitalize_words(config.project_name),
            is_typescript=is_typescript,
            is_es6=config.module_system == ModuleSystem.ES6,
            script_ext="ts" if is_typescript else "js",
            react_ext="tsx" if is_typescript else "jsx",
        )

    def as_template_vars(self) -> dict[str, Any]:
        """Flat mapping of plain values handed to Jinja2."""
        return self.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Runtime settings
# ---------------------------------------------------------------------------


class Settings(BaseModel):
    """Runtime knobs for the CLI, overridable through the environment."""

    templates_dir: Path = Field(default=DEFAULT_TEMPLATES_DIR)
    output_dir: Path = Field(default=Path("."))
    command_timeout: int = Field(default=600, ge=10, description="git/npm timeout in seconds")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            MERN_SCAFFOLD_TEMPLATES_DIR, MERN_SCAFFOLD_OUTPUT_DIR,
            MERN_SCAFFOLD_COMMAND_TIMEOUT.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("MERN_SCAFFOLD_TEMPLATES_DIR"):
            kwargs["templates_dir"] = Path(os.environ["MERN_SCAFFOLD_TEMPLATES_DIR"])
        if os.environ.get("MERN_SCAFFOLD_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["MERN_SCAFFOLD_OUTPUT_DIR"])
        if os.environ.get("MERN_SCAFFOLD_COMMAND_TIMEOUT"):
            kwargs["command_timeout"] = int(os.environ["MERN_SCAFFOLD_COMMAND_TIMEOUT"])
        return cls(**kwargs)
