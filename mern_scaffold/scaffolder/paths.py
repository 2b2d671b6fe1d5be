"""Template path resolution.

Maps a ``ProjectConfig`` to the template directories that make up a
project.  Everything here is a pure path computation; checking whether a
directory exists is left to the caller, which must treat a missing directory
differently from an empty one.

Layout of the template tree::

    client/<frontend>/<variant>/   per-variant frontend sources
    client/common/                 shared by every frontend variant
    server/express/<variant>/      per-variant backend sources
    server/common/                 shared by every backend variant
    root/                          project-level files
    docker/{root,client,server}/   Docker files per target
    cicd/<provider>/               CI/CD pipelines
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from ..config import (
    DEFAULT_TEMPLATES_DIR,
    CicdProvider,
    Frontend,
    Language,
    ModuleSystem,
    ProjectConfig,
)

DockerTarget = Literal["root", "client", "server"]

BACKEND_FRAMEWORK = "express"

VARIANT_TS_ES6 = "ts-es6"
VARIANT_JS_ES6 = "js-es6"
VARIANT_JS_VANILLA = "js-vanilla"

KNOWN_FRONTEND_VARIANTS: tuple[str, ...] = (
    "vite/ts-es6",
    "vite/js-es6",
    "vite/js-vanilla",
    "nextjs/ts-es6",
)

KNOWN_BACKEND_VARIANTS: tuple[str, ...] = (
    "express/ts-es6",
    "express/js-es6",
    "express/js-vanilla",
)


def variant_key(config: ProjectConfig) -> str:
    """Return the language/module-system variant directory name."""
    if config.language == Language.TYPESCRIPT:
        return VARIANT_TS_ES6
    if config.module_system == ModuleSystem.ES6:
        return VARIANT_JS_ES6
    return VARIANT_JS_VANILLA


def _root(templates_root: str | Path | None) -> Path:
    return Path(templates_root) if templates_root is not None else DEFAULT_TEMPLATES_DIR


def frontend_template_path(config: ProjectConfig, templates_root: str | Path | None = None) -> Path:
    return _root(templates_root) / "client" / Frontend(config.frontend).value / variant_key(config)


def backend_template_path(config: ProjectConfig, templates_root: str | Path | None = None) -> Path:
    return _root(templates_root) / "server" / BACKEND_FRAMEWORK / variant_key(config)


def common_frontend_template_path(templates_root: str | Path | None = None) -> Path:
    return _root(templates_root) / "client" / "common"


def common_backend_template_path(templates_root: str | Path | None = None) -> Path:
    return _root(templates_root) / "server" / "common"


def root_template_path(templates_root: str | Path | None = None) -> Path:
    return _root(templates_root) / "root"


def docker_template_path(target: DockerTarget, templates_root: str | Path | None = None) -> Path:
    if target not in ("root", "client", "server"):
        raise ValueError(f"Unknown docker target: {target!r}")
    return _root(templates_root) / "docker" / target


def cicd_template_path(provider: CicdProvider | str, templates_root: str | Path | None = None) -> Path:
    return _root(templates_root) / "cicd" / CicdProvider(provider).value
