"""Shared pytest fixtures for the mern-scaffold test suite.

Provides reusable fixtures for:
- Temporary output directories
- A minimal, self-contained template tree (independent of the bundled one)
- ProjectConfig factories
- Mocked subprocess execution for the git/npm steps
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest

from mern_scaffold.config import ProjectConfig, TemplateContext


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Destination root that generated projects are created under."""
    out = tmp_path / "output"
    out.mkdir()
    yield out


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Write ``{relative_path: content}`` under *root* and return *root*."""
    for relative, content in files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return root


# A small template tree covering every subtree the generators read.  Each
# variant holds a package.json and one source file so tests can tell which
# variant was materialized.
MINIMAL_TEMPLATES: dict[str, str] = {
    # Frontend variants
    "client/vite/ts-es6/package.json.j2": '{"name": "{{ project_name }}-client"}\n',
    "client/vite/ts-es6/src/App.tsx.j2": "export const title = '{{ project_name_capitalized }}';\n",
    "client/vite/ts-es6/src/store/index.ts": "export const store = {};\n",
    "client/vite/ts-es6/src/context/AppContext.tsx": "export const AppContext = {};\n",
    "client/vite/js-es6/package.json.j2": '{"name": "{{ project_name }}-client"}\n',
    "client/vite/js-es6/src/App.jsx": "export default function App() {}\n",
    "client/vite/js-vanilla/package.json.j2": '{"name": "{{ project_name }}-client"}\n',
    "client/vite/js-vanilla/src/App.jsx": "module.exports = {};\n",
    "client/common/.env.example": "VITE_API_URL=/api\n",
    # Backend variants
    "server/express/ts-es6/package.json.j2": '{"name": "{{ project_name }}-server"}\n',
    "server/express/ts-es6/src/app.ts.j2": "// auth={{ auth }} payment={{ payment }}\n",
    "server/express/ts-es6/src/controllers/authController.ts": "export {};\n",
    "server/express/ts-es6/src/controllers/paymentController.ts": "export {};\n",
    "server/express/ts-es6/src/routes/auth.ts": "export {};\n",
    "server/express/ts-es6/src/routes/payment.ts": "export {};\n",
    "server/express/ts-es6/src/routes/health.ts": "export {};\n",
    "server/express/ts-es6/src/middleware/auth.ts": "export {};\n",
    "server/express/ts-es6/src/middleware/errorHandler.ts": "export {};\n",
    "server/express/ts-es6/src/models/User.ts": "export {};\n",
    "server/express/ts-es6/src/config/passport.ts": "export {};\n",
    "server/express/ts-es6/src/services/payment/StripeAdapter.ts": "export {};\n",
    "server/express/ts-es6/src/services/payment/PaystackAdapter.ts": "export {};\n",
    "server/express/ts-es6/src/services/payment/MockAdapter.ts": "export {};\n",
    "server/express/js-es6/package.json.j2": '{"name": "{{ project_name }}-server"}\n',
    "server/express/js-es6/src/app.js": "export default {};\n",
    "server/express/js-vanilla/package.json.j2": '{"name": "{{ project_name }}-server"}\n',
    "server/express/js-vanilla/src/app.js": "module.exports = {};\n",
    "server/common/.env.example.j2": "PORT=5000\n",
    "server/common/prisma/schema.prisma": "datasource db {}\n",
    "server/common/db/schema.sql": "CREATE TABLE users ();\n",
    # Project level
    "root/package.json.j2": '{"name": "{{ project_name }}"}\n',
    "root/README.md.j2": "# {{ project_name_capitalized }}\n",
    "root/.gitignore": "node_modules/\n",
    "docker/root/docker-compose.yml.j2": "services: {}\n",
    "docker/client/Dockerfile": "FROM node:20-alpine\n",
    "docker/client/nginx.conf": "server {}\n",
    "docker/server/Dockerfile": "FROM node:20-alpine\n",
    "cicd/github/.github/workflows/test.yml.j2": "name: Lint and Test\n",
}


@pytest.fixture
def templates_root(tmp_path: Path) -> Path:
    """A minimal template tree written to a temporary directory."""
    return write_tree(tmp_path / "templates", MINIMAL_TEMPLATES)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def make_config() -> Callable[..., ProjectConfig]:
    """Factory for ProjectConfig with test-friendly defaults.

    Docker, git and install are off unless a test turns them on.
    """

    def _make(**overrides: Any) -> ProjectConfig:
        values: dict[str, Any] = {
            "project_name": "test-app",
            "docker": False,
            "git": False,
            "install": False,
        }
        values.update(overrides)
        return ProjectConfig(**values)

    return _make


@pytest.fixture
def default_config(make_config) -> ProjectConfig:
    """Full-stack TypeScript project with every default option."""
    return make_config()


@pytest.fixture
def default_context(default_config) -> TemplateContext:
    return TemplateContext.from_config(default_config)


# ---------------------------------------------------------------------------
# Subprocess
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_run_command():
    """Patch ``run_command`` as seen by the CLI; every command succeeds.

    Usage:
        def test_something(mock_run_command):
            ...
            assert mock_run_command.await_count == 3
    """
    mock = AsyncMock(return_value=(0, "", ""))
    with patch("mern_scaffold.cli.run_command", mock):
        yield mock


@pytest.fixture
def tree_writer() -> Callable[[Path, dict[str, str]], Path]:
    """The ``write_tree`` helper, for tests that build their own template trees."""
    return write_tree
