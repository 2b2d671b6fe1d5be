"""Integration tests that generate real projects from the bundled templates.

These tests run the ProjectGenerator end-to-end and verify that the generated
project directory has the expected layout and that its JSON and YAML
configuration files are well-formed.

No external tools (node, npm, git, Docker) are required.
"""

from __future__ import annotations

import itertools
import json
from pathlib import Path

import pytest
import yaml

from mern_scaffold.scaffolder import GenerationResult, ProjectGenerator


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _generate_result(config, output_dir: Path) -> GenerationResult:
    result = await ProjectGenerator(config, output_dir).generate()
    assert result.success, result.summary()
    return result


async def _generate(config, output_dir: Path) -> Path:
    return (await _generate_result(config, output_dir)).project_path


def _assert_json_and_yaml_valid(project: Path) -> None:
    for package_json in project.rglob("package.json"):
        data = json.loads(package_json.read_text())
        assert "name" in data, package_json
    for name in ("tsconfig.json",):
        for path in project.rglob(name):
            json.loads(path.read_text())
    for path in itertools.chain(project.rglob("*.yml"), project.rglob("*.yaml")):
        assert yaml.safe_load(path.read_text()) is not None, path


AUTH_ONLY_MARKERS = ("controllers/authController", "routes/auth.", "middleware/auth.", "passport", "models/User")
PAYMENT_ONLY_MARKERS = ("services/payment/", "controllers/paymentController", "routes/payment.")


def _files_matching(result: GenerationResult, markers: tuple[str, ...]) -> list[str]:
    return [f for f in result.created_files if any(marker in f for marker in markers)]


# ---------------------------------------------------------------------------
# Full stack
# ---------------------------------------------------------------------------


@pytest.mark.integration
class TestFullStackProject:
    @pytest.mark.asyncio
    async def test_typescript_defaults_with_docker(self, make_config, output_dir):
        project = await _generate(make_config(project_name="my-app", docker=True, auth="none"), output_dir)

        assert (project / "client" / "vite.config.ts").is_file()
        assert (project / "client" / "src" / "App.tsx").is_file()
        assert (project / "client" / "src" / "store" / "index.ts").is_file()
        assert not (project / "client" / "src" / "context").exists()
        assert (project / "server" / "src" / "app.ts").is_file()
        assert (project / "server" / "src" / "server.ts").is_file()
        assert not (project / "server" / "src" / "controllers" / "authController.ts").exists()
        assert not (project / "server" / "src" / "models").exists()
        assert (project / "shared" / "index.ts").is_file()
        assert (project / "docker-compose.yml").is_file()
        assert (project / "client" / "Dockerfile").is_file()
        assert (project / "client" / "nginx.conf").is_file()
        assert (project / "server" / "Dockerfile").is_file()

        compose = yaml.safe_load((project / "docker-compose.yml").read_text())
        assert set(compose["services"]) == {"client", "server", "mongo"}
        assert "mongo-data" in compose["volumes"]

        root_package = json.loads((project / "package.json").read_text())
        assert root_package["name"] == "my-app"
        assert "My App" in (project / "README.md").read_text()
        _assert_json_and_yaml_valid(project)

    @pytest.mark.asyncio
    async def test_templated_names(self, make_config, output_dir):
        project = await _generate(make_config(project_name="shop-front"), output_dir)
        client_pkg = json.loads((project / "client" / "package.json").read_text())
        server_pkg = json.loads((project / "server" / "package.json").read_text())
        assert client_pkg["name"] == "shop-front-client"
        assert server_pkg["name"] == "shop-front-server"
        assert "{{" not in (project / "client" / "index.html").read_text()

    @pytest.mark.asyncio
    async def test_passport_with_stripe(self, make_config, output_dir):
        project = await _generate(make_config(auth="passport", payment="stripe"), output_dir)
        server = project / "server" / "src"

        assert (server / "config" / "passport.ts").is_file()
        assert (server / "controllers" / "authController.ts").is_file()
        assert (server / "models" / "User.ts").is_file()
        assert (server / "services" / "payment" / "PaymentProvider.ts").is_file()
        assert (server / "services" / "payment" / "StripeAdapter.ts").is_file()
        assert (server / "services" / "payment" / "PaymentService.ts").is_file()
        assert not (server / "services" / "payment" / "PaystackAdapter.ts").exists()
        assert not (server / "services" / "payment" / "MockAdapter.ts").exists()
        assert (server / "controllers" / "paymentController.ts").is_file()
        assert (server / "routes" / "payment.ts").is_file()

        server_pkg = json.loads((project / "server" / "package.json").read_text())
        assert "stripe" in server_pkg["dependencies"]
        assert "passport" in server_pkg["dependencies"]

    @pytest.mark.asyncio
    async def test_jwt_has_no_passport_config(self, make_config, output_dir):
        project = await _generate(make_config(auth="jwt"), output_dir)
        assert (project / "server" / "src" / "routes" / "auth.ts").is_file()
        assert not (project / "server" / "src" / "config" / "passport.ts").exists()

    @pytest.mark.asyncio
    async def test_postgres_prisma(self, make_config, output_dir):
        project = await _generate(make_config(database="postgresql", orm="prisma", docker=True), output_dir)
        assert (project / "server" / "prisma" / "schema.prisma").is_file()
        assert not (project / "server" / "db").exists()
        compose = yaml.safe_load((project / "docker-compose.yml").read_text())
        assert "postgres" in compose["services"]
        assert "postgres-data" in compose["volumes"]

    @pytest.mark.asyncio
    async def test_postgres_pg(self, make_config, output_dir):
        project = await _generate(make_config(database="postgresql", orm="pg"), output_dir)
        assert (project / "server" / "db" / "schema.sql").is_file()
        assert not (project / "server" / "prisma").exists()

    @pytest.mark.asyncio
    async def test_nextjs_client(self, make_config, output_dir):
        project = await _generate(make_config(frontend="nextjs", docker=True), output_dir)
        assert (project / "client" / "app" / "page.tsx").is_file()
        assert (project / "client" / "next.config.mjs").is_file()
        assert not (project / "client" / "nginx.conf").exists()
        _assert_json_and_yaml_valid(project)


# ---------------------------------------------------------------------------
# Single component
# ---------------------------------------------------------------------------


@pytest.mark.integration
class TestSingleComponentProject:
    @pytest.mark.parametrize("module_system", ["es6", "vanilla"])
    @pytest.mark.asyncio
    async def test_backend_javascript(self, make_config, output_dir, module_system):
        config = make_config(
            project_name="backend-app", mode="backend", language="javascript", module_system=module_system
        )
        project = await _generate(config, output_dir)

        app = (project / "src" / "app.js").read_text()
        if module_system == "vanilla":
            assert "require(" in app
            assert json.loads((project / "package.json").read_text())["type"] == "commonjs"
        else:
            assert "import " in app
            assert json.loads((project / "package.json").read_text())["type"] == "module"
        assert not (project / "client").exists()
        assert not (project / "server").exists()
        assert not (project / "shared").exists()
        assert (project / ".env.example").is_file()

    @pytest.mark.asyncio
    async def test_backend_es6_postgres_jwt(self, make_config, output_dir):
        config = make_config(
            project_name="backend-app",
            mode="backend",
            language="javascript",
            module_system="es6",
            database="postgresql",
            auth="jwt",
        )
        result = await _generate_result(config, output_dir)
        project = result.project_path

        assert project == output_dir.resolve() / "backend-app"
        assert (project / "src" / "server.js").is_file()
        assert (project / "src" / "app.js").is_file()
        assert (project / "src" / "routes" / "auth.js").is_file()
        assert (project / "prisma" / "schema.prisma").is_file()
        assert not (project / "client").exists()
        assert "src/server.js" in result.created_files
        assert not any(f.startswith("client/") for f in result.created_files)

    @pytest.mark.asyncio
    async def test_frontend_only(self, make_config, output_dir):
        project = await _generate(make_config(project_name="ui", mode="frontend", docker=True), output_dir)

        assert (project / "vite.config.ts").is_file()
        assert (project / "src" / "App.tsx").is_file()
        assert (project / "Dockerfile").is_file()
        assert not (project / "server").exists()
        assert json.loads((project / "package.json").read_text())["name"] == "ui"
        compose = yaml.safe_load((project / "docker-compose.yml").read_text())
        assert set(compose["services"]) == {"client"}


# ---------------------------------------------------------------------------
# CI/CD
# ---------------------------------------------------------------------------


@pytest.mark.integration
class TestGithubWorkflows:
    @pytest.mark.asyncio
    async def test_workflows_generated(self, make_config, output_dir):
        project = await _generate(make_config(cicd="github"), output_dir)
        workflows = project / ".github" / "workflows"

        test_yml = (workflows / "test.yml").read_text()
        assert "Lint and Test" in test_yml
        assert "npm test" in test_yml
        assert "${{ matrix.package }}" in test_yml
        assert (workflows / "docker.yml").is_file()
        _assert_json_and_yaml_valid(project)


# ---------------------------------------------------------------------------
# Option matrix
# ---------------------------------------------------------------------------


LANGUAGE_VARIANTS = [
    {"language": "typescript"},
    {"language": "javascript", "module_system": "es6"},
    {"language": "javascript", "module_system": "vanilla"},
]


@pytest.mark.integration
class TestOptionMatrix:
    @pytest.mark.parametrize("variant", LANGUAGE_VARIANTS, ids=lambda v: "-".join(v.values()))
    @pytest.mark.parametrize("auth", ["jwt", "session", "oauth", "passport", "none"])
    @pytest.mark.asyncio
    async def test_auth_variants(self, make_config, output_dir, variant, auth):
        result = await _generate_result(make_config(auth=auth, docker=True, cicd="github", **variant), output_dir)
        auth_files = _files_matching(result, AUTH_ONLY_MARKERS)
        if auth == "none":
            assert auth_files == []
        else:
            assert any("authController" in f for f in auth_files)
        _assert_json_and_yaml_valid(result.project_path)

    @pytest.mark.parametrize("variant", LANGUAGE_VARIANTS, ids=lambda v: "-".join(v.values()))
    @pytest.mark.parametrize("auth", ["jwt", "none"])
    @pytest.mark.asyncio
    async def test_no_payment_files_without_provider(self, make_config, output_dir, variant, auth):
        result = await _generate_result(make_config(auth=auth, payment="none", **variant), output_dir)
        assert _files_matching(result, PAYMENT_ONLY_MARKERS) == []
        assert not (result.project_path / "server" / "src" / "services").exists()

    @pytest.mark.parametrize("variant", LANGUAGE_VARIANTS, ids=lambda v: "-".join(v.values()))
    @pytest.mark.parametrize("state", ["zustand", "redux", "context", "none"])
    @pytest.mark.parametrize("tailwind", [True, False])
    @pytest.mark.asyncio
    async def test_client_variants(self, make_config, output_dir, variant, state, tailwind):
        config = make_config(mode="frontend", state=state, tailwind=tailwind, **variant)
        project = await _generate(config, output_dir)
        _assert_json_and_yaml_valid(project)

    @pytest.mark.parametrize("variant", LANGUAGE_VARIANTS, ids=lambda v: "-".join(v.values()))
    @pytest.mark.parametrize("payment", ["stripe", "paystack", "mock"])
    @pytest.mark.parametrize("database, orm", [("mongodb", None), ("postgresql", "prisma"), ("postgresql", "pg")])
    @pytest.mark.asyncio
    async def test_backend_variants(self, make_config, output_dir, variant, payment, database, orm):
        config = make_config(mode="backend", payment=payment, database=database, orm=orm, **variant)
        project = await _generate(config, output_dir)
        adapter = {"stripe": "StripeAdapter", "paystack": "PaystackAdapter", "mock": "MockAdapter"}[payment]
        assert any(project.rglob(f"{adapter}.*"))
        _assert_json_and_yaml_valid(project)

    @pytest.mark.parametrize("state", ["zustand", "redux", "context", "none"])
    @pytest.mark.asyncio
    async def test_nextjs_state_variants(self, make_config, output_dir, state):
        project = await _generate(make_config(frontend="nextjs", state=state, tailwind=False), output_dir)
        _assert_json_and_yaml_valid(project)
