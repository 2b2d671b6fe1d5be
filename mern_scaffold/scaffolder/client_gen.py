"""Frontend (client) generation.

Renders the React frontend for the selected framework and variant, the
variant-independent client files, and the client Dockerfile.
"""

from __future__ import annotations

from pathlib import Path

from ..config import Frontend, StateManagement
from ..errors import TemplateNotFoundError
from .base import ComponentGenerator, TemplateSource, output_parts, relational_filter
from .paths import (
    KNOWN_FRONTEND_VARIANTS,
    common_frontend_template_path,
    docker_template_path,
    frontend_template_path,
)
from .templates import IncludeFilter


def state_filter(state: StateManagement) -> IncludeFilter:
    """Keep only the state-management subtree matching *state*.

    ``context/`` directories survive only for React Context; ``store/``
    directories are dropped for React Context and for no state management.
    """

    def include(relative: str) -> bool:
        dirs, _ = output_parts(relative)
        if state != StateManagement.CONTEXT and "context" in dirs:
            return False
        if state in (StateManagement.CONTEXT, StateManagement.NONE) and "store" in dirs:
            return False
        return True

    return include


def client_docker_filter(frontend: Frontend) -> IncludeFilter:
    """The nginx config only applies to the static Vite build."""

    def include(relative: str) -> bool:
        _, stem = output_parts(relative)
        return not (stem == "nginx" and frontend != Frontend.VITE)

    return include


class ClientGenerator(ComponentGenerator):
    """Generator for frontend (client) code."""

    component = "client"

    def describe(self) -> str:
        return f"Generating {self.config.frontend.value} frontend"

    def _variant_missing(self, path: Path) -> TemplateNotFoundError:
        return TemplateNotFoundError(
            path,
            (
                "Template not found for frontend configuration:\n"
                f"  Frontend: {self.config.frontend.value}\n"
                f"  Language: {self.config.language.value}\n"
                f"  Module System: {self.config.module_system.value}\n"
                f"  Expected path: {path}\n\n"
                f"Available template combinations: {', '.join(KNOWN_FRONTEND_VARIANTS)}\n"
                "Please check your configuration or ensure the template exists."
            ),
            known_combinations=KNOWN_FRONTEND_VARIANTS,
        )

    def sources(self) -> list[TemplateSource]:
        root = self.templates_root
        sources = [
            TemplateSource(
                frontend_template_path(self.config, root),
                include=state_filter(self.config.state),
                on_missing=self._variant_missing,
            ),
            TemplateSource(
                common_frontend_template_path(root),
                include=relational_filter(self.config),
            ),
        ]
        if self.config.docker:
            sources.append(
                TemplateSource(
                    docker_template_path("client", root),
                    include=client_docker_filter(self.config.frontend),
                    required=False,
                )
            )
        return sources
