"""mern-scaffold generation engine -- renders project trees from templates.

This package takes a ``ProjectConfig`` and materializes the matching
template directories (per-variant, common, Docker, CI/CD) into a new
project directory, rolling the directory back if any step fails.

Quick usage::

    from mern_scaffold.config import resolve_config
    from mern_scaffold.scaffolder import ProjectGenerator

    config = resolve_config("my-app")
    generator = ProjectGenerator(config, "/tmp/output")
    result = await generator.generate()
"""

from mern_scaffold.scaffolder.generator import GenerationResult, GenerationState, ProjectGenerator
from mern_scaffold.scaffolder.templates import TemplateRenderer

__all__ = [
    "GenerationResult",
    "GenerationState",
    "ProjectGenerator",
    "TemplateRenderer",
]
