"""Backend (server) generation.

Renders the Express API for the selected variant.  Auth and payment files
are feature-gated: they are only emitted when the matching option is on.
"""

from __future__ import annotations

from pathlib import Path

from ..config import AuthType, PaymentProvider
from ..errors import TemplateNotFoundError
from .base import ComponentGenerator, TemplateSource, output_parts, relational_filter
from .paths import (
    BACKEND_FRAMEWORK,
    KNOWN_BACKEND_VARIANTS,
    backend_template_path,
    common_backend_template_path,
    docker_template_path,
    variant_key,
)
from .templates import IncludeFilter

# Auth types configured through passport strategies.
STRATEGY_AUTH = (AuthType.OAUTH, AuthType.PASSPORT)

PAYMENT_ADAPTERS: dict[PaymentProvider, str] = {
    PaymentProvider.STRIPE: "StripeAdapter",
    PaymentProvider.PAYSTACK: "PaystackAdapter",
    PaymentProvider.MOCK: "MockAdapter",
}


def is_auth_file(relative: str) -> bool:
    """Auth controller, routes, middleware, strategy config or user model."""
    dirs, stem = output_parts(relative)
    parent = dirs[-1] if dirs else ""
    return (
        stem == "authController"
        or (parent in ("routes", "middleware") and stem == "auth")
        or is_strategy_file(relative)
        or (parent == "models" and stem == "User")
    )


def is_strategy_file(relative: str) -> bool:
    dirs, stem = output_parts(relative)
    return bool(dirs) and dirs[-1] == "config" and stem == "passport"


def is_payment_file(relative: str) -> bool:
    return "payment" in relative.lower()


def server_filter(auth: AuthType, payment: PaymentProvider) -> IncludeFilter:
    """Inclusion filter for the backend variant tree."""
    unused_adapters = {
        name for provider, name in PAYMENT_ADAPTERS.items() if provider != payment
    }

    def include(relative: str) -> bool:
        if auth == AuthType.NONE and is_auth_file(relative):
            return False
        if auth not in STRATEGY_AUTH and is_strategy_file(relative):
            return False
        if payment == PaymentProvider.NONE and is_payment_file(relative):
            return False
        _, stem = output_parts(relative)
        if stem in unused_adapters:
            return False
        return True

    return include


class ServerGenerator(ComponentGenerator):
    """Generator for backend (server) code."""

    component = "server"

    def describe(self) -> str:
        return "Generating Express backend"

    def _variant_missing(self, path: Path) -> TemplateNotFoundError:
        return TemplateNotFoundError(
            path,
            (
                "Template not found for backend configuration:\n"
                f"  Backend: {BACKEND_FRAMEWORK}/{variant_key(self.config)}\n"
                f"  Language: {self.config.language.value}\n"
                f"  Module System: {self.config.module_system.value}\n"
                f"  Expected path: {path}\n\n"
                f"Available template combinations: {', '.join(KNOWN_BACKEND_VARIANTS)}\n"
                "Please check your configuration or ensure the template exists."
            ),
            known_combinations=KNOWN_BACKEND_VARIANTS,
        )

    def sources(self) -> list[TemplateSource]:
        root = self.templates_root
        sources = [
            TemplateSource(
                backend_template_path(self.config, root),
                include=server_filter(self.config.auth, self.config.payment),
                on_missing=self._variant_missing,
            ),
            TemplateSource(
                common_backend_template_path(root),
                include=relational_filter(self.config),
            ),
        ]
        if self.config.docker:
            sources.append(
                TemplateSource(docker_template_path("server", root), required=False)
            )
        return sources
