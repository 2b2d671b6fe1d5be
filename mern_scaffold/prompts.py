"""Interactive configuration prompts.

Fills in every option the user did not pass on the command line.  With
``--yes`` nothing is asked and the defaults apply.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, TypeVar

from rich.prompt import Confirm, Prompt
from rich.table import Table

from .config import (
    AuthType,
    CicdProvider,
    ConfigOptions,
    Database,
    Frontend,
    GenerationMode,
    Language,
    ModuleSystem,
    Orm,
    PaymentProvider,
    ProjectConfig,
    StateManagement,
    validate_project_name,
)
from .utils import console, print_error, print_summary_table

E = TypeVar("E", bound=Enum)


MODE_CHOICES = {
    GenerationMode.FULL: "Full Stack (client + server)",
    GenerationMode.FRONTEND: "Frontend Only (React)",
    GenerationMode.BACKEND: "Backend Only (Express API)",
}
LANGUAGE_CHOICES = {
    Language.TYPESCRIPT: "TypeScript (recommended)",
    Language.JAVASCRIPT: "JavaScript",
}
MODULE_CHOICES = {
    ModuleSystem.ES6: "ES6 Modules (import/export) - recommended",
    ModuleSystem.VANILLA: "CommonJS (require/module.exports)",
}
FRONTEND_CHOICES = {
    Frontend.VITE: "Vite + React (recommended)",
    Frontend.NEXTJS: "Next.js",
}
STATE_CHOICES = {
    StateManagement.ZUSTAND: "Zustand (recommended)",
    StateManagement.REDUX: "Redux Toolkit",
    StateManagement.CONTEXT: "React Context",
    StateManagement.NONE: "None",
}
DATABASE_CHOICES = {
    Database.MONGODB: "MongoDB (with Mongoose)",
    Database.POSTGRESQL: "PostgreSQL (with Prisma/PG)",
}
ORM_CHOICES = {
    Orm.PRISMA: "Prisma (ORM)",
    Orm.PG: "node-postgres (pg)",
}
AUTH_CHOICES = {
    AuthType.JWT: "JWT (stateless tokens)",
    AuthType.SESSION: "Session (server-side)",
    AuthType.OAUTH: "OAuth (Google + GitHub)",
    AuthType.PASSPORT: "Passport (Local + Google + GitHub)",
    AuthType.NONE: "None",
}
PAYMENT_CHOICES = {
    PaymentProvider.NONE: "None",
    PaymentProvider.STRIPE: "Stripe",
    PaymentProvider.PAYSTACK: "Paystack",
    PaymentProvider.MOCK: "Mock Adapter (for development)",
}
CICD_CHOICES = {
    CicdProvider.NONE: "None",
    CicdProvider.GITHUB: "GitHub Actions",
}


def select(message: str, choices: dict[E, str], default: E) -> E:
    """Show a numbered list of *choices* and return the selected member."""
    console.print(f"\n[bold blue]{message}[/bold blue]")
    table = Table(show_header=False, box=None)
    members = list(choices)
    for i, member in enumerate(members, 1):
        table.add_row(f"[cyan]{i})[/cyan]", choices[member])
    console.print(table)

    answer = Prompt.ask(
        "Select",
        choices=[str(i) for i in range(1, len(members) + 1)],
        default=str(members.index(default) + 1),
        show_choices=False,
        console=console,
    )
    return members[int(answer) - 1]


def confirm(message: str, default: bool = True) -> bool:
    return Confirm.ask(message, default=default, console=console)


def prompt_project_name() -> str:
    """Ask for a project name until a valid one is given."""
    while True:
        name = Prompt.ask("What is your project name?", console=console)
        result = validate_project_name(name)
        if result.valid:
            return name
        for err in result.errors:
            print_error(f"  - {err}")


def run_project_prompts(options: ConfigOptions) -> ConfigOptions:
    """Ask for every unanswered option and return the completed answer set."""
    ask = not options.yes
    answers: dict[str, Any] = {}

    mode = options.mode
    if mode is None:
        mode = select("What would you like to generate?", MODE_CHOICES, GenerationMode.FULL) if ask else GenerationMode.FULL
    answers["mode"] = mode
    has_frontend = mode in (GenerationMode.FULL, GenerationMode.FRONTEND)
    has_backend = mode in (GenerationMode.FULL, GenerationMode.BACKEND)

    language = options.language
    if language is None:
        language = (
            select("Which programming language would you like to use?", LANGUAGE_CHOICES, Language.TYPESCRIPT)
            if ask else Language.TYPESCRIPT
        )
    answers["typescript"] = language == Language.TYPESCRIPT
    answers["javascript"] = language == Language.JAVASCRIPT

    # TypeScript always uses ES modules, so the question only exists for JavaScript.
    module_system = ModuleSystem.ES6
    if language == Language.JAVASCRIPT:
        module_system = options.module_system
        if module_system is None:
            module_system = (
                select("Which JavaScript module system would you like to use?", MODULE_CHOICES, ModuleSystem.ES6)
                if ask else ModuleSystem.ES6
            )
    answers["es6"] = module_system == ModuleSystem.ES6
    answers["vanilla"] = module_system == ModuleSystem.VANILLA

    def choose(key: str, message: str, choices: dict[E, str], default: E, relevant: bool = True) -> None:
        value = getattr(options, key)
        if value is None and ask and relevant:
            value = select(message, choices, default)
        answers[key] = value if value is not None else default

    def yes_no(key: str, message: str, relevant: bool = True) -> None:
        value = getattr(options, key)
        if value is None and ask and relevant:
            value = confirm(message)
        answers[key] = value if value is not None else True

    choose("frontend", "Which frontend framework would you like to use?", FRONTEND_CHOICES, Frontend.VITE, has_frontend)
    choose("state", "Which state management solution would you like?", STATE_CHOICES, StateManagement.ZUSTAND, has_frontend)
    choose("database", "Which database would you like to use?", DATABASE_CHOICES, Database.MONGODB, has_backend)
    if answers["database"] == Database.POSTGRESQL:
        choose("orm", "Select ORM/Driver for PostgreSQL:", ORM_CHOICES, Orm.PRISMA, has_backend)
    choose("auth", "Which authentication type would you like?", AUTH_CHOICES, AuthType.JWT, has_backend)
    yes_no("docker", "Include Docker configuration?")
    choose("payment", "Include payment provider integration?", PAYMENT_CHOICES, PaymentProvider.NONE, has_backend)
    yes_no("tailwind", "Include Tailwind CSS v4?", has_frontend)
    yes_no("git", "Initialize a git repository?")
    choose("cicd", "Which CI/CD provider would you like to use?", CICD_CHOICES, CicdProvider.NONE)
    yes_no("install", "Install dependencies after generation?")

    return options.model_copy(update=answers)


def display_config_summary(config: ProjectConfig) -> None:
    """Print the resolved configuration as a table."""
    rows: dict[str, str] = {
        "Project Name": config.project_name,
        "Mode": config.mode.value,
        "Language": config.language.value,
        "Module System": config.module_system.value,
    }
    if config.has_frontend:
        rows["Frontend"] = config.frontend.value
        rows["State Management"] = config.state.value
        rows["Tailwind CSS"] = "Yes (v4)" if config.tailwind else "No"
    if config.has_backend:
        rows["Database"] = config.database.value
        rows["ORM/Driver"] = config.orm.value
        rows["Authentication"] = config.auth.value
        rows["Payment"] = config.payment.value
    rows["Docker"] = "Yes" if config.docker else "No"
    rows["Git"] = "Yes" if config.git else "No"
    rows["CI/CD"] = config.cicd.value
    rows["Install Dependencies"] = "Yes" if config.install else "No"
    print_summary_table(rows, title="Project Configuration")


def confirm_generation() -> bool:
    return confirm("Proceed with project generation?")
