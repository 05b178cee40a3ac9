"""devsetup configuration.

Centralised, typed configuration for a setup run. All settings use Pydantic v2
models so they are validated at construction time. A single ``Config`` is
built by the CLI entry point and passed explicitly into every step; nothing
here is module-level mutable state.
"""

from __future__ import annotations

import getpass
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Operator-supplied values
# ---------------------------------------------------------------------------

# field -> (prompt label, environment variable)
VALUE_PROMPTS: dict[str, tuple[str, str]] = {
    "db_host": ("Database host", "DEVSETUP_DB_HOST"),
    "db_port": ("Database port", "DEVSETUP_DB_PORT"),
    "db_name": ("Database name", "DEVSETUP_DB_NAME"),
    "db_user": ("Database user", "DEVSETUP_DB_USER"),
    "db_password": ("Database password (leave blank for none)", "DEVSETUP_DB_PASSWORD"),
    "api_url": ("API URL", "DEVSETUP_API_URL"),
    "project_name": ("Project name", "DEVSETUP_PROJECT_NAME"),
    "license_choice": ("Choose license (MIT/Apache-2.0/none)", "DEVSETUP_LICENSE"),
}

SECRET_FIELDS = frozenset({"db_password"})


def default_db_user() -> str:
    """Return the login name used as the default database role."""
    return os.environ.get("USER") or getpass.getuser()


def value_default(field: str) -> str:
    """Return the fixed default for a ``ProjectValues`` field."""
    if field == "db_user":
        return default_db_user()
    return _STATIC_DEFAULTS[field]


_STATIC_DEFAULTS: dict[str, str] = {
    "db_host": "localhost",
    "db_port": "5432",
    "db_name": "lovable_dev",
    "db_password": "",
    "api_url": "http://localhost:3001",
    "project_name": "lovable-local-project",
    "license_choice": "MIT",
}


class ProjectValues(BaseModel):
    """Values the operator supplies for the generated project.

    Every field starts as ``None`` and is filled the first time a step needs
    it (see ``Prompter.fill``). Values are kept as plain strings so they are
    written to generated files exactly as typed.
    """

    db_host: str | None = None
    db_port: str | None = None
    db_name: str | None = None
    db_user: str | None = None
    db_password: str | None = None
    api_url: str | None = None
    project_name: str | None = None
    license_choice: str | None = None

    def is_set(self, field: str) -> bool:
        return getattr(self, field) is not None

    def get_or_default(self, field: str) -> str:
        """Return the field's value, or its default when not yet supplied.

        Never prompts and never stores the default.
        """
        value = getattr(self, field)
        return value if value is not None else value_default(field)

    def as_dict(self) -> dict[str, str]:
        """Return every field with defaults applied for unset values."""
        return {name: self.get_or_default(name) for name in VALUE_PROMPTS}


# ---------------------------------------------------------------------------
# Toolchain settings
# ---------------------------------------------------------------------------


class ToolchainConfig(BaseModel):
    """Tuning knobs for the external tools the setup drives."""

    package_manager: str = Field(default="brew")
    installer_url: str = Field(
        default="https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"
    )
    database_formula: str = Field(default="postgresql@15")
    database_binaries: list[str] = Field(default=["postgres", "psql"])
    required_tools: list[str] = Field(default=["node", "bun", "git"])
    # formula -> executable that proves it is installed
    optional_tools: dict[str, str] = Field(
        default={"jq": "jq", "tree": "tree", "fzf": "fzf", "ripgrep": "rg"}
    )
    max_attempts: int = Field(default=3, ge=1, description="Attempts per step before skip/exit")
    service_settle_seconds: float = Field(
        default=3.0, ge=0, description="Wait after starting the database service"
    )
    command_timeout: int = Field(default=900, ge=10, description="Per-command timeout in seconds")


# ---------------------------------------------------------------------------
# Top-level configuration
# ---------------------------------------------------------------------------


class Config(BaseModel):
    """Configuration for one devsetup run."""

    project_dir: Path = Field(default=Path("."))
    values: ProjectValues = Field(default_factory=ProjectValues)
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    verbose: bool = Field(default=False)

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def env_file_path(self) -> Path:
        return self.project_dir / ".env.local"

    @property
    def migrations_dir(self) -> Path:
        return self.project_dir / "migrations"

    @property
    def initial_migration_path(self) -> Path:
        return self.migrations_dir / "001_initial_schema.sql"

    @property
    def migration_script_path(self) -> Path:
        return self.project_dir / "scripts" / "migrate.js"

    @property
    def manifest_path(self) -> Path:
        """Path to the generated project's ``package.json``."""
        return self.project_dir / "package.json"

    @property
    def vscode_dir(self) -> Path:
        return self.project_dir / ".vscode"

    @property
    def readme_path(self) -> Path:
        return self.project_dir / "README.md"

    @property
    def license_path(self) -> Path:
        return self.project_dir / "LICENSE"

    @property
    def contributing_path(self) -> Path:
        return self.project_dir / "CONTRIBUTING.md"

    @property
    def database_client_path(self) -> Path:
        return self.project_dir / "src" / "integrations" / "database" / "client.ts"

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls, project_dir: Path | None = None) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            DEVSETUP_PROJECT_DIR, DEVSETUP_DB_HOST, DEVSETUP_DB_PORT,
            DEVSETUP_DB_NAME, DEVSETUP_DB_USER, DEVSETUP_DB_PASSWORD,
            DEVSETUP_API_URL, DEVSETUP_PROJECT_NAME, DEVSETUP_LICENSE,
            DEVSETUP_PACKAGE_MANAGER, DEVSETUP_DATABASE_FORMULA,
            DEVSETUP_MAX_ATTEMPTS, DEVSETUP_SETTLE_SECONDS.

        A value supplied here is treated as already answered and is never
        prompted for.
        """
        value_kwargs: dict[str, Any] = {}
        for field, (_, env_var) in VALUE_PROMPTS.items():
            if env_var in os.environ:
                value_kwargs[field] = os.environ[env_var]

        toolchain_kwargs: dict[str, Any] = {}
        if os.environ.get("DEVSETUP_PACKAGE_MANAGER"):
            toolchain_kwargs["package_manager"] = os.environ["DEVSETUP_PACKAGE_MANAGER"]
        if os.environ.get("DEVSETUP_DATABASE_FORMULA"):
            toolchain_kwargs["database_formula"] = os.environ["DEVSETUP_DATABASE_FORMULA"]
        if os.environ.get("DEVSETUP_MAX_ATTEMPTS"):
            toolchain_kwargs["max_attempts"] = int(os.environ["DEVSETUP_MAX_ATTEMPTS"])
        if os.environ.get("DEVSETUP_SETTLE_SECONDS"):
            toolchain_kwargs["service_settle_seconds"] = float(
                os.environ["DEVSETUP_SETTLE_SECONDS"]
            )

        if project_dir is None:
            project_dir = Path(os.environ.get("DEVSETUP_PROJECT_DIR", "."))

        return cls(
            project_dir=project_dir,
            values=ProjectValues(**value_kwargs),
            toolchain=ToolchainConfig(**toolchain_kwargs),
        )
