"""Content for every file the setup generates.

``ProjectFiles`` turns ``ProjectValues`` into the text of each boilerplate
file. It never touches the disk and never prompts: steps fill the values
they need first, then hand the rendered text to the materializer.
"""

from __future__ import annotations

import json
import shlex
from datetime import datetime, timezone
from typing import Any

from ..config import ProjectValues
from .templates import TemplateRenderer, slugify

# ---------------------------------------------------------------------------
# Licenses
# ---------------------------------------------------------------------------

LICENSE_TEMPLATES: dict[str, str | None] = {
    "MIT": "LICENSE-MIT.j2",
    "Apache-2.0": "LICENSE-Apache-2.0.j2",
    "none": None,
}

_LICENSE_ALIASES: dict[str, str] = {
    "mit": "MIT",
    "apache": "Apache-2.0",
    "apache-2.0": "Apache-2.0",
    "apache2": "Apache-2.0",
    "none": "none",
    "no": "none",
}

DEFAULT_COPYRIGHT_HOLDER = "Lovable Local Contributors"


def normalize_license(choice: str) -> str:
    """Map an operator answer to a key of ``LICENSE_TEMPLATES``.

    Raises:
        ValueError: The answer names no supported license.
    """
    key = _LICENSE_ALIASES.get(choice.strip().lower())
    if key is None:
        raise ValueError(
            f"Unknown license '{choice}' (choose {', '.join(LICENSE_TEMPLATES)})"
        )
    return key


# ---------------------------------------------------------------------------
# package.json
# ---------------------------------------------------------------------------


def required_scripts(db_name: str) -> dict[str, str]:
    """The npm scripts every generated manifest must define."""
    database = shlex.quote(db_name)
    return {
        "dev": "vite",
        "build": "tsc && vite build",
        "preview": "vite preview",
        "db:migrate": "node scripts/migrate.js",
        "db:reset": f"dropdb {database} && createdb {database} && npm run db:migrate",
    }


_DEPENDENCIES: dict[str, str] = {
    "react": "^18.2.0",
    "react-dom": "^18.2.0",
    "pg": "^8.11.3",
}

_DEV_DEPENDENCIES: dict[str, str] = {
    "@types/react": "^18.2.66",
    "@types/react-dom": "^18.2.22",
    "@types/pg": "^8.10.9",
    "@vitejs/plugin-react-swc": "^3.5.0",
    "typescript": "^5.2.2",
    "vite": "^5.2.0",
}


# ---------------------------------------------------------------------------
# ProjectFiles
# ---------------------------------------------------------------------------


class ProjectFiles:
    """Renders the generated project's boilerplate."""

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    def build_context(self, values: ProjectValues) -> dict[str, Any]:
        """Template context: every value, with defaults for unset ones."""
        return {
            **values.as_dict(),
            "year": datetime.now(timezone.utc).year,
            "copyright_holder": DEFAULT_COPYRIGHT_HOLDER,
        }

    def _render(self, template: str, values: ProjectValues) -> str:
        return self.renderer.render(template, self.build_context(values))

    # -- Individual files --------------------------------------------------

    def env_file(self, values: ProjectValues) -> str:
        return self._render("env.local.j2", values)

    def migration_script(self, values: ProjectValues) -> str:
        return self._render("migrate.js.j2", values)

    def initial_migration(self, values: ProjectValues) -> str:
        return self._render("001_initial_schema.sql.j2", values)

    def database_client(self, values: ProjectValues) -> str:
        return self._render("client.ts.j2", values)

    def editor_settings(self, values: ProjectValues) -> dict[str, str]:
        """Return ``{filename: content}`` for the ``.vscode`` directory."""
        return {
            "settings.json": self._render("vscode/settings.json.j2", values),
            "extensions.json": self._render("vscode/extensions.json.j2", values),
        }

    def readme(self, values: ProjectValues) -> str:
        return self._render("README.md.j2", values)

    def contributing(self, values: ProjectValues) -> str:
        return self._render("CONTRIBUTING.md.j2", values)

    def license(self, values: ProjectValues, choice: str) -> str | None:
        """Render the license text for *choice*, or ``None`` for ``"none"``."""
        template = LICENSE_TEMPLATES[normalize_license(choice)]
        if template is None:
            return None
        return self._render(template, values)

    def package_manifest(self, values: ProjectValues) -> str:
        """Render ``package.json`` for a Vite + React + pg project."""
        manifest = {
            "name": slugify(values.get_or_default("project_name")),
            "private": True,
            "version": "0.1.0",
            "type": "module",
            "scripts": required_scripts(values.get_or_default("db_name")),
            "dependencies": dict(_DEPENDENCIES),
            "devDependencies": dict(_DEV_DEPENDENCIES),
        }
        return json.dumps(manifest, indent=2) + "\n"
