"""Jinja2 template rendering for the generated project files.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``devsetup/scaffolder/templates/`` directory and renders them with values
collected from the operator. Writing the result is left to the
materializer, which only writes files that do not exist yet.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for project scaffolding.

    Templates are plain ``.j2`` files. Missing context variables raise
    instead of rendering as empty strings, so a blank value in a generated
    file is always one the operator chose.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([], default_for_string=False),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self.env.filters["slugify"] = slugify
        self.env.filters["title_case"] = _title_case_filter

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"vscode/settings.json.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------


def slugify(value: str) -> str:
    """Convert a string to an npm-package-safe slug."""
    slug = re.sub(r"[^a-z0-9._-]+", "-", value.lower().strip())
    return slug.strip("-._") or "app"


def _title_case_filter(value: str) -> str:
    """Convert ``my-cool_app`` to ``My Cool App``."""
    parts = re.split(r"[-_\s]+", value)
    return " ".join(word.capitalize() for word in parts if word)
