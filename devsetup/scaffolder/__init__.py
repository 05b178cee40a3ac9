"""devsetup scaffolder -- renders the generated project's boilerplate files.

Quick usage::

    from devsetup.scaffolder import ProjectFiles
    from devsetup.config import ProjectValues

    files = ProjectFiles()
    text = files.env_file(ProjectValues(db_name="mydb"))
"""

from .generator import (
    LICENSE_TEMPLATES,
    ProjectFiles,
    normalize_license,
    required_scripts,
)
from .templates import TemplateRenderer

__all__ = [
    "LICENSE_TEMPLATES",
    "ProjectFiles",
    "TemplateRenderer",
    "normalize_license",
    "required_scripts",
]
