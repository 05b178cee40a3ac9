"""Probe and materialize external resources.

    from devsetup.provision import ResourceMaterializer, ResourceProbe

    probe = ResourceProbe(host)
    materializer = ResourceMaterializer(host, probe, project_dir)
    materializer.ensure_directory(project_dir / "migrations")
"""

from .materializers import ResourceMaterializer
from .probes import ResourceProbe

__all__ = [
    "ResourceMaterializer",
    "ResourceProbe",
]
