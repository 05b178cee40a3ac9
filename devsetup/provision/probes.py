"""Read-only existence checks.

Probes never change anything and never raise for "absent": they return
``False`` so the caller can decide whether to materialize the resource.
"""

from __future__ import annotations

import json
from pathlib import Path

from ..host import HostSystem


class ResourceProbe:
    """Answers "does this already exist?" for every resource kind."""

    def __init__(self, host: HostSystem, package_manager: str = "brew") -> None:
        self.host = host
        self.package_manager = package_manager

    # -- Tools -------------------------------------------------------------

    def tool_available(self, *binaries: str) -> bool:
        """Return ``True`` if any of *binaries* resolves on ``PATH``."""
        return any(self.host.which(name) for name in binaries)

    # -- Services ----------------------------------------------------------

    def service_running(self, service: str) -> bool:
        """Query the service manager's structured status for *service*.

        Uses ``<package_manager> services info <service> --json``, which
        returns a list of objects carrying ``running`` and ``status``. An
        unreadable answer counts as not running.
        """
        result = self.host.run(
            [self.package_manager, "services", "info", service, "--json"]
        )
        if not result.ok:
            return False
        try:
            entries = json.loads(result.stdout or "[]")
        except json.JSONDecodeError:
            return False
        if isinstance(entries, dict):
            entries = [entries]
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            if entry.get("running") is True or entry.get("status") == "started":
                return True
        return False

    # -- Databases ---------------------------------------------------------

    def database_exists(self, name: str) -> bool:
        """Look *name* up in the ``pg_database`` catalog."""
        literal = name.replace("'", "''")
        result = self.host.run(
            [
                "psql",
                "--dbname",
                "postgres",
                "--tuples-only",
                "--no-align",
                "--command",
                f"SELECT 1 FROM pg_database WHERE datname = '{literal}'",
            ]
        )
        return result.ok and result.stdout.strip() == "1"

    # -- Paths -------------------------------------------------------------

    @staticmethod
    def file_exists(path: Path) -> bool:
        return Path(path).is_file()

    @staticmethod
    def dir_exists(path: Path) -> bool:
        return Path(path).is_dir()
