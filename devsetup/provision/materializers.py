"""Idempotent resource creation.

Each ``ensure_*`` method follows the same shape: probe, then create the
resource only when the probe reports it absent, then report. They return
``True`` when something was created and ``False`` when it already existed,
and raise ``MaterializeFailure`` when the external command or file write
fails.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import httpx

from ..exceptions import MaterializeFailure, OperatorDeclined
from ..host import HostSystem
from ..utils import (
    create_progress,
    display_path,
    ensure_dir,
    print_info,
    print_success,
    print_warning,
)
from .probes import ResourceProbe


class ResourceMaterializer:
    """Brings external resources into existence.

    Args:
        host: Command/network boundary.
        probe: Existence checks used before every action.
        root: Project directory, used only to shorten paths in status lines.
        package_manager: Executable used to install tools and run services.
        installer_url: Bootstrap script for the package manager itself.
        settle_seconds: Delay after starting a service, since its readiness
            cannot be observed directly.
    """

    def __init__(
        self,
        host: HostSystem,
        probe: ResourceProbe,
        root: Path,
        *,
        package_manager: str = "brew",
        installer_url: str = "",
        settle_seconds: float = 3.0,
    ) -> None:
        self.host = host
        self.probe = probe
        self.root = Path(root)
        self.package_manager = package_manager
        self.installer_url = installer_url
        self.settle_seconds = settle_seconds

    # -- Package manager ---------------------------------------------------

    def ensure_package_manager(self, confirm: Callable[[], bool]) -> bool:
        """Install the package manager after the operator agrees.

        Raises:
            OperatorDeclined: The operator refused; nothing later can succeed.
            MaterializeFailure: Download or installer failed.
        """
        if self.probe.tool_available(self.package_manager):
            print_success(f"{self.package_manager} is installed")
            return False

        print_warning(f"{self.package_manager} not found")
        if not confirm():
            raise OperatorDeclined(f"{self.package_manager} is required for this setup")

        try:
            script = self.host.fetch_text(self.installer_url)
        except httpx.HTTPError as exc:
            raise MaterializeFailure(self.package_manager, f"download failed: {exc}") from exc

        print_info(f"Installing {self.package_manager}...")
        # The installer asks for confirmation and a sudo password itself.
        result = self.host.run(["/bin/bash", "-c", script], capture=False)
        if not result.ok:
            raise MaterializeFailure(self.package_manager, result.error_text)
        print_success(f"{self.package_manager} installed successfully")
        return True

    # -- Tools -------------------------------------------------------------

    def ensure_tool(self, formula: str, binaries: list[str] | None = None) -> bool:
        """Install *formula* unless one of *binaries* is already on ``PATH``."""
        binaries = binaries or [formula]
        if self.probe.tool_available(*binaries):
            print_success(f"{formula} already installed")
            return False

        with create_progress() as progress:
            progress.add_task(f"Installing {formula}...", total=None)
            result = self.host.run([self.package_manager, "install", formula])
        if not result.ok:
            raise MaterializeFailure(formula, result.error_text)
        print_success(f"{formula} installed")
        return True

    # -- Services ----------------------------------------------------------

    def ensure_service(self, service: str) -> bool:
        if self.probe.service_running(service):
            print_success(f"{service} already running")
            return False

        print_info(f"Starting {service} service...")
        result = self.host.run([self.package_manager, "services", "start", service])
        if not result.ok:
            raise MaterializeFailure(f"{service} service", result.error_text)
        self.host.sleep(self.settle_seconds)
        print_success(f"{service} service started")
        return True

    # -- Databases ---------------------------------------------------------

    def ensure_database(self, name: str) -> bool:
        if self.probe.database_exists(name):
            print_success(f"Database '{name}' already exists")
            return False

        print_info(f"Creating database '{name}'...")
        result = self.host.run(["createdb", name])
        if not result.ok:
            raise MaterializeFailure(f"database '{name}'", result.error_text)
        print_success(f"Database '{name}' created")
        return True

    # -- Files and directories ---------------------------------------------

    def ensure_file(self, path: Path, content: str) -> bool:
        """Write *content* to *path* unless the file already exists."""
        label = display_path(path, self.root)
        if self.probe.file_exists(path):
            print_success(f"{label} already exists")
            return False

        try:
            ensure_dir(path.parent)
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise MaterializeFailure(label, str(exc)) from exc
        print_success(f"Created {label}")
        return True

    def ensure_directory(self, path: Path) -> bool:
        label = display_path(path, self.root)
        if self.probe.dir_exists(path):
            print_success(f"Directory exists: {label}")
            return False

        try:
            ensure_dir(path)
        except OSError as exc:
            raise MaterializeFailure(f"directory {label}", str(exc)) from exc
        print_success(f"Created directory: {label}")
        return True
