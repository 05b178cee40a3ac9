"""The boundary between devsetup and the workstation.

Every external effect that is not a plain file write goes through
``HostSystem``: resolving executables, running commands, sleeping and
downloading. Probes and materializers depend on this class only, so tests
substitute a fake that records calls instead of invoking real package
managers or databases.
"""

from __future__ import annotations

import shutil
import time
from dataclasses import dataclass
from pathlib import Path

import httpx

from .utils import print_command, run_command


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def error_text(self) -> str:
        """Best available description of a failure."""
        return self.stderr or self.stdout or f"exit status {self.returncode}"


class HostSystem:
    """Runs commands on the local machine.

    Args:
        cwd: Working directory for every command (the project directory).
        timeout: Default per-command timeout in seconds.
        verbose: Echo each command before running it.
    """

    def __init__(self, cwd: Path, timeout: int = 900, verbose: bool = False) -> None:
        self.cwd = Path(cwd)
        self.timeout = timeout
        self.verbose = verbose

    def which(self, name: str) -> str | None:
        """Return the resolved path of *name* on ``PATH``, or ``None``."""
        return shutil.which(name)

    def run(
        self,
        cmd: list[str],
        *,
        capture: bool = True,
        env: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        if self.verbose:
            print_command(cmd)
        returncode, stdout, stderr = run_command(
            cmd,
            cwd=self.cwd,
            timeout=timeout or self.timeout,
            capture=capture,
            env=env,
        )
        return CommandResult(returncode, stdout, stderr)

    def run_foreground(self, cmd: list[str], env: dict[str, str] | None = None) -> CommandResult:
        """Run a long-lived command attached to the terminal, with no timeout."""
        if self.verbose:
            print_command(cmd)
        returncode, _, _ = run_command(cmd, cwd=self.cwd, timeout=None, capture=False, env=env)
        return CommandResult(returncode)

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)

    def fetch_text(self, url: str, timeout: float = 30.0) -> str:
        """Download *url* and return the body as text.

        Raises:
            httpx.HTTPError: On connection failure or a non-2xx response.
        """
        response = httpx.get(url, follow_redirects=True, timeout=timeout)
        response.raise_for_status()
        return response.text
