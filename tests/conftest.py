"""Shared pytest fixtures for the devsetup test suite.

Provides reusable fixtures for:
- Temporary project directories and configurations
- A fake ``HostSystem`` that records commands instead of running them
- Prompters driven by a scripted answer stream
"""

from __future__ import annotations

import io
from collections.abc import Callable
from pathlib import Path
from typing import Union

import pytest
from rich.console import Console

from devsetup.config import Config, ToolchainConfig
from devsetup.host import CommandResult, HostSystem
from devsetup.prompts import Prompter

Response = Union[CommandResult, list[CommandResult], Callable[[list[str]], CommandResult]]


# ---------------------------------------------------------------------------
# Fake host
# ---------------------------------------------------------------------------


class FakeHost(HostSystem):
    """Records every external call and answers from canned responses.

    ``respond(("brew", "install"), ...)`` registers a response for every
    command starting with that prefix; the longest matching prefix wins. A
    list response is consumed one item per call (the last item repeats).
    Unmatched commands succeed with empty output.
    """

    def __init__(self, cwd: Path, tools: tuple[str, ...] = ()) -> None:
        super().__init__(cwd)
        self.tools: set[str] = set(tools)
        self.calls: list[list[str]] = []
        self.envs: list[dict[str, str] | None] = []
        self.foreground: list[list[str]] = []
        self.sleeps: list[float] = []
        self.fetched: list[str] = []
        self.fetch_body = "echo installing"
        self.fetch_error: Exception | None = None
        self._responses: dict[tuple[str, ...], Response] = {}

    # -- configuration -----------------------------------------------------

    def respond(self, prefix: tuple[str, ...], response: Response) -> None:
        self._responses[tuple(prefix)] = response

    def install_on_success(self, prefix: tuple[str, ...], tool: str) -> None:
        """Make a successful command matching *prefix* put *tool* on PATH."""

        def _install(cmd: list[str]) -> CommandResult:
            self.tools.add(tool)
            return CommandResult(0)

        self.respond(prefix, _install)

    def commands_starting(self, *prefix: str) -> list[list[str]]:
        return [c for c in self.calls if tuple(c[: len(prefix)]) == prefix]

    # -- HostSystem interface ----------------------------------------------

    def which(self, name: str) -> str | None:
        return f"/usr/local/bin/{name}" if name in self.tools else None

    def run(self, cmd, *, capture=True, env=None, timeout=None) -> CommandResult:
        self.calls.append(list(cmd))
        self.envs.append(env)
        return self._answer(list(cmd))

    def run_foreground(self, cmd, env=None) -> CommandResult:
        self.foreground.append(list(cmd))
        self.envs.append(env)
        return self._answer(list(cmd))

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)

    def fetch_text(self, url: str, timeout: float = 30.0) -> str:
        self.fetched.append(url)
        if self.fetch_error is not None:
            raise self.fetch_error
        return self.fetch_body

    def _answer(self, cmd: list[str]) -> CommandResult:
        best: tuple[str, ...] | None = None
        for prefix in self._responses:
            if tuple(cmd[: len(prefix)]) == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        if best is None:
            return CommandResult(0)

        response = self._responses[best]
        if isinstance(response, list):
            return response.pop(0) if len(response) > 1 else response[0]
        if callable(response):
            return response(cmd)
        return response


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


def scripted_prompter(*answers: str) -> Prompter:
    """A Prompter that reads *answers* one line at a time."""
    stream = io.StringIO("".join(f"{answer}\n" for answer in answers))
    return Prompter(console=Console(file=io.StringIO(), width=120), stream=stream)


# ---------------------------------------------------------------------------
# Paths & configuration
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def login_name(monkeypatch) -> str:
    """Pin the login name used as the default database user."""
    monkeypatch.setenv("USER", "tester")
    return "tester"


@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Temporary directory the setup writes into (auto-cleanup)."""
    project_dir = tmp_path / "test-project"
    project_dir.mkdir()
    yield project_dir


@pytest.fixture
def config(tmp_project_dir: Path) -> Config:
    """Config rooted at the temp project with no settle delay."""
    return Config(
        project_dir=tmp_project_dir,
        toolchain=ToolchainConfig(service_settle_seconds=0),
    )


@pytest.fixture
def fake_host(tmp_project_dir: Path) -> FakeHost:
    """Fake host where brew, node, npm, bun, git and psql are already installed."""
    return FakeHost(
        tmp_project_dir,
        tools=("brew", "node", "npm", "bun", "git", "psql", "postgres"),
    )


@pytest.fixture
def bare_host(tmp_project_dir: Path) -> FakeHost:
    """Fake host with nothing installed."""
    return FakeHost(tmp_project_dir)


@pytest.fixture
def make_prompter() -> Callable[..., Prompter]:
    """Factory for prompters fed from a list of scripted answers."""
    return scripted_prompter


@pytest.fixture
def make_host(tmp_project_dir: Path) -> Callable[..., FakeHost]:
    """Factory for fake hosts with a chosen set of installed tools."""

    def _make(*tools: str) -> FakeHost:
        return FakeHost(tmp_project_dir, tools=tools)

    return _make
