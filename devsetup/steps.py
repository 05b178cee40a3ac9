"""Steps and the retry/skip/exit controller.

A ``Step`` is a named, idempotent action. ``StepController.run`` executes it
up to ``max_attempts`` times, asking the operator after each failure whether
to retry, skip or exit.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .exceptions import SetupAborted, StepFailure
from .prompts import Prompter, RetryChoice
from .utils import print_error, print_step, print_success, print_warning


class StepId(str, Enum):
    """Stable identifiers for every setup step, in execution order."""

    PACKAGE_MANAGER = "package-manager"
    TOOLS = "tools"
    DATABASE_SERVICE = "database-service"
    DATABASE = "database"
    ENV_FILE = "env-file"
    DIRECTORIES = "directories"
    MIGRATION_SCRIPT = "migration-script"
    INITIAL_MIGRATION = "initial-migration"
    EDITOR_SETTINGS = "editor-settings"
    README = "readme"
    LICENSE = "license"
    CONTRIBUTING = "contributing"
    DEPENDENCIES = "dependencies"
    PACKAGE_SCRIPTS = "package-scripts"
    MIGRATIONS = "migrations"
    DATABASE_CLIENT = "database-client"


class StepOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    ABORTED = "aborted"


@dataclass(frozen=True)
class Step:
    """One unit of provisioning.

    ``action`` returns on success and raises ``StepFailure`` on failure.
    """

    id: StepId
    name: str
    action: Callable[[], None]


class StepController:
    """Runs a step with bounded retries.

    After a failed attempt with attempts remaining the operator may retry,
    skip or exit; an unrecognised answer counts as a retry and uses up an
    attempt. After the last attempt only skip or exit are offered.
    """

    def __init__(self, prompter: Prompter, max_attempts: int = 3) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.prompter = prompter
        self.max_attempts = max_attempts

    def run(self, step: Step) -> StepOutcome:
        """Execute *step* and return how it ended.

        Raises:
            SetupAborted: The operator chose exit.
        """
        for attempt in range(1, self.max_attempts + 1):
            print_step(f"{step.name} (Attempt {attempt}/{self.max_attempts})")
            try:
                step.action()
            except StepFailure as exc:
                print_error(f"{step.name} failed: {exc}")
            else:
                print_success(f"{step.name} completed successfully")
                return StepOutcome.SUCCEEDED

            if attempt < self.max_attempts:
                choice = self.prompter.retry_choice()
                if choice is RetryChoice.INVALID:
                    print_warning("Invalid choice, retrying")
            else:
                choice = self.prompter.skip_or_exit()

            if choice is RetryChoice.SKIP:
                print_warning(f"Skipping {step.name}")
                return StepOutcome.SKIPPED
            if choice is RetryChoice.EXIT:
                print_error("Exiting setup")
                raise SetupAborted(step.name)

        # skip_or_exit only ever returns SKIP or EXIT
        raise AssertionError("unreachable")
