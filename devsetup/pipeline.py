"""devsetup orchestrator.

Runs the setup steps either all in order or one at a time from an
interactive menu, then optionally starts the generated project's
development server.

Usage::

    devsetup                      # interactive menu
    devsetup --all                # every step, in order
    devsetup --serve              # start the dev server only
    python -m devsetup --project-dir ./my-app
"""

from __future__ import annotations

import sys
import time
from functools import partial
from pathlib import Path

from .config import Config
from .environment import DevEnvironment
from .exceptions import OperatorDeclined, PrerequisiteMissing, SetupAborted
from .host import HostSystem
from .prompts import MenuEntry, Prompter
from .steps import Step, StepController, StepId, StepOutcome
from .utils import (
    console,
    format_duration,
    print_banner,
    print_error,
    print_header,
    print_info,
    print_success,
    print_summary_table,
    print_warning,
)

BANNER_TITLE = "LOVABLE LOCAL DEVELOPMENT ENVIRONMENT"
BANNER_SUBTITLE = (
    "Create portable, local dev setups for modern\n"
    "React/TypeScript projects with PostgreSQL"
)

_OUTCOME_STYLES: dict[StepOutcome, str] = {
    StepOutcome.SUCCEEDED: "[green]succeeded[/green]",
    StepOutcome.SKIPPED: "[yellow]skipped[/yellow]",
    StepOutcome.ABORTED: "[red]aborted[/red]",
}


class SetupPipeline:
    """Sequences setup steps through the retry controller.

    Attributes:
        environment: The steps and the dev-server launcher.
        controller: Retry/skip/exit wrapper applied to every step.
        prompter: Operator input for the menu and follow-up questions.
        outcomes: Latest outcome per step in this session.
    """

    def __init__(
        self,
        environment: DevEnvironment,
        controller: StepController,
        prompter: Prompter,
    ) -> None:
        self.environment = environment
        self.controller = controller
        self.prompter = prompter
        self.steps: dict[StepId, Step] = {step.id: step for step in environment.steps()}
        self.outcomes: dict[StepId, StepOutcome] = {}

    # ------------------------------------------------------------------
    # Step execution
    # ------------------------------------------------------------------

    def run_step(self, step_id: StepId) -> StepOutcome:
        """Run a single step on demand.

        Raises:
            SetupAborted: The operator chose exit at a retry prompt.
            OperatorDeclined: A hard prerequisite was refused.
        """
        step = self.steps[step_id]
        try:
            outcome = self.controller.run(step)
        except SetupAborted:
            self.outcomes[step_id] = StepOutcome.ABORTED
            raise
        self.outcomes[step_id] = outcome
        return outcome

    def run_all(self, offer_server: bool = True) -> dict[StepId, StepOutcome]:
        """Run every step in order.

        A skipped step does not stop the run; later steps are independently
        idempotent. An abort stops immediately after printing the summary.

        Returns:
            Outcome per step, in execution order.
        """
        print_header("RUNNING COMPLETE SETUP")
        started = time.monotonic()
        results: dict[StepId, StepOutcome] = {}

        for step_id in self.steps:
            try:
                results[step_id] = self.run_step(step_id)
            except SetupAborted:
                results[step_id] = StepOutcome.ABORTED
                self._print_summary(results, time.monotonic() - started)
                raise

        self._print_summary(results, time.monotonic() - started)
        skipped = [self.steps[s].name for s, o in results.items() if o is StepOutcome.SKIPPED]
        if skipped:
            print_warning(f"Setup finished with {len(skipped)} skipped step(s): {', '.join(skipped)}")
        else:
            print_success("Complete setup finished!")

        if offer_server and self.prompter.confirm("Start the development server now?"):
            try:
                self.start_dev_server()
            except PrerequisiteMissing as exc:
                print_error(str(exc))
        return results

    def start_dev_server(self) -> int:
        """Launch the dev server; only possible once ``package.json`` exists.

        Raises:
            PrerequisiteMissing: No manifest or no package manager.
        """
        print_header("STARTING DEVELOPMENT SERVER")
        return self.environment.launch_dev_server()

    # ------------------------------------------------------------------
    # Interactive menu
    # ------------------------------------------------------------------

    def menu_entries(self) -> list[MenuEntry]:
        """Steps, then Run All, Start Dev Server and Exit."""
        entries = [
            MenuEntry(step.name, partial(self.run_step, step_id))
            for step_id, step in self.steps.items()
        ]
        entries.append(MenuEntry("Run All Steps", self.run_all))
        entries.append(MenuEntry("Start Dev Server", self._menu_dev_server))
        entries.append(MenuEntry("Exit", _goodbye))
        return entries

    def run_menu(self) -> int:
        """Present the menu until the operator picks Exit.

        Returns:
            Process exit status (0).
        """
        entries = self.menu_entries()
        exit_entry = entries[-1]
        while True:
            entry = self.prompter.select("Lovable Local Setup Menu", entries)
            entry.handler()
            if entry is exit_entry:
                break

        _print_outro(self.environment.config.toolchain.database_formula)
        return 0

    def _menu_dev_server(self) -> None:
        try:
            self.start_dev_server()
        except PrerequisiteMissing as exc:
            print_error(str(exc))

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _print_summary(self, results: dict[StepId, StepOutcome], elapsed: float) -> None:
        rows = {self.steps[step_id].name: _OUTCOME_STYLES[outcome] for step_id, outcome in results.items()}
        print_summary_table(rows, title=f"Setup Summary ({format_duration(elapsed)})")


def _goodbye() -> None:
    print_info("Goodbye!")


def _print_outro(database_formula: str) -> None:
    console.print()
    print_success("Setup complete!")
    console.print()
    print_info("Useful commands:")
    console.print("  • npm run dev - Start development server")
    console.print("  • npm run db:migrate - Run database migrations")
    console.print("  • npm run db:reset - Reset database")
    console.print(f"  • brew services stop {database_formula} - Stop PostgreSQL")
    console.print()


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def build_pipeline(config: Config, host: HostSystem, prompter: Prompter) -> SetupPipeline:
    """Assemble the environment, controller and orchestrator for *config*."""
    environment = DevEnvironment(config, host, prompter)
    controller = StepController(prompter, max_attempts=config.toolchain.max_attempts)
    return SetupPipeline(environment, controller, prompter)


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``devsetup`` and ``python -m devsetup``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="devsetup",
        description="Interactive local development environment setup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  devsetup\n"
            "  devsetup --all\n"
            "  devsetup --project-dir ./my-app --serve\n"
        ),
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--all",
        action="store_true",
        help="Run every setup step in order instead of showing the menu",
    )
    mode.add_argument(
        "--serve",
        action="store_true",
        help="Start the development server of an already generated project",
    )
    parser.add_argument(
        "--project-dir",
        default=None,
        help="Directory to set up (default: current directory)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Echo every external command before running it",
    )

    args = parser.parse_args(argv)

    config = Config.from_env(
        project_dir=Path(args.project_dir) if args.project_dir else None
    )
    config.verbose = args.verbose
    if not config.project_dir.is_dir():
        print_error(f"Project directory not found: {config.project_dir}")
        sys.exit(1)

    host = HostSystem(
        config.project_dir,
        timeout=config.toolchain.command_timeout,
        verbose=config.verbose,
    )
    prompter = Prompter()
    pipeline = build_pipeline(config, host, prompter)

    print_banner(BANNER_TITLE, BANNER_SUBTITLE)

    try:
        if args.serve:
            status = pipeline.start_dev_server()
        elif args.all:
            pipeline.run_all()
            status = 0
        else:
            status = pipeline.run_menu()
    except (SetupAborted, OperatorDeclined, PrerequisiteMissing) as exc:
        print_error(str(exc))
        sys.exit(1)
    except (KeyboardInterrupt, EOFError):
        console.print()
        print_warning("Interrupted")
        sys.exit(130)

    if status:
        sys.exit(status)


if __name__ == "__main__":
    main()
