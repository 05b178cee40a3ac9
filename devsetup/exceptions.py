"""Exception hierarchy for devsetup.

``StepFailure`` subclasses are recoverable: the step controller turns them
into a retry/skip/exit prompt. ``OperatorDeclined`` and ``SetupAborted`` end
the run.
"""

from __future__ import annotations


class SetupError(Exception):
    """Base class for every error raised by devsetup."""


class StepFailure(SetupError):
    """A step attempt failed and may be retried."""


class MaterializeFailure(StepFailure):
    """An external command exited non-zero or a file operation failed."""

    def __init__(self, resource: str, detail: str = "") -> None:
        self.resource = resource
        self.detail = detail.strip()
        super().__init__(f"{resource}: {self.detail}" if self.detail else resource)


class PrerequisiteMissing(StepFailure):
    """A file or tool the action depends on is absent."""


class OperatorDeclined(SetupError):
    """The operator refused a confirmation that the setup cannot proceed without."""


class SetupAborted(SetupError):
    """The operator chose to exit at a retry prompt."""

    def __init__(self, step_name: str) -> None:
        self.step_name = step_name
        super().__init__(f"Setup aborted during '{step_name}'")
