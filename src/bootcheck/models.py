"""
Data model shared by the provisioning and quality pipelines.

A Step wraps a side-effecting action that reports an Outcome. Steps hold
no state between runs: each action re-checks its own preconditions, and
whatever it leaves on the filesystem is what makes the next run a no-op.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple

__all__ = [
    "SUCCESS",
    "FAILURE",
    "OutcomeStatus",
    "Outcome",
    "Step",
    "StepRecord",
    "PipelineResult",
    "RunConfig",
]

# Exit codes
SUCCESS = 0
FAILURE = 1


class OutcomeStatus(str, Enum):
    """Status values for a step outcome."""
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class Outcome:
    """Result of running one step action.

    ``warnings`` and ``hints`` are extra lines shown after the status line,
    e.g. "Please edit .env" or the commands to run next.
    """

    status: OutcomeStatus
    message: str
    warnings: Tuple[str, ...] = ()
    hints: Tuple[str, ...] = ()
    exit_code: int = SUCCESS

    @classmethod
    def success(cls, message: str, warnings: Tuple[str, ...] = (), hints: Tuple[str, ...] = ()) -> "Outcome":
        return cls(OutcomeStatus.SUCCESS, message, tuple(warnings), tuple(hints))

    @classmethod
    def skipped(cls, reason: str, warnings: Tuple[str, ...] = (), hints: Tuple[str, ...] = ()) -> "Outcome":
        return cls(OutcomeStatus.SKIPPED, reason, tuple(warnings), tuple(hints))

    @classmethod
    def failed(cls, message: str, exit_code: int = FAILURE, hints: Tuple[str, ...] = ()) -> "Outcome":
        return cls(OutcomeStatus.FAILED, message, hints=tuple(hints), exit_code=exit_code or FAILURE)

    @property
    def ok(self) -> bool:
        return self.status != OutcomeStatus.FAILED


@dataclass(frozen=True)
class Step:
    """A named unit of pipeline work.

    Attributes:
        name: Identifier used in results and logs
        action: Callable performing the work; returns an Outcome or raises
            StepFailedError
        halts_pipeline_on_failure: Stop the pipeline as soon as this step fails
        title: Optional section heading printed before the step runs
    """

    name: str
    action: Callable[[], Outcome]
    halts_pipeline_on_failure: bool = True
    title: Optional[str] = None


@dataclass(frozen=True)
class StepRecord:
    """A step name paired with its outcome."""
    name: str
    outcome: Outcome
    duration_seconds: float = 0.0


@dataclass
class PipelineResult:
    """Ordered outcomes of one pipeline run."""

    pipeline: str
    records: List[StepRecord] = field(default_factory=list)
    halted_at: Optional[str] = None

    @property
    def ok(self) -> bool:
        """Aggregate status: False if any step failed."""
        return all(r.outcome.ok for r in self.records)

    @property
    def aborted(self) -> bool:
        return self.halted_at is not None

    @property
    def failed_steps(self) -> List[str]:
        return [r.name for r in self.records if not r.outcome.ok]

    @property
    def step_names(self) -> List[str]:
        return [r.name for r in self.records]

    @property
    def exit_code(self) -> int:
        """Exit status of the first failure, or SUCCESS."""
        for record in self.records:
            if not record.outcome.ok:
                return record.outcome.exit_code
        return SUCCESS

    def outcome_of(self, name: str) -> Optional[Outcome]:
        for record in self.records:
            if record.name == name:
                return record.outcome
        return None


@dataclass(frozen=True)
class RunConfig:
    """Per-invocation options supplied on the command line."""
    follow_logs: bool = False
