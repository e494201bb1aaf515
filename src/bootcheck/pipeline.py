"""
Step execution and the halt-or-accumulate pipeline driver.

A Pipeline runs its steps strictly in order. When a step whose
``halts_pipeline_on_failure`` flag is set fails, no later step runs.
Failures of other steps are recorded and the pipeline carries on; the
aggregate result is reported by ``PipelineResult.ok``.
"""

from __future__ import annotations

import logging
import time
from typing import List, Optional, Sequence

import httpx

from bootcheck import console
from bootcheck.errors import StepFailedError
from bootcheck.logger import StepLogger
from bootcheck.models import Outcome, OutcomeStatus, PipelineResult, Step, StepRecord

__all__ = ["StepExecutor", "Pipeline", "report_outcome"]

logger = logging.getLogger(__name__)


def report_outcome(outcome: Outcome) -> None:
    """Print the status line for an outcome followed by its warnings and hints."""
    if outcome.status == OutcomeStatus.FAILED:
        console.error(outcome.message)
    else:
        console.success(outcome.message)
    for text in outcome.warnings:
        console.warning(text)
    for text in outcome.hints:
        console.info(text)


class StepExecutor:
    """Run a single step and convert any failure into a Failed outcome.

    KeyboardInterrupt is not caught: it cancels the whole run.
    """

    def __init__(self, step_logger: Optional[StepLogger] = None) -> None:
        self.step_logger = step_logger

    def execute(self, step: Step) -> Outcome:
        if step.title:
            console.section(step.title)
        if self.step_logger:
            self.step_logger.log_step_started(step.name)

        start = time.monotonic()
        outcome = self._invoke(step)
        duration = time.monotonic() - start

        report_outcome(outcome)
        if self.step_logger:
            self.step_logger.log_step_finished(
                step.name,
                status=outcome.status.value,
                duration_seconds=duration,
                message=outcome.message,
            )
        return outcome

    def _invoke(self, step: Step) -> Outcome:
        try:
            outcome = step.action()
        except StepFailedError as exc:
            return Outcome.failed(exc.message, exit_code=exc.exit_code)
        except httpx.HTTPError as exc:
            return Outcome.failed(f"{step.name}: request failed: {exc}")
        except OSError as exc:
            return Outcome.failed(f"{step.name}: {exc}")
        except Exception as exc:
            logger.debug("Step %s raised", step.name, exc_info=True)
            return Outcome.failed(f"{step.name}: {type(exc).__name__}: {exc}")

        if not isinstance(outcome, Outcome):
            return Outcome.failed(f"{step.name}: action returned {type(outcome).__name__}, not an Outcome")
        return outcome


class Pipeline:
    """An ordered sequence of steps with a per-step failure policy."""

    def __init__(
        self,
        name: str,
        steps: Sequence[Step],
        executor: Optional[StepExecutor] = None,
        step_logger: Optional[StepLogger] = None,
    ) -> None:
        self.name = name
        self.steps: List[Step] = list(steps)
        self.step_logger = step_logger
        self.executor = executor or StepExecutor(step_logger)

    def run(self) -> PipelineResult:
        result = PipelineResult(pipeline=self.name)

        for step in self.steps:
            start = time.monotonic()
            outcome = self.executor.execute(step)
            result.records.append(
                StepRecord(name=step.name, outcome=outcome, duration_seconds=time.monotonic() - start)
            )

            if not outcome.ok and step.halts_pipeline_on_failure:
                result.halted_at = step.name
                logger.debug("Pipeline %s halted at %s", self.name, step.name)
                if self.step_logger:
                    self.step_logger.log_pipeline_aborted(step.name, outcome.message)
                return result

        if self.step_logger:
            self.step_logger.log_pipeline_completed(result.ok, result.failed_steps)
        return result
