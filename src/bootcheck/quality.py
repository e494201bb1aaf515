"""
Quality pipeline: lint, format, sort imports and test.

Only the tool check aborts the run. Every other step runs regardless of
earlier failures, and the pipeline passes only if all of them pass.
The formatter and import sorter run in write mode and may modify files.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from bootcheck import console
from bootcheck.config import BootcheckConfig
from bootcheck.logger import StepLogger
from bootcheck.models import Outcome, Step
from bootcheck.pipeline import Pipeline
from bootcheck.probe import CommandRunner, ToolProbe, prepend_path

__all__ = ["QualityChecks", "build_quality_pipeline", "HEADER", "PASSED_BANNER", "FAILED_BANNER"]

logger = logging.getLogger(__name__)

HEADER = "🔍 Running Code Quality Checks"
PASSED_BANNER = "All quality checks passed! 🎉"
FAILED_BANNER = "Some quality checks failed. Please fix the issues above."


class QualityChecks:
    """Actions behind the quality pipeline's steps."""

    def __init__(
        self,
        config: BootcheckConfig,
        runner: Optional[CommandRunner] = None,
        probe: Optional[ToolProbe] = None,
    ) -> None:
        self.config = config
        self.runner = runner or CommandRunner(
            cwd=config.project_root, timeout=config.command_timeout_seconds
        )
        self.probe = probe or ToolProbe(self.runner)

    def check_tool(self) -> Outcome:
        pm = self.config.package_manager
        prepend_path(self.config.extra_bin_dirs)
        found = self.probe.probe(pm, self.config.package_manager_version_args)
        if not found.available:
            return Outcome.failed(f"{pm} is not installed. Please run `bootcheck setup` first")
        return Outcome.success(f"Using {found.version or pm}")

    def ensure_dependencies(self) -> Outcome:
        argv = [self.config.package_manager, *self.config.sync_args]
        if not self.runner.run(argv, capture=True).ok:
            # Re-run with output visible so the user sees what went wrong
            console.warning("Syncing dependencies...")
            self.runner.check(argv)
        return Outcome.success("Development dependencies are installed")

    def _run_check(self, command: Sequence[str], passed: str, failed: str) -> Outcome:
        argv = self.config.run_argv(list(command))
        result = self.runner.run(argv)
        if result.ok:
            return Outcome.success(passed)
        logger.debug("%s exited with %d", " ".join(argv), result.returncode)
        return Outcome.failed(f"{failed} (exit status {result.returncode})")

    def run_lint(self) -> Outcome:
        tool = self.config.lint_command[0]
        return self._run_check(self.config.lint_command, f"{tool} linting passed!", f"{tool} linting failed")

    def run_format(self) -> Outcome:
        tool = self.config.format_command[0]
        return self._run_check(self.config.format_command, f"{tool} formatting applied!", f"{tool} formatting failed")

    def run_isort(self) -> Outcome:
        return self._run_check(self.config.isort_command, "Import sorting completed!", "Import sorting failed")

    def run_tests(self) -> Outcome:
        return self._run_check(self.config.test_command, "All tests passed!", "Some tests failed")

    def steps(self) -> List[Step]:
        return [
            Step("tool", self.check_tool, halts_pipeline_on_failure=True),
            Step(
                "dependencies",
                self.ensure_dependencies,
                halts_pipeline_on_failure=False,
                title="🔍 Checking development dependencies...",
            ),
            Step(
                "lint",
                self.run_lint,
                halts_pipeline_on_failure=False,
                title=f"🔍 Running {self.config.lint_command[0]} linting...",
            ),
            Step(
                "format",
                self.run_format,
                halts_pipeline_on_failure=False,
                title=f"🎨 Running {self.config.format_command[0]} formatting...",
            ),
            Step(
                "import-sort",
                self.run_isort,
                halts_pipeline_on_failure=False,
                title=f"📦 Running {self.config.isort_command[0]} import sorting...",
            ),
            Step(
                "test",
                self.run_tests,
                halts_pipeline_on_failure=False,
                title="🧪 Running unit tests...",
            ),
        ]


def build_quality_pipeline(
    config: BootcheckConfig,
    checks: Optional[QualityChecks] = None,
) -> Pipeline:
    """Build the quality pipeline; only the tool check halts on failure."""
    checks = checks or QualityChecks(config)
    step_logger = StepLogger(pipeline="quality", fmt=config.log_format)
    return Pipeline("quality", checks.steps(), step_logger=step_logger)
