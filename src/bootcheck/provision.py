"""
Provisioning pipeline: bootstrap a local development environment.

Steps, each of which aborts the run on failure:

1. package-manager  Install the package manager if it is not on PATH
2. dependencies     Sync all dependencies and optional extras
3. config-file      Copy the config template to the active config file once
4. logs             Create the logs directory and log files if missing
5. summary          Print next-step guidance
6. follow           Follow the primary log file when requested

Every step checks its own precondition first, so a second run against an
unchanged tree reports "already exists" instead of redoing work.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable, List, Optional

import httpx

from bootcheck import console
from bootcheck.config import BootcheckConfig
from bootcheck.errors import CommandError, InstallError, StepFailedError
from bootcheck.follow import follow_file
from bootcheck.logger import StepLogger
from bootcheck.models import Outcome, RunConfig, Step
from bootcheck.pipeline import Pipeline
from bootcheck.probe import CommandRunner, ToolProbe, prepend_path

__all__ = ["Provisioner", "build_provisioning_pipeline", "download_install_script"]

logger = logging.getLogger(__name__)


def download_install_script(url: str, timeout: Optional[float] = None) -> str:
    """Fetch a remote install script over HTTPS."""
    try:
        response = httpx.get(url, follow_redirects=True, timeout=timeout or httpx.Timeout(30.0))
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise InstallError(f"Failed to download installer from {url}: {exc}")
    return response.text


class Provisioner:
    """Actions behind the provisioning pipeline's steps."""

    def __init__(
        self,
        config: BootcheckConfig,
        run_config: RunConfig,
        runner: Optional[CommandRunner] = None,
        probe: Optional[ToolProbe] = None,
        fetch_script: Callable[[str], str] = download_install_script,
        follower: Callable[[Path], None] = follow_file,
    ) -> None:
        self.config = config
        self.run_config = run_config
        self.runner = runner or CommandRunner(
            cwd=config.project_root, timeout=config.command_timeout_seconds
        )
        self.probe = probe or ToolProbe(self.runner)
        self.fetch_script = fetch_script
        self.follower = follower

    def _probe_package_manager(self):
        prepend_path(self.config.extra_bin_dirs)
        return self.probe.probe(self.config.package_manager, self.config.package_manager_version_args)

    def ensure_package_manager(self) -> Outcome:
        pm = self.config.package_manager
        found = self._probe_package_manager()
        if found.available:
            return Outcome.success(f"{pm} is already installed ({found.version or 'version unknown'})")

        console.info(f"{pm} not found. Installing {pm}...")
        logger.debug("Fetching installer from %s", self.config.install_script_url)
        script = self.fetch_script(self.config.install_script_url)
        try:
            self.runner.check([self.config.install_shell], input_text=script)
        except CommandError as exc:
            raise InstallError(f"{pm} installer failed: {exc.message}", exit_code=exc.exit_code)

        found = self._probe_package_manager()
        if not found.available:
            raise InstallError(f"{pm} is still not on PATH after running the installer")
        return Outcome.success(f"{pm} installed successfully ({found.version or 'version unknown'})")

    def sync_dependencies(self) -> Outcome:
        console.info(f"Setting up Python environment with {self.config.package_manager}...")
        argv = [self.config.package_manager, *self.config.sync_args]
        result = self.runner.run(argv)
        if not result.ok:
            raise CommandError(
                argv,
                result.returncode,
                reason=f"Failed to install dependencies (`{' '.join(argv)}` exited with status {result.returncode})",
            )
        return Outcome.success("Dependencies installed successfully")

    def materialize_config(self) -> Outcome:
        target = self.config.env_path
        template = self.config.env_template_path
        if target.exists():
            return Outcome.skipped(f"{self.config.env_file} file already exists")

        console.info(f"Creating {self.config.env_file} file from template...")
        if not template.is_file():
            raise StepFailedError(f"{self.config.env_template} not found")

        shutil.copyfile(template, target)
        return Outcome.success(
            f"{self.config.env_file} file created from {self.config.env_template}",
            warnings=(f"Please edit {self.config.env_file} and add your API keys",),
        )

    def prepare_logs(self) -> Outcome:
        log_dir = self.config.log_dir_path
        created: List[str] = []

        if not log_dir.is_dir():
            log_dir.mkdir(parents=True, exist_ok=True)
            created.append(f"{self.config.log_dir} directory")

        # touch() never truncates; existing log content is left as is
        for path in (self.config.log_file_path, self.config.activity_log_path):
            if not path.exists():
                path.touch(exist_ok=True)
                created.append(path.name)

        if not created:
            return Outcome.skipped(f"{self.config.log_dir} directory and log files already exist")
        return Outcome.success(f"Created {', '.join(created)}")

    def summarize(self) -> Outcome:
        pm = self.config.package_manager
        return Outcome.success(
            "Setup complete!",
            hints=(
                f"To run the server:\n    {' '.join(self.config.run_argv(self.config.server_command))}",
                f"To run tests:\n    {pm} run pytest tests/",
                "To run code quality checks:\n    bootcheck check",
            ),
        )

    def follow_logs(self) -> Outcome:
        if not self.run_config.follow_logs:
            return Outcome.skipped(
                "Log follow not requested",
                hints=("To follow logs, run: bootcheck setup -f",),
            )

        console.info("Following logs (Ctrl+C to stop)...")
        self.follower(self.config.log_file_path)
        return Outcome.success("Stopped following logs")

    def steps(self) -> List[Step]:
        return [
            Step("package-manager", self.ensure_package_manager),
            Step("dependencies", self.sync_dependencies),
            Step("config-file", self.materialize_config),
            Step("logs", self.prepare_logs),
            Step("summary", self.summarize),
            Step("follow", self.follow_logs),
        ]


def build_provisioning_pipeline(
    config: BootcheckConfig,
    run_config: RunConfig,
    provisioner: Optional[Provisioner] = None,
) -> Pipeline:
    """Build the provisioning pipeline; every step halts on failure."""
    provisioner = provisioner or Provisioner(config, run_config)
    step_logger = StepLogger(pipeline="provision", fmt=config.log_format)
    return Pipeline("provision", provisioner.steps(), step_logger=step_logger)
