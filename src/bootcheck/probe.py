"""External command execution and tool probing.

Everything that touches the host environment (PATH lookups, subprocesses)
goes through ``CommandRunner`` and ``ToolProbe`` so tests can replace them.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from bootcheck.errors import CommandError

__all__ = ["CommandResult", "CommandRunner", "ProbeResult", "ToolProbe", "prepend_path"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Exit status and (optionally captured) output of a command."""
    argv: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Run external commands.

    No timeout is applied unless ``timeout`` is set; a hung tool then blocks
    until the user interrupts it with Ctrl+C.
    """

    def __init__(self, cwd: Optional[os.PathLike] = None, timeout: Optional[float] = None) -> None:
        self.cwd = cwd
        self.timeout = timeout

    def run(
        self,
        argv: Sequence[str],
        capture: bool = False,
        input_text: Optional[str] = None,
    ) -> CommandResult:
        """Run a command and return its result without raising on non-zero exit.

        Args:
            argv: Command and arguments
            capture: Capture stdout/stderr instead of letting them reach the terminal
            input_text: Text written to the command's stdin

        Raises:
            CommandError: If the command cannot be started or times out
        """
        argv = list(argv)
        logger.debug("Running: %s", " ".join(argv))
        try:
            completed = subprocess.run(
                argv,
                cwd=self.cwd,
                capture_output=capture,
                input=input_text,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise CommandError(argv, 127, reason=f"command not found: {argv[0]}")
        except subprocess.TimeoutExpired:
            raise CommandError(argv, 124, reason=f"`{' '.join(argv)}` timed out after {self.timeout:g} seconds")

        if completed.returncode != 0:
            logger.debug("Command failed with exit code %d", completed.returncode)

        return CommandResult(
            argv=argv,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    def check(
        self,
        argv: Sequence[str],
        capture: bool = False,
        input_text: Optional[str] = None,
    ) -> CommandResult:
        """Run a command, raising CommandError on non-zero exit."""
        result = self.run(argv, capture=capture, input_text=input_text)
        if not result.ok:
            raise CommandError(result.argv, result.returncode, stderr=result.stderr)
        return result


@dataclass(frozen=True)
class ProbeResult:
    """Whether a tool is on PATH, and the version it reports."""
    name: str
    available: bool
    path: Optional[str] = None
    version: Optional[str] = None


class ToolProbe:
    """Look up executables on PATH and query their versions."""

    def __init__(self, runner: Optional[CommandRunner] = None) -> None:
        self.runner = runner or CommandRunner()

    def probe(self, name: str, version_args: Sequence[str] = ("--version",)) -> ProbeResult:
        path = shutil.which(name)
        if path is None:
            logger.debug("%s not found on PATH", name)
            return ProbeResult(name=name, available=False)

        version = None
        try:
            result = self.runner.run([path, *version_args], capture=True)
        except CommandError as exc:
            logger.debug("Version query for %s failed: %s", name, exc)
        else:
            if result.ok:
                version = result.stdout.strip() or result.stderr.strip() or None

        logger.debug("Found %s at %s (%s)", name, path, version)
        return ProbeResult(name=name, available=True, path=path, version=version)


def prepend_path(directories: Iterable[str]) -> None:
    """Prepend directories to PATH for this process, skipping ones already present."""
    current = os.environ.get("PATH", "").split(os.pathsep)
    additions = [d for d in directories if d and d not in current]
    if additions:
        os.environ["PATH"] = os.pathsep.join(additions + [p for p in current if p])
