"""
Structured logging for pipeline step events.

Each step transition is emitted as one log entry on the ``bootcheck.steps``
logger, either as a JSON object or as a ``key=value`` text line.

Logged events:
- step.started
- step.completed
- step.skipped
- step.failed
- pipeline.completed
- pipeline.aborted

Usage:
    from bootcheck.logger import StepLogger, configure_logging

    configure_logging("info", "json")
    logger = StepLogger(pipeline="quality")
    logger.log_step_started("lint")
    logger.log_step_finished("lint", status="success", duration_seconds=1.2)
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

__all__ = ["StepLogger", "configure_logging"]

_steps_logger = logging.getLogger("bootcheck.steps")

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

_STATUS_EVENTS = {
    "success": "step.completed",
    "skipped": "step.skipped",
    "failed": "step.failed",
}


def configure_logging(level: str = "error", fmt: str = "text") -> None:
    """Attach a single stderr handler to the ``bootcheck`` logger.

    Safe to call more than once; the handler is replaced, not duplicated.
    """
    root = logging.getLogger("bootcheck")
    root.setLevel(_LEVELS.get(level, logging.ERROR))
    for handler in list(root.handlers):
        if getattr(handler, "_bootcheck", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler._bootcheck = True  # type: ignore[attr-defined]
    if fmt == "json":
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)
    root.propagate = False


class StepLogger:
    """
    Structured logger for step events.

    Each entry includes the pipeline and step names plus event-specific
    fields such as status and duration, so runs can be filtered by step.
    """

    def __init__(
        self,
        pipeline: str,
        service_name: str = "bootcheck",
        fmt: str = "json",
        extra_labels: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize step logger.

        Args:
            pipeline: Pipeline name ("provision" or "quality")
            service_name: Service name for log attribution
            fmt: "json" for one JSON object per line, "text" for key=value
            extra_labels: Additional labels attached to every entry
        """
        self.pipeline = pipeline
        self.service_name = service_name
        self.fmt = fmt
        self.extra_labels = extra_labels or {}
        self._logger = _steps_logger

    def _emit(
        self,
        event: str,
        step: Optional[str] = None,
        level: str = "info",
        **extra_fields: Any,
    ) -> None:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "event": event,
            "service": self.service_name,
            "pipeline": self.pipeline,
        }
        if step:
            entry["step"] = step

        entry.update({k: v for k, v in extra_fields.items() if v is not None})

        if self.extra_labels:
            entry["labels"] = self.extra_labels

        if self.fmt == "json":
            log_line = json.dumps(entry, default=str)
        else:
            log_line = " ".join(
                f"{key}={value}" for key, value in entry.items() if key not in ("timestamp", "level")
            )

        if level == "error":
            self._logger.error(log_line)
        elif level == "warn":
            self._logger.warning(log_line)
        else:
            self._logger.info(log_line)

    def log_step_started(self, step: str) -> None:
        """Log that a step is about to run."""
        self._emit(event="step.started", step=step)

    def log_step_finished(
        self,
        step: str,
        status: str,
        duration_seconds: float,
        message: Optional[str] = None,
    ) -> None:
        """Log a step's outcome; failures are logged at warning level."""
        self._emit(
            event=_STATUS_EVENTS.get(status, "step.completed"),
            step=step,
            level="warn" if status == "failed" else "info",
            status=status,
            duration_seconds=round(duration_seconds, 3),
            message=message,
        )

    def log_pipeline_completed(self, ok: bool, failed_steps: List[str]) -> None:
        """Log the aggregate result of a pipeline that ran to the end."""
        self._emit(
            event="pipeline.completed",
            level="info" if ok else "warn",
            ok=ok,
            failed_steps=failed_steps or None,
        )

    def log_pipeline_aborted(self, step: str, message: str) -> None:
        """Log that a halting step failed and the pipeline stopped."""
        self._emit(
            event="pipeline.aborted",
            step=step,
            level="warn",
            message=message,
        )
