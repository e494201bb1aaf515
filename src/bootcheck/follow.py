"""Follow a growing log file, like ``tail -F``."""

from __future__ import annotations

import os
import time
from collections import deque
from pathlib import Path
from typing import Callable, Optional

import click

__all__ = ["follow_file"]


def _stat_or_none(path: Path) -> Optional[os.stat_result]:
    try:
        return path.stat()
    except FileNotFoundError:
        return None


def follow_file(
    path: Path,
    initial_lines: int = 10,
    poll_interval: float = 0.5,
    stop: Optional[Callable[[], bool]] = None,
    echo: Callable[[str], None] = lambda line: click.echo(line, nl=False),
) -> None:
    """Print the last lines of ``path`` and then every line appended to it.

    Blocks until ``stop`` returns True; without ``stop`` it only returns when
    interrupted (KeyboardInterrupt). A truncated file is re-read from its
    start. When the file is rotated (renamed or deleted, then recreated),
    the rest of the old file is drained and the new file is followed from
    its first line; while no file exists at ``path`` it keeps waiting.

    Args:
        path: Log file to follow
        initial_lines: Number of existing lines printed before following
        poll_interval: Seconds to sleep when no new data is available
        stop: Predicate checked between polls
        echo: Writer for each line (lines keep their trailing newline)
    """
    fh = open(path, "rb")
    try:
        if initial_lines > 0:
            for raw in deque(iter(fh.readline, b""), maxlen=initial_lines):
                echo(raw.decode("utf-8", errors="replace"))
        else:
            fh.seek(0, 2)

        while True:
            raw = fh.readline()
            if raw:
                echo(raw.decode("utf-8", errors="replace"))
                continue

            if stop is not None and stop():
                return

            # A missing file is waited for, not treated as an error
            current = _stat_or_none(path)
            if current is not None:
                opened = os.fstat(fh.fileno())
                if (current.st_dev, current.st_ino) != (opened.st_dev, opened.st_ino):
                    try:
                        reopened = open(path, "rb")
                    except FileNotFoundError:
                        pass
                    else:
                        for raw in iter(fh.readline, b""):
                            echo(raw.decode("utf-8", errors="replace"))
                        fh.close()
                        fh = reopened
                        continue
                elif current.st_size < fh.tell():
                    fh.seek(0)
                    continue

            time.sleep(poll_interval)
    finally:
        fh.close()
