"""
Diagnostic transcript for a single benchmark invocation.

Every component appends human-readable lines here; the full transcript is the
body returned to the caller. Observers receive each line as it is appended.
"""

from __future__ import annotations

import logging
from typing import Callable

LogObserver = Callable[[str], None]

_logger = logging.getLogger(__name__)


class LogTranscript:
    """Append-only list of lines with observer fan-out."""

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._observers: list[LogObserver] = []

    def add_observer(self, observer: LogObserver) -> None:
        if observer is None or not callable(observer):
            raise ValueError("Observer can't be None")
        self._observers.append(observer)

    def append(self, line: str) -> None:
        self._lines.append(line)
        for observer in self._observers:
            try:
                observer(line)
            except Exception:
                # A broken observer must never affect the run.
                _logger.debug("Log observer %r failed", observer, exc_info=True)

    def snapshot(self) -> list[str]:
        """Return a copy of the transcript as of this call."""
        return list(self._lines)

    def render(self) -> str:
        return "".join(f"{line}\n" for line in self._lines)

    def reset(self) -> None:
        self._lines = []

    def __len__(self) -> int:
        return len(self._lines)


class LoggerObserver:
    """Forward transcript lines to a stdlib logger."""

    def __init__(self, logger: logging.Logger, level: int = logging.INFO) -> None:
        self._logger = logger
        self._level = level

    def __call__(self, line: str) -> None:
        self._logger.log(self._level, line)


def print_observer(line: str) -> None:
    print(line, flush=True)
