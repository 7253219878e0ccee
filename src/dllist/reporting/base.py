from __future__ import annotations

import sys
import threading
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional

__all__ = [
    "TaskStatus",
    "TaskRecord",
    "Reporter",
    "set_reporter",
    "get_reporter",
    "set_verbosity",
    "get_verbosity",
]

# Keys of task metadata echoed in a task's closing line.
STAT_KEYS = ("entries", "bytes")


class TaskStatus(Enum):
    RUNNING = auto()
    SUCCESS = auto()
    FAILED = auto()
    SKIPPED = auto()


@dataclass(slots=True)
class TaskRecord:
    task_id: str
    name: str
    total: Optional[int] = None
    completed: int = 0
    status: TaskStatus = TaskStatus.RUNNING
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None
    meta: Dict[str, Any] = field(default_factory=dict)

    def close(self, status: TaskStatus, **final_meta: Any) -> None:
        self.status = status
        self.end_time = time.time()
        self.meta.update(final_meta)

    @property
    def duration(self) -> float:
        end = self.end_time if self.end_time is not None else time.time()
        return end - self.start_time

    def summary_line(self, icon: str) -> str:
        """``<icon> <name> done/total (1.23s) [entries=.. bytes=..]``"""
        progress = (
            f" {self.completed}/{self.total}" if self.total is not None else ""
        )
        stats = [f"{k}={self.meta[k]}" for k in STAT_KEYS if k in self.meta]
        stats_part = f" [{' '.join(stats)}]" if stats else ""
        return f"{icon} {self.name}{progress} ({self.duration:.2f}s){stats_part}"


_VERBOSITY: int = 0  # set by the CLI (-v repeats)


def set_verbosity(level: int) -> None:
    global _VERBOSITY
    _VERBOSITY = max(0, level)


def get_verbosity() -> int:
    return _VERBOSITY


class Reporter:
    """Progress and message sink shared by all build workers.

    Workers call into the active reporter from their own threads, so
    implementations guard their output with ``self._lock``.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        raise NotImplementedError

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        raise NotImplementedError

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        raise NotImplementedError

    def status(self, message: str, **fields: Any) -> None:
        raise NotImplementedError

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        pass

    def error(self, message: str, **fields: Any) -> None:
        raise NotImplementedError

    def warning(self, message: str, **fields: Any) -> None:
        self.status(message, **fields)

    def section(self, title: str) -> None:
        raise NotImplementedError

    def flush(self) -> None:
        pass


_ACTIVE_REPORTER: Reporter | None = None
_ACTIVE_LOCK = threading.Lock()


def set_reporter(rep: Reporter) -> None:
    global _ACTIVE_REPORTER
    with _ACTIVE_LOCK:
        _ACTIVE_REPORTER = rep


def get_reporter() -> Reporter:
    """Active reporter; a plain stderr reporter until the CLI sets one."""
    global _ACTIVE_REPORTER
    with _ACTIVE_LOCK:
        if _ACTIVE_REPORTER is None:
            from .plain import PlainReporter  # local import to avoid cycle

            _ACTIVE_REPORTER = PlainReporter(stream=sys.stderr)
        return _ACTIVE_REPORTER
