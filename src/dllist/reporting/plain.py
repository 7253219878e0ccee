from __future__ import annotations

import sys
from typing import Any, Dict

from .base import Reporter, TaskRecord, TaskStatus, get_verbosity

ICONS = {
    TaskStatus.SUCCESS: "✔",
    TaskStatus.FAILED: "✖",
    TaskStatus.SKIPPED: "→",
}

# ANSI color per message tag
_COLORS = {"INFO": "32", "WARN": "33", "ERROR": "31"}


class PlainReporter(Reporter):
    """Line-oriented reporter on stderr; ANSI color only on a TTY."""

    def __init__(self, stream=None, use_color: bool | None = None):
        super().__init__()
        self.stream = stream or sys.stderr
        if use_color is None:
            use_color = getattr(self.stream, "isatty", lambda: False)()
        self.use_color = use_color
        self._tasks: Dict[str, TaskRecord] = {}

    def _write(self, line: str) -> None:
        with self._lock:
            self.stream.write(line + "\n")

    def _tagged(self, tag: str, message: str, color: str | None = None) -> None:
        color = color or _COLORS.get(tag)
        if self.use_color and color:
            tag = f"\x1b[{color}m{tag}\x1b[0m"
        self._write(f"{tag}: {message}")

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        with self._lock:
            self._tasks[task_id] = TaskRecord(task_id, name, total, meta=meta)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        with self._lock:
            rec = self._tasks.get(task_id)
            if rec is None:
                return
            rec.completed += step
            rec.meta.update(meta)
            item = meta.get("current_item") or f"#{rec.completed}"
            total = "?" if rec.total is None else rec.total
            self._write(f"   · {rec.name}: {item} ({rec.completed}/{total})")

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        with self._lock:
            rec = self._tasks.pop(task_id, None)
            if rec is None:
                return
            rec.close(status, **final_meta)
            self._write(" " + rec.summary_line(ICONS.get(status, "?")))

    def status(self, message: str, **fields: Any) -> None:
        self._tagged("INFO", message)

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self._tagged(f"VERB{level}", message, color="36")

    def error(self, message: str, **fields: Any) -> None:
        self._tagged("ERROR", message)

    def warning(self, message: str, **fields: Any) -> None:
        self._tagged("WARN", message)

    def section(self, title: str) -> None:
        self._write(f"\n[{title}]")
