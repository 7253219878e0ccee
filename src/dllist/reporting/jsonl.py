from __future__ import annotations

import json
import re
import sys
from typing import Any, Dict

from .base import Reporter, TaskRecord, TaskStatus, get_verbosity

# Status lines that carry ``key=value`` pairs worth a structured event.
_SUMMARY_RE = re.compile(r"^(build|verify) summary:\s*(.*)$", re.IGNORECASE)


class JsonLinesReporter(Reporter):
    """One JSON object per line on stdout, for CI logs and dashboards.

    Events: ``task_start``, ``task_progress``, ``task_end``, ``section``,
    ``status``, plus ``worker`` and ``summary`` events derived from the
    builder's status fields and summary lines.
    """

    def __init__(self, stream=None):
        super().__init__()
        self.stream = stream or sys.stdout
        self._tasks: Dict[str, TaskRecord] = {}

    def _emit(self, event: str, **payload: Any) -> None:
        line = json.dumps({"event": event, **payload}, sort_keys=True, default=str)
        with self._lock:
            self.stream.write(line + "\n")

    def _message(self, level: str, message: str, **fields: Any) -> None:
        self._emit("status", level=level, message=message, **fields)

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        with self._lock:
            self._tasks[task_id] = TaskRecord(task_id, name, total, meta=meta)
        self._emit("task_start", id=task_id, name=name, total=total, **meta)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        with self._lock:
            rec = self._tasks.get(task_id)
            if rec is None:
                return
            rec.completed += step
            rec.meta.update(meta)
            completed = rec.completed
        self._emit("task_progress", id=task_id, completed=completed, **meta)

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
        self._emit(
            "task_end",
            id=task_id,
            status=status.name.lower(),
            completed=rec.completed,
            total=rec.total,
            duration_seconds=rec.duration,
            **rec.meta,
        )

    def status(self, message: str, **fields: Any) -> None:
        if "worker" in fields:
            self._emit(
                "worker",
                phase=fields["worker"],
                region=fields.get("region"),
                language=fields.get("language"),
            )
        summary = _SUMMARY_RE.match(message)
        if summary:
            pairs = dict(
                token.split("=", 1)
                for token in summary.group(2).split()
                if "=" in token
            )
            self._emit(
                "summary",
                summary_type=summary.group(1).lower(),
                raw=message,
                **pairs,
                **fields,
            )
        self._message("info", message, **fields)

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self._message(f"verbose{level}", message, vlevel=level, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self._message("error", message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._message("warning", message, **fields)

    def section(self, title: str) -> None:
        self._emit("section", title=title)
