"""Bounded-concurrency build orchestrator.

One worker thread per (region, language) pair; an :class:`AdmissionGate`
bounds how many of them build at once. The first failure stops further
admissions, every already-running build is waited for, and the failure is
raised as :class:`BuildFailedError`. There is no partial-success mode.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Sequence

from .constants import Language, RegionMeta
from .context import BuildContext
from .listing.builder import BuildResult, run_build
from .logging import get_logger
from .packing.errors import (
    BuildFailedError,
    DlListError,
    E_BUILD_FAILED,
    config_error,
)
from .reporting import TaskStatus, get_reporter

__all__ = ["DEFAULT_CONCURRENCY", "AdmissionGate", "BuildFn", "run_builds"]

DEFAULT_CONCURRENCY = 3

BuildFn = Callable[[BuildContext, RegionMeta, Language], BuildResult]


class AdmissionGate:
    """Counting gate with instrumentation of how many slots are held."""

    def __init__(self, limit: int):
        if limit < 1:
            raise ValueError("Admission limit must be at least 1")
        self.limit = limit
        self._sem = threading.BoundedSemaphore(limit)
        self._lock = threading.Lock()
        self.active = 0
        self.peak = 0
        self.admitted = 0

    @contextmanager
    def slot(self) -> Iterator[None]:
        self._sem.acquire()
        with self._lock:
            self.active += 1
            self.admitted += 1
            self.peak = max(self.peak, self.active)
        try:
            yield
        finally:
            with self._lock:
                self.active -= 1
            self._sem.release()


def _label(region: RegionMeta, language: Language) -> str:
    return f"{region.region.name}/{language.name}"


def run_builds(
    ctx: BuildContext,
    pairs: Sequence[tuple[RegionMeta, Language]],
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    build: BuildFn = run_build,
    gate: Optional[AdmissionGate] = None,
) -> list[BuildResult]:
    """Run one build per pair and return results in ``pairs`` order."""
    if not ctx.prepared:
        raise config_error("Build context must be prepared before scheduling")
    if not pairs:
        return []
    logger = get_logger()
    rep = get_reporter()
    gate = gate or AdmissionGate(concurrency)
    abort = threading.Event()

    def _worker(region: RegionMeta, language: Language) -> Optional[BuildResult]:
        with gate.slot():
            if abort.is_set():
                logger.debug("Skipping %s after earlier failure", _label(region, language))
                return None
            try:
                return build(ctx, region, language)
            except BaseException:
                # Set before the slot is released so no waiting build starts.
                abort.set()
                raise

    results: dict[int, BuildResult] = {}
    failure: Optional[tuple[int, BaseException]] = None
    rep.start_task("build.lists", "Download lists", total=len(pairs))
    with ThreadPoolExecutor(
        max_workers=len(pairs), thread_name_prefix="dllist"
    ) as executor:
        futures = {
            executor.submit(_worker, region, language): idx
            for idx, (region, language) in enumerate(pairs)
        }
        for future in as_completed(futures):
            idx = futures[future]
            region, language = pairs[idx]
            try:
                result = future.result()
            except Exception as exc:
                if failure is None:
                    failure = (idx, exc)
                    logger.error("Build %s failed: %s", _label(region, language), exc)
                continue
            if result is not None:
                results[idx] = result
                rep.advance("build.lists", current_item=_label(region, language))

    if failure is not None:
        rep.end_task("build.lists", TaskStatus.FAILED)
        idx, exc = failure
        region, language = pairs[idx]
        cause = exc.code if isinstance(exc, DlListError) else type(exc).__name__
        raise BuildFailedError(
            E_BUILD_FAILED,
            f"Build for region {region.region.name} language {language.name} failed: {exc}",
            {
                "region": region.region.name,
                "language": language.name,
                "cause": cause,
            },
        ) from exc
    rep.end_task("build.lists", entries=len(results))
    return [results[i] for i in range(len(pairs))]
