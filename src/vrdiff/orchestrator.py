"""Folder-level diff run: reconcile both trees, then fan jobs out to a thread pool."""

from __future__ import annotations

import logging
import math
import os
import threading
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from vrdiff.codec import list_images
from vrdiff.models import DiffOutcome
from vrdiff.reconcile import reconcile_paths
from vrdiff.report import Report, ReportAggregator
from vrdiff.worker import DiffJob, run_job

log = logging.getLogger(__name__)

_POOL_CPU_FRACTION = 0.75


def default_pool_size() -> int:
    """Return ceil(0.75 * logical cores), at least 1."""
    cpus = os.cpu_count() or 1
    return max(1, math.ceil(cpus * _POOL_CPU_FRACTION))


class WorkCursor:
    """Shared index into the common-path list; each index is handed out once."""

    def __init__(self, paths: Sequence[str]) -> None:
        self._paths = paths
        self._next = 0
        self._lock = threading.Lock()

    def claim(self) -> str | None:
        """Atomically take the next path, or return None once exhausted."""
        with self._lock:
            index = self._next
            self._next += 1
        if index >= len(self._paths):
            return None
        return self._paths[index]


def _drain(
    cursor: WorkCursor,
    make_job: Callable[[str], DiffJob],
    runner: Callable[[DiffJob], DiffOutcome],
    aggregator: ReportAggregator,
) -> None:
    """Pool unit loop: claim, run, merge, repeat until the cursor is exhausted."""
    while (path := cursor.claim()) is not None:
        aggregator.add_outcome(runner(make_job(path)))


def run_pool(
    paths: Sequence[str],
    make_job: Callable[[str], DiffJob],
    aggregator: ReportAggregator,
    *,
    workers: int,
    runner: Callable[[DiffJob], DiffOutcome] = run_job,
) -> None:
    """Process every path with *workers* pool units.

    ``workers == 1`` runs the loop on the calling thread. Otherwise threads
    are started, joined, and discarded before returning. An exception that
    escapes a unit is re-raised here after all units have stopped.

    Raises:
        ValueError: If *workers* is less than 1.
    """
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")

    cursor = WorkCursor(paths)
    if workers == 1:
        _drain(cursor, make_job, runner, aggregator)
        return

    failures: list[BaseException] = []

    def _unit() -> None:
        try:
            _drain(cursor, make_job, runner, aggregator)
        except BaseException as exc:  # noqa: BLE001
            failures.append(exc)

    threads = [
        threading.Thread(target=_unit, name=f"vrdiff-unit-{i}", daemon=True)
        for i in range(min(workers, max(len(paths), 1)))
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    if failures:
        raise failures[0]


def diff_folders(
    baseline_root: str | Path,
    candidate_root: str | Path,
    diff_root: str | Path,
    diff_options: Any = None,
    side_by_side: bool = False,
    parallel: bool = True,
    *,
    workers: int | None = None,
) -> Report:
    """Compare two image trees and write diff images for changed pairs.

    Args:
        baseline_root: Directory holding the reference images.
        candidate_root: Directory holding the images under test.
        diff_root: Directory receiving one PNG per changed path; created if absent.
        diff_options: Forwarded unchanged to the pixel diff function.
        side_by_side: Render baseline | diff | candidate canvases.
        parallel: Use a thread pool; False runs every job on the calling thread.
        workers: Pool size override; defaults to ``default_pool_size()``.

    Returns:
        Report covering every image path of both trees.

    Raises:
        FileNotFoundError: If either image root is missing.
        OSError: If the diff root cannot be created.
    """
    started = time.monotonic()
    baseline_root = Path(baseline_root)
    candidate_root = Path(candidate_root)
    diff_root = Path(diff_root)

    baseline_paths = list_images(baseline_root)
    candidate_paths = list_images(candidate_root)
    diff_root.mkdir(parents=True, exist_ok=True)
    log.info(
        "%d images: %d baseline, %d candidate",
        len(baseline_paths) + len(candidate_paths),
        len(baseline_paths),
        len(candidate_paths),
    )

    recon = reconcile_paths(baseline_paths, candidate_paths)
    aggregator = ReportAggregator()
    aggregator.add_paths(recon.added, recon.removed)
    log.info(
        "%d images in common, %d removed, %d added",
        len(recon.common),
        len(recon.removed),
        len(recon.added),
    )

    def make_job(path: str) -> DiffJob:
        return DiffJob(
            path=path,
            baseline_root=baseline_root,
            candidate_root=candidate_root,
            diff_root=diff_root,
            diff_options=diff_options,
            side_by_side=side_by_side,
        )

    pool_size = 1 if not parallel else (workers or default_pool_size())
    log.info("diffing %d image pairs with %d workers", len(recon.common), pool_size)
    run_pool(recon.common, make_job, aggregator, workers=pool_size)

    report = aggregator.freeze(len(recon.common))
    log.info(
        "diffed %d pairs, wrote %d diff images in %.2fs",
        len(recon.common),
        len(report.changed),
        time.monotonic() - started,
    )
    return report
