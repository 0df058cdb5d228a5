"""Per-pair diff pipeline: load, decode, normalize, diff, persist, report."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np

from vrdiff.codec import classify, decode, encode_png
from vrdiff.errors import DiffComputeError, ImageIOError, JobError
from vrdiff.models import Changed, DiffOutcome, Errored, Unchanged
from vrdiff.normalize import RawImage, normalize_pair
from vrdiff.pixel_diff import pixel_diff

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiffJob:
    """One common path plus the run configuration needed to diff it."""

    path: str
    baseline_root: Path
    candidate_root: Path
    diff_root: Path
    diff_options: Any = None
    side_by_side: bool = False

    @property
    def baseline_path(self) -> Path:
        return self.baseline_root / self.path

    @property
    def candidate_path(self) -> Path:
        return self.candidate_root / self.path

    @property
    def diff_path(self) -> Path:
        return self.diff_root / self.path


def _read(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise ImageIOError(f"cannot read {path}: {exc}") from exc


def _write(path: Path, data: bytes) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise ImageIOError(f"cannot write {path}: {exc}") from exc


def diff_pair(
    baseline: RawImage,
    candidate: RawImage,
    *,
    diff_options: Any = None,
    side_by_side: bool = False,
) -> tuple[int, int, RawImage]:
    """Normalize two decoded images and run the pixel diff.

    Returns:
        (changed pixel count, compared pixel count, rendered canvas).

    Raises:
        DimensionInvariantError: If normalization leaves mismatched buffers.
        DiffComputeError: If the diff function raises.
    """
    a, b = normalize_pair(baseline, candidate)
    panels = 3 if side_by_side else 1
    canvas = np.zeros((a.height, a.width * panels, 4), dtype=np.uint8)
    try:
        result = pixel_diff(a.pixels, b.pixels, canvas, a.width, a.height, diff_options)
    except Exception as exc:  # noqa: BLE001
        raise DiffComputeError(f"pixel diff failed: {exc}") from exc
    rendered = RawImage(width=a.width * panels, height=a.height, pixels=canvas)
    return result.changed, result.total, rendered


def _run(job: DiffJob) -> DiffOutcome:
    baseline_bytes = _read(job.baseline_path)
    candidate_bytes = _read(job.candidate_path)

    fmt = classify(job.path)
    baseline = decode(baseline_bytes, fmt)
    candidate = decode(candidate_bytes, fmt)

    changed, total, canvas = diff_pair(
        baseline,
        candidate,
        diff_options=job.diff_options,
        side_by_side=job.side_by_side,
    )
    if changed == 0:
        return Unchanged(path=job.path)

    _write(job.diff_path, encode_png(canvas))
    log.debug("wrote diff image %s (%d pixels changed)", job.diff_path, changed)
    return Changed(
        path=job.path,
        diff_pixels=changed,
        total_pixels=total,
        diff_image=job.diff_path,
    )


def run_job(job: DiffJob) -> DiffOutcome:
    """Run the full pipeline for one job and always return an outcome.

    Job-local failures become an Errored outcome; they never propagate.
    """
    try:
        return _run(job)
    except JobError as exc:
        log.warning("error diffing %s: %s", job.path, exc)
        return Errored(path=job.path, message=str(exc))
    except Exception as exc:  # noqa: BLE001
        log.exception("unexpected failure diffing %s", job.path)
        return Errored(path=job.path, message=str(exc) or type(exc).__name__)
