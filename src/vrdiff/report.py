"""Report aggregation and output renderers."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from typing import Any

from vrdiff.errors import ReportInvariantError
from vrdiff.models import Changed, DiffOutcome, DiffStatus, Errored, Unchanged


@dataclass(frozen=True)
class Report:
    """Final classification of every image path in both trees."""

    added: tuple[str, ...]
    removed: tuple[str, ...]
    changed: tuple[Changed, ...]
    unchanged: tuple[str, ...]
    errored: tuple[Errored, ...]

    @property
    def common_count(self) -> int:
        return len(self.changed) + len(self.unchanged) + len(self.errored)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.changed)

    @property
    def has_errors(self) -> bool:
        return bool(self.errored)

    def to_dict(self) -> dict[str, Any]:
        return {
            "added": list(self.added),
            "removed": list(self.removed),
            "changed": [
                {
                    "path": c.path,
                    "diff_pixels": c.diff_pixels,
                    "total_pixels": c.total_pixels,
                    "diff_ratio": c.diff_ratio,
                    "diff_image": str(c.diff_image) if c.diff_image else None,
                }
                for c in self.changed
            ],
            "unchanged": list(self.unchanged),
            "errored": [{"path": e.path, "message": e.message} for e in self.errored],
        }


class _Bucket:
    """Append-only list guarded by its own lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: list[Any] = []

    def append(self, item: Any) -> None:
        with self._lock:
            self._items.append(item)

    def extend(self, items: list[Any]) -> None:
        with self._lock:
            self._items.extend(items)

    def snapshot(self) -> tuple[Any, ...]:
        with self._lock:
            return tuple(self._items)


class ReportAggregator:
    """Thread-safe merge target for reconciliation results and job outcomes.

    Each category has an independent lock, so concurrent pool units appending
    to different categories never contend.
    """

    def __init__(self) -> None:
        self._added = _Bucket()
        self._removed = _Bucket()
        self._changed = _Bucket()
        self._unchanged = _Bucket()
        self._errored = _Bucket()
        self._frozen = False

    def add_paths(self, added: list[str], removed: list[str]) -> None:
        """Merge the reconciler's added and removed lists, keeping their order."""
        self._check_open()
        self._added.extend(added)
        self._removed.extend(removed)

    def add_outcome(self, outcome: DiffOutcome) -> None:
        self._check_open()
        if isinstance(outcome, Changed):
            self._changed.append(outcome)
        elif isinstance(outcome, Unchanged):
            self._unchanged.append(outcome.path)
        elif isinstance(outcome, Errored):
            self._errored.append(outcome)
        else:
            raise TypeError(f"unknown outcome type: {type(outcome).__name__}")

    def freeze(self, common_count: int) -> Report:
        """Close the aggregator and return the immutable report.

        Raises:
            ReportInvariantError: If outcomes do not cover exactly *common_count* paths.
        """
        self._check_open()
        self._frozen = True
        report = Report(
            added=self._added.snapshot(),
            removed=self._removed.snapshot(),
            changed=self._changed.snapshot(),
            unchanged=self._unchanged.snapshot(),
            errored=self._errored.snapshot(),
        )
        if report.common_count != common_count:
            raise ReportInvariantError(
                f"{report.common_count} outcomes recorded for {common_count} common paths"
            )
        return report

    def _check_open(self) -> None:
        if self._frozen:
            raise RuntimeError("report already returned")


def _rows(report: Report) -> list[tuple[DiffStatus, str, str]]:
    rows: list[tuple[DiffStatus, str, str]] = []
    rows.extend((DiffStatus.ADDED, p, "") for p in report.added)
    rows.extend((DiffStatus.REMOVED, p, "") for p in report.removed)
    rows.extend((DiffStatus.CHANGED, c.path, str(c.diff_pixels)) for c in report.changed)
    rows.extend((DiffStatus.UNCHANGED, p, "0") for p in report.unchanged)
    rows.extend((DiffStatus.ERRORED, e.path, e.message) for e in report.errored)
    rows.sort(key=lambda r: r[1])
    return rows


def render_tsv(report: Report, *, header: bool = True) -> str:
    """Render the report as tab-separated values sorted by path.

    The third column is the changed pixel count, or the error message for
    errored paths.
    """
    lines: list[str] = []
    if header:
        lines.append("STATUS\tPATH\tDIFF_PIXELS")
    for status, path, detail in _rows(report):
        lines.append(f"{status.value}\t{path}\t{detail}")
    return "\n".join(lines)


def render_shortstat(report: Report) -> str:
    """Render the report as a single summary line.

    Returns:
        String like "1 added, 0 removed, 2 changed, 40 unchanged, 0 errored".
    """
    return (
        f"{len(report.added)} added, {len(report.removed)} removed, "
        f"{len(report.changed)} changed, {len(report.unchanged)} unchanged, "
        f"{len(report.errored)} errored"
    )


def render_json(report: Report) -> str:
    """Render the report as a JSON object with per-category lists sorted by path."""
    data = report.to_dict()
    data["unchanged"] = sorted(data["unchanged"])
    for key in ("changed", "errored"):
        data[key] = sorted(data[key], key=lambda d: d["path"])
    return json.dumps(data, indent=2)
