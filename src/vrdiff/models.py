"""Per-path classification outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union


class DiffStatus(str, Enum):
    """Classification of one relative image path."""

    ADDED = "+"
    REMOVED = "-"
    CHANGED = "~"
    UNCHANGED = "="
    ERRORED = "!"


@dataclass(frozen=True)
class Changed:
    """Common path whose images differ in at least one pixel."""

    path: str
    diff_pixels: int
    total_pixels: int
    diff_image: Path | None

    status = DiffStatus.CHANGED

    @property
    def rendered(self) -> bool:
        return self.diff_image is not None

    @property
    def diff_ratio(self) -> float:
        """Changed pixels as a percentage of the compared canvas."""
        if self.total_pixels == 0:
            return 0.0
        return self.diff_pixels / self.total_pixels * 100.0


@dataclass(frozen=True)
class Unchanged:
    path: str

    status = DiffStatus.UNCHANGED


@dataclass(frozen=True)
class Errored:
    """Common path whose job aborted before producing a diff."""

    path: str
    message: str

    status = DiffStatus.ERRORED


DiffOutcome = Union[Changed, Unchanged, Errored]
