"""Options shared by the diff commands."""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any

import click

from vrdiff.pixel_diff import DiffOptions


def diff_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Attach --threshold, --fade and --side-by-side to a Click command."""

    @click.option(
        "--threshold",
        default=0,
        type=click.IntRange(0, 255),
        help="Largest per-channel delta still counted as equal.",
    )
    @click.option(
        "--fade",
        default=0.1,
        type=click.FloatRange(0.0, 1.0),
        help="Opacity of the grayscale baseline under the diff overlay.",
    )
    @click.option("--side-by-side", is_flag=True, help="Render baseline | diff | candidate.")
    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return fn(*args, **kwargs)

    return wrapper


def build_options(threshold: int, fade: float) -> DiffOptions:
    return DiffOptions(threshold=threshold, fade=fade)
