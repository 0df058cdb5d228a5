"""vrdiff image command -- single-pair pixel comparison."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from vrdiff.codec import classify, decode, encode_png
from vrdiff.commands._helpers import build_options, diff_options
from vrdiff.errors import JobError
from vrdiff.normalize import RawImage
from vrdiff.worker import diff_pair


def _load(path: Path) -> RawImage:
    return decode(path.read_bytes(), classify(path.name))


@click.command("image")
@click.argument("expected", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("actual", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@diff_options
@click.option(
    "--diff-output",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write diff visualization PNG.",
)
@click.option("--json", "use_json", is_flag=True, help="JSON output.")
def image_cmd(
    expected: Path,
    actual: Path,
    threshold: int,
    fade: float,
    side_by_side: bool,
    diff_output: Path | None,
    use_json: bool,
) -> None:
    """Compare two images pixel-by-pixel, padding the smaller one.

    Exit 0 if images match, exit 1 if they differ, exit 2 on error.
    """
    try:
        changed, total, canvas = diff_pair(
            _load(expected),
            _load(actual),
            diff_options=build_options(threshold, fade),
            side_by_side=side_by_side,
        )
        written: Path | None = None
        if diff_output is not None and changed > 0:
            diff_output.parent.mkdir(parents=True, exist_ok=True)
            diff_output.write_bytes(encode_png(canvas))
            written = diff_output
    except (JobError, OSError) as exc:
        click.echo(f"error: {exc}", err=True)
        sys.exit(2)

    ratio = changed / total * 100.0 if total else 0.0
    if use_json:
        click.echo(
            json.dumps(
                {
                    "identical": changed == 0,
                    "diff_pixels": changed,
                    "total_pixels": total,
                    "diff_ratio": ratio,
                    "diff_image": str(written) if written else None,
                    "threshold": threshold,
                }
            )
        )
    elif changed == 0:
        click.echo("match")
    else:
        click.echo(f"diff: {changed}/{total} pixels ({ratio:.2f}%)")

    sys.exit(0 if changed == 0 else 1)
