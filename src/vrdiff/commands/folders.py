"""vrdiff folders command -- compare two image trees."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from vrdiff.commands._helpers import build_options, diff_options
from vrdiff.orchestrator import diff_folders
from vrdiff.report import render_json, render_shortstat, render_tsv


@click.command("folders")
@click.argument("baseline", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("candidate", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("diff_dir", type=click.Path(file_okay=False, path_type=Path))
@diff_options
@click.option(
    "--workers",
    default=None,
    type=click.IntRange(min=1),
    envvar="VRDIFF_WORKERS",
    help="Pool size (default: three quarters of logical cores).",
)
@click.option("--serial", is_flag=True, help="Run every diff on the main thread.")
@click.option("--json", "output_json", is_flag=True, help="JSON output.")
@click.option("--format", "fmt", type=click.Choice(["tsv", "json"]), default="tsv")
@click.option("--shortstat", is_flag=True, help="One-line summary.")
@click.option("--no-header", is_flag=True, help="Omit TSV header.")
def folders_cmd(
    baseline: Path,
    candidate: Path,
    diff_dir: Path,
    threshold: int,
    fade: float,
    side_by_side: bool,
    workers: int | None,
    serial: bool,
    output_json: bool,
    fmt: str,
    shortstat: bool,
    no_header: bool,
) -> None:
    """Diff every image under BASELINE against CANDIDATE, writing diffs to DIFF_DIR.

    Exit 0 if both trees match, 1 if images were added, removed or changed,
    2 if any pair could not be diffed.
    """
    try:
        report = diff_folders(
            baseline,
            candidate,
            diff_dir,
            build_options(threshold, fade),
            side_by_side,
            not serial,
            workers=workers,
        )
    except OSError as exc:
        click.echo(f"error: {exc}", err=True)
        sys.exit(2)

    if shortstat:
        click.echo(render_shortstat(report))
    elif output_json or fmt == "json":
        click.echo(render_json(report))
    else:
        click.echo(render_tsv(report, header=not no_header))

    for errored in report.errored:
        click.echo(f"error: {errored.path}: {errored.message}", err=True)

    if report.has_errors:
        sys.exit(2)
    sys.exit(1 if report.has_changes else 0)
