from __future__ import annotations

import logging

import click

from vrdiff import __version__
from vrdiff.commands.folders import folders_cmd
from vrdiff.commands.image import image_cmd


def _configure_logging(ctx: click.Context, param: click.Parameter, value: int) -> None:
    """Send log records to stderr when -v is given (-vv for debug)."""
    if not value:
        return
    level = logging.DEBUG if value > 1 else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="vrdiff")
@click.option(
    "-v",
    "--verbose",
    count=True,
    expose_value=False,
    is_eager=True,
    callback=_configure_logging,
    help="Log progress to stderr (repeat for debug output).",
)
def main() -> None:
    """vrdiff: visual regression diffs between two image trees."""


main.add_command(folders_cmd, name="folders")
main.add_command(image_cmd, name="image")


if __name__ == "__main__":
    main()
