from __future__ import annotations

import logging

import click

from shotdiff import __version__
from shotdiff.commands.batch import batch_cmd
from shotdiff.commands.compare import compare_cmd

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _configure_logging(ctx: click.Context, param: click.Parameter, value: int) -> None:
    """Route shotdiff logs to stderr; -v for INFO, -vv for DEBUG."""
    level = logging.WARNING
    if value == 1:
        level = logging.INFO
    elif value > 1:
        level = logging.DEBUG
    logger = logging.getLogger("shotdiff")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="shotdiff")
@click.option(
    "-v",
    "--verbose",
    count=True,
    expose_value=False,
    is_eager=True,
    callback=_configure_logging,
    help="Log progress to stderr (-vv for debug).",
)
def main() -> None:
    """shotdiff: image comparison for visual regression checks."""


main.add_command(compare_cmd, name="compare")
main.add_command(compare_cmd, name="diff")
main.add_command(batch_cmd, name="batch")


if __name__ == "__main__":
    main()
