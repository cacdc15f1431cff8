"""Command line interface for modvendor."""

import argparse
import logging
import pathlib
import sys
from typing import TextIO

from modvendor.config import VendorConfig, resolve_vendor_config
from modvendor.errors import VendorError
from modvendor.vendor import vendor_modules

LOGGER_NAME: str = "modvendor"


def _log_level(*, verbose: int, quiet: int) -> int:
    """Map ``-v``/``-q`` counts to a logging level; ``-q`` wins over ``-v``."""

    if quiet >= 2:
        return logging.ERROR
    if quiet == 1:
        return logging.WARNING
    if verbose >= 1:
        # Per-file "vendoring ..." lines are logged at DEBUG.
        return logging.DEBUG
    return logging.INFO


def _configure_logging(level: int, stream: TextIO | None = None) -> logging.Logger:
    """Attach a single plain-message stderr handler to the modvendor logger.

    :param level: Logging level for the logger and its handler.
    :param stream: Output stream (defaults to ``sys.stderr`` at call time).
    :returns: Configured logger.
    """

    logger: logging.Logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    handler: logging.StreamHandler = logging.StreamHandler(stream=stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger.handlers.clear()
    logger.addHandler(handler)
    return logger


def _build_parser() -> argparse.ArgumentParser:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="modvendor",
        description=(
            "Copy files pruned by `go mod vendor` (headers, .proto files, assets) "
            "from the Go module cache into ./vendor/."
        ),
    )
    parser.add_argument(
        "-copy",
        dest="copy",
        type=str,
        default="",
        help='Copy files matching glob patterns to ./vendor/, e.g. -copy="**/*.c **/*.h **/*.proto".',
    )
    parser.add_argument(
        "-include",
        dest="include",
        type=str,
        default="",
        help=(
            "Additional packages untracked in vendor/modules.txt, "
            'e.g. -include="github.com/tensorflow/tensorflow/tensorflow/c".'
        ),
    )
    parser.add_argument(
        "-C",
        dest="project_root",
        type=pathlib.Path,
        default=None,
        help="Project root containing go.mod (defaults to the current directory).",
    )
    parser.add_argument(
        "-v",
        dest="verbose",
        action="count",
        default=0,
        help="Verbose output: print every vendored file.",
    )
    parser.add_argument(
        "-q",
        dest="quiet",
        action="count",
        default=0,
        help="Reduce logging. Pass twice to only report errors.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the modvendor CLI.

    :param argv: Optional argv list (excluding program name).
    :returns: Exit code.
    """

    ns = _build_parser().parse_args(argv)
    logger: logging.Logger = _configure_logging(_log_level(verbose=ns.verbose, quiet=ns.quiet))

    try:
        config: VendorConfig = resolve_vendor_config(
            copy=ns.copy,
            include=ns.include,
            project_root=ns.project_root,
        )
        vendor_modules(config, logger=logger)
    except VendorError as e:
        logger.error(f"modvendor: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
