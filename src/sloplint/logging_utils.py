from __future__ import annotations

import logging
import sys

_FORMAT = "sloplint: %(message)s"
_VERBOSE_FORMAT = "sloplint [%(levelname)s] %(name)s: %(message)s"


def log_level(*, verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_logging(*, verbose: bool, quiet: bool) -> None:
    """
    Route sloplint logs to stderr.

    stdout carries only the report, so `--format json` output stays parseable
    at every verbosity.
    """

    logging.basicConfig(
        level=log_level(verbose=verbose, quiet=quiet),
        format=_VERBOSE_FORMAT if verbose else _FORMAT,
        stream=sys.stderr,
        force=True,
    )
