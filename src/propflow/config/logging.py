"""Logging setup shared by the CLI and tests."""

from __future__ import annotations

import logging


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Configure the root logger for command-line runs.

    Output goes to stderr so JSON written to stdout stays machine-readable. Pass
    ``force=True`` to replace handlers installed by an earlier call.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
