"""loguru configuration for the naws process."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger


def configure_logging(verbose: bool = False, log_file: Path | None = None) -> None:
    """Replace loguru's default sink with naws' sinks.

    stderr only shows warnings unless *verbose*; the optional file sink
    always records debug output.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> - <level>{message}</level>",
        level="DEBUG" if verbose else "WARNING",
    )
    if log_file is not None:
        logger.add(
            str(log_file),
            rotation="10 MB",
            retention="7 days",
            level="DEBUG",
        )
