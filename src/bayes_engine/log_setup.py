"""Loguru configuration for command-line use.

Library code only emits records through ``loguru.logger``; applications
decide where they go. The CLI calls :func:`setup_logging` once.
"""

from __future__ import annotations

import os
import sys

from loguru import logger


def setup_logging(verbose: bool = False) -> None:
    """Install a single stderr sink.

    The level is ``DEBUG`` when ``verbose`` is set or ``BAYES_ENGINE_DEBUG``
    is truthy, otherwise ``INFO``.
    """
    debug = verbose or os.getenv("BAYES_ENGINE_DEBUG", "").lower() in {"1", "true", "yes", "on"}

    logger.remove()  # drop the default handler to avoid duplicates
    logger.add(
        sys.stderr,
        level="DEBUG" if debug else "INFO",
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
               "<level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
               "<level>{message}</level>",
        backtrace=False,
        diagnose=False,
    )
