"""Logging setup for applications embedding runbook."""

import logging
import sys


def setup_logging(verbose: bool = False) -> None:
    """Configure the root logger.

    By default, logging does not output to console.
    In verbose mode, DEBUG-level logs are shown on stderr.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    if verbose:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        root_logger.addHandler(console_handler)

    # Capture everything so file handlers added later still see debug records
    root_logger.setLevel(logging.DEBUG)
