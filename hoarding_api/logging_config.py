"""
Logging configuration for the API and the CLI.
"""

import logging
import sys

_configured = False


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Configure the root logger with a single stdout handler.

    Safe to call more than once; later calls only adjust the level.
    """
    global _configured

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    if not _configured:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        root_logger.addHandler(console_handler)
        _configured = True

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)

    return root_logger
