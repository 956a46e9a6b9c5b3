"""Logging configuration."""
from __future__ import annotations

import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once for the process.

    Console handler on stdout; werkzeug request lines are kept at WARNING so
    location pushes do not flood the log.
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("mysql.connector").setLevel(logging.WARNING)

    logging.getLogger(__name__).info("Logging configured: level=%s", logging.getLevelName(log_level))
