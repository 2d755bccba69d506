"""Logging setup for the vismatch command-line entry point."""

import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging to stderr at *level*.

    httpx and httpcore log every request at INFO, which drowns the
    client's own messages, so both are capped at WARNING.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger(__name__).debug(
        "Logging configured at level %s", logging.getLevelName(log_level)
    )
