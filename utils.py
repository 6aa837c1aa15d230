"""
General utility functions for the CLI application.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

console: Console = Console(stderr=True)

# Chatty third-party loggers kept at WARNING even in verbose mode.
QUIET_LOGGERS = ("httpx", "httpcore")


def setup_logging(verbose: bool = False) -> None:
    """
    Route log records through Rich on stderr.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = RichHandler(
        console=console,
        show_path=verbose,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s", datefmt="[%X]"))
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
