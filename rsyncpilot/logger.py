# RsyncPilot Logging
# Diagnostic logging through Rich, with an optional plain log file

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from rsyncpilot.utils.paths import expand_path

PACKAGE_LOGGER = "rsyncpilot"
FILE_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Optional[str] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Configure the package logger for CLI usage.

    Args:
        verbose: Show DEBUG messages on the console (WARNING otherwise).
        log_file: Optional file receiving INFO and above.
        console: Rich console to log to (stderr by default).

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    rich_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.addHandler(rich_handler)

    if log_file:
        path = expand_path(log_file)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, encoding="utf-8")
        except OSError as exc:
            logger.warning("Cannot open log file %s: %s", path, exc)
        else:
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
            file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
            logger.addHandler(file_handler)

    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return logger
