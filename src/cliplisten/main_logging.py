"""Logging configuration for cliplisten CLI."""
import logging

from cliplisten.constants import MAX_VERBOSITY

# Log level for each verbosity setting.
VERBOSITY_LEVELS: dict[int, int] = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
}


def configure_logging(verbosity: int) -> None:
    """Configure logging level based on verbosity setting.

    Args:
        verbosity: 0 for warnings and errors only, 1 for connection
            summaries, 2 for encoding decisions and received text.

    Verbose output is prefixed with a timestamp and the process id. Errors
    are always printed to stderr regardless of verbosity.
    """
    verbosity = max(0, min(verbosity, MAX_VERBOSITY))
    if verbosity:
        fmt = "%(asctime)s cliplisten[%(process)d]: %(levelname)s: %(message)s"
    else:
        fmt = "%(levelname)s: %(message)s"
    logging.basicConfig(
        level=VERBOSITY_LEVELS[verbosity],
        format=fmt,
        datefmt="%Y/%m/%d %H:%M:%S",
        handlers=[logging.StreamHandler()],
    )
