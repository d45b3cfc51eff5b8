"""
loguru setup for oceanfv runs.

Messages go to stderr and, optionally, to a log file. The file sink is
uncolored and keeps solver diagnostics (per-solve PCG iteration counts are
logged at DEBUG) even when the console shows INFO and above.
"""

import sys
from loguru import logger


CONSOLE_FORMAT = (
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
TIME_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logging(level="INFO", show_time=True, file=None, file_level="DEBUG"):
    """Configure loguru for oceanfv.

    Parameters
    ----------
    level : str
        Console level (DEBUG, INFO, SUCCESS, WARNING, ERROR, CRITICAL).
    show_time : bool
        Whether to show timestamps on the console.
    file : str or Path, optional
        Log file appended to in addition to stderr.
    file_level : str
        Level of the file sink.
    """
    logger.remove()

    console_format = TIME_FORMAT + CONSOLE_FORMAT if show_time else CONSOLE_FORMAT
    logger.add(sys.stderr, format=console_format, level=level, colorize=True)

    if file is not None:
        logger.add(file, format=FILE_FORMAT, level=file_level, colorize=False)

    return logger


def configure_logging(config):
    """Apply the ``logging`` section of a ``SimulationConfig`` (or a ``LoggingConfig``)."""
    section = getattr(config, "logging", config)
    return setup_logging(level=section.level, show_time=section.show_time,
                         file=section.file, file_level=section.file_level)
