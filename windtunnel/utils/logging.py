"""Console and file logging for wind-tunnel runs (loguru sinks)."""

import sys
from pathlib import Path

from loguru import logger

_CONSOLE_BODY = (
    "<level>{level: <8}</level> | <magenta>{extra[case]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[case]} | {name}:{line} - {message}"


def setup_logging(level="INFO", show_time=True, log_file=None,
                  file_level="DEBUG", case="-"):
    """Replace the loguru sinks with the wind-tunnel console (and file) sinks.

    Parameters
    ----------
    level : str
        Console level (DEBUG, INFO, SUCCESS, WARNING, ERROR, CRITICAL)
    show_time : bool
        Whether to prefix console records with a timestamp.
    log_file : str or Path, optional
        Plain-text log written alongside the console output; truncated on
        every call.
    file_level : str
        Level of the file sink.
    case : str
        Case name shown in every record.
    """
    logger.remove()
    logger.configure(extra={"case": case})

    console_format = _CONSOLE_BODY
    if show_time:
        console_format = "<green>{time:HH:mm:ss.SSS}</green> | " + console_format
    logger.add(sys.stderr, format=console_format, level=level, colorize=True)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(path, format=_FILE_FORMAT, level=file_level,
                   colorize=False, mode="w")

    return logger


def setup_logging_from_config(config):
    """Install the sinks described by a ``SimulationConfig``."""
    log = config.logging
    return setup_logging(level=log.level, show_time=log.show_time,
                         log_file=log.file, file_level=log.file_level,
                         case=config.output.case_name)
