"""Run log: every narration line goes to the console and to a file kept
next to the processed race days."""

import datetime
import logging
import os
import sys

from .errors import WriteError

LOG_FORMAT = '%(message)s'
LOGGER_NAME = 'bibassign'


def configure_run_log(output_dir: str, level: int = logging.INFO) -> str:
    """Attach console and file handlers to the package logger.

    Returns:
        Path of the run log file ("run-log-<yy-mm-dd-HHMMSS>.txt").

    Raises:
        WriteError: the output directory or the log file cannot be created.
    """
    stamp = datetime.datetime.now().strftime('%y-%m-%d-%H%M%S')
    log_path = os.path.join(output_dir, f"run-log-{stamp}.txt")
    try:
        os.makedirs(output_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
    except OSError as e:
        raise WriteError([(output_dir, str(e))]) from e

    close_run_log()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in (logging.StreamHandler(sys.stdout), file_handler):
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return log_path


def close_run_log() -> None:
    """Detach and close every handler configure_run_log attached."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
