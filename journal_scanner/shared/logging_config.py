"""
Logging for the journal scanner

Every module logs through get_project_logger(__name__). Loggers write to
stdout in one format; the level of all of them is set once at startup from
the LOG_LEVEL setting via configure_logging().
"""

import logging
import sys


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

_project_level = 'INFO'
_project_loggers: set[str] = set()


def parse_log_level(level: str) -> str:
    """Normalise a level name, raising ValueError for unknown names"""
    name = (level or '').strip().upper()
    if name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r}, expected one of {', '.join(LOG_LEVELS)}")
    return name


def setup_logger(name: str, level: str = "INFO", log_file: str = None) -> logging.Logger:
    """
    Setup a logger writing to stdout and optionally to a file

    Args:
        name: Logger name (typically __name__)
        level: Logging level name
        log_file: Optional file path to also write logs to

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Prevent duplicate handlers if logger already configured
    if logger.handlers:
        return logger

    logger.setLevel(parse_log_level(level))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_project_logger(module_name: str, verbose: bool = False) -> logging.Logger:
    """
    Get a stdout logger at the project level, or DEBUG when verbose

    Loggers created here follow later configure_logging() calls unless they
    were created verbose.
    """
    if verbose:
        return setup_logger(module_name, "DEBUG")

    _project_loggers.add(module_name)
    return setup_logger(module_name, _project_level)


def configure_logging(level: str) -> str:
    """Set the level of every project logger, existing and future; returns the level name"""
    global _project_level
    _project_level = parse_log_level(level)
    for name in _project_loggers:
        logging.getLogger(name).setLevel(_project_level)
    return _project_level
