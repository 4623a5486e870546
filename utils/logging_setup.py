"""
Logging setup utilities for the pressure logger.
Provides consistent logging configuration across all modules.
"""
import logging
import datetime
from pathlib import Path


TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_level=logging.INFO, log_to_file=True, log_folder="logs"):
    """
    Configure logging for the application.

    Args:
        log_level: Logging level (default: logging.INFO)
        log_to_file: Whether to log to file in addition to console (default: True)
        log_folder: Folder to store log files (default: "logs")

    Returns:
        logging.Logger: Configured root logger
    """
    # Get root logger
    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    # Console handler (stderr)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    # File handler (optional)
    if log_to_file:
        log_folder_path = Path(log_folder)
        log_folder_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.datetime.now().strftime(TIMESTAMP_FORMAT)
        log_file = log_folder_path / f"pressure_log_{timestamp}.log"

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")

    return logger


def get_logger(name):
    """
    Get a logger instance for a specific module.

    Args:
        name: Name of the module (typically __name__)

    Returns:
        logging.Logger: Logger instance
    """
    return logging.getLogger(name)


def suppress_console_logging(level=logging.WARNING):
    """
    Raise the console threshold for long unattended runs, but keep file logging.
    Warnings and errors still reach the console.
    """
    for handler in logging.getLogger().handlers:
        if type(handler) is logging.StreamHandler:
            handler.setLevel(level)


def restore_console_logging(level=None):
    """
    Restore logging output to the console (StreamHandler) at the given level (default: INFO).
    """
    for handler in logging.getLogger().handlers:
        if type(handler) is logging.StreamHandler:
            handler.setLevel(level if level is not None else logging.INFO)
