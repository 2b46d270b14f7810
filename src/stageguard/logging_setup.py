"""Logging configuration for stageguard."""

from __future__ import annotations

import logging
import os

CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(
    logger_name: str = "stageguard",
    log_file: str | None = None,
    verbose: bool = False,
) -> logging.Logger:
    """
    Configure dual-handler logging (console + file).

    Module loggers (`stageguard.application.orchestrator`, ...) propagate
    to the package logger, so configuring "stageguard" covers all of them.

    Args:
        logger_name: Name for the logger
        log_file: Path to log file (None for no file logging)
        verbose: Enable DEBUG level on console (default WARNING, so JSON
            output on stdout stays clean)

    Returns:
        Configured logger instance
    """
    # Console handler on stderr
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))

    # File handler (if path provided)
    file_handler = None
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        )

    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.DEBUG)
    # Repeated CLI invocations in one process must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.addHandler(console_handler)
    if file_handler:
        logger.addHandler(file_handler)

    # Suppress noisy 3rd party loggers
    for noisy in ["jsonschema", "urllib3"]:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger
