# sqliradar/utils/logger.py - Logging Scan Output

import logging
import os
import sys
from datetime import datetime
from typing import Optional

from colorama import Fore, Style

DEFAULT_LOG_DIR = "scan_results"
DATE_FORMAT = "%d-%m-%Y %H:%M:%S"


def setup_logger(name: str, level: int = logging.INFO, log_to_file: bool = False,
                 log_dir: Optional[str] = None) -> logging.Logger:
    """
    Create a logger that prints colored output to stderr and optionally logs to a file.

    Args:
        name: The name of the logger
        level: The logging level
        log_to_file: Whether to also log output to a file (default: False)
        log_dir: Directory for log files (default: ./scan_results)
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # avoid duplicate handlers
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_fmt = (
        f"%(asctime)s {Fore.GREEN}[%(levelname)s]{Style.RESET_ALL} "
        "%(message)s"
    )
    console_handler.setFormatter(logging.Formatter(console_fmt, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    if log_to_file:
        add_file_handler(log_dir, name)

    return logger


def add_file_handler(log_dir: Optional[str], *names: str) -> str:
    """
    Attach one timestamped scan log file to the given loggers.

    Returns:
        str: Path of the log file
    """
    log_dir = log_dir or os.path.join(os.getcwd(), DEFAULT_LOG_DIR)
    os.makedirs(log_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"scan_{timestamp}.log")

    file_handler = logging.FileHandler(log_file)
    # File output without colors
    file_fmt = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
    file_handler.setFormatter(logging.Formatter(file_fmt, datefmt=DATE_FORMAT))

    for name in names:
        logger = logging.getLogger(name)
        logger.addHandler(file_handler)

    return log_file


def set_level(level: int, *names: str) -> None:
    """Change the level of already configured loggers and their handlers."""
    for name in names:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
