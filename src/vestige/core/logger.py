"""
Logging Setup

Centralized logging configuration for Vestige runs. Console output carries
the per-target progress; rotating log files keep the full debug trail and a
separate error log for skipped targets and failed assets.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional, Dict


APP_NAME = "vestige"

DETAILED_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s'
CONSOLE_FORMAT = '%(asctime)s | %(levelname)s | %(message)s'


class VestigeLogger:
    """
    Owns the handlers of the ``vestige`` logger hierarchy.

    Module loggers created with ``logging.getLogger(__name__)`` inside the
    ``vestige`` package propagate here, so a single setup call covers the
    whole pipeline.
    """

    def __init__(self, log_dir: Optional[str] = "logs", app_name: str = APP_NAME):
        """
        Args:
            log_dir: Directory for the rotating log files, or None for
                console-only logging
            app_name: Root logger name
        """
        self.log_dir = Path(log_dir) if log_dir else None
        self.app_name = app_name
        self.loggers: Dict[str, logging.Logger] = {}

        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)

    def setup_logger(self, level: int = logging.INFO) -> logging.Logger:
        """
        Attach console and file handlers to the application logger.

        Args:
            level: Console logging level

        Returns:
            The configured application logger
        """
        logger = logging.getLogger(self.app_name)
        logger.setLevel(logging.DEBUG)

        # Reconfiguring replaces our previous handlers
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))
        logger.addHandler(console_handler)

        if self.log_dir is not None:
            detailed_formatter = logging.Formatter(DETAILED_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

            file_handler = logging.handlers.RotatingFileHandler(
                self.log_dir / f"{self.app_name}.log",
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(detailed_formatter)
            logger.addHandler(file_handler)

            error_handler = logging.handlers.RotatingFileHandler(
                self.log_dir / f"{self.app_name}_errors.log",
                maxBytes=5*1024*1024,  # 5MB
                backupCount=3,
                encoding='utf-8'
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(detailed_formatter)
            logger.addHandler(error_handler)

        self.loggers['main'] = logger
        return logger

    def get_logger(self, name: str) -> logging.Logger:
        full_name = f"{self.app_name}.{name}"
        if full_name not in self.loggers:
            self.loggers[full_name] = logging.getLogger(full_name)
        return self.loggers[full_name]

    def log_system_info(self):
        """Log interpreter and working-directory details at startup."""
        logger = self.get_logger('system')

        logger.debug("=== Vestige run started ===")
        logger.debug(f"Python version: {sys.version}")
        logger.debug(f"Platform: {sys.platform}")
        logger.debug(f"Working directory: {os.getcwd()}")
        if self.log_dir is not None:
            logger.debug(f"Log directory: {self.log_dir.absolute()}")


_logger_instance: Optional[VestigeLogger] = None


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger below the application logger.

    Args:
        name: Component name (optional)

    Returns:
        Logger instance
    """
    global _logger_instance

    if _logger_instance is None:
        _logger_instance = VestigeLogger(log_dir=None)

    return _logger_instance.get_logger(name or 'main')


def initialize_logging(log_dir: Optional[str] = "logs", level: int = logging.INFO) -> logging.Logger:
    """
    Initialize the global logging system.

    Args:
        log_dir: Directory for log files, or None to log to the console only
        level: Console logging level

    Returns:
        The application logger
    """
    global _logger_instance
    _logger_instance = VestigeLogger(log_dir)
    logger = _logger_instance.setup_logger(level)
    _logger_instance.log_system_info()
    return logger
