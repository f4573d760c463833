"""
Logging configuration and utilities.

This module provides centralized logging configuration for the
loom package with appropriate formatting and levels.
"""

import logging
import os
from typing import Optional

_ROOT_LOGGER_NAME = "loom"


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure logging for the loom package.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output
    """
    # Determine log level
    if level is None:
        level = os.environ.get("LOOM_LOG_LEVEL", "WARNING")

    log_level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    logger.setLevel(log_level)

    # Remove existing handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Prevent propagation to root logger
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the given module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance under the ``loom`` hierarchy
    """
    if name == _ROOT_LOGGER_NAME or name.startswith(_ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")


class LoomLogger:
    """
    Centralized logging for debugging and monitoring.

    This class provides specialized logging methods for the stages of the
    template transformation pipeline.
    """

    def __init__(self, name: str):
        """
        Initialize logger for specific component.

        Args:
            name: Component name for logging context
        """
        self.logger = get_logger(name)

    def log_transform_start(self, source_path: str, length: int) -> None:
        """
        Log beginning of a template transformation.

        Args:
            source_path: Path (or pseudo path) of the template
            length: Number of characters in the template text
        """
        self.logger.info(f"Transforming template {source_path or '<text>'} ({length} chars)")

    def log_fragments(self, source_path: str, count: int) -> None:
        """
        Log the number of fragments scanned from one template file.

        Args:
            source_path: Path of the scanned template
            count: Number of fragments produced
        """
        self.logger.debug(f"Scanned {count} fragments from {source_path or '<text>'}")

    def log_include(self, including_path: str, included_path: str) -> None:
        """
        Log an include directive being followed.

        Args:
            including_path: Template that contains the directive
            included_path: Resolved path of the included template
        """
        self.logger.debug(f"Including {included_path} from {including_path or '<text>'}")

    def log_diagnostic(self, path: str, line: int, code: str, message: str, is_error: bool) -> None:
        """
        Log a translated backend diagnostic.

        Args:
            path: Template path the diagnostic maps to
            line: Template line the diagnostic maps to
            code: Backend diagnostic code
            message: Backend diagnostic message
            is_error: Whether the diagnostic is fatal
        """
        if is_error:
            self.logger.error(f"{path}({line}): error {code}: {message}")
        else:
            self.logger.warning(f"{path}({line}): warning {code}: {message}")

    def log_performance_metrics(self, parse_time: float, compile_time: float, execution_time: float) -> None:
        """
        Log performance metrics for monitoring.

        Args:
            parse_time: Time spent parsing and generating (seconds)
            compile_time: Time spent in the backend compiler (seconds)
            execution_time: Time spent running the generated unit (seconds)
        """
        self.logger.info(
            f"Performance: parse={parse_time:.3f}s, compile={compile_time:.3f}s, "
            f"execution={execution_time:.3f}s"
        )


# Initialize logging on module import
setup_logging()
