"""
Logging Service - Diagnostic logging with configurable levels
Writes to stderr; stdout carries only the report
"""
import sys
import logging
from typing import Optional


class LoggingService:
    """
    Centralized logging service with structured output.
    """

    def __init__(self, name: str = 'buildinfo-report', level: str = 'WARNING'):
        """
        Initialize logging service.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        self._logger = logging.getLogger(name)
        self._logger.propagate = False
        self._set_level(level)
        self._setup_handlers()

    def _set_level(self, level: str) -> None:
        """Set logging level from string"""
        level_map = {
            'DEBUG': logging.DEBUG,
            'INFO': logging.INFO,
            'WARNING': logging.WARNING,
            'ERROR': logging.ERROR,
            'CRITICAL': logging.CRITICAL
        }
        log_level = level_map.get(str(level).upper(), logging.WARNING)
        self._logger.setLevel(log_level)

    def _setup_handlers(self) -> None:
        """Setup console handler with formatting"""
        self._logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(self._logger.level)

        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(formatter)

        self._logger.addHandler(console_handler)

    def debug(self, message: str, **kwargs) -> None:
        """Log debug message"""
        self._logger.debug(message, extra=kwargs)

    def info(self, message: str, **kwargs) -> None:
        """Log info message"""
        self._logger.info(message, extra=kwargs)

    def warning(self, message: str, **kwargs) -> None:
        """Log warning message"""
        self._logger.warning(message, extra=kwargs)

    def critical(self, message: str, exc_info: bool = False, **kwargs) -> None:
        """
        Log critical message.

        Args:
            message: Critical message
            exc_info: Include exception traceback
            **kwargs: Additional context
        """
        self._logger.critical(message, exc_info=exc_info, extra=kwargs)

    def set_level(self, level: str) -> None:
        """
        Change logging level dynamically.

        Args:
            level: New log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        self._set_level(level)
        for handler in self._logger.handlers:
            handler.setLevel(self._logger.level)

    def log_startup(self, config: dict) -> None:
        """
        Log where the build descriptor will be read from.

        Args:
            config: Configuration dict
        """
        build_info = config.get('build_info')
        if not isinstance(build_info, dict):
            build_info = {}
        self.debug(f"Python: {sys.version.split()[0]}")
        self.debug(f"Build stamp: {build_info.get('path') or 'none'}")
        self.debug(f"Distribution: {build_info.get('distribution') or 'none'}")

    @property
    def logger(self) -> logging.Logger:
        """Get underlying logger instance"""
        return self._logger


# Global singleton instance
_logging_service: Optional[LoggingService] = None


def get_logger(name: str = 'buildinfo-report', level: str = 'WARNING') -> LoggingService:
    """
    Get or create logging service singleton.

    Args:
        name: Logger name
        level: Log level

    Returns:
        LoggingService instance
    """
    global _logging_service
    if _logging_service is None:
        _logging_service = LoggingService(name, level)
    return _logging_service
