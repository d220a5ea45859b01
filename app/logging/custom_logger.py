"""
Custom leveled logger
Levels: warning, info, request, error, slow, great

Records go through the standard ``logging`` tree; ``LevelAwareFormatter``
(installed by ``app.core.logging.setup_logging``) renders each custom level
with its own prefix.
"""
import logging
import traceback
from typing import Any, Dict

from app.logging.log_levels import LogLevel
from app.logging.formatters import DefaultFormatter, get_formatter_for_level


# Map custom levels onto stdlib levels
LOG_LEVEL_MAP = {
    LogLevel.WARNING: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.REQUEST: logging.INFO,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.SLOW: logging.WARNING,
    LogLevel.GREAT: logging.INFO,
}


class LevelAwareFormatter(logging.Formatter):
    """Formats records emitted by CustomLogger with their level formatter"""

    def __init__(self):
        super().__init__()
        self._default = DefaultFormatter()

    def format(self, record: logging.LogRecord) -> str:
        level = getattr(record, "custom_level", None)
        if level is None:
            return self._default.format(record)
        return get_formatter_for_level(LogLevel(level)).format(record)


class CustomLogger:
    """
    Leveled logger with keyword context

    Usage:
        logger = CustomLogger("my_module")
        logger.info("Repository imported", repo_id=123)
        logger.error("Import failed", exc_info=True, full_name="owner/repo")
        logger.slow("Slow GitHub call", duration=5.2)
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(name)

    def _log(
        self,
        level: LogLevel,
        message: str,
        exc_info: bool = False,
        **context: Any
    ) -> None:
        """Internal logging method"""
        if context:
            rendered = " ".join(f"{key}={value}" for key, value in context.items())
            message = f"{message} | {rendered}"

        extra = {"custom_level": level.value, "custom_data": context}
        if exc_info:
            extra["clean_traceback"] = self._get_clean_traceback()

        self.logger.log(
            LOG_LEVEL_MAP[level],
            message,
            extra=extra,
            exc_info=exc_info
        )

    def _get_clean_traceback(self) -> str:
        """
        Current traceback without duplicated lines or library frames
        """
        tb_lines = traceback.format_exc().split('\n')

        seen = set()
        clean_lines = []

        for line in tb_lines:
            if line.strip() and line not in seen:
                if not any(skip in line for skip in ['/usr/local/lib/python', 'site-packages']):
                    seen.add(line)
                    clean_lines.append(line)

        return '\n'.join(clean_lines)

    def warning(self, message: str, **context: Any) -> None:
        """
        Something deserves attention but is not a failure

        Example:
            logger.warning("Commit lookup failed", full_name="owner/repo")
        """
        self._log(LogLevel.WARNING, message, **context)

    def info(self, message: str, **context: Any) -> None:
        """
        Noteworthy system event

        Example:
            logger.info("User signed in", user_id=123)
        """
        self._log(LogLevel.INFO, message, **context)

    def request(
        self,
        message: str,
        method: str,
        path: str,
        status_code: int,
        duration: float,
        **context: Any
    ) -> None:
        """
        HTTP request line

        Example:
            logger.request(
                "API request",
                method="GET",
                path="/api/repositories",
                status_code=200,
                duration=0.152
            )
        """
        self._log(
            LogLevel.REQUEST,
            message,
            method=method,
            path=path,
            status_code=status_code,
            duration=duration,
            **context
        )

    def error(
        self,
        message: str,
        exc_info: bool = True,
        **context: Any
    ) -> None:
        """
        Failure that needs attention

        Example:
            try:
                ...
            except SQLAlchemyError:
                logger.error("Failed to add squad creator", squad_id=7)
        """
        self._log(LogLevel.ERROR, message, exc_info=exc_info, **context)

    def slow(
        self,
        message: str,
        duration: float,
        threshold: float = 1.0,
        **context: Any
    ) -> None:
        """
        Operation exceeded its time budget

        Example:
            logger.slow("Slow request", duration=5.2, threshold=1.0, path="/api/repositories/import")
        """
        self._log(
            LogLevel.SLOW,
            message,
            duration=duration,
            threshold=threshold,
            **context
        )

    def great(self, message: str, **context: Any) -> None:
        """
        Positive milestone

        Example:
            logger.great("Seeding complete", seeded=12)
        """
        self._log(LogLevel.GREAT, message, **context)


_loggers: Dict[str, CustomLogger] = {}


def get_logger(name: str) -> CustomLogger:
    """
    Return the shared CustomLogger for ``name``

    Usage:
        from app.logging import get_logger
        logger = get_logger(__name__)
    """
    if name not in _loggers:
        _loggers[name] = CustomLogger(name)
    return _loggers[name]
