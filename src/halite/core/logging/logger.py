"""
Request/response logger for Halite.

HaliteLogger is the logging collaborator of Client/AsyncClient: when
``Options.logging`` is enabled the client calls ``request()`` before and
``response()`` after every exchange (redirect hops included).
"""

import logging
from typing import TYPE_CHECKING, Any, Optional

from ...utils.sanitizer import mask_headers, mask_sensitive_data, mask_url
from .config import LoggingConfig, LogLevel
from .filters import CorrelationIdFilter, ExtraFieldsFilter
from .formatters import get_formatter
from .handlers import create_console_handler, create_file_handler

if TYPE_CHECKING:
    from ..request import Request
    from ..response import Response

DEFAULT_LOGGER_NAME = "halite"


class HaliteLogger:
    """
    Structured logger with console/file handlers.

    Extra keyword arguments become record fields; secrets in them are masked.

    Example:
        >>> logger = HaliteLogger(LoggingConfig.create(level="DEBUG", format="json"))
        >>> logger.info("Started", service="billing")
        >>> client = Client(logger=logger)   # logs every request/response
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: str = DEFAULT_LOGGER_NAME):
        self.config = config or LoggingConfig()
        self.name = name
        self._closed = False

        level = self._get_level(self.config.level)
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)
        self._logger.propagate = False

        # Переинициализация: старые handlers закрываются
        for handler in self._logger.handlers[:]:
            self._logger.removeHandler(handler)
            handler.close()

        filters = []
        if self.config.enable_correlation_id:
            filters.append(CorrelationIdFilter())
        if self.config.extra_fields:
            filters.append(ExtraFieldsFilter(self.config.extra_fields))

        formatter = get_formatter(self.config.format.value)

        if self.config.enable_console:
            self._logger.addHandler(create_console_handler(level, formatter, filters))

        if self.config.enable_file and self.config.file_path:
            self._logger.addHandler(create_file_handler(
                file_path=self.config.file_path,
                level=level,
                formatter=formatter,
                max_bytes=self.config.max_bytes,
                backup_count=self.config.backup_count,
                filters=filters
            ))

    @staticmethod
    def _get_level(level: LogLevel) -> int:
        return getattr(logging, level.value)

    @property
    def logger(self) -> logging.Logger:
        """Underlying stdlib logger."""
        return self._logger

    # ==================== Collaborator hooks ====================

    def request(self, request: 'Request') -> None:
        """
        Log an outgoing request. The request is only read.

        Example output (text):
            [...] [INFO] [halite] Request verb=POST uri=https://api.com/items headers={...} body_size=17
        """
        fields = {"verb": request.verb, "uri": mask_url(request.uri)}
        if self.config.log_headers:
            fields["headers"] = mask_headers(request.headers)
        fields["body_size"] = len(request.body)
        self.info("Request", **fields)

    def response(self, response: 'Response') -> None:
        """Log a received response. The response is only read."""
        self.info(
            "Response",
            status=response.status,
            uri=mask_url(response.uri),
            content_type=response.content_type,
            body_size=len(response.body),
            redirects=len(response.history),
        )

    # ==================== Proxy methods ====================

    def _log(self, level: int, message: str, fields: dict, exc_info: bool = False) -> None:
        self._logger.log(level, message, extra=mask_sensitive_data(fields), exc_info=exc_info)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """
        Example:
            >>> logger.info("Request completed", status=200, duration_ms=150)
        """
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, message, kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log with traceback; call from an exception handler."""
        self._log(logging.ERROR, message, kwargs, exc_info=True)

    def close(self) -> None:
        """
        Flush and close all handlers. Idempotent.
        """
        if self._closed:
            return

        for handler in self._logger.handlers[:]:
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)

        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


# Global logger instance
_default_logger: Optional[HaliteLogger] = None


def get_logger(config: Optional[LoggingConfig] = None) -> HaliteLogger:
    """
    Get the global logger, creating it on first call.

    ``config`` is only used when the logger does not exist yet.
    """
    global _default_logger

    if _default_logger is None:
        _default_logger = HaliteLogger(config)

    return _default_logger


def configure_logging(config: LoggingConfig) -> HaliteLogger:
    """
    Replace the global logger with a newly configured one.

    Example:
        >>> configure_logging(LoggingConfig.create(level="DEBUG", format="colored"))
    """
    global _default_logger
    if _default_logger is not None:
        _default_logger.close()
    _default_logger = HaliteLogger(config)
    return _default_logger
