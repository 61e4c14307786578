"""
Настройки логгера запросов/ответов.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    JSON = "json"
    TEXT = "text"
    COLORED = "colored"


# Ротация лог файла по умолчанию
DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5


@dataclass(frozen=True)
class LoggingConfig:
    """
    What HaliteLogger writes and where.

    Attributes:
        level: Minimum level of emitted records
        format: json, text or colored
        enable_console: Write to stderr
        enable_file: Write to a rotating file at ``file_path``
        max_bytes / backup_count: Rotation of the log file
        enable_correlation_id: Tag every record of one call with the same ID
        log_headers: Include (masked) headers in Request records
        extra_fields: Static fields (service, environment) added to every record

    Example:
        >>> LoggingConfig.create(level="debug", format="json", log_headers=False)
    """

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.TEXT
    enable_console: bool = True
    enable_file: bool = False
    file_path: Optional[str] = None
    max_bytes: int = DEFAULT_MAX_BYTES
    backup_count: int = DEFAULT_BACKUP_COUNT
    enable_correlation_id: bool = True
    log_headers: bool = True
    extra_fields: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.enable_file and not self.file_path:
            raise ValueError("file_path is required when enable_file=True")
        if self.max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        if self.backup_count < 0:
            raise ValueError("backup_count must be non-negative")

    @classmethod
    def create(cls, level: str = "INFO", format: str = "text", **kwargs: Any) -> "LoggingConfig":
        """
        Build from plain strings (values read from env or CLI flags).

        Remaining keyword arguments are passed to the dataclass unchanged;
        ``extra_fields=None`` becomes an empty dict.

        Raises:
            ValueError: Unknown level or format, or invalid file settings
        """
        if kwargs.get('extra_fields') is None:
            kwargs['extra_fields'] = {}
        return cls(level=LogLevel(level.upper()), format=LogFormat(format.lower()), **kwargs)
