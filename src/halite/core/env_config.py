# src/halite/core/env_config.py
"""
Загрузка опций клиента из переменных окружения и .env файлов.

Переменные (префикс HALITE_):
    HALITE_USER_AGENT=my-service/1.0
    HALITE_CONNECT_TIMEOUT=5
    HALITE_READ_TIMEOUT=30
    HALITE_FOLLOW=5
    HALITE_FOLLOW_STRICT=false
    HALITE_LOGGING=true
    HALITE_LOG_LEVEL=DEBUG
    HALITE_LOG_FORMAT=json
    HALITE_LOG_FILE_PATH=/var/log/halite.log
"""

from typing import Any, Dict, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging import HaliteLogger, LoggingConfig
from .options import Options


class HaliteSettings(BaseSettings):
    """
    Client defaults read from the environment.

    Priority (highest to lowest): init kwargs, environment, .env file, defaults.

    Example:
        >>> settings = HaliteSettings(_env_file=".env.production")
        >>> settings.follow
        5
    """

    model_config = SettingsConfigDict(
        env_prefix='HALITE_',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    user_agent: Optional[str] = Field(default=None, min_length=1)

    connect_timeout: Optional[float] = Field(default=None, gt=0, description="Connect timeout in seconds")
    read_timeout: Optional[float] = Field(default=None, gt=0, description="Read timeout in seconds")

    follow: int = Field(default=0, ge=0, description="Maximum redirects to follow")
    follow_strict: bool = Field(default=True, description="Keep method and body on 301/302")

    logging: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "text", "colored"] = Field(default="text")
    log_file_path: Optional[str] = None

    def to_logging_config(self) -> LoggingConfig:
        return LoggingConfig.create(
            level=self.log_level,
            format=self.log_format,
            enable_file=self.log_file_path is not None,
            file_path=self.log_file_path,
        )

    def to_options(self) -> Options:
        """
        Convert to Options.

        Only settings that were actually provided (env, .env or kwargs)
        count as explicit, so the result merges like a hand-built Options.
        """
        provided = self.model_fields_set
        kwargs: Dict[str, Any] = {}

        if self.user_agent is not None:
            kwargs['headers'] = {"User-Agent": self.user_agent}
        if 'connect_timeout' in provided:
            kwargs['connect_timeout'] = self.connect_timeout
        if 'read_timeout' in provided:
            kwargs['read_timeout'] = self.read_timeout
        if 'follow' in provided:
            kwargs['follow'] = self.follow
        if 'follow_strict' in provided:
            kwargs['follow_strict'] = self.follow_strict
        if 'logging' in provided:
            kwargs['logging'] = self.logging
            if self.logging:
                kwargs['logger'] = HaliteLogger(self.to_logging_config())

        return Options.create(**kwargs)


def load_from_env(env_file: Optional[str] = None, **overrides: Any) -> Options:
    """
    Load client options from environment variables.

    Args:
        env_file: Optional .env file path
        **overrides: Explicit values (HaliteSettings field names), highest priority

    Returns:
        Options for Client(options=...)

    Raises:
        pydantic.ValidationError: Invalid value (e.g. negative timeout)

    Example:
        >>> client = Client(options=load_from_env(".env"))
        >>> options = load_from_env(follow=3)   # override
    """
    settings = HaliteSettings(_env_file=env_file, **overrides)
    return settings.to_options()
