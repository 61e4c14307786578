"""
Конфигурация таймаутов и редиректов.

Все конфиги immutable (frozen dataclasses) для потокобезопасности.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Tuple, Union

from ..version import __version__

# User-Agent по умолчанию
USER_AGENT = f"Halite/{__version__}"

# Максимум последовательных редиректов для with_follow() без аргументов
FOLLOW_MAX_HOPS = 5

# Политика методов на 301/302: True - сохранять метод и тело
FOLLOW_STRICT = True

TimeoutValue = Union[int, float, timedelta, None]


def _seconds(value: TimeoutValue) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TIMEOUT CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class TimeoutConfig:
    """
    Конфигурация таймаутов.

    Args:
        connect: Таймаут подключения (сек), None - без ограничения
        read: Таймаут чтения данных (сек), None - без ограничения

    Examples:
        >>> TimeoutConfig(connect=5, read=30)
        >>> TimeoutConfig(connect=timedelta(seconds=3))
    """
    connect: Optional[float] = None
    read: Optional[float] = None

    def __post_init__(self):
        """Валидация и приведение к секундам."""
        object.__setattr__(self, 'connect', _seconds(self.connect))
        object.__setattr__(self, 'read', _seconds(self.read))
        if self.connect is not None and self.connect <= 0:
            raise ValueError("connect timeout must be positive")
        if self.read is not None and self.read <= 0:
            raise ValueError("read timeout must be positive")

    @classmethod
    def coerce(
        cls,
        value: Union["TimeoutConfig", TimeoutValue, Tuple[TimeoutValue, TimeoutValue]],
    ) -> "TimeoutConfig":
        """
        Привести timeout аргумент к TimeoutConfig.

        Число задаёт read таймаут, кортеж - (connect, read).

        Examples:
            >>> TimeoutConfig.coerce(30)
            TimeoutConfig(connect=None, read=30.0)
            >>> TimeoutConfig.coerce((3, 10))
            TimeoutConfig(connect=3.0, read=10.0)
        """
        if isinstance(value, TimeoutConfig):
            return value
        if isinstance(value, tuple):
            return cls(connect=value[0], read=value[1])
        return cls(read=value)

    def as_tuple(self) -> Tuple[Optional[float], Optional[float]]:
        """Вернуть как (connect, read) для requests."""
        return (self.connect, self.read)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# FOLLOW CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class FollowConfig:
    """
    Политика следования редиректам.

    Args:
        hops: Максимум редиректов; 0 - не следовать (по умолчанию)
        strict: На 301/302 сохранять метод и тело (True) или
                переписывать в GET без тела (False)

    Examples:
        >>> FollowConfig()                    # не следовать
        >>> FollowConfig(hops=3)              # до 3 редиректов
        >>> FollowConfig(hops=5, strict=False)
    """
    hops: int = 0
    strict: bool = FOLLOW_STRICT

    def __post_init__(self):
        """Валидация."""
        if self.hops < 0:
            raise ValueError("follow hops must be non-negative")

    @classmethod
    def coerce(cls, value: Union["FollowConfig", int, bool], strict: Optional[bool] = None) -> "FollowConfig":
        """
        Привести follow аргумент к FollowConfig.

        True означает FOLLOW_MAX_HOPS, False - 0.
        """
        if isinstance(value, FollowConfig):
            if strict is None:
                return value
            return cls(hops=value.hops, strict=strict)
        if isinstance(value, bool):
            hops = FOLLOW_MAX_HOPS if value else 0
        else:
            hops = int(value)
        return cls(hops=hops, strict=FOLLOW_STRICT if strict is None else strict)
