"""
Иерархия исключений Halite.

Классификация:
- ошибки валидации (UnsupportedMethodError, UnsupportedSchemeError, RequestError)
  выбрасываются до любого сетевого обмена и никогда не ретраятся
- сетевые ошибки (TimeoutError, ConnectionError) пробрасываются вызывающему
  без внутренних повторов
"""

import builtins
import socket
from typing import Optional

import httpx
import requests
import urllib3

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class HaliteException(Exception):
    """Базовое исключение Halite."""

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ВАЛИДАЦИЯ ЗАПРОСА
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class RequestError(HaliteException):
    """
    Невалидная комбинация опций.

    Примеры:
    - SSL контекст вместе с http:// URI
    - тело запроса, которое нельзя сериализовать
    """
    pass

class UnsupportedMethodError(HaliteException):
    """HTTP метод не входит в список разрешённых."""

    def __init__(self, verb: str):
        self.verb = verb
        super().__init__(f"Unknown method: {verb}")

class UnsupportedSchemeError(HaliteException):
    """
    URI без схемы или со схемой кроме http/https.

    Args:
        message: Сообщение об ошибке
        scheme: Схема URI (None если отсутствует)
    """

    def __init__(self, message: str, scheme: Optional[str] = None):
        self.scheme = scheme
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# СЕТЕВЫЕ ОШИБКИ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class NetworkError(HaliteException):
    """Сетевая ошибка транспорта."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        full_message = f"{message}"
        if url:
            full_message += f" (url: {url})"
        super().__init__(full_message)

class TimeoutError(NetworkError):
    """
    Таймаут подключения или чтения.

    Args:
        message: Сообщение об ошибке
        url: URL запроса
        timeout_type: Тип таймаута ('connect' или 'read')
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        timeout_type: Optional[str] = None
    ):
        self.timeout_type = timeout_type

        msg = message
        if timeout_type:
            msg += f" ({timeout_type} timeout)"

        super().__init__(msg, url)

class ConnectionError(NetworkError):
    """
    Ошибка подключения.

    Примеры:
    - Connection refused
    - Connection reset
    - DNS resolution failed
    """
    pass

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# HTTP СТАТУС
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class HTTPStatusError(HaliteException):
    """
    4xx/5xx ответ. Выбрасывается только из Response.raise_for_status().

    Args:
        status_code: HTTP статус
        url: URL
        message: Дополнительное сообщение
    """

    def __init__(self, status_code: int, url: str, message: str = ""):
        self.status_code = status_code
        self.url = url

        msg = f"HTTP {status_code} error for {url}"
        if message:
            msg += f": {message}"

        super().__init__(msg)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# УТИЛИТЫ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _timeout_type(exc: Exception) -> Optional[str]:
    if isinstance(exc, requests.exceptions.ConnectTimeout):
        return "connect"
    if isinstance(exc, requests.exceptions.ReadTimeout):
        return "read"
    if isinstance(exc, httpx.ConnectTimeout):
        return "connect"
    if isinstance(exc, httpx.ReadTimeout):
        return "read"
    return None


def _wrapped_read_timeout(exc: BaseException) -> bool:
    """
    Таймаут чтения, завёрнутый в ошибку соединения.

    requests оборачивает urllib3.ReadTimeoutError при чтении тела в
    requests.ConnectionError; исходный таймаут лежит в args, __cause__
    или __context__ (возможно, на несколько уровней глубже).
    """
    pending = [exc]
    seen = set()
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        if current is not exc and isinstance(
            current, (urllib3.exceptions.ReadTimeoutError, socket.timeout, builtins.TimeoutError)
        ):
            return True
        pending.extend(arg for arg in current.args if isinstance(arg, BaseException))
        for linked in (current.__cause__, current.__context__):
            if linked is not None:
                pending.append(linked)
    return False


def classify_transport_exception(exc: Exception, url: str) -> Exception:
    """
    Преобразует исключение транспорта в исключение Halite.

    Таймауты проверяются первыми: requests.ConnectTimeout наследует
    и Timeout, и ConnectionError.

    Args:
        exc: Исключение транспорта
        url: URL запроса

    Returns:
        TimeoutError / ConnectionError, либо исходное исключение
        без изменений для всех остальных ошибок
    """
    if isinstance(exc, HaliteException):
        return exc

    timeout_types = (
        requests.exceptions.Timeout,
        httpx.TimeoutException,
        socket.timeout,
        builtins.TimeoutError,
    )
    connection_types = (
        requests.exceptions.ConnectionError,
        httpx.NetworkError,
        builtins.ConnectionError,
    )

    if isinstance(exc, timeout_types):
        return TimeoutError(str(exc) or "Request timed out", url, _timeout_type(exc))

    if isinstance(exc, connection_types):
        if _wrapped_read_timeout(exc):
            return TimeoutError(str(exc) or "Read timed out", url, "read")
        return ConnectionError(str(exc) or "Connection failed", url)

    return exc
