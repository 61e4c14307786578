"""Halite - HTTP client with layered options, body negotiation and explicit redirect handling."""

import logging

from .version import __version__
from .core.client import Client
from .async_client import AsyncClient
from .core.config import FollowConfig, TimeoutConfig
from .core.env_config import HaliteSettings, load_from_env
from .core.headers import Headers
from .core.options import Options
from .core.request import Request
from .core.response import Response
from .core.redirector import Redirector
from .core.transport import RequestsTransport, Transport, TransportResponse
from .core.async_transport import AsyncTransport, HttpxAsyncTransport
from .core.logging import HaliteLogger, LoggingConfig, configure_logging, get_logger
from .core.exceptions import (
    HaliteException,
    RequestError,
    UnsupportedMethodError,
    UnsupportedSchemeError,
    NetworkError,
    TimeoutError,
    ConnectionError,
    HTTPStatusError,
)
from .api import request, get, head, post, put, patch, delete, options

# NullHandler: без настройки логирования библиотека ничего не выводит
logging.getLogger('halite').addHandler(logging.NullHandler())

__license__ = "MIT"

__all__ = [
    "__version__",
    # Clients
    "Client",
    "AsyncClient",
    # Options
    "Options",
    "TimeoutConfig",
    "FollowConfig",
    "HaliteSettings",
    "load_from_env",
    # Request / Response
    "Headers",
    "Request",
    "Response",
    "Redirector",
    # Transport
    "Transport",
    "TransportResponse",
    "RequestsTransport",
    "AsyncTransport",
    "HttpxAsyncTransport",
    # Logging
    "HaliteLogger",
    "LoggingConfig",
    "configure_logging",
    "get_logger",
    # Exceptions
    "HaliteException",
    "RequestError",
    "UnsupportedMethodError",
    "UnsupportedSchemeError",
    "NetworkError",
    "TimeoutError",
    "ConnectionError",
    "HTTPStatusError",
    # Shortcuts
    "request",
    "get",
    "head",
    "post",
    "put",
    "patch",
    "delete",
    "options",
]
