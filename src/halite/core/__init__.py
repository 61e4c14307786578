"""Core Halite модули: опции, построение запроса, редиректы, транспорт."""

from .config import FOLLOW_MAX_HOPS, FOLLOW_STRICT, USER_AGENT, FollowConfig, TimeoutConfig
from .headers import Headers, normalize_header_name
from .options import Options
from .request import ALLOWED_SCHEMES, ALLOWED_VERBS, Request, build_request, build_uri, encode_body
from .response import REDIRECT_STATUSES, Response
from .redirector import Done, Following, Redirect, Redirector, redirect_method
from .transport import RequestsTransport, Transport, TransportResponse
from .async_transport import AsyncTransport, HttpxAsyncTransport
from .client import BaseClient, Client
from .exceptions import (
    HaliteException,
    RequestError,
    UnsupportedMethodError,
    UnsupportedSchemeError,
    NetworkError,
    TimeoutError,
    ConnectionError,
    HTTPStatusError,
    classify_transport_exception,
)

__all__ = [
    # Config
    "FOLLOW_MAX_HOPS",
    "FOLLOW_STRICT",
    "USER_AGENT",
    "FollowConfig",
    "TimeoutConfig",
    "Options",
    # Request / Response
    "ALLOWED_SCHEMES",
    "ALLOWED_VERBS",
    "Headers",
    "normalize_header_name",
    "Request",
    "build_request",
    "build_uri",
    "encode_body",
    "REDIRECT_STATUSES",
    "Response",
    # Redirects
    "Done",
    "Following",
    "Redirect",
    "Redirector",
    "redirect_method",
    # Transport
    "Transport",
    "TransportResponse",
    "RequestsTransport",
    "AsyncTransport",
    "HttpxAsyncTransport",
    # Client
    "BaseClient",
    "Client",
    # Exceptions
    "HaliteException",
    "RequestError",
    "UnsupportedMethodError",
    "UnsupportedSchemeError",
    "NetworkError",
    "TimeoutError",
    "ConnectionError",
    "HTTPStatusError",
    "classify_transport_exception",
]
