# src/halite/core/transport.py
"""
Transport: performs exactly one wire-level HTTP exchange.

The client never lets the transport follow redirects, apply its own cookie
jar or add default headers; all of that is decided by the core engine.
"""
import logging
import ssl
from dataclasses import dataclass, field
from typing import Optional, Protocol, runtime_checkable

import requests
from requests.adapters import HTTPAdapter

from .headers import Headers
from .session_manager import ThreadSafeSessionManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    """Raw result of one exchange."""
    status: int
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""


@runtime_checkable
class Transport(Protocol):
    """
    Synchronous transport contract.

    Implementations raise their library's own timeout/connection errors;
    the client maps them with classify_transport_exception().
    """

    def exchange(
        self,
        domain: str,
        verb: str,
        full_path: str,
        headers: Headers,
        body: bytes,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
    ) -> TransportResponse:
        ...

    def close(self) -> None:
        ...


def strip_fragment(full_path: str) -> str:
    """Fragments are never sent on the wire."""
    return full_path.split("#", 1)[0]


class SSLContextAdapter(HTTPAdapter):
    """HTTPAdapter that hands a caller-provided SSLContext to urllib3 unchanged."""

    def __init__(self, ssl_context: Optional[ssl.SSLContext] = None, **kwargs):
        self.ssl_context = ssl_context
        super().__init__(**kwargs)

    def init_poolmanager(self, connections, maxsize, block=False, **pool_kwargs):
        if self.ssl_context is not None:
            pool_kwargs['ssl_context'] = self.ssl_context
        super().init_poolmanager(connections, maxsize, block=block, **pool_kwargs)


class RequestsTransport:
    """
    Transport on top of requests with thread-local sessions.

    Args:
        pool_connections: Number of connection pools to cache
        pool_maxsize: Maximum connections per pool

    Example:
        >>> transport = RequestsTransport()
        >>> raw = transport.exchange("http://httpbin.org", "GET", "/get", Headers(), b"")
        >>> raw.status
        200
    """

    def __init__(self, pool_connections: int = 10, pool_maxsize: int = 10):
        self.pool_connections = pool_connections
        self.pool_maxsize = pool_maxsize
        self._session_manager = ThreadSafeSessionManager(session_factory=self._create_session)

    def _create_session(self, ssl_context: Optional[ssl.SSLContext] = None) -> requests.Session:
        """Create a session without default headers; retries and redirects stay off."""
        session = requests.Session()
        session.headers.clear()

        adapter = SSLContextAdapter(
            ssl_context=ssl_context,
            pool_connections=self.pool_connections,
            pool_maxsize=self.pool_maxsize,
            max_retries=0,
        )
        session.mount('http://', adapter)
        session.mount('https://', adapter)
        return session

    @staticmethod
    def _response_headers(response: requests.Response) -> Headers:
        # requests folds repeated headers (Set-Cookie) into one value; HTTPHeaderDict.items() keeps them
        headers = Headers()
        for name, value in response.raw.headers.items():
            headers.add(name, value)
        return headers

    def exchange(
        self,
        domain: str,
        verb: str,
        full_path: str,
        headers: Headers,
        body: bytes,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
    ) -> TransportResponse:
        url = domain + strip_fragment(full_path)
        session = self._session_manager.get_session(ssl_context)

        # prepare() вместо session.prepare_request(): без cookie jar и дефолтных заголовков сессии
        prepared = requests.Request(
            method=verb,
            url=url,
            headers=headers.to_request_dict(),
            data=body or None,
        ).prepare()

        response = session.send(
            prepared,
            allow_redirects=False,
            timeout=(connect_timeout, read_timeout),
        )
        try:
            return TransportResponse(
                status=response.status_code,
                headers=self._response_headers(response),
                body=response.content,
            )
        finally:
            response.close()

    def close(self) -> None:
        self._session_manager.close_all()
