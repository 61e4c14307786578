# src/halite/core/async_transport.py
"""
Асинхронный транспорт на базе httpx.

Один httpx.AsyncClient на SSL контекст; редиректы и cookie jar httpx
не используются - запросы строятся напрямую и отправляются через send().
"""
import asyncio
import logging
import ssl
from typing import Dict, Optional, Protocol, runtime_checkable

import httpx

from .headers import Headers
from .transport import TransportResponse, strip_fragment

logger = logging.getLogger(__name__)


@runtime_checkable
class AsyncTransport(Protocol):
    """Asynchronous transport contract; same arguments as Transport.exchange."""

    async def exchange(
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

    async def close(self) -> None:
        ...


class HttpxAsyncTransport:
    """
    Transport on top of httpx.AsyncClient.

    Args:
        max_connections: Maximum concurrent connections per client
        max_keepalive_connections: Maximum idle keep-alive connections

    Example:
        >>> transport = HttpxAsyncTransport()
        >>> raw = await transport.exchange("https://httpbin.org", "GET", "/get", Headers(), b"")
        >>> await transport.close()
    """

    def __init__(self, max_connections: int = 10, max_keepalive_connections: int = 10):
        self._limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
        )
        self._clients: Dict[Optional[int], httpx.AsyncClient] = {}
        # Lock создаётся в работающем event loop при первом использовании
        self._lock: Optional[asyncio.Lock] = None

    def _get_lock(self) -> asyncio.Lock:
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def _get_client(self, ssl_context: Optional[ssl.SSLContext]) -> httpx.AsyncClient:
        """Получить или создать httpx клиент для SSL контекста."""
        key = id(ssl_context) if ssl_context is not None else None
        async with self._get_lock():
            client = self._clients.get(key)
            if client is None:
                client = httpx.AsyncClient(
                    verify=ssl_context if ssl_context is not None else True,
                    limits=self._limits,
                    follow_redirects=False,
                    trust_env=False,
                )
                self._clients[key] = client
            return client

    async def exchange(
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
        client = await self._get_client(ssl_context)
        timeout = httpx.Timeout(None, connect=connect_timeout, read=read_timeout)

        # Request напрямую: без дефолтных заголовков и кук httpx клиента
        request = httpx.Request(
            verb,
            domain + strip_fragment(full_path),
            headers=headers.multi_items(),
            content=body or None,
            extensions={"timeout": timeout.as_dict()},
        )
        response = await client.send(request)
        try:
            response_headers = Headers()
            for name, value in response.headers.multi_items():
                response_headers.add(name, value)
            return TransportResponse(
                status=response.status_code,
                headers=response_headers,
                body=response.content,
            )
        finally:
            await response.aclose()

    async def close(self) -> None:
        """Закрыть все клиенты."""
        async with self._get_lock():
            clients = list(self._clients.values())
            self._clients.clear()
        for client in clients:
            await client.aclose()
