# src/halite/async_client.py
"""
Асинхронный клиент на базе httpx.

Та же семантика, что и у Client: merge опций, валидация, Redirector,
перенос кук в session state. Единственная точка ожидания - обмен с
транспортом; merge, построение запроса и решения о редиректах синхронны.
"""

from typing import Any, Optional

from .core.client import BaseClient, OptionsInput
from .core.async_transport import AsyncTransport, HttpxAsyncTransport
from .core.logging import HaliteLogger
from .core.options import Options
from .core.redirector import Redirector
from .core.request import Request
from .core.response import Response


class AsyncClient(BaseClient):
    """
    Asynchronous HTTP client.

    Example:
        >>> async with AsyncClient(follow=5) as client:
        ...     response = await client.get("https://httpbin.org/redirect/1")
        ...     response.status_code
        200
    """

    def _default_transport(self) -> AsyncTransport:
        return HttpxAsyncTransport()

    async def __aenter__(self) -> "AsyncClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Закрыть транспорт, если он создан этим клиентом."""
        if self._owns_transport:
            await self._transport.close()

    async def _exchange(
        self,
        request: Request,
        effective: Options,
        call_logger: Optional[HaliteLogger],
    ) -> Response:
        self._check_tls(request, effective)
        if call_logger is not None:
            call_logger.request(request)
        try:
            raw = await self._transport.exchange(**self._transport_args(request, effective))
        except Exception as e:
            mapped = self._map_error(e, request)
            if mapped is e:
                raise
            raise mapped from e
        return self._finish_exchange(request, raw, call_logger)

    async def request(self, verb: str, uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
        """
        Выполнить вызов.

        Args:
            verb: HTTP метод
            uri: Абсолютный http/https URI
            options: Опции вызова (Options или dict)
            **kwargs: Ключи Options.create() только для этого вызова

        Raises:
            UnsupportedMethodError, UnsupportedSchemeError, RequestError,
            TimeoutError, ConnectionError
        """
        effective = self._effective(options, kwargs)
        request = self._prepare(verb, uri, effective)
        call_logger = self._call_logger(effective)

        with self._correlation(call_logger):
            response = await self._exchange(request, effective, call_logger)
            if effective.follow.hops == 0:
                return response

            redirector = Redirector(request, response, effective.follow.hops, effective.follow.strict)
            return await redirector.perform_async(lambda hop: self._exchange(hop, effective, call_logger))

    # ==================== HTTP методы ====================

    async def get(self, uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
        return await self.request("GET", uri, options, **kwargs)

    async def head(self, uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
        return await self.request("HEAD", uri, options, **kwargs)

    async def post(self, uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
        return await self.request("POST", uri, options, **kwargs)

    async def put(self, uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
        return await self.request("PUT", uri, options, **kwargs)

    async def patch(self, uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
        return await self.request("PATCH", uri, options, **kwargs)

    async def delete(self, uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
        return await self.request("DELETE", uri, options, **kwargs)

    async def options(self, uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
        return await self.request("OPTIONS", uri, options, **kwargs)
