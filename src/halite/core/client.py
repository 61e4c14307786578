# src/halite/core/client.py
"""
Client - оркестратор одного вызова.

    merge(options) -> build_request -> transport.exchange -> [Redirector] -> Response

Клиент хранит долгоживущий Options (session state). После каждого обмена
куки из Set-Cookie переносятся в НОВЫЙ Options, который подменяет старый
под блокировкой (copy-then-swap), поэтому параллельные вызовы из разных
потоков не теряют обновления.
"""
import base64
import logging
import threading
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, Optional, Union
from urllib.parse import urlsplit

from .config import FOLLOW_MAX_HOPS, FOLLOW_STRICT
from .exceptions import HaliteException, RequestError, classify_transport_exception
from .headers import HeaderInput
from .logging import HaliteLogger, get_logger
from .logging.filters import clear_correlation_id, set_correlation_id
from .options import Options
from .redirector import Redirector
from .request import Request, build_request
from .response import Response
from .transport import RequestsTransport, Transport, TransportResponse

logger = logging.getLogger(__name__)

OptionsInput = Union[Options, Mapping[str, Any], None]


def _coerce_options(options: OptionsInput, kwargs: Dict[str, Any]) -> Optional[Options]:
    """Options/словарь вызова + keyword аргументы Options.create() -> один Options."""
    if options is not None and not isinstance(options, Options):
        options = Options.create(**dict(options))
    if kwargs:
        extra = Options.create(**kwargs)
        options = options.merge(extra) if options is not None else extra
    return options


class BaseClient:
    """
    Shared state and request preparation for Client and AsyncClient.

    Args:
        options: Session options (Options or a dict of Options.create() keywords)
        transport: Transport collaborator; shared with branches created by with_*()
        **kwargs: Options.create() keywords, applied on top of ``options``
    """

    def __init__(self, options: OptionsInput = None, transport: Any = None, **kwargs: Any):
        stored = _coerce_options(options, kwargs)
        self._options: Options = stored if stored is not None else Options()
        self._options_lock = threading.Lock()
        self._owns_transport = transport is None
        self._transport = transport if transport is not None else self._default_transport()

    def _default_transport(self) -> Any:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} follow={self._options.follow.hops}>"

    # ==================== Session state ====================

    def get_options(self) -> Options:
        """Snapshot of the stored session options."""
        with self._options_lock:
            return self._options

    def get_cookies(self) -> Dict[str, str]:
        return dict(self.get_options().cookies)

    def get_headers(self) -> Dict[str, Any]:
        return self.get_options().headers.to_dict()

    def _absorb(self, response: Response) -> None:
        """Единственная мутация session state: swap на новый Options."""
        with self._options_lock:
            self._options = self._options.absorb_response(response)

    # ==================== Chainable branches ====================

    def _branch(self, options: Options):
        return type(self)(options=options, transport=self._transport)

    def with_options(self, options: OptionsInput = None, **kwargs: Any):
        """
        New client with ``options`` merged onto this client's options.

        The branch shares the transport but has its own session state.
        """
        return self._branch(self.get_options().merge(_coerce_options(options, kwargs)))

    def with_headers(self, headers: HeaderInput = None, **kwargs: Any):
        """
        Example:
            >>> client.with_headers(accept="application/json").get(uri)
        """
        return self._branch(self.get_options().with_headers(headers, **kwargs))

    def with_cookies(self, cookies: Optional[Mapping[str, Any]] = None, **kwargs: Any):
        return self._branch(self.get_options().with_cookies(cookies, **kwargs))

    def auth(self, value: str):
        """New client sending ``Authorization: <value>``."""
        return self.with_headers({"Authorization": value})

    def basic_auth(self, user: str, password: str):
        """
        New client with HTTP Basic credentials.

        Example:
            >>> client.basic_auth("user", "pass").get("https://httpbin.org/basic-auth/user/pass")
        """
        token = base64.b64encode(f"{user}:{password}".encode("utf-8")).decode("ascii")
        return self.auth(f"Basic {token}")

    def follow(self, hops: int = FOLLOW_MAX_HOPS, strict: bool = FOLLOW_STRICT):
        return self._branch(self.get_options().with_follow(hops, strict))

    def timeout(self, connect: Optional[float] = None, read: Optional[float] = None):
        return self._branch(self.get_options().with_timeout(connect, read))

    def logging(self, enabled: bool = True, logger: Optional[HaliteLogger] = None):
        return self._branch(self.get_options().with_logging(enabled, logger))

    # ==================== Call preparation ====================

    def _effective(self, options: OptionsInput, kwargs: Dict[str, Any]) -> Options:
        return self.get_options().merge(_coerce_options(options, kwargs))

    @staticmethod
    def _prepare(verb: str, uri: str, effective: Options) -> Request:
        """
        Validate and build the first request of a call.

        Raises:
            RequestError: SSL context given for a plain http URI
            UnsupportedMethodError / UnsupportedSchemeError: from build_request
        """
        if effective.ssl is not None and urlsplit(uri).scheme.lower() == "http":
            raise RequestError(f"SSL context given for a plain http URI: {uri}")
        return build_request(verb, uri, effective)

    @staticmethod
    def _check_tls(request: Request, effective: Options) -> None:
        """SSL контекст допустим только для https; проверяется на каждом hop."""
        if effective.ssl is not None and request.scheme == "http":
            raise RequestError(f"SSL context given for a plain http URI: {request.uri}")

    @staticmethod
    def _call_logger(effective: Options) -> Optional[HaliteLogger]:
        if not effective.logging:
            return None
        return effective.logger or get_logger()

    @staticmethod
    @contextmanager
    def _correlation(call_logger: Optional[HaliteLogger]) -> Iterator[None]:
        """Correlation ID для всех записей лога одного вызова."""
        if call_logger is None or not call_logger.config.enable_correlation_id:
            yield
            return
        set_correlation_id(uuid.uuid4().hex)
        try:
            yield
        finally:
            clear_correlation_id()

    @staticmethod
    def _transport_args(request: Request, effective: Options) -> Dict[str, Any]:
        return {
            "domain": request.domain,
            "verb": request.verb,
            "full_path": request.full_path,
            "headers": request.headers,
            "body": request.body,
            "connect_timeout": effective.timeout.connect,
            "read_timeout": effective.timeout.read,
            "ssl_context": effective.ssl,
        }

    @staticmethod
    def _map_error(exc: Exception, request: Request) -> Exception:
        if isinstance(exc, HaliteException):
            return exc
        return classify_transport_exception(exc, request.uri)

    def _finish_exchange(
        self,
        request: Request,
        raw: TransportResponse,
        call_logger: Optional[HaliteLogger],
    ) -> Response:
        response = Response(uri=request.uri, status=raw.status, headers=raw.headers, body=raw.body)
        logger.debug("%s %s%s -> %s", request.verb, request.domain, urlsplit(request.uri).path, raw.status)
        self._absorb(response)
        if call_logger is not None:
            call_logger.response(response)
        return response


class Client(BaseClient):
    """
    Synchronous HTTP client.

    Example:
        >>> with Client(headers={"private_token": "abc"}, follow=3) as client:
        ...     response = client.get("https://httpbin.org/redirect/2")
        ...     len(response.history)
        2
        >>> # Per-call options are merged onto the client's options
        >>> client.post("https://httpbin.org/post", json={"name": "halite"})
    """

    def _default_transport(self) -> Transport:
        return RequestsTransport()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            self._transport.close()

    def _exchange(self, request: Request, effective: Options, call_logger: Optional[HaliteLogger]) -> Response:
        """One wire exchange; transport errors are mapped to Halite errors."""
        self._check_tls(request, effective)
        if call_logger is not None:
            call_logger.request(request)
        try:
            raw = self._transport.exchange(**self._transport_args(request, effective))
        except Exception as e:
            mapped = self._map_error(e, request)
            if mapped is e:
                raise
            raise mapped from e
        return self._finish_exchange(request, raw, call_logger)

    def request(self, verb: str, uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
        """
        Perform a call.

        Args:
            verb: HTTP method (case-insensitive)
            uri: Absolute http/https URI
            options: Per-call Options or dict, merged onto the client's options
            **kwargs: Options.create() keywords for this call only

        Returns:
            Final Response; ``history`` holds followed redirect responses

        Raises:
            UnsupportedMethodError: Unknown verb
            UnsupportedSchemeError: Missing or non-http(s) scheme
            RequestError: Invalid option combination
            TimeoutError: Connect/read timeout on any hop
            ConnectionError: Connection failure on any hop
        """
        effective = self._effective(options, kwargs)
        request = self._prepare(verb, uri, effective)
        call_logger = self._call_logger(effective)

        with self._correlation(call_logger):
            response = self._exchange(request, effective, call_logger)
            if effective.follow.hops == 0:
                return response

            redirector = Redirector(request, response, effective.follow.hops, effective.follow.strict)
            return redirector.perform(lambda hop: self._exchange(hop, effective, call_logger))

    # ==================== Verb shortcuts ====================

    def get(self, uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
        return self.request("GET", uri, options, **kwargs)

    def head(self, uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
        return self.request("HEAD", uri, options, **kwargs)

    def post(self, uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
        return self.request("POST", uri, options, **kwargs)

    def put(self, uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
        return self.request("PUT", uri, options, **kwargs)

    def patch(self, uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
        return self.request("PATCH", uri, options, **kwargs)

    def delete(self, uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
        return self.request("DELETE", uri, options, **kwargs)

    def options(self, uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
        """HTTP OPTIONS; the stored session options are available via get_options()."""
        return self.request("OPTIONS", uri, options, **kwargs)
