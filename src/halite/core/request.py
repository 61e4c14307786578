# src/halite/core/request.py
"""
Request building: verb/scheme validation, query augmentation and body negotiation.
"""

import json
import mimetypes
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple, Union
from urllib.parse import urlencode, urlsplit, urlunsplit

from urllib3 import encode_multipart_formdata

from .exceptions import RequestError, UnsupportedMethodError, UnsupportedSchemeError
from .headers import Headers, HeaderInput, cookie_header
from .types import ConfigValue, contains_file, flatten_params, is_file, to_param_string

if TYPE_CHECKING:
    from .options import Options

ALLOWED_VERBS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")
ALLOWED_SCHEMES = ("http", "https")

# Marker for Request.redirect(): keep the current body
_KEEP = object()


class Request:
    """
    Immutable, validated HTTP request.

    Example:
        >>> request = Request("get", "http://example.com/foo/bar?q=halite#result")
        >>> request.verb
        'GET'
        >>> request.domain
        'http://example.com'
        >>> request.full_path
        '/foo/bar?q=halite#result'
    """

    __slots__ = ("_verb", "_uri", "_parts", "_headers", "_body", "_initialized")

    def __init__(
        self,
        verb: str,
        uri: str,
        headers: HeaderInput = None,
        body: Union[bytes, str, None] = b"",
    ):
        normalized_verb = str(verb).upper()
        if normalized_verb not in ALLOWED_VERBS:
            raise UnsupportedMethodError(normalized_verb)

        parts = urlsplit(uri)
        if not parts.scheme:
            raise UnsupportedSchemeError(f"Missing scheme: {uri}")
        if parts.scheme.lower() not in ALLOWED_SCHEMES:
            raise UnsupportedSchemeError(f"Unknown scheme: {parts.scheme}", scheme=parts.scheme)

        if isinstance(body, str):
            body = body.encode("utf-8")

        object.__setattr__(self, '_verb', normalized_verb)
        object.__setattr__(self, '_uri', uri)
        object.__setattr__(self, '_parts', parts)
        object.__setattr__(self, '_headers', Headers.escape(headers))
        object.__setattr__(self, '_body', body or b"")
        object.__setattr__(self, '_initialized', True)

    def __setattr__(self, name, value):
        """Запретить изменение после init (immutability)."""
        if getattr(self, '_initialized', False):
            raise AttributeError(f"Cannot modify '{name}' - Request is immutable")
        object.__setattr__(self, name, value)

    def __repr__(self) -> str:
        return f"<Request {self._verb} {self._uri}>"

    @property
    def verb(self) -> str:
        return self._verb

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def scheme(self) -> str:
        return self._parts.scheme.lower()

    @property
    def host(self) -> Optional[str]:
        return self._parts.hostname

    @property
    def headers(self) -> Headers:
        """A copy: changing it does not change the request."""
        return self._headers.copy()

    @property
    def body(self) -> bytes:
        return self._body

    @property
    def content_type(self) -> Optional[str]:
        return self._headers.get("Content-Type")

    @property
    def domain(self) -> str:
        """Scheme, userinfo, host and port only - the connection key for the transport."""
        return urlunsplit((self._parts.scheme, self._parts.netloc, "", "", ""))

    @property
    def full_path(self) -> str:
        """Path, query and fragment; an empty path becomes ``/``."""
        path = self._parts.path or "/"
        if self._parts.query:
            path += f"?{self._parts.query}"
        if self._parts.fragment:
            path += f"#{self._parts.fragment}"
        return path

    def redirect(
        self,
        uri: str,
        verb: Optional[str] = None,
        body: Any = _KEEP,
        headers: Optional[Headers] = None,
    ) -> 'Request':
        """
        Request for the next redirect hop.

        When the body is dropped, headers describing it are removed as well.
        """
        next_headers = headers.copy() if headers is not None else self.headers
        next_body = self._body if body is _KEEP else (body or b"")
        if not next_body:
            for name in ("Content-Type", "Content-Length"):
                if name in next_headers:
                    del next_headers[name]
        return Request(verb or self._verb, uri, next_headers, next_body)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BODY NEGOTIATION
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class RequestBody:
    """Encoded body and the content type derived for it."""
    body: bytes = b""
    content_type: Optional[str] = None


def _file_field(value: Any) -> Tuple[str, bytes, str]:
    filename = os.path.basename(getattr(value, "name", "") or "") or "file"
    data = value.read()
    if isinstance(data, str):
        data = data.encode("utf-8")
    content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return filename, data, content_type


def encode_form(form: Dict[str, ConfigValue]) -> RequestBody:
    """
    Encode form data.

    Multipart when any value is a file handle, urlencoded otherwise.
    """
    pairs = flatten_params(form)
    if contains_file(form):
        fields: List[Tuple[str, Any]] = []
        for name, value in pairs:
            if is_file(value):
                fields.append((name, _file_field(value)))
            else:
                fields.append((name, to_param_string(value)))
        body, content_type = encode_multipart_formdata(fields)
        return RequestBody(body, content_type)

    encoded = urlencode([(name, to_param_string(value)) for name, value in pairs])
    return RequestBody(encoded.encode("utf-8"), "application/x-www-form-urlencoded")


def encode_body(options: 'Options') -> RequestBody:
    """
    Pick the body encoding. First match wins, in this fixed order:

    1. non-empty ``form``  -> multipart/form-data or x-www-form-urlencoded
    2. non-empty ``json``  -> application/json
    3. non-empty ``raw``   -> text/plain
    4. otherwise           -> empty body, no content type
    """
    if options.form:
        return encode_form(dict(options.form))

    if options.json:
        try:
            body = json.dumps(dict(options.json))
        except (TypeError, ValueError) as e:
            raise RequestError(f"Unable to serialize json body: {e}") from e
        return RequestBody(body.encode("utf-8"), "application/json")

    if options.raw:
        return RequestBody(options.raw.encode("utf-8"), "text/plain")

    return RequestBody()


def build_uri(uri: str, params: Dict[str, ConfigValue]) -> str:
    """
    Append params to the query string and normalize an empty path to ``/``.

    Example:
        >>> build_uri("http://example.com?a=1", {"b": 2})
        'http://example.com/?a=1&b=2'
    """
    parts = urlsplit(uri)
    query = parts.query
    if params:
        encoded = urlencode([(name, to_param_string(value)) for name, value in flatten_params(params)])
        if encoded:
            query = "&".join(q for q in (query, encoded) if q)
    path = parts.path or "/"
    return urlunsplit((parts.scheme, parts.netloc, path, query, parts.fragment))


def build_request(verb: str, uri: str, options: 'Options') -> Request:
    """
    Build a validated Request from effective options.

    The derived content type never overrides an explicit ``Content-Type``
    header; the ``Cookie`` header is rebuilt from the cookie map.

    Raises:
        UnsupportedMethodError: verb is not allowed
        UnsupportedSchemeError: scheme is missing or not http/https
    """
    # Validate before touching the body (file handles are read while encoding)
    Request(verb, uri)

    request_uri = build_uri(uri, dict(options.params))
    data = encode_body(options)

    headers = options.headers.copy()
    if data.content_type and "Content-Type" not in headers:
        headers.set("Content-Type", data.content_type)
    if options.cookies:
        headers.set("Cookie", cookie_header(options.cookies))

    return Request(verb, request_uri, headers, data.body)
