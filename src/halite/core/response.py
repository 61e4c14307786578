# src/halite/core/response.py
"""
Response returned by Client/AsyncClient, including the redirect history.
"""

import json as json_module
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Dict, Optional, Tuple

from .exceptions import HTTPStatusError
from .headers import Headers, parse_set_cookie

REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})


@dataclass(frozen=True)
class Response:
    """
    HTTP response.

    Attributes:
        uri: URI of the request that produced this response
        status: HTTP status code
        headers: Response headers, one list entry per received value
        body: Raw body bytes
        history: Earlier responses of the same call's redirect chain, oldest first

    Example:
        >>> response = client.get("http://httpbin.org/get")
        >>> response.status_code
        200
        >>> response.json()["url"]
        'http://httpbin.org/get'
    """
    uri: str
    status: int
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""
    history: Tuple['Response', ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'headers', Headers.escape(self.headers))
        object.__setattr__(self, 'history', tuple(self.history))

    def __repr__(self) -> str:
        return f"<Response [{self.status}] {self.uri}>"

    @property
    def status_code(self) -> int:
        return self.status

    @property
    def reason(self) -> str:
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return ""

    @property
    def ok(self) -> bool:
        return self.status < 400

    @property
    def is_redirect(self) -> bool:
        return self.status in REDIRECT_STATUSES

    @property
    def location(self) -> Optional[str]:
        return self.headers.get("Location")

    # ==================== Content ====================

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("Content-Type")

    @property
    def mime_type(self) -> Optional[str]:
        if not self.content_type:
            return None
        return self.content_type.split(";", 1)[0].strip().lower()

    @property
    def charset(self) -> Optional[str]:
        if not self.content_type:
            return None
        for param in self.content_type.split(";")[1:]:
            key, _, value = param.strip().partition("=")
            if key.lower() == "charset" and value:
                return value.strip('"\'')
        return None

    @property
    def content_length(self) -> Optional[int]:
        value = self.headers.get("Content-Length")
        if value is None:
            return len(self.body)
        try:
            return int(value)
        except ValueError:
            return None

    @property
    def text(self) -> str:
        """Body decoded with the declared charset (utf-8 by default)."""
        try:
            return self.body.decode(self.charset or "utf-8", errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")

    def json(self, **kwargs: Any) -> Any:
        """Parse the body as JSON."""
        return json_module.loads(self.text, **kwargs)

    @property
    def cookies(self) -> Dict[str, str]:
        """Cookies set by this response (``Set-Cookie``)."""
        cookies: Dict[str, str] = {}
        for value in self.headers.get_list("Set-Cookie"):
            parsed = parse_set_cookie(value)
            if parsed:
                cookies[parsed[0]] = parsed[1]
        return cookies

    def raise_for_status(self) -> 'Response':
        """
        Raise HTTPStatusError for 4xx/5xx, return self otherwise.

        The client never calls this on its own.
        """
        if self.status >= 400:
            raise HTTPStatusError(self.status, self.uri, self.reason)
        return self
