"""
Case-insensitive multi-valued HTTP headers.

Header names are normalized on the way in: underscores become hyphens and
every segment is capitalized, so ``content_type``, ``CONTENT-TYPE`` and
``Content-Type`` all address the same entry.
"""

import re
from http.cookies import CookieError, SimpleCookie
from typing import Any, Dict, Iterable, Iterator, List, Mapping, MutableMapping, Optional, Tuple, Union

from .types import normalize_value, to_param_string

HeaderInput = Union["Headers", Mapping[Any, Any], Iterable[Tuple[str, str]], None]

_CONTENT_LENGTH_RE = re.compile(r"^\d+$")


def normalize_header_name(name: Any) -> str:
    """
    Normalize a header name.

    Examples:
        >>> normalize_header_name("content_type")
        'Content-Type'
        >>> normalize_header_name("conTENT-type")
        'Content-Type'
    """
    parts = str(name).replace("_", "-").split("-")
    return "-".join(part.capitalize() for part in parts)


class Headers(MutableMapping):
    """
    Ordered, case-insensitive header map storing a list of values per name.

    ``headers[name]`` returns the values joined with ``", "``; use
    :meth:`get_list` for the individual values.

    Example:
        >>> headers = Headers({"accept": "text/html"})
        >>> headers.add("Set-Cookie", "a=1")
        >>> headers.add("Set-Cookie", "b=2")
        >>> headers.get_list("set-cookie")
        ['a=1', 'b=2']
    """

    def __init__(self, data: HeaderInput = None, **kwargs: Any):
        self._store: Dict[str, List[str]] = {}
        if data is not None:
            self.update_all(data)
        if kwargs:
            self.update_all(kwargs)

    @classmethod
    def escape(cls, data: HeaderInput) -> "Headers":
        """
        Build headers from caller-supplied data.

        Values are converted through ConfigValue; lists keep every item.
        A ``Content-Length`` that is not a plain integer is skipped.

        Example:
            >>> Headers.escape({"content_type": "application/json"})["Content-Type"]
            'application/json'
        """
        headers = cls()
        if data is None:
            return headers
        if isinstance(data, Headers):
            return data.copy()

        pairs = data.items() if isinstance(data, Mapping) else data
        for key, raw in pairs:
            name = normalize_header_name(key)
            value = normalize_value(raw)
            values = value if isinstance(value, list) else [value]
            strings = [to_param_string(v) for v in values]

            if name == "Content-Length" and not all(_CONTENT_LENGTH_RE.match(s) for s in strings):
                continue

            headers.set(name, strings)
        return headers

    # ==================== MutableMapping ====================

    def __getitem__(self, name: str) -> str:
        return ", ".join(self._store[normalize_header_name(name)])

    def __setitem__(self, name: str, value: Union[str, List[str]]) -> None:
        self.set(name, value)

    def __delitem__(self, name: str) -> None:
        del self._store[normalize_header_name(name)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._store)

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_header_name(name) in self._store

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Headers):
            return self._store == other._store
        if isinstance(other, Mapping):
            return self == Headers(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Headers({self.to_dict()!r})"

    # ==================== Multi-value API ====================

    def set(self, name: str, value: Union[str, List[str]]) -> None:
        """Replace all values of ``name``."""
        values = list(value) if isinstance(value, (list, tuple)) else [value]
        self._store[normalize_header_name(name)] = [str(v) for v in values]

    def add(self, name: str, value: str) -> None:
        """Append a value to ``name``, keeping existing ones."""
        self._store.setdefault(normalize_header_name(name), []).append(str(value))

    def get_list(self, name: str) -> List[str]:
        return list(self._store.get(normalize_header_name(name), []))

    def update_all(self, data: HeaderInput) -> None:
        """Overwrite per key from another header source (shallow, per name)."""
        other = Headers.escape(data) if not isinstance(data, Headers) else data
        for name, values in other._store.items():
            self._store[name] = list(values)

    def multi_items(self) -> List[Tuple[str, str]]:
        """All ``(name, value)`` pairs, one per value."""
        return [(name, value) for name, values in self._store.items() for value in values]

    def copy(self) -> "Headers":
        headers = Headers()
        headers._store = {name: list(values) for name, values in self._store.items()}
        return headers

    def to_dict(self) -> Dict[str, Union[str, List[str]]]:
        """Plain dict; single values are unwrapped."""
        return {
            name: values[0] if len(values) == 1 else list(values)
            for name, values in self._store.items()
        }

    def to_request_dict(self) -> Dict[str, str]:
        """Flattened dict for transports that accept a single value per header."""
        separator = {"Cookie": "; "}
        return {
            name: separator.get(name, ", ").join(values)
            for name, values in self._store.items()
        }


# ==================== Cookies ====================

def parse_cookie_header(value: str) -> Dict[str, str]:
    """
    Parse a request ``Cookie`` header.

    Example:
        >>> parse_cookie_header("a=1; b=2")
        {'a': '1', 'b': '2'}
    """
    cookies: Dict[str, str] = {}
    for chunk in value.split(";"):
        name, sep, val = chunk.strip().partition("=")
        if sep and name:
            cookies[name.strip()] = val.strip()
    return cookies


def parse_set_cookie(value: str) -> Optional[Tuple[str, str]]:
    """
    Extract ``(name, value)`` from a single ``Set-Cookie`` header value.

    Attributes (Path, Expires, ...) are ignored. Returns None for values
    that cannot be parsed.
    """
    cookie = SimpleCookie()
    try:
        cookie.load(value)
    except CookieError:
        cookie = SimpleCookie()

    if cookie:
        morsel = next(iter(cookie.values()))
        return morsel.key, morsel.value

    # SimpleCookie rejects some real-world values; fall back to the first pair
    name, sep, rest = value.partition("=")
    if not sep or not name.strip():
        return None
    return name.strip(), rest.split(";", 1)[0].strip()


def cookies_from_headers(headers: Headers) -> Dict[str, str]:
    """Collect cookies from ``Cookie`` and ``Set-Cookie`` entries."""
    cookies: Dict[str, str] = {}
    for value in headers.get_list("Cookie"):
        cookies.update(parse_cookie_header(value))
    for value in headers.get_list("Set-Cookie"):
        parsed = parse_set_cookie(value)
        if parsed:
            cookies[parsed[0]] = parsed[1]
    return cookies


def cookie_header(cookies: Mapping[str, str]) -> str:
    """
    Example:
        >>> cookie_header({"session": "abc", "theme": "dark"})
        'session=abc; theme=dark'
    """
    return "; ".join(f"{name}={value}" for name, value in cookies.items())
