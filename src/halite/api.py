# src/halite/api.py
"""
Module-level shortcuts: one throwaway Client per call.

Example:
    >>> import halite
    >>> halite.get("https://httpbin.org/get", params={"q": "halite"}).status_code
    200
"""

from typing import Any

from .core.client import Client, OptionsInput
from .core.response import Response


def request(verb: str, uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
    """Perform a single call with a fresh client; the transport is closed afterwards."""
    with Client() as client:
        return client.request(verb, uri, options, **kwargs)


def get(uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
    return request("GET", uri, options, **kwargs)


def head(uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
    return request("HEAD", uri, options, **kwargs)


def post(uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
    return request("POST", uri, options, **kwargs)


def put(uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
    return request("PUT", uri, options, **kwargs)


def patch(uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
    return request("PATCH", uri, options, **kwargs)


def delete(uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
    return request("DELETE", uri, options, **kwargs)


def options(uri: str, options: OptionsInput = None, **kwargs: Any) -> Response:
    return request("OPTIONS", uri, options, **kwargs)
