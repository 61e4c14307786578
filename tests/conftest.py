"""
Pytest configuration and fixtures for halite tests.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import pytest
import responses as responses_lib

from halite.core.client import Client
from halite.core.headers import Headers
from halite.core.logging import CorrelationIdFilter, HaliteLogger, LoggingConfig
from halite.core.transport import TransportResponse


@dataclass
class Call:
    """One exchange seen by FakeTransport."""
    domain: str
    verb: str
    full_path: str
    headers: Headers
    body: bytes
    connect_timeout: Optional[float]
    read_timeout: Optional[float]
    ssl_context: Any


def raw(status: int = 200, headers: Any = None, body: bytes = b"") -> TransportResponse:
    """Build a TransportResponse; headers may be a dict or a list of pairs."""
    result = Headers()
    pairs = headers.items() if isinstance(headers, dict) else (headers or [])
    for name, value in pairs:
        result.add(name, value)
    return TransportResponse(status=status, headers=result, body=body)


class FakeTransport:
    """
    In-memory transport: returns queued responses (or raises queued exceptions)
    in order, then ``default`` forever.
    """

    def __init__(self, *queued: Any, default: Optional[TransportResponse] = None):
        self.queued: List[Any] = list(queued)
        self.default = default if default is not None else raw(200)
        self.calls: List[Call] = []
        self.closed = False

    def exchange(self, domain, verb, full_path, headers, body,
                 connect_timeout=None, read_timeout=None, ssl_context=None):
        self.calls.append(Call(domain, verb, full_path, headers, body,
                               connect_timeout, read_timeout, ssl_context))
        item = self.queued.pop(0) if self.queued else self.default
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True


class AsyncFakeTransport(FakeTransport):
    """FakeTransport with an awaitable exchange()."""

    async def exchange(self, *args, **kwargs):
        return FakeTransport.exchange(self, *args, **kwargs)

    async def close(self):
        self.closed = True


class ListHandler(logging.Handler):
    """Collects records for assertions."""

    def __init__(self):
        super().__init__()
        self.records: List[logging.LogRecord] = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def client(transport):
    """Client on top of the in-memory transport."""
    with Client(transport=transport) as c:
        yield c


@pytest.fixture
def mock_responses():
    """Mock HTTP responses using responses library."""
    with responses_lib.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def captured_logger():
    """HaliteLogger without console output; records are collected in ``.records``."""
    logger = HaliteLogger(
        LoggingConfig.create(level="DEBUG", enable_console=False),
        name="halite.test",
    )
    handler = ListHandler()
    handler.addFilter(CorrelationIdFilter())
    logger.logger.addHandler(handler)
    logger.records = handler.records
    yield logger
    logger.close()
