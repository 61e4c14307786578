# src/halite/core/redirector.py
"""
Redirect following as an explicit state machine.

States:
    Following(hop)  - a request/response pair has been exchanged, hop redirects so far
    Done(response)  - final response, with the history of earlier responses

The transition function is pure: it only decides whether to follow and how
the next request looks. The outer loop (``Redirector.perform``) owns the
exchange side effect, so at most ``max_hops + 1`` exchanges happen per call.
"""

import logging
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Optional, Tuple, Union
from urllib.parse import urljoin, urlsplit

from .config import FOLLOW_STRICT
from .exceptions import HaliteException
from .headers import cookie_header, parse_cookie_header
from .request import Request
from .response import REDIRECT_STATUSES, Response

logger = logging.getLogger(__name__)

# 303: всегда GET без тела
SEE_OTHER = 303
# 307/308: метод и тело сохраняются
PRESERVING_STATUSES = frozenset({307, 308})
# 301/302: зависит от strict
LEGACY_STATUSES = frozenset({301, 302})


@dataclass(frozen=True)
class Following:
    """Redirect chain in progress."""
    hop: int
    request: Request
    response: Response
    history: Tuple[Response, ...] = ()


@dataclass(frozen=True)
class Done:
    """Chain finished; ``response.history`` holds the earlier responses."""
    response: Response


@dataclass(frozen=True)
class Redirect:
    """Decision to follow: the request for the next hop."""
    request: Request


State = Union[Following, Done]


def _origin(uri: str) -> Tuple[str, Optional[str], Optional[int]]:
    parts = urlsplit(uri)
    default_port = {"http": 80, "https": 443}.get(parts.scheme)
    return parts.scheme, parts.hostname, parts.port or default_port


def _is_https_upgrade(old: str, new: str) -> bool:
    old_scheme, old_host, old_port = _origin(old)
    new_scheme, new_host, new_port = _origin(new)
    return (
        old_scheme == "http" and new_scheme == "https"
        and old_host == new_host
        and old_port in (80, None) and new_port in (443, None)
    )


def redirect_method(status: int, verb: str, strict: bool) -> Tuple[str, bool]:
    """
    Method for the next hop and whether the body is kept.

    Examples:
        >>> redirect_method(303, "POST", strict=True)
        ('GET', False)
        >>> redirect_method(307, "POST", strict=False)
        ('POST', True)
        >>> redirect_method(302, "POST", strict=False)
        ('GET', False)
    """
    if status == SEE_OTHER:
        return "GET", False
    if status in PRESERVING_STATUSES:
        return verb, True
    if status in LEGACY_STATUSES and not strict:
        return "GET", False
    return verb, True


class Redirector:
    """
    Follows redirects for one call.

    Args:
        request: First request (already exchanged)
        response: Its response
        max_hops: Maximum number of redirects to follow
        strict: 301/302 keep method and body (True) or become GET without body (False)

    Example:
        >>> redirector = Redirector(request, response, max_hops=5)
        >>> final = redirector.perform(lambda req: exchange(req))
        >>> len(final.history)
        2
    """

    def __init__(
        self,
        request: Request,
        response: Response,
        max_hops: int,
        strict: bool = FOLLOW_STRICT,
    ):
        if max_hops < 0:
            raise ValueError("max_hops must be non-negative")
        self.max_hops = max_hops
        self.strict = strict
        self.initial = Following(hop=0, request=request, response=response)

    # ==================== Pure transition ====================

    def transition(self, state: Following) -> Union[Done, Redirect]:
        """Decide the next step for ``state`` without performing any exchange."""
        response = state.response

        if response.status not in REDIRECT_STATUSES or state.hop >= self.max_hops:
            return self.finish(state)

        location = response.location
        if not location:
            logger.debug("Redirect %s without Location header, stopping", response.status)
            return self.finish(state)

        next_uri = urljoin(state.request.uri, location.strip())
        verb, keep_body = redirect_method(response.status, state.request.verb, self.strict)

        headers = state.request.headers
        if _origin(next_uri) != _origin(state.request.uri) and not _is_https_upgrade(state.request.uri, next_uri):
            if "Authorization" in headers:
                del headers["Authorization"]

        set_cookies = response.cookies
        if set_cookies:
            cookies = parse_cookie_header(headers.get("Cookie", ""))
            cookies.update(set_cookies)
            headers.set("Cookie", cookie_header(cookies))

        try:
            next_request = state.request.redirect(
                next_uri,
                verb=verb,
                body=state.request.body if keep_body else b"",
                headers=headers,
            )
        except HaliteException as e:
            logger.debug("Cannot follow redirect to %s: %s", next_uri, e)
            return self.finish(state)

        logger.debug(
            "Following %s redirect %d/%d: %s %s",
            response.status, state.hop + 1, self.max_hops, next_request.verb, next_uri
        )
        return Redirect(next_request)

    def advance(self, state: Following, redirect: Redirect, response: Response) -> Following:
        """Record the exchanged hop and move to the next state."""
        previous = replace(state.response, history=state.history)
        return Following(
            hop=state.hop + 1,
            request=redirect.request,
            response=response,
            history=state.history + (previous,),
        )

    @staticmethod
    def finish(state: Following) -> Done:
        return Done(replace(state.response, history=state.history))

    # ==================== Loops ====================

    def perform(self, exchange: Callable[[Request], Response]) -> Response:
        """
        Run the chain, calling ``exchange`` once per followed redirect.

        Exchange errors propagate unchanged and abort the whole chain.
        """
        state: State = self.initial
        while isinstance(state, Following):
            step = self.transition(state)
            if isinstance(step, Done):
                state = step
            else:
                state = self.advance(state, step, exchange(step.request))
        return state.response

    async def perform_async(self, exchange: Callable[[Request], Awaitable[Response]]) -> Response:
        """Async variant of :meth:`perform`; suspends only inside ``exchange``."""
        state: State = self.initial
        while isinstance(state, Following):
            step = self.transition(state)
            if isinstance(step, Done):
                state = step
            else:
                state = self.advance(state, step, await exchange(step.request))
        return state.response
