# src/halite/core/session_manager.py
"""
Thread-safe session management for the requests transport.

Each thread gets its own requests.Session per TLS context, so concurrent
calls on one client never share a connection pool mid-exchange.
"""
import logging
import ssl
import threading
import weakref
from typing import Callable, Dict, Optional, Set

import requests

logger = logging.getLogger(__name__)

SessionFactory = Callable[[Optional[ssl.SSLContext]], requests.Session]


class ThreadSafeSessionManager:
    """
    Manages thread-local requests.Session instances.

    Sessions are lazily created on first access per (thread, TLS context)
    and tracked with weak references so close_all() can reach every thread.

    Example:
        >>> manager = ThreadSafeSessionManager(make_session)
        >>> session = manager.get_session()          # plain session
        >>> session = manager.get_session(context)   # session bound to an SSLContext
        >>> manager.close_all()
    """

    def __init__(self, session_factory: SessionFactory):
        """
        Args:
            session_factory: Creates and configures a new Session for a TLS context (or None)
        """
        self._session_factory = session_factory
        self._local = threading.local()

        # Все созданные сессии (weak refs) для close_all()
        self._all_sessions: Set[weakref.ref] = set()
        self._sessions_lock = threading.Lock()

    def _sessions(self) -> Dict[Optional[int], requests.Session]:
        sessions = getattr(self._local, 'sessions', None)
        if sessions is None:
            sessions = {}
            self._local.sessions = sessions
        return sessions

    def get_session(self, ssl_context: Optional[ssl.SSLContext] = None) -> requests.Session:
        """
        Get the current thread's session for ``ssl_context``, creating it if needed.

        Returns:
            requests.Session instance for current thread
        """
        sessions = self._sessions()
        key = id(ssl_context) if ssl_context is not None else None
        session = sessions.get(key)
        if session is None:
            session = self._session_factory(ssl_context)
            sessions[key] = session
            with self._sessions_lock:
                self._all_sessions.add(weakref.ref(session, self._cleanup_weak_ref))
            logger.debug("Created session for thread %s", threading.current_thread().name)
        return session

    def _cleanup_weak_ref(self, ref: weakref.ref):
        with self._sessions_lock:
            self._all_sessions.discard(ref)

    @staticmethod
    def _close(session: requests.Session):
        try:
            session.close()
        except OSError as e:
            logger.debug("Error while closing session: %s", e)

    def close_current_session(self):
        """Close the current thread's sessions only."""
        sessions = self._sessions()
        for session in sessions.values():
            self._close(session)
        sessions.clear()

    def close_all(self):
        """
        Close all sessions from all threads.

        Safe to call multiple times.
        """
        self.close_current_session()

        with self._sessions_lock:
            sessions_copy = list(self._all_sessions)
            self._all_sessions.clear()

        for session_ref in sessions_copy:
            session = session_ref()
            if session is not None:
                self._close(session)

    def get_active_sessions_count(self) -> int:
        """Count of sessions not yet garbage collected."""
        with self._sessions_lock:
            return sum(1 for ref in self._all_sessions if ref() is not None)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close_all()
        return False
