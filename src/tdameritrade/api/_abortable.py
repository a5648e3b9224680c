"""Sessions whose in-flight connection can be torn down from another thread.

`requests` has no cancel hook, so sessions built by `new_session` mount an
adapter whose urllib3 connections register themselves with the
`AbortHandle` bound to the sending thread. `AbortHandle.abort` shuts the
socket down, which wakes a blocked read with EOF and tells the server the
exchange is over.

Only direct connections are tracked; requests routed through a proxy are
not abortable.
"""

from __future__ import annotations

import logging
import socket
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.connection import HTTPConnection, HTTPSConnection
from urllib3.connectionpool import HTTPConnectionPool, HTTPSConnectionPool

logger = logging.getLogger(__name__)

_bound = threading.local()


class AbortHandle:
    """Tracks the connection used by one send and can shut it down."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._conn: HTTPConnection | None = None
        self._aborted = False

    @property
    def aborted(self) -> bool:
        return self._aborted

    def attach(self, conn: HTTPConnection) -> None:
        with self._lock:
            self._conn = conn
            aborted = self._aborted
        if aborted:
            _shutdown(conn)

    def abort(self) -> None:
        """Shut down the attached socket. Safe to call more than once."""
        with self._lock:
            if self._aborted:
                return
            self._aborted = True
            conn = self._conn
        if conn is not None:
            _shutdown(conn)


def _shutdown(conn: HTTPConnection) -> None:
    sock = getattr(conn, "sock", None)
    if sock is None:
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError as e:
        # already closed by the peer or by urllib3
        logger.debug("TDA socket shutdown skipped: %r", e)


@contextmanager
def bind_abort_handle(handle: AbortHandle) -> Iterator[AbortHandle]:
    """Attach connections opened on this thread to `handle` while active."""
    previous = getattr(_bound, "handle", None)
    _bound.handle = handle
    try:
        yield handle
    finally:
        _bound.handle = previous


def _attach_current(conn: HTTPConnection) -> None:
    handle: AbortHandle | None = getattr(_bound, "handle", None)
    if handle is not None:
        handle.attach(conn)


class _AbortableMixin:
    # HTTPS connects during pool validation, before `request`
    def connect(self) -> None:
        _attach_current(self)  # type: ignore[arg-type]
        super().connect()  # type: ignore[misc]
        _attach_current(self)  # type: ignore[arg-type]

    # pooled keep-alive connections skip `connect`
    def request(self, *args: Any, **kwargs: Any) -> Any:
        _attach_current(self)  # type: ignore[arg-type]
        return super().request(*args, **kwargs)  # type: ignore[misc]


class _AbortableHTTPConnection(_AbortableMixin, HTTPConnection):
    pass


class _AbortableHTTPSConnection(_AbortableMixin, HTTPSConnection):
    pass


class _AbortableHTTPConnectionPool(HTTPConnectionPool):
    ConnectionCls = _AbortableHTTPConnection


class _AbortableHTTPSConnectionPool(HTTPSConnectionPool):
    ConnectionCls = _AbortableHTTPSConnection


_POOL_CLASSES = {
    "http": _AbortableHTTPConnectionPool,
    "https": _AbortableHTTPSConnectionPool,
}


class AbortableHTTPAdapter(HTTPAdapter):
    """`HTTPAdapter` whose direct connections report to `AbortHandle`s."""

    def init_poolmanager(self, *args: Any, **kwargs: Any) -> None:
        super().init_poolmanager(*args, **kwargs)
        self.poolmanager.pool_classes_by_scheme = dict(_POOL_CLASSES)


def new_session() -> requests.Session:
    """Return a `requests.Session` whose sends can be aborted."""
    sess = requests.Session()
    adapter = AbortableHTTPAdapter()
    sess.mount("http://", adapter)
    sess.mount("https://", adapter)
    return sess
