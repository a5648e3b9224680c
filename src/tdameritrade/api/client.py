from __future__ import annotations

import logging
import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urljoin, urlsplit

import requests

from ..context import Context
from ..errors import ContextCancelled, RequestConstructionError, TransportError
from ._abortable import AbortHandle, bind_abort_handle, new_session
from ._client_helpers import (
    error_message,
    jitter_sleep,
    params_summary,
    retry_after_seconds,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.tdameritrade.com/v1/"
DEFAULT_USER_AGENT = "tdameritrade-chains"


@dataclass(frozen=True)
class Response:
    """Response metadata handed back alongside decoded results."""

    status_code: int
    headers: Mapping[str, str]
    url: str
    raw: requests.Response | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_requests(cls, resp: requests.Response) -> Response:
        return cls(
            status_code=resp.status_code,
            headers=dict(resp.headers),
            url=resp.url,
            raw=resp,
        )


class _InFlight:
    """One send on a daemon thread, abortable from the caller's thread."""

    def __init__(
        self,
        sess: requests.Session,
        request: requests.PreparedRequest,
        timeout: float,
    ) -> None:
        self.handle = AbortHandle()
        self.finished = threading.Event()
        self.wakeup = threading.Event()
        self._response: requests.Response | None = None
        self._error: Exception | None = None
        self._thread = threading.Thread(
            target=self._run,
            args=(sess, request, timeout),
            name="tda-http",
            daemon=True,
        )

    def start(self) -> None:
        self._thread.start()

    def abort(self) -> None:
        self.handle.abort()
        self.wakeup.set()

    def result(self) -> requests.Response:
        if self._error is not None:
            raise self._error
        assert self._response is not None
        return self._response

    def _run(
        self,
        sess: requests.Session,
        request: requests.PreparedRequest,
        timeout: float,
    ) -> None:
        try:
            with bind_abort_handle(self.handle):
                self._response = sess.send(request, timeout=timeout)
        except Exception as e:
            self._error = e
        finally:
            self.finished.set()
            self.wakeup.set()


@dataclass(frozen=True)
class Client:
    """HTTP transport for TD Ameritrade API requests.

    The client wraps `requests` and provides:
    - request construction relative to `base_url` with auth headers
    - caller cancellation through a `Context`
    - optional retries with exponential backoff for transient failures

    Retry policy (high level):
    - `max_retries=0` (default) sends exactly one request
    - Retries on HTTP 429 (rate limit) and HTTP 5xx (server errors)
    - Retries on transport-level issues (timeouts / connection errors)
    - Does *not* retry on other HTTP 4xx responses (bad params, auth, etc.)

    Session handling:
    - You may pass a shared session to reuse connections across calls. Build
      it with `new_session()` so cancellation can abort its sockets.
    - If you do not pass a session, each call creates one and closes it.

    Cancellation:
    - An already-done context fails before any network I/O.
    - Otherwise the exchange runs on a worker thread; if the context is
      cancelled or its deadline passes first, the call raises at once and
      the in-flight socket is shut down, so the server sees EOF. The socket
      timeout is also clipped to the context deadline.

    Logging:
    - Request logs use a redacted params summary that never includes secrets.

    Exceptions:
    - `RequestConstructionError` for malformed base URLs or paths.
    - `TransportError` for network failures and non-2xx responses, with
      the response metadata attached when the server answered.
    - `ContextCancelled` / `DeadlineExceeded` on caller cancellation.
    """

    access_token: str | None = field(default=None, repr=False)
    api_key: str | None = field(default=None, repr=False)
    base_url: str = DEFAULT_BASE_URL
    timeout_s: float = 30.0
    max_retries: int = 0
    backoff_s: float = 0.75
    user_agent: str = DEFAULT_USER_AGENT
    session: requests.Session | None = field(default=None, repr=False, compare=False)

    def new_request(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | None = None,
    ) -> requests.PreparedRequest:
        """Build a request for `path`, resolved relative to `base_url`.

        `path` may already carry a query string; `params` are appended.
        """
        base = urlsplit(self.base_url)
        if base.scheme not in {"http", "https"} or not base.netloc:
            raise RequestConstructionError(
                f"base_url must be an absolute http(s) URL, got {self.base_url!r}"
            )
        if not base.path.endswith("/"):
            raise RequestConstructionError(
                f"base_url must have a trailing slash, got {self.base_url!r}"
            )
        if urlsplit(path).scheme or path.startswith("/"):
            raise RequestConstructionError(
                f"path must be relative to base_url, got {path!r}"
            )

        headers = {
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"

        wire_params = dict(params or {})
        if self.api_key and "apikey" not in wire_params:
            wire_params["apikey"] = self.api_key

        try:
            return requests.Request(
                method.upper(),
                urljoin(self.base_url, path),
                headers=headers,
                params=wire_params,
            ).prepare()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise RequestConstructionError(f"Invalid request for {path!r}: {e}") from e

    def do(
        self,
        ctx: Context | None,
        request: requests.PreparedRequest,
    ) -> tuple[Response, bytes]:
        """Send `request` and return the response metadata and raw body."""
        if ctx is not None:
            ctx.raise_if_done()

        params_log = params_summary(request.url or "")
        path = urlsplit(request.url or "").path

        created_session = self.session is None
        sess = self.session or new_session()

        try:
            for attempt in range(self.max_retries + 1):
                logger.debug(
                    "TDA %s attempt=%d/%d path=%s params=[%s]",
                    request.method,
                    attempt + 1,
                    self.max_retries + 1,
                    path,
                    params_log,
                )

                try:
                    raw = self._send(ctx, sess, request)
                except (
                    requests.exceptions.Timeout,
                    requests.exceptions.ConnectionError,
                ) as e:
                    if attempt >= self.max_retries:
                        logger.error(
                            "TDA transport error path=%s params=[%s] err=%r",
                            path,
                            params_log,
                            e,
                        )
                        raise TransportError(
                            f"{request.method} {path} failed: {e}"
                        ) from e

                    sleep_s = min(30.0, jitter_sleep(self.backoff_s * (2**attempt)))
                    logger.warning(
                        "TDA transport error retrying path=%s params=[%s] "
                        "sleep_s=%.2f err=%r",
                        path,
                        params_log,
                        sleep_s,
                        e,
                    )
                    self._sleep(ctx, sleep_s)
                    continue
                except requests.exceptions.RequestException as e:
                    raise TransportError(f"{request.method} {path} failed: {e}") from e

                resp = Response.from_requests(raw)
                sc = raw.status_code

                # Retry on rate limit / server errors
                if (sc == 429 or 500 <= sc <= 599) and attempt < self.max_retries:
                    sleep_s = retry_after_seconds(
                        raw, jitter_sleep(self.backoff_s * (2**attempt))
                    )
                    sleep_s = min(30.0, sleep_s)
                    logger.warning(
                        "TDA retryable status=%s path=%s params=[%s] sleep_s=%.2f",
                        sc,
                        path,
                        params_log,
                        sleep_s,
                    )
                    self._sleep(ctx, sleep_s)
                    continue

                if not 200 <= sc <= 299:
                    logger.error(
                        "TDA HTTP error status=%s path=%s params=[%s]",
                        sc,
                        path,
                        params_log,
                    )
                    raise TransportError(
                        f"{request.method} {path}: {sc} {error_message(raw)}",
                        resp,
                    )

                logger.debug(
                    "TDA %s success status=%s path=%s params=[%s]",
                    request.method,
                    sc,
                    path,
                    params_log,
                )
                return resp, raw.content

        finally:
            if created_session:
                sess.close()

        # Unreachable: the final attempt either returns or raises
        raise TransportError(f"{request.method} {path} failed after retries")

    def _timeout(self, ctx: Context | None) -> float:
        remaining = ctx.remaining() if ctx is not None else None
        if remaining is None:
            return self.timeout_s
        return max(0.001, min(self.timeout_s, remaining))

    def _send(
        self,
        ctx: Context | None,
        sess: requests.Session,
        request: requests.PreparedRequest,
    ) -> requests.Response:
        """Send once, returning early if `ctx` finishes first."""
        if ctx is None:
            return sess.send(request, timeout=self._timeout(None))

        ctx.raise_if_done()

        call = _InFlight(sess, request, self._timeout(ctx))
        ctx.add_done_callback(call.abort)
        call.start()
        try:
            while not call.finished.is_set():
                call.wakeup.wait(ctx.remaining())
                if ctx.done():
                    break
        finally:
            ctx.remove_done_callback(call.abort)
            if not call.finished.is_set():
                call.abort()

        err = ctx.err()
        if err is not None:
            logger.debug("TDA request aborted: %s", err)
            raise err

        return call.result()

    def _sleep(self, ctx: Context | None, seconds: float) -> None:
        if ctx is None:
            time.sleep(seconds)
            return
        if ctx.wait(seconds):
            raise ctx.err() or ContextCancelled("context cancelled")
