from __future__ import annotations

import time

import pytest

from tdameritrade.context import Context
from tdameritrade.errors import ContextCancelled, DeadlineExceeded


def test_live_context_has_no_error() -> None:
    ctx = Context()
    assert ctx.err() is None
    assert not ctx.done()
    assert ctx.remaining() is None
    ctx.raise_if_done()


def test_cancel_is_idempotent_and_fires_callbacks_once() -> None:
    ctx = Context()
    calls: list[int] = []
    ctx.add_done_callback(lambda: calls.append(1))

    ctx.cancel()
    ctx.cancel()

    assert calls == [1]
    assert isinstance(ctx.err(), ContextCancelled)
    with pytest.raises(ContextCancelled):
        ctx.raise_if_done()


def test_callback_added_after_cancel_runs_immediately() -> None:
    ctx = Context()
    ctx.cancel()
    calls: list[int] = []
    ctx.add_done_callback(lambda: calls.append(1))
    assert calls == [1]


def test_parent_cancel_propagates_to_children() -> None:
    parent = Context()
    child = parent.with_cancel()
    grandchild = child.with_timeout(60)

    parent.cancel()

    assert child.cancelled
    assert grandchild.cancelled


def test_child_cancel_does_not_touch_parent() -> None:
    parent = Context()
    child = parent.with_cancel()
    child.cancel()
    assert not parent.cancelled


def test_child_deadline_never_exceeds_parent() -> None:
    parent = Context().with_timeout(1.0)
    child = parent.with_timeout(100.0)
    assert child.deadline == parent.deadline


def test_expired_deadline_reports_deadline_exceeded() -> None:
    ctx = Context().with_timeout(0)
    err = ctx.err()
    assert isinstance(err, DeadlineExceeded)
    assert isinstance(err, ContextCancelled)
    assert ctx.remaining() == 0.0


def test_wait_returns_on_deadline() -> None:
    ctx = Context().with_timeout(0.05)
    t0 = time.monotonic()
    assert ctx.wait(5.0) is True
    assert time.monotonic() - t0 < 2.0


def test_wait_times_out_on_live_context() -> None:
    assert Context().wait(0.01) is False


def test_context_manager_cancels_on_exit() -> None:
    with Context().with_cancel() as ctx:
        assert not ctx.cancelled
    assert ctx.cancelled
