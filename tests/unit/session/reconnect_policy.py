"""Unit tests for the bounded reconnect policy."""

from __future__ import annotations

from realtime_proxy.handlers.session.retry import ReconnectPolicy


def test_one_attempt_per_drop() -> None:
    policy = ReconnectPolicy(max_consecutive_drops=1)
    assert not policy.allow_attempt()

    policy.record_drop()
    assert policy.allow_attempt()
    policy.mark_attempt()
    assert not policy.allow_attempt()
    assert policy.attempts == 1


def test_second_consecutive_drop_exhausts() -> None:
    policy = ReconnectPolicy(max_consecutive_drops=1)
    policy.record_drop()
    policy.mark_attempt()
    policy.record_drop()
    assert policy.exhausted
    assert not policy.allow_attempt()


def test_success_resets_consecutive_drops() -> None:
    policy = ReconnectPolicy(max_consecutive_drops=1)
    policy.record_drop()
    policy.mark_attempt()
    policy.record_success()
    assert policy.consecutive_drops == 0

    policy.record_drop()
    assert not policy.exhausted
    assert policy.allow_attempt()


def test_record_drop_returns_running_count_and_arms_attempt() -> None:
    policy = ReconnectPolicy()
    assert policy.max_consecutive_drops == 1
    assert policy.record_drop() == 1
    assert policy.pending
    assert policy.record_drop() == 2
    assert not policy.pending
