"""Unit tests for the crypto thread pool boundary."""

from __future__ import annotations

import threading

import pytest
from issuer.services._shared.workers import CryptoWorkers, InlineWorkers


def _thread_name() -> str:
    return threading.current_thread().name


def _boom() -> None:
    raise ValueError("boom")


def test_pool_runs_off_the_calling_thread() -> None:
    workers = CryptoWorkers(max_workers=2)
    try:
        assert workers.run(_thread_name).startswith("crypto")
        assert workers.run(pow, 2, 10) == 1024
    finally:
        workers.shutdown()


def test_pool_propagates_exceptions_unchanged() -> None:
    workers = CryptoWorkers(max_workers=1)
    try:
        with pytest.raises(ValueError, match="boom"):
            workers.run(_boom)
    finally:
        workers.shutdown()


def test_pool_restarts_after_shutdown() -> None:
    workers = CryptoWorkers(max_workers=1)
    workers.shutdown()  # no pool yet; harmless
    assert workers.run(int, "7") == 7
    workers.shutdown()
    assert workers.run(int, "8") == 8
    workers.shutdown()


def test_inline_workers_use_calling_thread() -> None:
    assert InlineWorkers().run(_thread_name) == threading.current_thread().name
