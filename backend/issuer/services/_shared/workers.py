"""Thread pool boundary for CPU-bound cryptographic work."""

from __future__ import annotations

import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import ParamSpec, TypeVar

P = ParamSpec("P")
R = TypeVar("R")


class CryptoWorkers:
    """
    Bounded pool running key generation, signing, encryption and decryption.

    Request threads block on the result while the pool caps how many RSA
    operations run at once, so store round trips on other threads keep
    flowing. Exceptions raised by ``fn`` propagate unchanged.

    :param max_workers: Pool size.
    :type max_workers: int
    """

    def __init__(self, max_workers: int = 4) -> None:
        self.max_workers = max(1, int(max_workers))
        self._pool: ThreadPoolExecutor | None = None
        self._lock = threading.Lock()

    def _executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._pool is None:
                self._pool = ThreadPoolExecutor(
                    max_workers=self.max_workers, thread_name_prefix="crypto"
                )
            return self._pool

    def run(self, fn: Callable[P, R], *args: P.args, **kwargs: P.kwargs) -> R:
        """Execute ``fn`` on the pool and wait for its result."""
        return self._executor().submit(fn, *args, **kwargs).result()

    def shutdown(self) -> None:
        with self._lock:
            if self._pool is not None:
                self._pool.shutdown(wait=True)
                self._pool = None


class InlineWorkers(CryptoWorkers):
    """Runs work on the calling thread (unit tests, CLI)."""

    def __init__(self) -> None:
        super().__init__(max_workers=1)

    def run(self, fn: Callable[P, R], *args: P.args, **kwargs: P.kwargs) -> R:
        return fn(*args, **kwargs)
