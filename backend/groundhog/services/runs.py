"""Per-farm run tokens for the analysis pipelines.

Starting a run for a key cancels the previous run for the same key. A
cancelled run checks its token between stages and stops before writing, so a
superseded request cannot persist a result after a newer one has started.
"""

import logging
import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class RunCancelled(Exception):
    pass


class RunToken:
    def __init__(self, key: Hashable) -> None:
        self.key = key
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise RunCancelled(f"Run {self.key!r} was superseded by a newer request")


class RunRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active: dict[Hashable, RunToken] = {}

    def begin(self, key: Hashable) -> RunToken:
        token = RunToken(key)
        with self._lock:
            previous = self._active.get(key)
            self._active[key] = token
        if previous is not None:
            logger.info(f"Cancelling superseded run {key!r}")
            previous.cancel()
        return token

    def finish(self, token: RunToken) -> None:
        with self._lock:
            if self._active.get(token.key) is token:
                del self._active[token.key]

    def is_active(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._active

    @contextmanager
    def run(self, key: Hashable) -> Iterator[RunToken]:
        token = self.begin(key)
        try:
            yield token
        finally:
            self.finish(token)


analysis_runs = RunRegistry()
