# vectordb_sdk/progress.py
# SPDX-License-Identifier: Apache-2.0
"""
Bounded polling for long-running server operations.

Collection loading, flushing, compaction, index building and bulk import all
finish asynchronously on the server. The client drives them to completion with
one shared loop:

    NOT_STARTED -> POLLING -> COMPLETED
                          +-> TIMED_OUT   (budget spent, server work left running)
                          +-> FAILED      (check reported a terminal error)

Each caller supplies a `check` function that performs one status RPC and maps
the response to a `Progress` snapshot, raising a `VectorClientError` when the
server reports a terminal failure.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from vectordb_sdk.errors import OperationTimeout, VectorClientError

LOG = logging.getLogger(__name__)

DEFAULT_CHECK_INTERVAL_MS = 500
DEFAULT_CHECK_TIMEOUT_S = 60
FOREVER = 2 ** 32 - 1


@dataclass(frozen=True)
class Progress:
    finished: int = 0
    total: int = 0

    def done(self) -> bool:
        return self.finished >= self.total

    @classmethod
    def complete(cls, total: int = 100) -> "Progress":
        return cls(finished=total, total=total)

    @classmethod
    def running(cls, finished: int, total: int = 100) -> "Progress":
        """Snapshot of unfinished work; never reports done()."""
        finished = max(0, int(finished))
        return cls(finished=finished, total=max(int(total), finished + 1))


ProgressCallback = Callable[[Progress], None]


class ProgressMonitor:
    """
    Polling settings for one long-running call.

    check_timeout: seconds to wait; 0 checks once, FOREVER never gives up.
    check_interval: milliseconds between two status checks.
    """

    def __init__(
        self,
        check_timeout: float = DEFAULT_CHECK_TIMEOUT_S,
        *,
        check_interval: int = DEFAULT_CHECK_INTERVAL_MS,
        callback: Optional[ProgressCallback] = None,
    ) -> None:
        if check_timeout < 0:
            raise ValueError("check_timeout must be >= 0")
        self._check_timeout = check_timeout
        self._check_interval = DEFAULT_CHECK_INTERVAL_MS
        self._callback = callback
        self.set_check_interval(check_interval)

    @classmethod
    def no_wait(cls) -> "ProgressMonitor":
        return cls(0)

    @classmethod
    def forever(cls) -> "ProgressMonitor":
        return cls(FOREVER)

    @property
    def check_timeout(self) -> float:
        return self._check_timeout

    @property
    def check_interval(self) -> int:
        return self._check_interval

    def is_forever(self) -> bool:
        return self._check_timeout >= FOREVER

    def set_check_interval(self, check_interval: int) -> None:
        if check_interval < 0:
            raise ValueError("check_interval must be >= 0")
        self._check_interval = int(check_interval)

    def set_callback(self, callback: Optional[ProgressCallback]) -> None:
        self._callback = callback

    def do_progress(self, progress: Progress) -> None:
        if self._callback is not None:
            self._callback(progress)

    def __repr__(self) -> str:
        return f"ProgressMonitor(check_timeout={self._check_timeout!r}, check_interval={self._check_interval!r})"


class PollState(Enum):
    NOT_STARTED = "not_started"
    POLLING = "polling"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


class ProgressPoller:
    """
    Single-threaded poll loop bound to one monitor.

    The first check runs immediately. The monitor callback receives the snapshot
    of every successful check, including the one that completes the work.
    """

    def __init__(
        self,
        monitor: ProgressMonitor,
        *,
        op: str = "wait",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._monitor = monitor
        self._op = op
        self._clock = clock
        self._sleep = sleep
        self.state = PollState.NOT_STARTED
        self.checks = 0

    def run(self, check: Callable[[], Progress]) -> Progress:
        monitor = self._monitor
        timeout_s = monitor.check_timeout
        interval_s = monitor.check_interval / 1000.0
        deadline = None if monitor.is_forever() else self._clock() + timeout_s

        self.state = PollState.POLLING
        while True:
            try:
                progress = check()
            except VectorClientError:
                self.state = PollState.FAILED
                raise
            self.checks += 1
            monitor.do_progress(progress)

            if progress.done():
                self.state = PollState.COMPLETED
                return progress
            if timeout_s == 0:
                # single check; the work may still be running (state stays POLLING)
                return progress

            if deadline is None:
                self._sleep(interval_s)
                continue

            remaining = deadline - self._clock()
            if remaining <= 0:
                self.state = PollState.TIMED_OUT
                LOG.debug("%s: gave up after %d checks (%s/%s)", self._op, self.checks, progress.finished, progress.total)
                raise OperationTimeout(
                    f"{self._op} time out",
                    details={"op": self._op, "finished": progress.finished, "total": progress.total},
                )
            self._sleep(min(interval_s, remaining))


__all__ = [
    "Progress",
    "ProgressCallback",
    "ProgressMonitor",
    "ProgressPoller",
    "PollState",
    "FOREVER",
    "DEFAULT_CHECK_INTERVAL_MS",
    "DEFAULT_CHECK_TIMEOUT_S",
]
