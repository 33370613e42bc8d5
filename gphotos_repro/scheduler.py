"""Single-worker task scheduler for one-shot and fixed-rate periodic jobs."""

from __future__ import annotations

import heapq
import itertools
import logging
import math
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class MissedTickPolicy(str, Enum):
    """What a periodic job does with grid deadlines that passed while it was running."""

    SKIP = "skip"
    CATCH_UP = "catch-up"


@dataclass
class TaskResult:
    """Outcome of one task execution. Tasks return this instead of raising."""

    name: str
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, name: str) -> "TaskResult":
        return cls(name)

    @classmethod
    def failure(cls, name: str, error: BaseException) -> "TaskResult":
        return cls(name, error)


Task = Callable[[], TaskResult]


@dataclass(order=True)
class _Job:
    due: float
    seq: int
    name: str = field(compare=False)
    fn: Task = field(compare=False)
    interval: Optional[float] = field(default=None, compare=False)


class Scheduler:
    """Runs jobs one at a time on a single worker thread.

    Jobs due at the same instant run in submission order. Periodic jobs keep
    a fixed grid (``start + k * interval``) but never overlap: the next
    deadline is chosen after the previous run completes, according to the
    ``MissedTickPolicy``.
    """

    def __init__(
        self,
        policy: MissedTickPolicy = MissedTickPolicy.SKIP,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._policy = MissedTickPolicy(policy)
        self._clock = clock
        self._queue: List[_Job] = []
        self._seq = itertools.count()
        self._cond = threading.Condition()
        self._stopped = False
        self._thread: Optional[threading.Thread] = None

    # ── submission ───────────────────────────────────────────────────

    def schedule_once(self, name: str, fn: Task, delay: float = 0.0) -> None:
        self._push(_Job(self._clock() + delay, next(self._seq), name, fn))

    def schedule_periodic(
        self, name: str, fn: Task, interval: float, initial_delay: float = 0.0
    ) -> None:
        if not math.isfinite(interval) or interval <= 0:
            raise ValueError(f"interval must be positive and finite, got {interval}")
        self._push(_Job(self._clock() + initial_delay, next(self._seq), name, fn, interval))

    def _push(self, job: _Job) -> None:
        with self._cond:
            heapq.heappush(self._queue, job)
            self._cond.notify()

    def next_due(self) -> Optional[float]:
        with self._cond:
            return self._queue[0].due if self._queue else None

    # ── execution ────────────────────────────────────────────────────

    def run_pending(self) -> List[TaskResult]:
        """Run every job that is due now, in due/submission order. Returns their results."""
        results = []
        while True:
            with self._cond:
                if not self._queue or self._queue[0].due > self._clock():
                    break
                job = heapq.heappop(self._queue)
            results.append(self._execute(job))
            if job.interval is not None:
                job.due = self._next_deadline(job, self._clock())
                job.seq = next(self._seq)
                self._push(job)
        return results

    def _execute(self, job: _Job) -> TaskResult:
        logger.debug("Running %s", job.name)
        try:
            result = job.fn()
        except Exception as exc:
            result = TaskResult.failure(job.name, exc)
        if not result.ok:
            err = result.error
            logger.error(
                "Task %s failed: %s", job.name, err,
                exc_info=(type(err), err, err.__traceback__),
            )
        return result

    def _next_deadline(self, job: _Job, now: float) -> float:
        nxt = job.due + job.interval
        if self._policy is MissedTickPolicy.CATCH_UP:
            return nxt
        skipped = 0
        while nxt < now:
            nxt += job.interval
            skipped += 1
        if skipped:
            logger.warning("%s overran its interval, skipped %d tick(s)", job.name, skipped)
        return nxt

    # ── worker thread ────────────────────────────────────────────────

    def start(self) -> None:
        self._thread = threading.Thread(target=self._run, name="scheduler", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while True:
            with self._cond:
                while not self._stopped:
                    if not self._queue:
                        self._cond.wait()
                        continue
                    delay = self._queue[0].due - self._clock()
                    if delay <= 0:
                        break
                    self._cond.wait(delay)
                if self._stopped:
                    return
            self.run_pending()

    def join(self, timeout: float | None = None) -> None:
        """Block the caller until the worker exits. Without ``stop()`` that is never."""
        if self._thread is not None:
            self._thread.join(timeout)

    def stop(self) -> None:
        with self._cond:
            self._stopped = True
            self._cond.notify_all()
