"""Background workers that keep build recomputation off the interactive thread.

Each build side (A and B) owns two long-lived workers: one computes the
``Stats`` bundle at the simulated AC, the other surveys mean damage across the
AC range. Workers talk to the coordinator only through their own inbound job
queue and outbound result queue; builds are cloned before they cross over.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
import weakref
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Union

from .aggregate import calc_build_means, calc_build_stats
from .data import DEFAULT_MIN_DMG, DEFAULT_SIM_AC
from .models import Build, Stats
from .pmf import greater_than

logger = logging.getLogger(__name__)


class Side(str, Enum):
    A = "A"
    B = "B"


class ResultKind(str, Enum):
    STATS = "stats"
    MEANS = "means"


class WorkerError(RuntimeError):
    """Base class for worker lifecycle failures."""


class WorkerClosedError(WorkerError):
    """Raised when work is submitted after the workers were shut down."""


class WorkerFaultError(WorkerError):
    """Raised when a worker died while computing a job."""


@dataclass(frozen=True)
class ComputeJob:
    side: Side
    version: int
    build: Build
    sim_ac: int
    desired_min_dmg: int


Payload = Union[Stats, list[float]]


@dataclass(frozen=True)
class ComputeResult:
    side: Side
    kind: ResultKind
    version: int
    payload: Optional[Payload] = None
    error: Optional[BaseException] = None


ComputeFn = Callable[[ComputeJob], Payload]


def compute_stats(job: ComputeJob) -> Stats:
    return calc_build_stats(job.build, job.sim_ac, job.desired_min_dmg)


def compute_means(job: ComputeJob) -> list[float]:
    return calc_build_means(job.build)


class Worker(threading.Thread):
    """Blocking receive-compute-send loop fed by a single job queue.

    Sending ``None`` closes the inbox; the loop finishes and the thread exits.
    A failing job is reported on the outbox and ends the worker.
    """

    def __init__(self, kind: ResultKind, side: Side, compute: ComputeFn) -> None:
        super().__init__(name=f"{kind.value}-{side.value}", daemon=True)
        self.kind = kind
        self.side = side
        self._compute = compute
        self.inbox: queue.Queue[Optional[ComputeJob]] = queue.Queue()
        self.outbox: queue.Queue[ComputeResult] = queue.Queue()
        self._inbox_closed = False

    def submit(self, job: ComputeJob) -> None:
        """Queue ``job`` without waiting for it to run."""

        if self._inbox_closed:
            raise WorkerClosedError(f"Worker {self.name} is closed")
        if not self.is_alive():
            raise WorkerFaultError(f"Worker {self.name} is not running")
        self.inbox.put(job)

    def close(self, timeout: Optional[float] = None) -> None:
        """Close the inbox and wait for the current job to finish."""

        if not self._inbox_closed:
            self._inbox_closed = True
            self.inbox.put(None)
        if self.is_alive():
            self.join(timeout)

    def _next_job(self) -> Optional[ComputeJob]:
        """Block for a job, then skip any queued jobs it has been superseded by."""

        job = self.inbox.get()
        while job is not None:
            try:
                newer = self.inbox.get_nowait()
            except queue.Empty:
                break
            if newer is None:
                return None
            logger.debug("%s skipped v%d in favour of v%d", self.name, job.version, newer.version)
            job = newer
        return job

    def run(self) -> None:
        logger.info("Worker %s started", self.name)
        while True:
            job = self._next_job()
            if job is None:
                break
            try:
                payload = self._compute(job)
            except Exception as exc:
                logger.exception("Worker %s failed on v%d", self.name, job.version)
                self.outbox.put(ComputeResult(job.side, self.kind, job.version, error=exc))
                return
            self.outbox.put(ComputeResult(job.side, self.kind, job.version, payload=payload))
        logger.info("Worker %s stopped", self.name)


@dataclass
class SideState:
    """Coordinator-owned view of one build side."""

    build: Build
    version: int = 1
    dispatched_version: int = 0
    stats: Stats = field(default_factory=Stats.empty)
    stats_version: int = 0
    means: list[float] = field(default_factory=list)
    means_version: int = 0

    @property
    def dirty(self) -> bool:
        return self.version > self.dispatched_version

    @property
    def settled(self) -> bool:
        return self.stats_version == self.version and self.means_version == self.version


def _close_workers(workers: list[Worker], timeout: Optional[float]) -> None:
    for worker in workers:
        worker.close(timeout)


class Coordinator:
    """Dispatch dirty builds to background workers and merge their results.

    The coordinator is driven from a single interactive thread: ``tick`` sends
    newly edited builds and collects finished results without ever blocking.
    Each side carries a version counter bumped on every edit; a result computed
    from an older version than the latest dispatched one is discarded.
    """

    def __init__(
        self,
        build_a: Build,
        build_b: Build,
        sim_ac: int = DEFAULT_SIM_AC,
        desired_min_dmg: int = DEFAULT_MIN_DMG,
        stats_fn: ComputeFn = compute_stats,
        means_fn: ComputeFn = compute_means,
    ) -> None:
        if desired_min_dmg < 0:
            raise ValueError("Desired minimum damage must be non-negative.")
        self._sides = {Side.A: SideState(build_a), Side.B: SideState(build_b)}
        self._sim_ac = int(sim_ac)
        self._desired_min_dmg = int(desired_min_dmg)
        self._workers: dict[tuple[Side, ResultKind], Worker] = {}
        for side in Side:
            for kind, compute in ((ResultKind.STATS, stats_fn), (ResultKind.MEANS, means_fn)):
                worker = Worker(kind, side, compute)
                worker.start()
                self._workers[(side, kind)] = worker
        self._closed = False
        self._fault: Optional[WorkerFaultError] = None
        # A dropped coordinator still stops its threads; the finalizer must not hold self.
        self._finalizer = weakref.finalize(self, _close_workers, list(self._workers.values()), 0)
        self._finalizer.atexit = False

    def __enter__(self) -> Coordinator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ---- Inputs ------------------------------------------------------------

    @property
    def sim_ac(self) -> int:
        return self._sim_ac

    @property
    def desired_min_dmg(self) -> int:
        return self._desired_min_dmg

    def build(self, side: Side) -> Build:
        """Return the UI-owned build for ``side``; call ``mark_dirty`` after editing it."""

        return self._sides[side].build

    def set_build(self, side: Side, build: Build) -> None:
        self._sides[side].build = build
        self.mark_dirty(side)

    def mark_dirty(self, side: Side) -> int:
        """Record an edit to ``side`` and return its new version."""

        state = self._sides[side]
        state.version += 1
        return state.version

    def set_sim_ac(self, sim_ac: int) -> None:
        sim_ac = int(sim_ac)
        if sim_ac != self._sim_ac:
            self._sim_ac = sim_ac
            self._mark_all_dirty()

    def set_desired_min_dmg(self, desired_min_dmg: int) -> None:
        desired_min_dmg = int(desired_min_dmg)
        if desired_min_dmg < 0:
            raise ValueError("Desired minimum damage must be non-negative.")
        if desired_min_dmg != self._desired_min_dmg:
            self._desired_min_dmg = desired_min_dmg
            self._mark_all_dirty()

    def _mark_all_dirty(self) -> None:
        for side in Side:
            self.mark_dirty(side)

    # ---- Outputs -----------------------------------------------------------

    def stats(self, side: Side) -> Stats:
        return self._sides[side].stats

    def means(self, side: Side) -> list[float]:
        return self._sides[side].means

    def version(self, side: Side) -> int:
        return self._sides[side].version

    def is_dirty(self, side: Side) -> bool:
        return self._sides[side].dirty

    def is_settled(self, side: Optional[Side] = None) -> bool:
        """Return True once ``side`` (or every side) shows results for its latest version."""

        if side is not None:
            return self._sides[side].settled
        return all(state.settled for state in self._sides.values())

    # ---- Driving -----------------------------------------------------------

    def dispatch(self) -> list[Side]:
        """Send every dirty build to its side's workers, one clone per worker."""

        if self._closed:
            raise WorkerClosedError("Coordinator is closed")
        if self._fault is not None:
            raise self._fault
        sent: list[Side] = []
        for side, state in self._sides.items():
            if not state.dirty:
                continue
            for kind in ResultKind:
                job = ComputeJob(
                    side=side,
                    version=state.version,
                    build=state.build.clone(),
                    sim_ac=self._sim_ac,
                    desired_min_dmg=self._desired_min_dmg,
                )
                self._workers[(side, kind)].submit(job)
            state.dispatched_version = state.version
            logger.debug("Dispatched build %s v%d", side.value, state.version)
            sent.append(side)
        return sent

    def poll(self) -> list[ComputeResult]:
        """Install every finished result without blocking and return the installed ones.

        Every outbox is drained before a fault is raised, and once a worker has
        failed every later ``poll`` and ``dispatch`` raises the same fault.

        Raises
        ------
        WorkerFaultError
            If a worker reported a failed job, now or earlier.
        """

        installed: list[ComputeResult] = []
        for worker in self._workers.values():
            while True:
                try:
                    result = worker.outbox.get_nowait()
                except queue.Empty:
                    break
                if result.error is not None:
                    if self._fault is None:
                        fault = WorkerFaultError(f"Worker {worker.name} failed on v{result.version}")
                        fault.__cause__ = result.error
                        self._fault = fault
                    continue
                if self._install(result):
                    installed.append(result)
        if installed:
            self._refresh_comparison()
        if self._fault is not None:
            raise self._fault
        return installed

    def tick(self) -> list[ComputeResult]:
        """Run one interactive-loop step: dispatch dirty builds, then collect results."""

        self.dispatch()
        return self.poll()

    def wait_until_settled(self, timeout: float = 10.0, interval: float = 0.01) -> bool:
        """Tick until every side is settled or ``timeout`` seconds elapse."""

        deadline = time.monotonic() + timeout
        while True:
            self.tick()
            if self.is_settled():
                return True
            if time.monotonic() >= deadline:
                return False
            time.sleep(interval)

    def _install(self, result: ComputeResult) -> bool:
        state = self._sides[result.side]
        if result.version < state.dispatched_version:
            logger.debug(
                "Discarded stale %s result for %s v%d (latest v%d)",
                result.kind.value,
                result.side.value,
                result.version,
                state.dispatched_version,
            )
            return False
        if result.kind is ResultKind.STATS:
            state.stats = result.payload
            state.stats_version = result.version
        else:
            state.means = list(result.payload)
            state.means_version = result.version
        return True

    def _refresh_comparison(self) -> None:
        a = self._sides[Side.A]
        b = self._sides[Side.B]
        a.stats = replace(a.stats, greater_then_chance=greater_than(a.stats.pmf, b.stats.pmf))
        b.stats = replace(b.stats, greater_then_chance=greater_than(b.stats.pmf, a.stats.pmf))

    def close(self, timeout: Optional[float] = 5.0) -> None:
        """Close every worker inbox and wait for the workers to finish."""

        if self._closed:
            return
        self._closed = True
        self._finalizer.detach()
        _close_workers(list(self._workers.values()), timeout)
