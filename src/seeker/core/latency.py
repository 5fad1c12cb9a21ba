"""Sleep jitter sampling with optional SCHED_FIFO elevation.

The sampler is a thin driver: it records how long each sleep actually
took and hands the durations to the statistics engine. Scheduling
elevation is scoped by ``RtPriorityGuard`` and always undone on exit.
"""

from __future__ import annotations

import ctypes
import ctypes.util
import errno
import functools
import logging
import os
import time
from collections.abc import Callable

from seeker.core.stats import compute_statistics
from seeker.models.latency import BenchConfig, LatencyStats

logger = logging.getLogger("seeker.latency")

MAX_LATENCY_SAMPLES = 8192
MIN_BENCH_BUDGET_MS = 50
NOW_OVERHEAD_ITERATIONS = 10_000
_WARMUP_ITERATIONS = 100

_NS_PER_SEC = 1_000_000_000
_TIMER_ABSTIME = 1

Clock = Callable[[], int]
Sleeper = Callable[[int, bool], None]


class RtPriorityGuard:
    """Context manager that runs its body under SCHED_FIFO at ``priority``.

    Priorities outside 1-99 leave scheduling untouched. Missing privilege
    (CAP_SYS_NICE) is not an error: ``elevated`` stays False and the body
    runs at normal priority. The previous policy is restored on every exit
    path, including exceptions raised by the body.
    """

    def __init__(self, priority: int) -> None:
        self._requested = priority
        self._elevated = False
        self._saved_policy: int | None = None
        self._saved_param: os.sched_param | None = None

    @property
    def elevated(self) -> bool:
        return self._elevated

    @property
    def priority(self) -> int:
        """The SCHED_FIFO priority in effect, 0 when not elevated."""
        return self._requested if self._elevated else 0

    def __enter__(self) -> RtPriorityGuard:
        if not 1 <= self._requested <= 99:
            return self
        if not hasattr(os, "sched_setscheduler"):
            logger.debug("SCHED_FIFO not supported on this platform")
            return self

        try:
            self._saved_policy = os.sched_getscheduler(0)
            self._saved_param = os.sched_getparam(0)
            os.sched_setscheduler(0, os.SCHED_FIFO, os.sched_param(self._requested))
        except OSError as exc:
            logger.debug("RT priority %d not granted: %s", self._requested, exc)
            return self

        self._elevated = True
        logger.debug("Elevated to SCHED_FIFO priority %d", self._requested)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self._elevated:
            return
        try:
            os.sched_setscheduler(0, self._saved_policy, self._saved_param)
        except OSError:
            logger.warning("Failed to restore scheduling policy %s", self._saved_policy)
        self._elevated = False


class _Timespec(ctypes.Structure):
    _fields_ = [("tv_sec", ctypes.c_long), ("tv_nsec", ctypes.c_long)]


@functools.lru_cache(maxsize=1)
def _clock_nanosleep():
    """libc clock_nanosleep, or None when libc cannot be loaded."""
    path = ctypes.util.find_library("c")
    if path is None:
        return None
    try:
        libc = ctypes.CDLL(path, use_errno=True)
        fn = libc.clock_nanosleep
    except (OSError, AttributeError):
        logger.debug("clock_nanosleep unavailable, absolute sleeps use time.sleep")
        return None
    fn.restype = ctypes.c_int
    fn.argtypes = [
        ctypes.c_int, ctypes.c_int,
        ctypes.POINTER(_Timespec), ctypes.POINTER(_Timespec),
    ]
    return fn


def sleep_until(deadline_ns: int) -> None:
    """Sleep until an absolute CLOCK_MONOTONIC deadline."""
    fn = _clock_nanosleep()
    if fn is None:
        remaining = deadline_ns - time.monotonic_ns()
        if remaining > 0:
            time.sleep(remaining / _NS_PER_SEC)
        return

    wakeup = _Timespec(deadline_ns // _NS_PER_SEC, deadline_ns % _NS_PER_SEC)
    # Same absolute deadline on retry, so interruptions do not add drift
    while fn(time.CLOCK_MONOTONIC, _TIMER_ABSTIME, ctypes.byref(wakeup), None) == errno.EINTR:
        pass


def precise_sleep(duration_ns: int, absolute: bool = False) -> None:
    """Sleep for ``duration_ns``, relative or against a computed deadline."""
    if duration_ns <= 0:
        return
    if absolute:
        sleep_until(time.monotonic_ns() + duration_ns)
    else:
        time.sleep(duration_ns / _NS_PER_SEC)


def measure_now_overhead(
    iterations: int = NOW_OVERHEAD_ITERATIONS,
    clock: Clock = time.monotonic_ns,
) -> float:
    """Average cost of one clock read in nanoseconds."""
    if iterations <= 0:
        iterations = NOW_OVERHEAD_ITERATIONS

    for _ in range(_WARMUP_ITERATIONS):
        clock()

    t0 = clock()
    for _ in range(iterations):
        clock()
    t1 = clock()
    return (t1 - t0) / iterations


def collect_samples(
    budget_ns: int,
    target_ns: int,
    absolute: bool,
    clock: Clock = time.monotonic_ns,
    sleep: Sleeper = precise_sleep,
    max_samples: int = MAX_LATENCY_SAMPLES,
) -> list[float]:
    """Sleep repeatedly, one at a time, recording each actual duration."""
    samples: list[float] = []
    deadline = clock() + budget_ns
    while clock() < deadline and len(samples) < max_samples:
        t0 = clock()
        sleep(target_ns, absolute)
        t1 = clock()
        samples.append(float(t1 - t0))
    return samples


def measure_latency(
    config: BenchConfig | None = None,
    *,
    budget_ms: int | None = None,
    clock: Clock = time.monotonic_ns,
    sleep: Sleeper = precise_sleep,
) -> LatencyStats:
    """Run the sleep jitter benchmark and summarize it.

    ``budget_ms`` alone is shorthand for the default config with that
    budget. Budgets below 50 ms are raised to 50 ms.
    """
    if config is None:
        config = BenchConfig() if budget_ms is None else BenchConfig(budget_ms=budget_ms)

    budget_ns = max(config.budget_ms, MIN_BENCH_BUDGET_MS) * 1_000_000
    target_ns = config.sleep_target_us * 1000

    with RtPriorityGuard(config.rt_priority) as guard:
        used_rt = guard.elevated
        rt_priority = guard.priority
        overhead = measure_now_overhead(clock=clock)
        samples = collect_samples(
            budget_ns, target_ns, config.use_absolute_time, clock=clock, sleep=sleep
        )

    logger.debug(
        "Collected %d samples (target=%d ns, rt=%s)", len(samples), target_ns, used_rt
    )

    stats = compute_statistics(samples)
    return LatencyStats(
        sample_count=stats.count,
        now_overhead_ns=overhead,
        target_ns=float(target_ns),
        min_ns=stats.min,
        max_ns=stats.max,
        mean_ns=stats.mean,
        median_ns=stats.median,
        p90_ns=stats.p90,
        p95_ns=stats.p95,
        p99_ns=stats.p99,
        p999_ns=stats.p999,
        stddev_ns=stats.stddev,
        used_absolute_time=config.use_absolute_time,
        used_rt_priority=used_rt,
        rt_priority_used=rt_priority,
    )
