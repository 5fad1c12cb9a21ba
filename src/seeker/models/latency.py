"""Latency benchmark configuration and results."""

from __future__ import annotations

from dataclasses import dataclass

from seeker.models.enums import RtVerdict, SleepMode

# p99 jitter below this is considered good for real-time use.
GOOD_RT_JITTER_P99_NS = 100_000.0

# (p99 jitter upper bound in ns, base score), checked in order.
_RT_SCORE_BANDS: tuple[tuple[float, int], ...] = (
    (10_000.0, 100),
    (50_000.0, 90),
    (100_000.0, 75),
    (500_000.0, 50),
    (1_000_000.0, 25),
)


@dataclass(frozen=True, slots=True)
class BenchConfig:
    """Sleep jitter benchmark settings.

    rt_priority 0 leaves scheduling untouched; 1-99 requests SCHED_FIFO.
    """

    budget_ms: int = 250
    sleep_target_us: int = 1000
    use_absolute_time: bool = False
    rt_priority: int = 0

    @classmethod
    def quick(cls) -> BenchConfig:
        return cls(budget_ms=250, sleep_target_us=1000)

    @classmethod
    def thorough(cls) -> BenchConfig:
        return cls(budget_ms=5000, sleep_target_us=1000)

    @classmethod
    def rt_characterization(cls) -> BenchConfig:
        """Short target, absolute deadlines and SCHED_FIFO 90."""
        return cls(
            budget_ms=2000,
            sleep_target_us=100,
            use_absolute_time=True,
            rt_priority=90,
        )


@dataclass(frozen=True, slots=True)
class LatencyStats:
    """Sleep duration statistics from one benchmark run, all times in ns."""

    sample_count: int = 0
    now_overhead_ns: float = 0.0
    target_ns: float = 0.0
    min_ns: float = 0.0
    max_ns: float = 0.0
    mean_ns: float = 0.0
    median_ns: float = 0.0
    p90_ns: float = 0.0
    p95_ns: float = 0.0
    p99_ns: float = 0.0
    p999_ns: float = 0.0
    stddev_ns: float = 0.0
    used_absolute_time: bool = False
    used_rt_priority: bool = False
    rt_priority_used: int = 0

    @property
    def sleep_mode(self) -> SleepMode:
        return SleepMode.ABSOLUTE if self.used_absolute_time else SleepMode.RELATIVE

    @property
    def jitter_mean_ns(self) -> float:
        return self.mean_ns - self.target_ns

    @property
    def jitter_p95_ns(self) -> float:
        return self.p95_ns - self.target_ns

    @property
    def jitter_p99_ns(self) -> float:
        return self.p99_ns - self.target_ns

    @property
    def jitter_max_ns(self) -> float:
        return self.max_ns - self.target_ns

    @property
    def undershoot_ns(self) -> float:
        """Positive when the shortest sleep woke before the target."""
        return self.target_ns - self.min_ns

    def is_good_for_rt(self) -> bool:
        return self.jitter_p99_ns < GOOD_RT_JITTER_P99_NS

    @property
    def verdict(self) -> RtVerdict:
        return RtVerdict.GOOD if self.is_good_for_rt() else RtVerdict.NEEDS_TUNING

    def rt_score(self) -> int:
        """0-100 suitability score from p99 jitter, penalized by outliers."""
        jitter_p99 = self.jitter_p99_ns
        jitter_max = self.jitter_max_ns

        score = 10
        for bound, band_score in _RT_SCORE_BANDS:
            if jitter_p99 < bound:
                score = band_score
                break

        # A large max relative to p99 means rare but severe wakeup delays
        if jitter_max > jitter_p99 * 10.0:
            score -= 20
        elif jitter_max > jitter_p99 * 5.0:
            score -= 10

        return max(0, min(100, score))
