"""Order statistics (percentiles, mean, population stddev) over a sample set."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from seeker.models.results import Statistics


def percentile(sorted_samples: Sequence[float], p: float) -> float:
    """Linearly interpolated percentile, ``p`` in [0, 1], of ascending samples.

    Interpolates between index floor((n-1)*p) and the next one; the last
    sample is returned when the next index would be out of range.
    """
    n = len(sorted_samples)
    if n == 0:
        return 0.0
    index = (n - 1) * p
    lower = int(index)
    upper = lower + 1
    if upper >= n:
        return float(sorted_samples[n - 1])
    frac = index - lower
    lo = sorted_samples[lower]
    hi = sorted_samples[upper]
    # clamp away float rounding so percentiles stay ordered
    return min(max(lo * (1.0 - frac) + hi * frac, lo), hi)


def median(sorted_samples: Sequence[float]) -> float:
    n = len(sorted_samples)
    if n == 0:
        return 0.0
    mid = n // 2
    if n % 2 == 0:
        return (sorted_samples[mid - 1] + sorted_samples[mid]) / 2.0
    return float(sorted_samples[mid])


def compute_statistics(samples: Iterable[float]) -> Statistics:
    """Summarize samples. An empty input gives an all-zero result.

    The input is copied before sorting and left untouched.
    """
    ordered = sorted(float(s) for s in samples)
    n = len(ordered)
    if n == 0:
        return Statistics()

    mean = math.fsum(ordered) / n
    variance = math.fsum((v - mean) ** 2 for v in ordered) / n

    return Statistics(
        count=n,
        min=ordered[0],
        max=ordered[-1],
        mean=mean,
        median=median(ordered),
        p90=percentile(ordered, 0.90),
        p95=percentile(ordered, 0.95),
        p99=percentile(ordered, 0.99),
        p999=percentile(ordered, 0.999),
        stddev=math.sqrt(max(0.0, variance)),
    )
