"""Per-CPU softirq deltas between two /proc/softirqs snapshots."""

from __future__ import annotations

from seeker.core.irq import per_core_deltas, snapshot_interval_ns
from seeker.models.counters import SoftirqTypeStats
from seeker.models.results import SoftirqDelta
from seeker.models.snapshots import SoftirqSnapshot


def compute_softirq_delta(before: SoftirqSnapshot, after: SoftirqSnapshot) -> SoftirqDelta:
    """Match vectors by name, in ``after`` order; missing ones start from zero."""
    cpu_count = min(before.cpu_count, after.cpu_count)
    previous = {stats.name: stats for stats in before.types}
    empty = SoftirqTypeStats()

    rows = [
        per_core_deltas(previous.get(stats.name, empty).per_core, stats.per_core, cpu_count)
        for stats in after.types
    ]
    return SoftirqDelta(
        names=tuple(stats.name for stats in after.types),
        types=tuple(stats.type for stats in after.types),
        per_core_delta=tuple(rows),
        cpu_count=cpu_count,
        interval_ns=snapshot_interval_ns(before, after),
    )
