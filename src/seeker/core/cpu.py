"""CPU utilization percentages from two /proc/stat snapshots."""

from __future__ import annotations

from seeker.models.counters import CpuTimeCounters
from seeker.models.results import CpuUtilizationDelta, CpuUtilizationPercent
from seeker.models.snapshots import CpuUtilizationSnapshot

_FIELDS = (
    "user", "nice", "system", "idle", "iowait",
    "irq", "softirq", "steal", "guest", "guest_nice",
)


def compute_percent(
    before: CpuTimeCounters, after: CpuTimeCounters
) -> CpuUtilizationPercent:
    """Share of the elapsed jiffies spent in each state.

    All zeros when the total did not advance (no time elapsed or the
    counters went backwards). A single field that went backwards gets 0.
    """
    total_before = before.total()
    total_after = after.total()
    if total_after <= total_before:
        return CpuUtilizationPercent()

    total_delta = float(total_after - total_before)

    def _pct(name: str) -> float:
        b = getattr(before, name)
        a = getattr(after, name)
        return (a - b) * 100.0 / total_delta if a >= b else 0.0

    return CpuUtilizationPercent(**{name: _pct(name) for name in _FIELDS})


def compute_utilization_delta(
    before: CpuUtilizationSnapshot,
    after: CpuUtilizationSnapshot,
) -> CpuUtilizationDelta:
    """Aggregate and per-core utilization between two snapshots.

    Only cores present in both snapshots are reported. Percentages come
    from the jiffy counters alone, so they do not depend on the timestamps.
    """
    core_count = min(before.core_count, after.core_count)
    return CpuUtilizationDelta(
        aggregate=compute_percent(before.aggregate, after.aggregate),
        per_core=tuple(
            compute_percent(before.per_core[i], after.per_core[i])
            for i in range(core_count)
        ),
        interval_ns=max(0, after.timestamp_ns - before.timestamp_ns),
    )
