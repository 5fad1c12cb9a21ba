"""C-state usage and residency deltas between two cpuidle snapshots."""

from __future__ import annotations

import logging

from seeker.models.counters import CpuIdleStats
from seeker.models.results import CpuIdleDelta
from seeker.models.snapshots import CpuIdleSnapshot

logger = logging.getLogger("seeker.idle")


def _state_deltas(
    before: CpuIdleStats, after: CpuIdleStats
) -> tuple[tuple[int, ...], tuple[int, ...]]:
    n_states = min(len(before.states), len(after.states))
    usage = []
    time_us = []
    for b, a in zip(before.states[:n_states], after.states[:n_states]):
        usage.append(a.usage_count - b.usage_count if a.usage_count >= b.usage_count else 0)
        time_us.append(a.time_us - b.time_us if a.time_us >= b.time_us else 0)
    return tuple(usage), tuple(time_us)


def compute_cpu_idle_delta(
    before: CpuIdleSnapshot,
    after: CpuIdleSnapshot,
) -> CpuIdleDelta:
    """Per-CPU, per-state deltas. Rows are matched by position.

    A row whose CPU ids differ between the snapshots (hotplug between
    captures) is left empty rather than compared against the wrong CPU.
    """
    cpu_count = min(before.cpu_count, after.cpu_count)
    usage_rows: list[tuple[int, ...]] = []
    time_rows: list[tuple[int, ...]] = []

    for b_cpu, a_cpu in zip(before.per_cpu[:cpu_count], after.per_cpu[:cpu_count]):
        if b_cpu.cpu_id != a_cpu.cpu_id:
            logger.debug("cpuidle row mismatch: cpu%d vs cpu%d", b_cpu.cpu_id, a_cpu.cpu_id)
            usage_rows.append(())
            time_rows.append(())
            continue
        usage, time_us = _state_deltas(b_cpu, a_cpu)
        usage_rows.append(usage)
        time_rows.append(time_us)

    return CpuIdleDelta(
        usage_delta=tuple(usage_rows),
        time_delta_us=tuple(time_rows),
        interval_ns=max(0, after.timestamp_ns - before.timestamp_ns),
    )
