"""Per-core interrupt deltas between two /proc/interrupts snapshots."""

from __future__ import annotations

from seeker.models.counters import IrqLineStats
from seeker.models.results import IrqDelta
from seeker.models.snapshots import IrqSnapshot


def snapshot_interval_ns(before, after) -> int:
    """Elapsed ns between two snapshots; 0 unless both are valid and time advanced."""
    if not (before.is_valid and after.is_valid) or after.timestamp_ns <= before.timestamp_ns:
        return 0
    return after.timestamp_ns - before.timestamp_ns


def per_core_deltas(before: tuple[int, ...], after: tuple[int, ...], core_count: int) -> tuple[int, ...]:
    """Counter differences for the first ``core_count`` cores; a regression yields 0."""
    deltas = []
    for core in range(core_count):
        b = before[core] if core < len(before) else 0
        a = after[core] if core < len(after) else 0
        deltas.append(a - b if a >= b else 0)
    return tuple(deltas)


def compute_irq_delta(before: IrqSnapshot, after: IrqSnapshot) -> IrqDelta:
    """Match IRQ lines by name, in ``after`` order.

    A line absent from ``before`` (a handler registered between captures)
    is differenced against zero.
    """
    core_count = min(before.core_count, after.core_count)
    previous = {line.name: line for line in before.lines}
    empty = IrqLineStats()

    names = []
    rows = []
    for line in after.lines:
        old = previous.get(line.name, empty)
        names.append(line.name)
        rows.append(per_core_deltas(old.per_core, line.per_core, core_count))

    return IrqDelta(
        names=tuple(names),
        per_core_delta=tuple(rows),
        core_count=core_count,
        interval_ns=snapshot_interval_ns(before, after),
    )
