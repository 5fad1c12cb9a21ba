"""Point-in-time snapshots: counter records plus a monotonic timestamp.

A ``timestamp_ns`` of 0 marks a snapshot whose capture failed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from seeker.models.counters import (
    CpuIdleStats,
    CpuTimeCounters,
    InterfaceCounters,
    IoCounters,
    IrqLineStats,
    SoftirqTypeStats,
)
from seeker.models.enums import SoftirqType


@dataclass(frozen=True, slots=True)
class CounterSnapshot:
    """A single counter record captured at a point in time.

    ``counters`` is any of the counter dataclasses; its integer fields are
    what the delta engine differences.
    """

    identity: str
    counters: Any
    timestamp_ns: int = 0

    @property
    def is_valid(self) -> bool:
        return self.timestamp_ns != 0


@dataclass(frozen=True, slots=True)
class CpuUtilizationSnapshot:
    """Aggregate and per-core CPU time counters (per_core indexed by CPU id)."""

    aggregate: CpuTimeCounters = field(default_factory=CpuTimeCounters)
    per_core: tuple[CpuTimeCounters, ...] = ()
    timestamp_ns: int = 0

    @property
    def core_count(self) -> int:
        return len(self.per_core)

    @property
    def is_valid(self) -> bool:
        return self.timestamp_ns != 0


@dataclass(frozen=True, slots=True)
class CpuIdleSnapshot:
    """C-state statistics for every CPU exposing cpuidle."""

    per_cpu: tuple[CpuIdleStats, ...] = ()
    timestamp_ns: int = 0

    @property
    def cpu_count(self) -> int:
        return len(self.per_cpu)

    @property
    def is_valid(self) -> bool:
        return self.timestamp_ns != 0


@dataclass(frozen=True, slots=True)
class InterfaceStatsSnapshot:
    """Counters for one or more network interfaces."""

    interfaces: tuple[InterfaceCounters, ...] = ()
    timestamp_ns: int = 0

    @property
    def count(self) -> int:
        return len(self.interfaces)

    @property
    def is_valid(self) -> bool:
        return self.timestamp_ns != 0

    def find(self, ifname: str | None) -> InterfaceCounters | None:
        if not ifname:
            return None
        for counters in self.interfaces:
            if counters.ifname == ifname:
                return counters
        return None


@dataclass(frozen=True, slots=True)
class IoStatsSnapshot:
    """I/O counters of a single block device."""

    device: str = ""
    counters: IoCounters = field(default_factory=IoCounters)
    timestamp_ns: int = 0

    @property
    def identity(self) -> str:
        return self.device

    @property
    def is_valid(self) -> bool:
        return self.timestamp_ns != 0


@dataclass(frozen=True, slots=True)
class IrqSnapshot:
    """Every IRQ line from /proc/interrupts.

    ``core_count`` comes from the header row; each line's ``per_core`` is
    padded to that width.
    """

    lines: tuple[IrqLineStats, ...] = ()
    core_count: int = 0
    timestamp_ns: int = 0

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def is_valid(self) -> bool:
        return self.timestamp_ns != 0

    def total_for_core(self, core: int) -> int:
        if core < 0 or core >= self.core_count:
            return 0
        return sum(line.per_core[core] for line in self.lines if core < len(line.per_core))

    def total_all_cores(self) -> int:
        return sum(line.total() for line in self.lines)

    def find(self, name: str) -> IrqLineStats | None:
        for line in self.lines:
            if line.name == name:
                return line
        return None


@dataclass(frozen=True, slots=True)
class SoftirqSnapshot:
    """Every softirq vector from /proc/softirqs."""

    types: tuple[SoftirqTypeStats, ...] = ()
    cpu_count: int = 0
    timestamp_ns: int = 0

    @property
    def type_count(self) -> int:
        return len(self.types)

    @property
    def is_valid(self) -> bool:
        return self.timestamp_ns != 0

    def total_for_cpu(self, cpu: int) -> int:
        if cpu < 0 or cpu >= self.cpu_count:
            return 0
        return sum(t.per_core[cpu] for t in self.types if cpu < len(t.per_core))

    def get_type(self, softirq_type: SoftirqType) -> SoftirqTypeStats | None:
        for stats in self.types:
            if stats.type == softirq_type:
                return stats
        return None
