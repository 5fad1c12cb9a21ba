"""Seeker data models."""

from seeker.models.counters import (
    CpuIdleStats,
    CpuTimeCounters,
    CStateInfo,
    InterfaceCounters,
    IoCounters,
    IrqLineStats,
    SoftirqTypeStats,
)
from seeker.models.enums import DeltaStatus, RtVerdict, SleepMode, SoftirqType
from seeker.models.latency import BenchConfig, LatencyStats
from seeker.models.results import (
    CounterDelta,
    CpuIdleDelta,
    CpuUtilizationDelta,
    CpuUtilizationPercent,
    InterfaceRates,
    InterfaceStatsDelta,
    IoStatsDelta,
    IrqDelta,
    SoftirqDelta,
    Statistics,
)
from seeker.models.snapshots import (
    CounterSnapshot,
    CpuIdleSnapshot,
    CpuUtilizationSnapshot,
    InterfaceStatsSnapshot,
    IoStatsSnapshot,
    IrqSnapshot,
    SoftirqSnapshot,
)

__all__ = [
    "DeltaStatus",
    "RtVerdict",
    "SleepMode",
    "SoftirqType",
    "CpuTimeCounters",
    "CStateInfo",
    "CpuIdleStats",
    "InterfaceCounters",
    "IoCounters",
    "IrqLineStats",
    "SoftirqTypeStats",
    "CounterSnapshot",
    "CpuUtilizationSnapshot",
    "CpuIdleSnapshot",
    "InterfaceStatsSnapshot",
    "IoStatsSnapshot",
    "IrqSnapshot",
    "SoftirqSnapshot",
    "CounterDelta",
    "CpuUtilizationPercent",
    "CpuUtilizationDelta",
    "CpuIdleDelta",
    "InterfaceRates",
    "InterfaceStatsDelta",
    "IoStatsDelta",
    "IrqDelta",
    "SoftirqDelta",
    "Statistics",
    "BenchConfig",
    "LatencyStats",
]
