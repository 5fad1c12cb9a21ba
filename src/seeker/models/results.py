"""Frozen dataclass models for deltas, derived rates and statistics."""

from __future__ import annotations

from dataclasses import dataclass, field

from seeker.models.enums import DeltaStatus, SoftirqType

NS_PER_SEC = 1_000_000_000


@dataclass(frozen=True, slots=True)
class CounterDelta:
    """Field-wise difference between two snapshots of the same counter record.

    The default instance is the "no measurable interval" result: no
    fields, zero elapsed time.
    """

    identity: str = ""
    deltas: tuple[tuple[str, int], ...] = ()
    elapsed_s: float = 0.0
    status: DeltaStatus = DeltaStatus.INVALID_INTERVAL

    @property
    def valid(self) -> bool:
        return self.status == DeltaStatus.OK

    def get(self, name: str) -> int:
        for field_name, value in self.deltas:
            if field_name == name:
                return value
        return 0

    def as_dict(self) -> dict[str, int]:
        return dict(self.deltas)

    def rate(self, name: str) -> float:
        """Per-second rate of a field, 0.0 when no time elapsed."""
        if self.elapsed_s <= 0.0:
            return 0.0
        return self.get(name) / self.elapsed_s


@dataclass(frozen=True, slots=True)
class CpuUtilizationPercent:
    """CPU time breakdown over an interval, each field 0-100."""

    user: float = 0.0
    nice: float = 0.0
    system: float = 0.0
    idle: float = 0.0
    iowait: float = 0.0
    irq: float = 0.0
    softirq: float = 0.0
    steal: float = 0.0
    guest: float = 0.0
    guest_nice: float = 0.0

    def active(self) -> float:
        """Busy share: everything except idle and iowait."""
        return (
            self.user + self.nice + self.system + self.irq + self.softirq
            + self.steal + self.guest + self.guest_nice
        )

    def total(self) -> float:
        return self.active() + self.idle + self.iowait


@dataclass(frozen=True, slots=True)
class CpuUtilizationDelta:
    """Utilization percentages for the aggregate and each core."""

    aggregate: CpuUtilizationPercent = field(default_factory=CpuUtilizationPercent)
    per_core: tuple[CpuUtilizationPercent, ...] = ()
    interval_ns: int = 0

    @property
    def core_count(self) -> int:
        return len(self.per_core)


@dataclass(frozen=True, slots=True)
class CpuIdleDelta:
    """Per-CPU, per-state usage and time deltas, indexed [cpu][state]."""

    usage_delta: tuple[tuple[int, ...], ...] = ()
    time_delta_us: tuple[tuple[int, ...], ...] = ()
    interval_ns: int = 0

    @property
    def cpu_count(self) -> int:
        return len(self.time_delta_us)

    def state_count(self, cpu: int) -> int:
        if cpu < 0 or cpu >= self.cpu_count:
            return 0
        return len(self.time_delta_us[cpu])

    def residency_percent(self, cpu: int, state: int) -> float:
        """Share of the interval spent in a C-state.

        Not clamped: kernel accounting on multi-core and virtualized hosts
        can report more than 100%.
        """
        if state < 0 or state >= self.state_count(cpu) or self.interval_ns == 0:
            return 0.0
        interval_us = self.interval_ns / 1000.0
        return self.time_delta_us[cpu][state] / interval_us * 100.0

    def capped_residency_percent(self, cpu: int, state: int) -> float:
        return min(self.residency_percent(cpu, state), 100.0)


@dataclass(frozen=True, slots=True)
class InterfaceRates:
    """Per-second rates for one interface."""

    ifname: str = ""
    duration_s: float = 0.0
    rx_bytes_per_sec: float = 0.0
    tx_bytes_per_sec: float = 0.0
    rx_packets_per_sec: float = 0.0
    tx_packets_per_sec: float = 0.0
    rx_errors_per_sec: float = 0.0
    tx_errors_per_sec: float = 0.0
    rx_dropped_per_sec: float = 0.0
    tx_dropped_per_sec: float = 0.0
    collisions_per_sec: float = 0.0

    def rx_mbps(self) -> float:
        return self.rx_bytes_per_sec * 8.0 / 1_000_000.0

    def tx_mbps(self) -> float:
        return self.tx_bytes_per_sec * 8.0 / 1_000_000.0

    def total_mbps(self) -> float:
        return self.rx_mbps() + self.tx_mbps()

    def has_errors(self) -> bool:
        return self.rx_errors_per_sec > 0.0 or self.tx_errors_per_sec > 0.0

    def has_drops(self) -> bool:
        return self.rx_dropped_per_sec > 0.0 or self.tx_dropped_per_sec > 0.0


@dataclass(frozen=True, slots=True)
class InterfaceStatsDelta:
    """Rates for every interface present in both snapshots."""

    interfaces: tuple[InterfaceRates, ...] = ()
    duration_s: float = 0.0

    @property
    def count(self) -> int:
        return len(self.interfaces)

    def find(self, ifname: str | None) -> InterfaceRates | None:
        if not ifname:
            return None
        for rates in self.interfaces:
            if rates.ifname == ifname:
                return rates
        return None


@dataclass(frozen=True, slots=True)
class IoStatsDelta:
    """Block device rates over an interval. Rates are per second."""

    device: str = ""
    interval_s: float = 0.0
    read_iops: float = 0.0
    write_iops: float = 0.0
    total_iops: float = 0.0
    read_bytes_per_sec: float = 0.0
    write_bytes_per_sec: float = 0.0
    total_bytes_per_sec: float = 0.0
    avg_read_latency_ms: float = 0.0
    avg_write_latency_ms: float = 0.0
    utilization_pct: float = 0.0  # capped at 100
    avg_queue_depth: float = 0.0  # not capped
    read_merges_pct: float = 0.0
    write_merges_pct: float = 0.0
    discard_iops: float = 0.0
    discard_bytes_per_sec: float = 0.0

    def is_idle(self) -> bool:
        return self.total_iops < 0.1 and self.utilization_pct < 1.0

    def is_high_utilization(self) -> bool:
        return self.utilization_pct > 80.0


@dataclass(frozen=True, slots=True)
class IrqDelta:
    """Per-line, per-core interrupt counts over an interval, indexed [line][core]."""

    names: tuple[str, ...] = ()
    per_core_delta: tuple[tuple[int, ...], ...] = ()
    core_count: int = 0
    interval_ns: int = 0

    @property
    def line_count(self) -> int:
        return len(self.names)

    def line_total(self, line: int) -> int:
        if line < 0 or line >= self.line_count:
            return 0
        return sum(self.per_core_delta[line])

    def total_for_core(self, core: int) -> int:
        if core < 0 or core >= self.core_count:
            return 0
        return sum(row[core] for row in self.per_core_delta)

    def rate_for_core(self, core: int) -> float:
        """Interrupts per second on one core, 0.0 for a zero interval."""
        if self.interval_ns == 0:
            return 0.0
        return self.total_for_core(core) / (self.interval_ns / NS_PER_SEC)

    def rate_for_line(self, name: str) -> float:
        if self.interval_ns == 0 or name not in self.names:
            return 0.0
        return self.line_total(self.names.index(name)) / (self.interval_ns / NS_PER_SEC)

    def top_lines(self, limit: int = 10) -> list[tuple[str, int]]:
        """Busiest lines as (name, count), highest first, zero counts omitted."""
        totals = [(name, self.line_total(i)) for i, name in enumerate(self.names)]
        busy = [item for item in totals if item[1] > 0]
        busy.sort(key=lambda item: item[1], reverse=True)
        return busy[: max(0, limit)]


@dataclass(frozen=True, slots=True)
class SoftirqDelta:
    """Per-type, per-CPU softirq counts over an interval, indexed [type][cpu]."""

    names: tuple[str, ...] = ()
    types: tuple[SoftirqType, ...] = ()
    per_core_delta: tuple[tuple[int, ...], ...] = ()
    cpu_count: int = 0
    interval_ns: int = 0

    @property
    def type_count(self) -> int:
        return len(self.names)

    def type_total(self, index: int) -> int:
        if index < 0 or index >= self.type_count:
            return 0
        return sum(self.per_core_delta[index])

    def total_for_cpu(self, cpu: int) -> int:
        if cpu < 0 or cpu >= self.cpu_count:
            return 0
        return sum(row[cpu] for row in self.per_core_delta)

    def rate_for_cpu(self, cpu: int) -> float:
        if self.interval_ns == 0:
            return 0.0
        return self.total_for_cpu(cpu) / (self.interval_ns / NS_PER_SEC)

    def type_rate(self, index: int) -> float:
        if self.interval_ns == 0:
            return 0.0
        return self.type_total(index) / (self.interval_ns / NS_PER_SEC)

    def rate_for_type(self, softirq_type: SoftirqType) -> float:
        """Rate of one vector summed over all CPUs; 0.0 if absent."""
        if softirq_type not in self.types:
            return 0.0
        return self.type_rate(self.types.index(softirq_type))


@dataclass(frozen=True, slots=True)
class Statistics:
    """Order statistics of a finite sample set."""

    count: int = 0
    min: float = 0.0
    max: float = 0.0
    mean: float = 0.0
    median: float = 0.0
    p90: float = 0.0
    p95: float = 0.0
    p99: float = 0.0
    p999: float = 0.0
    stddev: float = 0.0  # population
