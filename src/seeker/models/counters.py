"""Frozen dataclass models for raw cumulative kernel counters."""

from __future__ import annotations

from dataclasses import dataclass

from seeker.models.enums import SoftirqType

# Bounds applied by the collectors when building snapshots.
MAX_CPUS = 1024
IDLE_MAX_CPUS = 256
IDLE_MAX_STATES = 16
IDLE_NAME_SIZE = 32
IDLE_DESC_SIZE = 64
MAX_INTERFACES = 32
IF_NAME_SIZE = 16
DEVICE_NAME_SIZE = 32
IRQ_MAX_CPUS = 256
IRQ_MAX_LINES = 512
IRQ_NAME_SIZE = 32
IRQ_DESC_SIZE = 64
SOFTIRQ_MAX_CPUS = 256
SOFTIRQ_MAX_TYPES = 16
SOFTIRQ_NAME_SIZE = 16

SECTOR_SIZE = 512


@dataclass(frozen=True, slots=True)
class CpuTimeCounters:
    """Raw CPU time counters from /proc/stat, in jiffies since boot."""

    user: int = 0
    nice: int = 0
    system: int = 0
    idle: int = 0
    iowait: int = 0
    irq: int = 0
    softirq: int = 0
    steal: int = 0
    guest: int = 0
    guest_nice: int = 0

    def total(self) -> int:
        return (
            self.user + self.nice + self.system + self.idle + self.iowait
            + self.irq + self.softirq + self.steal + self.guest + self.guest_nice
        )

    def active(self) -> int:
        """Total minus idle and iowait, never negative."""
        total = self.total()
        inactive = self.idle + self.iowait
        return total - inactive if total >= inactive else 0


@dataclass(frozen=True, slots=True)
class CStateInfo:
    """A single C-state of a single CPU, from cpuidle sysfs."""

    name: str = ""
    desc: str = ""
    latency_us: int = 0  # exit latency
    residency_us: int = 0  # target residency
    usage_count: int = 0
    time_us: int = 0
    disabled: bool = False


@dataclass(frozen=True, slots=True)
class CpuIdleStats:
    """All C-states of one CPU, indexed by state number."""

    cpu_id: int = -1
    states: tuple[CStateInfo, ...] = ()

    def total_idle_time_us(self) -> int:
        return sum(s.time_us for s in self.states)

    def deepest_enabled_state(self) -> int:
        """Index of the deepest state not disabled, or -1 if all are disabled."""
        deepest = -1
        for idx, state in enumerate(self.states):
            if not state.disabled:
                deepest = idx
        return deepest


@dataclass(frozen=True, slots=True)
class InterfaceCounters:
    """Raw counters from /sys/class/net/<if>/statistics/."""

    ifname: str = ""
    rx_bytes: int = 0
    tx_bytes: int = 0
    rx_packets: int = 0
    tx_packets: int = 0
    rx_errors: int = 0
    tx_errors: int = 0
    rx_dropped: int = 0
    tx_dropped: int = 0
    collisions: int = 0
    rx_multicast: int = 0

    def total_errors(self) -> int:
        return self.rx_errors + self.tx_errors

    def total_drops(self) -> int:
        return self.rx_dropped + self.tx_dropped

    def has_issues(self) -> bool:
        return self.total_errors() > 0 or self.total_drops() > 0 or self.collisions > 0


@dataclass(frozen=True, slots=True)
class IoCounters:
    """Raw counters from /sys/block/<dev>/stat.

    Operations are completed requests, sectors are 512-byte units and
    times are milliseconds. Discard fields need kernel 4.18+, flush
    fields 5.5+; both stay zero on older kernels.
    """

    read_ops: int = 0
    read_merges: int = 0
    read_sectors: int = 0
    read_time_ms: int = 0
    write_ops: int = 0
    write_merges: int = 0
    write_sectors: int = 0
    write_time_ms: int = 0
    io_in_flight: int = 0
    io_time_ms: int = 0
    weighted_io_time_ms: int = 0
    discard_ops: int = 0
    discard_merges: int = 0
    discard_sectors: int = 0
    discard_time_ms: int = 0
    flush_ops: int = 0
    flush_time_ms: int = 0

    def read_bytes(self) -> int:
        return self.read_sectors * SECTOR_SIZE

    def write_bytes(self) -> int:
        return self.write_sectors * SECTOR_SIZE

    def total_ops(self) -> int:
        return self.read_ops + self.write_ops

    def total_bytes(self) -> int:
        return self.read_bytes() + self.write_bytes()


@dataclass(frozen=True, slots=True)
class IrqLineStats:
    """One row of /proc/interrupts: an IRQ line's count on each CPU."""

    name: str = ""  # "0", "NMI", "LOC", ...
    desc: str = ""  # controller and handler, e.g. "IO-APIC 2-edge timer"
    per_core: tuple[int, ...] = ()

    def total(self) -> int:
        return sum(self.per_core)


@dataclass(frozen=True, slots=True)
class SoftirqTypeStats:
    """One row of /proc/softirqs: a softirq vector's count on each CPU."""

    name: str = ""
    type: SoftirqType = SoftirqType.UNKNOWN
    per_core: tuple[int, ...] = ()

    def total(self) -> int:
        return sum(self.per_core)
