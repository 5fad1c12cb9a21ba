"""Snapshot capture from /proc and sysfs.

Every capture function is safe to call repeatedly and never raises: when
the source cannot be read the returned snapshot carries timestamp 0 and
zeroed counters. Callers check ``snapshot.is_valid`` before use.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

import psutil

from seeker.models.counters import (
    DEVICE_NAME_SIZE,
    IDLE_DESC_SIZE,
    IDLE_MAX_CPUS,
    IDLE_MAX_STATES,
    IDLE_NAME_SIZE,
    IF_NAME_SIZE,
    IRQ_DESC_SIZE,
    IRQ_MAX_CPUS,
    IRQ_MAX_LINES,
    IRQ_NAME_SIZE,
    MAX_CPUS,
    MAX_INTERFACES,
    SOFTIRQ_MAX_CPUS,
    SOFTIRQ_MAX_TYPES,
    SOFTIRQ_NAME_SIZE,
    CpuIdleStats,
    CpuTimeCounters,
    CStateInfo,
    InterfaceCounters,
    IoCounters,
    IrqLineStats,
    SoftirqTypeStats,
)
from seeker.models.enums import SoftirqType
from seeker.models.snapshots import (
    CpuIdleSnapshot,
    CpuUtilizationSnapshot,
    InterfaceStatsSnapshot,
    IoStatsSnapshot,
    IrqSnapshot,
    SoftirqSnapshot,
)

logger = logging.getLogger("seeker.collectors")

PROC_STAT = Path("/proc/stat")
PROC_INTERRUPTS = Path("/proc/interrupts")
PROC_SOFTIRQS = Path("/proc/softirqs")
CPU_SYS_PATH = Path("/sys/devices/system/cpu")
NET_SYS_PATH = Path("/sys/class/net")
SYS_BLOCK = Path("/sys/block")

_CPU_FIELDS = (
    "user", "nice", "system", "idle", "iowait",
    "irq", "softirq", "steal", "guest", "guest_nice",
)

# /sys/class/net/<if>/statistics/<file> -> InterfaceCounters field
_NET_COUNTER_FILES = (
    ("rx_bytes", "rx_bytes"),
    ("tx_bytes", "tx_bytes"),
    ("rx_packets", "rx_packets"),
    ("tx_packets", "tx_packets"),
    ("rx_errors", "rx_errors"),
    ("tx_errors", "tx_errors"),
    ("rx_dropped", "rx_dropped"),
    ("tx_dropped", "tx_dropped"),
    ("collisions", "collisions"),
    ("rx_multicast", "multicast"),
)

# Field order of /sys/block/<dev>/stat (Documentation/block/stat.rst)
_IO_STAT_FIELDS = (
    "read_ops", "read_merges", "read_sectors", "read_time_ms",
    "write_ops", "write_merges", "write_sectors", "write_time_ms",
    "io_in_flight", "io_time_ms", "weighted_io_time_ms",
    "discard_ops", "discard_merges", "discard_sectors", "discard_time_ms",
    "flush_ops", "flush_time_ms",
)
_IO_BASIC_FIELDS = 11
_IO_DISCARD_FIELDS = 15
_IO_FLUSH_FIELDS = 17


def _truncate(name: str, size: int) -> str:
    return name[: size - 1]


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text()
    except (OSError, UnicodeDecodeError):
        return None


def _read_uint(path: Path) -> int:
    """Read an unsigned integer file; 0 when missing or unparsable."""
    text = _read_text(path)
    if text is None:
        return 0
    try:
        return max(0, int(text.split()[0]))
    except (ValueError, IndexError):
        return 0


def _is_uint(token: str) -> bool:
    # str.isdigit also accepts superscripts and other digits int() rejects
    return token.isascii() and token.isdigit()


def _parse_leading_uints(tokens: list[str], limit: int) -> list[int]:
    """Parse tokens as integers until the first that is not one."""
    values: list[int] = []
    for token in tokens[:limit]:
        if not _is_uint(token):
            break
        values.append(int(token))
    return values


# --- CPU time (/proc/stat) ---------------------------------------------------


def parse_cpu_line(line: str) -> tuple[int, CpuTimeCounters] | None:
    """Parse a ``cpu`` or ``cpuN`` line. Returns (cpu_id, counters), -1 for aggregate.

    Older kernels print fewer than ten values; the missing ones stay zero.
    """
    tokens = line.split()
    if not tokens or not tokens[0].startswith("cpu"):
        return None

    suffix = tokens[0][3:]
    if suffix == "":
        cpu_id = -1
    elif _is_uint(suffix):
        cpu_id = int(suffix)
    else:
        return None

    values = _parse_leading_uints(tokens[1:], len(_CPU_FIELDS))
    return cpu_id, CpuTimeCounters(**dict(zip(_CPU_FIELDS, values)))


def get_cpu_utilization_snapshot(proc_stat: Path = PROC_STAT) -> CpuUtilizationSnapshot:
    """Capture aggregate and per-core jiffies."""
    timestamp = time.monotonic_ns()
    text = _read_text(proc_stat)
    if text is None:
        logger.debug("Cannot read %s", proc_stat)
        return CpuUtilizationSnapshot()

    aggregate = CpuTimeCounters()
    cores: dict[int, CpuTimeCounters] = {}
    for line in text.splitlines():
        parsed = parse_cpu_line(line)
        if parsed is None:
            continue
        cpu_id, counters = parsed
        if cpu_id < 0:
            aggregate = counters
        elif cpu_id < MAX_CPUS:
            cores[cpu_id] = counters

    core_count = max(cores) + 1 if cores else 0
    per_core = tuple(cores.get(i, CpuTimeCounters()) for i in range(core_count))
    return CpuUtilizationSnapshot(aggregate=aggregate, per_core=per_core, timestamp_ns=timestamp)


# --- CPU idle states (cpuidle sysfs) -----------------------------------------


def _numbered_dirs(base: Path, prefix: str, limit: int) -> list[tuple[int, Path]]:
    """Subdirectories named ``<prefix><N>`` with N < limit, sorted by N."""
    found = []
    try:
        entries = list(base.iterdir())
    except OSError:
        return []
    for entry in entries:
        suffix = entry.name[len(prefix):]
        if not entry.name.startswith(prefix) or not _is_uint(suffix):
            continue
        index = int(suffix)
        if index < limit and entry.is_dir():
            found.append((index, entry))
    return sorted(found)


def read_cstate(state_dir: Path) -> CStateInfo:
    return CStateInfo(
        name=_truncate((_read_text(state_dir / "name") or "").strip(), IDLE_NAME_SIZE),
        desc=_truncate((_read_text(state_dir / "desc") or "").strip(), IDLE_DESC_SIZE),
        latency_us=_read_uint(state_dir / "latency"),
        residency_us=_read_uint(state_dir / "residency"),
        usage_count=_read_uint(state_dir / "usage"),
        time_us=_read_uint(state_dir / "time"),
        disabled=_read_uint(state_dir / "disable") != 0,
    )


def get_cpu_idle_snapshot(cpu_base: Path = CPU_SYS_PATH) -> CpuIdleSnapshot:
    """Capture C-state usage and residency for every CPU that has cpuidle."""
    timestamp = time.monotonic_ns()
    if not cpu_base.is_dir():
        logger.debug("No cpu sysfs at %s", cpu_base)
        return CpuIdleSnapshot()

    per_cpu = []
    for cpu_id, cpu_dir in _numbered_dirs(cpu_base, "cpu", IDLE_MAX_CPUS):
        idle_dir = cpu_dir / "cpuidle"
        if not idle_dir.is_dir():
            continue
        states = {idx: read_cstate(d) for idx, d in _numbered_dirs(idle_dir, "state", IDLE_MAX_STATES)}
        if not states:
            continue
        per_cpu.append(
            CpuIdleStats(
                cpu_id=cpu_id,
                states=tuple(states.get(i, CStateInfo()) for i in range(max(states) + 1)),
            )
        )

    return CpuIdleSnapshot(per_cpu=tuple(per_cpu), timestamp_ns=timestamp)


# --- Network interfaces (/sys/class/net) -------------------------------------


def get_interface_counters(ifname: str, net_base: Path = NET_SYS_PATH) -> InterfaceCounters:
    """Read one interface's counters; unreadable counters are 0."""
    if not ifname:
        return InterfaceCounters()
    stats_dir = net_base / ifname / "statistics"
    values = {field: _read_uint(stats_dir / filename) for field, filename in _NET_COUNTER_FILES}
    return InterfaceCounters(ifname=_truncate(ifname, IF_NAME_SIZE), **values)


def get_interface_stats_snapshot(
    ifname: str | None = None,
    net_base: Path = NET_SYS_PATH,
) -> InterfaceStatsSnapshot:
    """Capture one interface, or all of them (up to MAX_INTERFACES)."""
    timestamp = time.monotonic_ns()

    if ifname:
        if not (net_base / ifname / "statistics").is_dir():
            logger.debug("Interface %s has no statistics directory", ifname)
            return InterfaceStatsSnapshot()
        return InterfaceStatsSnapshot(
            interfaces=(get_interface_counters(ifname, net_base),),
            timestamp_ns=timestamp,
        )

    try:
        names = sorted(entry.name for entry in net_base.iterdir() if not entry.name.startswith("."))
    except OSError:
        logger.debug("Cannot list %s", net_base)
        return InterfaceStatsSnapshot()

    interfaces = tuple(get_interface_counters(name, net_base) for name in names[:MAX_INTERFACES])
    return InterfaceStatsSnapshot(interfaces=interfaces, timestamp_ns=timestamp)


def list_interfaces() -> list[str]:
    """Names of the network interfaces known to the system."""
    try:
        return sorted(psutil.net_if_stats())
    except (psutil.AccessDenied, OSError):
        logger.debug("Cannot enumerate network interfaces")
        return []


# --- Block devices (/sys/block) ----------------------------------------------


def parse_io_stat(content: str) -> IoCounters | None:
    """Parse /sys/block/<dev>/stat; None if fewer than 11 fields parse.

    Kernels before 4.18 print 11 fields, before 5.5 print 15; absent
    discard and flush counters stay zero.
    """
    values = _parse_leading_uints(content.split(), _IO_FLUSH_FIELDS)
    if len(values) < _IO_BASIC_FIELDS:
        return None
    if len(values) < _IO_DISCARD_FIELDS:
        values = values[:_IO_BASIC_FIELDS]
    elif len(values) < _IO_FLUSH_FIELDS:
        values = values[:_IO_DISCARD_FIELDS]
    return IoCounters(**dict(zip(_IO_STAT_FIELDS, values)))


def get_io_stats_snapshot(device: str, sys_block: Path = SYS_BLOCK) -> IoStatsSnapshot:
    """Capture one block device's counters."""
    if not device:
        return IoStatsSnapshot()

    name = _truncate(device, DEVICE_NAME_SIZE)
    content = _read_text(sys_block / device / "stat")
    if content is None:
        logger.debug("Cannot read stat for %s", device)
        return IoStatsSnapshot(device=name)

    counters = parse_io_stat(content)
    if counters is None:
        logger.debug("Malformed stat for %s: %r", device, content[:80])
        return IoStatsSnapshot(device=name)

    return IoStatsSnapshot(device=name, counters=counters, timestamp_ns=time.monotonic_ns())


def list_block_devices(sys_block: Path = SYS_BLOCK) -> list[str]:
    """Whole-disk devices that psutil reports and that have a /sys/block entry."""
    try:
        per_disk = psutil.disk_io_counters(perdisk=True) or {}
    except (psutil.AccessDenied, OSError):
        logger.debug("Cannot enumerate block devices")
        return []
    return sorted(name for name in per_disk if (sys_block / name).is_dir())


# --- Interrupts (/proc/interrupts, /proc/softirqs) ---------------------------


def parse_cpu_header(line: str) -> int:
    """Count the leading ``CPUn`` columns of an interrupts/softirqs header."""
    count = 0
    for token in line.split():
        if not token.startswith("CPU") or not _is_uint(token[3:]):
            break
        count += 1
    return count


def _split_counter_row(line: str, name_size: int) -> tuple[str, list[str]] | None:
    """Split ``NAME: v0 v1 ...`` into its name and the tokens after the colon."""
    name, sep, rest = line.strip().partition(":")
    name = name.strip()
    if not sep or not name or len(name) >= name_size:
        return None
    return name, rest.split()


def _padded(values: list[int], width: int) -> tuple[int, ...]:
    return tuple(values) + (0,) * (width - len(values))


def parse_irq_line(line: str, core_count: int) -> IrqLineStats | None:
    """Parse one /proc/interrupts row.

    Rows such as ``ERR:`` and ``MIS:`` carry a single count; missing
    per-core values are zero. Whatever follows the counts is the
    description.
    """
    row = _split_counter_row(line, IRQ_NAME_SIZE)
    if row is None:
        return None
    name, tokens = row
    values = _parse_leading_uints(tokens, core_count)
    return IrqLineStats(
        name=name,
        desc=_truncate(" ".join(tokens[len(values):]), IRQ_DESC_SIZE),
        per_core=_padded(values, core_count),
    )


def parse_softirq_line(line: str, cpu_count: int) -> SoftirqTypeStats | None:
    """Parse one /proc/softirqs row such as ``NET_RX: 12 34``."""
    row = _split_counter_row(line, SOFTIRQ_NAME_SIZE)
    if row is None:
        return None
    name, tokens = row
    return SoftirqTypeStats(
        name=name,
        type=SoftirqType.from_name(name),
        per_core=_padded(_parse_leading_uints(tokens, cpu_count), cpu_count),
    )


def _read_counter_table(path: Path, max_cpus: int) -> tuple[int, list[str]] | None:
    """Read a CPU-column table: (cpu count from header, remaining rows)."""
    text = _read_text(path)
    if text is None:
        logger.debug("Cannot read %s", path)
        return None
    rows = text.splitlines()
    core_count = parse_cpu_header(rows[0]) if rows else 0
    if core_count == 0:
        logger.debug("No CPU columns in %s header", path)
        return None
    return min(core_count, max_cpus), rows[1:]


def get_irq_snapshot(proc_interrupts: Path = PROC_INTERRUPTS) -> IrqSnapshot:
    """Capture per-core counts for every IRQ line (up to IRQ_MAX_LINES)."""
    timestamp = time.monotonic_ns()
    table = _read_counter_table(proc_interrupts, IRQ_MAX_CPUS)
    if table is None:
        return IrqSnapshot()

    core_count, rows = table
    lines = []
    for row in rows:
        if len(lines) >= IRQ_MAX_LINES:
            break
        parsed = parse_irq_line(row, core_count)
        if parsed is not None:
            lines.append(parsed)
    return IrqSnapshot(lines=tuple(lines), core_count=core_count, timestamp_ns=timestamp)


def get_softirq_snapshot(proc_softirqs: Path = PROC_SOFTIRQS) -> SoftirqSnapshot:
    """Capture per-CPU counts for every softirq vector (up to SOFTIRQ_MAX_TYPES)."""
    timestamp = time.monotonic_ns()
    table = _read_counter_table(proc_softirqs, SOFTIRQ_MAX_CPUS)
    if table is None:
        return SoftirqSnapshot()

    cpu_count, rows = table
    types = []
    for row in rows:
        if len(types) >= SOFTIRQ_MAX_TYPES:
            break
        parsed = parse_softirq_line(row, cpu_count)
        if parsed is not None:
            types.append(parsed)
    return SoftirqSnapshot(types=tuple(types), cpu_count=cpu_count, timestamp_ns=timestamp)
