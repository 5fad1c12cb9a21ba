"""Markdown formatters for LLM-friendly output, plus throughput helpers."""

from __future__ import annotations

from seeker.models.latency import LatencyStats
from seeker.models.results import (
    CpuIdleDelta,
    CpuUtilizationDelta,
    InterfaceStatsDelta,
    IoStatsDelta,
    IrqDelta,
    SoftirqDelta,
)
from seeker.models.snapshots import CpuIdleSnapshot

# Residencies at or below this are left out of the idle report
_RESIDENCY_FLOOR_PCT = 0.1


def format_throughput(bytes_per_sec: float) -> str:
    """Network-style bit rate: bps, Kbps, Mbps or Gbps (decimal units)."""
    if bytes_per_sec <= 0.0:
        return "0 bps"
    bits = bytes_per_sec * 8.0
    if bits >= 1e9:
        return f"{bits / 1e9:.2f} Gbps"
    if bits >= 1e6:
        return f"{bits / 1e6:.2f} Mbps"
    if bits >= 1e3:
        return f"{bits / 1e3:.2f} Kbps"
    return f"{bits:.0f} bps"


def format_bytes_per_sec(bytes_per_sec: float) -> str:
    """Storage-style byte rate: B/s, KB/s, MB/s or GB/s (decimal units)."""
    if bytes_per_sec < 1e3:
        return f"{bytes_per_sec:.0f} B/s"
    if bytes_per_sec < 1e6:
        return f"{bytes_per_sec / 1e3:.1f} KB/s"
    if bytes_per_sec < 1e9:
        return f"{bytes_per_sec / 1e6:.1f} MB/s"
    return f"{bytes_per_sec / 1e9:.2f} GB/s"


def format_cpu_delta(delta: CpuUtilizationDelta, per_core: bool = False) -> str:
    """Format CPU utilization as a markdown table."""
    a = delta.aggregate
    lines = [
        "## CPU Utilization",
        f"**Interval:** {delta.interval_ns / 1e6:.2f} ms  ",
        "",
        "| CPU | Active | User | Nice | System | Idle | IOwait | IRQ | SoftIRQ | Steal |",
        "|-----|--------|------|------|--------|------|--------|-----|---------|-------|",
        _cpu_row("all", a),
    ]
    if per_core:
        lines.extend(_cpu_row(f"cpu{i}", pct) for i, pct in enumerate(delta.per_core))
    return "\n".join(lines)


def _cpu_row(label: str, p) -> str:
    return (
        f"| {label} | {p.active():.1f}% | {p.user:.1f}% | {p.nice:.1f}% | {p.system:.1f}% "
        f"| {p.idle:.1f}% | {p.iowait:.1f}% | {p.irq:.1f}% | {p.softirq:.1f}% | {p.steal:.1f}% |"
    )


def format_idle_delta(
    delta: CpuIdleDelta,
    snapshot: CpuIdleSnapshot | None = None,
    cap: bool = True,
) -> str:
    """Format C-state residency per CPU.

    ``snapshot`` supplies CPU ids and state names when available.
    """
    if delta.cpu_count == 0:
        return "No cpuidle data available."

    lines = [
        "## C-State Residency",
        f"**Interval:** {delta.interval_ns / 1e6:.2f} ms  ",
        "",
        "| CPU | Residency |",
        "|-----|-----------|",
    ]
    for cpu in range(delta.cpu_count):
        cpu_label = f"cpu{cpu}"
        names: tuple[str, ...] = ()
        if snapshot is not None and cpu < snapshot.cpu_count:
            stats = snapshot.per_cpu[cpu]
            cpu_label = f"cpu{stats.cpu_id}"
            names = tuple(s.name for s in stats.states)

        parts = []
        for state in range(delta.state_count(cpu)):
            pct = (
                delta.capped_residency_percent(cpu, state)
                if cap
                else delta.residency_percent(cpu, state)
            )
            if pct > _RESIDENCY_FLOOR_PCT:
                name = names[state] if state < len(names) and names[state] else f"S{state}"
                parts.append(f"{name}={pct:.1f}%")
        lines.append(f"| {cpu_label} | {' '.join(parts) or '—'} |")

    return "\n".join(lines)


def format_net_delta(delta: InterfaceStatsDelta) -> str:
    """Format interface rates as a markdown table."""
    if delta.count == 0:
        return "No interface rates (no common interfaces or no elapsed time)."

    lines = [
        "## Network Interfaces",
        f"**Interval:** {delta.duration_s:.3f} s  ",
        "",
        "| Interface | RX | TX | RX pps | TX pps | Errors/s | Drops/s |",
        "|-----------|----|----|--------|--------|----------|---------|",
    ]
    for r in delta.interfaces:
        errors = r.rx_errors_per_sec + r.tx_errors_per_sec
        drops = r.rx_dropped_per_sec + r.tx_dropped_per_sec
        lines.append(
            f"| {r.ifname} | {format_throughput(r.rx_bytes_per_sec)} "
            f"| {format_throughput(r.tx_bytes_per_sec)} "
            f"| {r.rx_packets_per_sec:.0f} | {r.tx_packets_per_sec:.0f} "
            f"| {errors:.0f} | {drops:.0f} |"
        )
    return "\n".join(lines)


def format_io_delta(delta: IoStatsDelta) -> str:
    """Format block device rates."""
    if not delta.device:
        return "No I/O rates (device mismatch, failed capture or interval too short)."

    lines = [
        f"## Block Device: {delta.device}",
        f"**Interval:** {delta.interval_s:.3f} s  ",
        "",
        "| Metric | Read | Write |",
        "|--------|------|-------|",
        f"| IOPS | {delta.read_iops:.1f} | {delta.write_iops:.1f} |",
        f"| Throughput | {format_bytes_per_sec(delta.read_bytes_per_sec)} "
        f"| {format_bytes_per_sec(delta.write_bytes_per_sec)} |",
        f"| Avg latency | {delta.avg_read_latency_ms:.2f} ms | {delta.avg_write_latency_ms:.2f} ms |",
        f"| Merged | {delta.read_merges_pct:.1f}% | {delta.write_merges_pct:.1f}% |",
        "",
        f"**Utilization:** {delta.utilization_pct:.1f}%  ",
        f"**Avg queue depth:** {delta.avg_queue_depth:.2f}",
    ]
    if delta.discard_iops > 0:
        lines.append(
            f"  \n**Discard:** {delta.discard_iops:.1f}/s, "
            f"{format_bytes_per_sec(delta.discard_bytes_per_sec)}"
        )
    if delta.is_idle():
        lines.append("\n*Device idle during interval*")
    elif delta.is_high_utilization():
        lines.append("\n**Warning:** device utilization above 80%")
    return "\n".join(lines)


def format_irq_delta(delta: IrqDelta, top: int = 10) -> str:
    """Format per-core interrupt rates and the busiest IRQ lines."""
    if delta.core_count == 0:
        return "No interrupt data available."

    lines = [
        "## Hardware Interrupts",
        f"**Interval:** {delta.interval_ns / 1e6:.2f} ms  ",
        "",
        "| CPU | IRQs | IRQs/s |",
        "|-----|------|--------|",
    ]
    for core in range(delta.core_count):
        lines.append(
            f"| cpu{core} | {delta.total_for_core(core)} | {delta.rate_for_core(core):.0f} |"
        )

    busiest = delta.top_lines(top)
    if busiest:
        lines.extend(["", "| IRQ | Count | Rate/s |", "|-----|-------|--------|"])
        for name, count in busiest:
            lines.append(f"| {name} | {count} | {delta.rate_for_line(name):.0f} |")
    else:
        lines.append("\n*No interrupts during interval*")
    return "\n".join(lines)


def format_softirq_delta(delta: SoftirqDelta) -> str:
    """Format softirq rates per vector and per CPU."""
    if delta.cpu_count == 0:
        return "No softirq data available."

    lines = [
        "## Softirqs",
        f"**Interval:** {delta.interval_ns / 1e6:.2f} ms  ",
        "",
        "| Type | Count | Rate/s |",
        "|------|-------|--------|",
    ]
    for index, name in enumerate(delta.names):
        count = delta.type_total(index)
        if count > 0:
            lines.append(f"| {name} | {count} | {delta.type_rate(index):.0f} |")

    per_cpu = " ".join(f"cpu{cpu}={delta.rate_for_cpu(cpu):.0f}" for cpu in range(delta.cpu_count))
    lines.extend(["", f"**Per-CPU rates/s:** {per_cpu}"])
    return "\n".join(lines)


def format_latency(stats: LatencyStats) -> str:
    """Format a latency benchmark run with jitter analysis and RT score."""
    if stats.sample_count == 0:
        return "No latency samples collected."

    def _us(ns: float) -> str:
        return f"{ns / 1000.0:.1f} us"

    def _signed_us(ns: float) -> str:
        return f"{ns / 1000.0:+.1f} us"

    rt = str(stats.rt_priority_used) if stats.used_rt_priority else "none"
    lines = [
        "## Latency Benchmark",
        f"**Samples:** {stats.sample_count}  ",
        f"**Target:** {_us(stats.target_ns)}  ",
        f"**Mode:** {stats.sleep_mode.value}  ",
        f"**RT priority:** {rt}  ",
        f"**Clock read overhead:** {stats.now_overhead_ns:.1f} ns",
        "",
        "| Statistic | Sleep | Jitter |",
        "|-----------|-------|--------|",
        f"| Min | {_us(stats.min_ns)} | |",
        f"| Mean | {_us(stats.mean_ns)} | {_signed_us(stats.jitter_mean_ns)} |",
        f"| Median | {_us(stats.median_ns)} | |",
        f"| p90 | {_us(stats.p90_ns)} | |",
        f"| p95 | {_us(stats.p95_ns)} | {_signed_us(stats.jitter_p95_ns)} |",
        f"| p99 | {_us(stats.p99_ns)} | {_signed_us(stats.jitter_p99_ns)} |",
        f"| p99.9 | {_us(stats.p999_ns)} | |",
        f"| Max | {_us(stats.max_ns)} | {_signed_us(stats.jitter_max_ns)} |",
        f"| StdDev | {_us(stats.stddev_ns)} | |",
        "",
    ]
    if stats.undershoot_ns > 0:
        lines.append(f"**Early wakeup:** {_us(stats.undershoot_ns)}  ")

    label = "GOOD" if stats.is_good_for_rt() else "NEEDS TUNING"
    lines.append(f"**RT score:** {stats.rt_score()}/100 [{label}]")
    return "\n".join(lines)
