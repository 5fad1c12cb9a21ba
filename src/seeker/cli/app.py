"""Typer CLI for seeker telemetry."""

from __future__ import annotations

import logging
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from seeker.config import SeekerConfig
from seeker.logging_setup import setup_logging
from seeker.mcp.formatters import format_bytes_per_sec, format_throughput
from seeker.models.latency import BenchConfig

app = typer.Typer(
    name="seeker",
    help="Snapshot/delta system telemetry and sleep jitter benchmarks.",
    no_args_is_help=True,
)
console = Console(stderr=True)

_PRESETS = {
    "quick": BenchConfig.quick,
    "thorough": BenchConfig.thorough,
    "rt": BenchConfig.rt_characterization,
}


def _config() -> SeekerConfig:
    return SeekerConfig.load()


def _interval_s(config: SeekerConfig, interval_ms: int | None) -> float:
    return (interval_ms if interval_ms is not None else config.sampling.interval_ms) / 1000.0


def _fail_capture(what: str) -> None:
    console.print(f"[red]Could not read {what}.[/red]")
    raise typer.Exit(1)


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Snapshot/delta system telemetry and sleep jitter benchmarks."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING)


@app.command()
def cpu(
    interval_ms: Annotated[Optional[int], typer.Option("--interval-ms", "-i", help="Sampling interval")] = None,
    per_core: Annotated[bool, typer.Option("--per-core", help="Show every core")] = False,
) -> None:
    """CPU utilization breakdown over an interval."""
    from seeker.core.snapshot import sample_cpu

    config = _config()
    pair = sample_cpu(_interval_s(config, interval_ms))
    if not pair.captured:
        _fail_capture("/proc/stat")

    delta = pair.delta
    table = Table(title=f"CPU Utilization ({delta.interval_ns / 1e6:.1f} ms)")
    for column in ("CPU", "Active", "User", "System", "Idle", "IOwait", "IRQ", "SoftIRQ", "Steal"):
        table.add_column(column, justify="left" if column == "CPU" else "right")

    rows = [("all", delta.aggregate)]
    if per_core:
        rows.extend((f"cpu{i}", pct) for i, pct in enumerate(delta.per_core))
    for label, p in rows:
        table.add_row(
            label,
            f"{p.active():.1f}%",
            f"{p.user:.1f}%",
            f"{p.system:.1f}%",
            f"{p.idle:.1f}%",
            f"{p.iowait:.1f}%",
            f"{p.irq:.1f}%",
            f"{p.softirq:.1f}%",
            f"{p.steal:.1f}%",
        )
    console.print(table)

    if delta.aggregate.total() == 0.0:
        console.print("[yellow]No CPU time elapsed; try a longer interval.[/yellow]")


@app.command()
def idle(
    interval_ms: Annotated[Optional[int], typer.Option("--interval-ms", "-i", help="Sampling interval")] = None,
    raw: Annotated[bool, typer.Option("--raw", help="Do not cap residency at 100%")] = False,
) -> None:
    """C-state residency per CPU over an interval."""
    from seeker.core.snapshot import sample_idle

    config = _config()
    pair = sample_idle(_interval_s(config, interval_ms))
    if not pair.captured:
        _fail_capture("cpuidle sysfs")

    delta = pair.delta
    snap = pair.after
    if delta.cpu_count == 0:
        console.print("[dim]No CPUs expose cpuidle states.[/dim]")
        return

    cap = config.display.cap_residency and not raw
    table = Table(title=f"C-State Residency ({delta.interval_ns / 1e6:.1f} ms)")
    table.add_column("CPU", style="bold")
    table.add_column("Deepest enabled")
    table.add_column("Residency")

    for i in range(delta.cpu_count):
        stats = snap.per_cpu[i]
        parts = []
        for s in range(delta.state_count(i)):
            pct = delta.capped_residency_percent(i, s) if cap else delta.residency_percent(i, s)
            if pct > 0.1:
                name = stats.states[s].name or f"S{s}"
                parts.append(f"{name}={pct:.1f}%")
        deepest = stats.deepest_enabled_state()
        table.add_row(
            f"cpu{stats.cpu_id}",
            stats.states[deepest].name if deepest >= 0 else "—",
            " ".join(parts) or "—",
        )
    console.print(table)


@app.command()
def net(
    ifname: Annotated[Optional[str], typer.Argument(help="Interface (omit for all)")] = None,
    interval_ms: Annotated[Optional[int], typer.Option("--interval-ms", "-i", help="Sampling interval")] = None,
) -> None:
    """Network interface throughput and packet rates."""
    from seeker.core.collectors import list_interfaces
    from seeker.core.snapshot import sample_net

    if ifname and ifname not in list_interfaces():
        console.print(f"[red]Interface not found:[/red] {ifname}")
        raise typer.Exit(1)

    config = _config()
    pair = sample_net(_interval_s(config, interval_ms), ifname)
    if not pair.captured:
        _fail_capture("interface statistics")

    delta = pair.delta
    if delta.count == 0:
        console.print("[yellow]No interface rates (no elapsed time or no common interfaces).[/yellow]")
        return

    table = Table(title=f"Network Interfaces ({delta.duration_s:.3f} s)")
    table.add_column("Interface", style="bold")
    for column in ("RX", "TX", "RX pps", "TX pps", "Errors/s", "Drops/s"):
        table.add_column(column, justify="right")

    for r in delta.interfaces:
        errors = r.rx_errors_per_sec + r.tx_errors_per_sec
        drops = r.rx_dropped_per_sec + r.tx_dropped_per_sec
        table.add_row(
            r.ifname,
            format_throughput(r.rx_bytes_per_sec),
            format_throughput(r.tx_bytes_per_sec),
            f"{r.rx_packets_per_sec:.0f}",
            f"{r.tx_packets_per_sec:.0f}",
            f"[red]{errors:.0f}[/red]" if r.has_errors() else "0",
            f"[yellow]{drops:.0f}[/yellow]" if r.has_drops() else "0",
        )
    console.print(table)


@app.command()
def io(
    device: Annotated[Optional[str], typer.Argument(help="Block device (omit for all)")] = None,
    interval_ms: Annotated[Optional[int], typer.Option("--interval-ms", "-i", help="Sampling interval")] = None,
) -> None:
    """Block device IOPS, throughput, latency and utilization."""
    from seeker.core.collectors import list_block_devices
    from seeker.core.snapshot import sample_io

    config = _config()
    devices = [device] if device else list_block_devices()
    if not devices:
        console.print("[dim]No block devices found.[/dim]")
        return

    table = Table(title="Block Device I/O")
    table.add_column("Device", style="bold")
    for column in ("r/s", "w/s", "Read", "Write", "r_lat", "w_lat", "Util", "QD"):
        table.add_column(column, justify="right")

    captured = 0
    for dev in devices:
        pair = sample_io(
            _interval_s(config, interval_ms),
            dev,
            min_interval_ns=config.sampling.min_interval_ns,
        )
        if not pair.captured:
            console.print(f"[yellow]Could not read stats for {dev}[/yellow]")
            continue
        captured += 1
        d = pair.delta
        if not d.device:
            console.print(f"[yellow]Interval too short for {dev}[/yellow]")
            continue
        util = f"{d.utilization_pct:.1f}%"
        table.add_row(
            d.device,
            f"{d.read_iops:.1f}",
            f"{d.write_iops:.1f}",
            format_bytes_per_sec(d.read_bytes_per_sec),
            format_bytes_per_sec(d.write_bytes_per_sec),
            f"{d.avg_read_latency_ms:.2f}ms",
            f"{d.avg_write_latency_ms:.2f}ms",
            f"[red]{util}[/red]" if d.is_high_utilization() else util,
            f"{d.avg_queue_depth:.2f}",
        )

    if captured == 0:
        _fail_capture("block device stats")
    console.print(table)


@app.command()
def irq(
    interval_ms: Annotated[Optional[int], typer.Option("--interval-ms", "-i", help="Sampling interval")] = None,
    top: Annotated[int, typer.Option("--top", help="IRQ lines to list")] = 10,
) -> None:
    """Hardware interrupt rates per core and the busiest IRQ lines."""
    from seeker.core.snapshot import sample_irq

    config = _config()
    pair = sample_irq(_interval_s(config, interval_ms))
    if not pair.captured:
        _fail_capture("/proc/interrupts")

    delta = pair.delta
    table = Table(title=f"Interrupts per CPU ({delta.interval_ns / 1e6:.1f} ms)")
    table.add_column("CPU", style="bold")
    table.add_column("IRQs", justify="right")
    table.add_column("IRQs/s", justify="right")
    for core in range(delta.core_count):
        table.add_row(f"cpu{core}", str(delta.total_for_core(core)), f"{delta.rate_for_core(core):.0f}")
    console.print(table)

    busiest = delta.top_lines(top)
    if not busiest:
        console.print("[dim]No interrupts during interval.[/dim]")
        return
    busiest_table = Table(title="Busiest IRQ lines")
    busiest_table.add_column("IRQ", style="bold")
    busiest_table.add_column("Count", justify="right")
    busiest_table.add_column("Rate/s", justify="right")
    for name, count in busiest:
        busiest_table.add_row(name, str(count), f"{delta.rate_for_line(name):.0f}")
    console.print(busiest_table)


@app.command()
def softirq(
    interval_ms: Annotated[Optional[int], typer.Option("--interval-ms", "-i", help="Sampling interval")] = None,
) -> None:
    """Softirq rates per vector and per CPU."""
    from seeker.core.snapshot import sample_softirq

    config = _config()
    pair = sample_softirq(_interval_s(config, interval_ms))
    if not pair.captured:
        _fail_capture("/proc/softirqs")

    delta = pair.delta
    table = Table(title=f"Softirqs ({delta.interval_ns / 1e6:.1f} ms)")
    table.add_column("Type", style="bold")
    table.add_column("Count", justify="right")
    table.add_column("Rate/s", justify="right")
    for index, name in enumerate(delta.names):
        table.add_row(name, str(delta.type_total(index)), f"{delta.type_rate(index):.0f}")
    console.print(table)

    per_cpu = " ".join(f"cpu{cpu}={delta.rate_for_cpu(cpu):.0f}" for cpu in range(delta.cpu_count))
    console.print(f"  Per-CPU rates/s: {per_cpu}")


@app.command()
def bench(
    preset: Annotated[Optional[str], typer.Option("--preset", help="quick, thorough or rt")] = None,
    budget_ms: Annotated[Optional[int], typer.Option("--budget-ms", help="Total measurement time")] = None,
    target_us: Annotated[Optional[int], typer.Option("--target-us", help="Sleep target per sample")] = None,
    absolute: Annotated[
        Optional[bool],
        typer.Option("--absolute/--relative", help="Absolute-deadline or relative sleeps"),
    ] = None,
    rt_priority: Annotated[Optional[int], typer.Option("--rt-priority", help="SCHED_FIFO priority 1-99")] = None,
) -> None:
    """Measure sleep jitter and rate real-time suitability."""
    from seeker.core.latency import measure_latency

    if preset is not None and preset not in _PRESETS:
        console.print(f"[red]Unknown preset:[/red] {preset}")
        raise typer.Exit(1)

    config = _config()
    base = _PRESETS[preset]() if preset else config.bench.to_bench_config()
    bench_config = BenchConfig(
        budget_ms=budget_ms if budget_ms is not None else base.budget_ms,
        sleep_target_us=target_us if target_us is not None else base.sleep_target_us,
        use_absolute_time=absolute if absolute is not None else base.use_absolute_time,
        rt_priority=rt_priority if rt_priority is not None else base.rt_priority,
    )

    stats = measure_latency(bench_config)
    if stats.sample_count == 0:
        console.print("[red]No latency samples collected.[/red]")
        raise typer.Exit(1)

    if bench_config.rt_priority > 0 and not stats.used_rt_priority:
        console.print(
            f"[yellow]RT priority {bench_config.rt_priority} not granted "
            "(needs CAP_SYS_NICE); measured at normal priority.[/yellow]"
        )

    table = Table(title=f"Sleep Latency ({stats.sample_count} samples, target {stats.target_ns / 1000:.0f} us)")
    table.add_column("Statistic", style="bold")
    table.add_column("Sleep (us)", justify="right")
    table.add_column("Jitter (us)", justify="right")
    rows = (
        ("Min", stats.min_ns, None),
        ("Mean", stats.mean_ns, stats.jitter_mean_ns),
        ("Median", stats.median_ns, None),
        ("p90", stats.p90_ns, None),
        ("p95", stats.p95_ns, stats.jitter_p95_ns),
        ("p99", stats.p99_ns, stats.jitter_p99_ns),
        ("p99.9", stats.p999_ns, None),
        ("Max", stats.max_ns, stats.jitter_max_ns),
        ("StdDev", stats.stddev_ns, None),
    )
    for label, value, jitter in rows:
        table.add_row(label, f"{value / 1000:.1f}", f"{jitter / 1000:+.1f}" if jitter is not None else "")
    console.print(table)

    console.print(f"  Mode: {stats.sleep_mode.value}  now() overhead: {stats.now_overhead_ns:.1f} ns")
    score = stats.rt_score()
    if stats.is_good_for_rt():
        console.print(f"  RT score: [green]{score}/100 [GOOD][/green]")
    else:
        console.print(f"  RT score: [yellow]{score}/100 [NEEDS TUNING][/yellow]")


@app.command()
def serve() -> None:
    """Run the MCP tool server over stdio."""
    from seeker.mcp.server import create_server

    create_server(_config()).run()


def main() -> None:
    """Entry point for the seeker CLI."""
    app()


if __name__ == "__main__":
    main()
