"""FastMCP server factory exposing the telemetry samplers as tools."""

from __future__ import annotations

from seeker.config import SeekerConfig
from seeker.mcp.formatters import (
    format_cpu_delta,
    format_idle_delta,
    format_io_delta,
    format_irq_delta,
    format_latency,
    format_net_delta,
    format_softirq_delta,
)
from seeker.models.latency import BenchConfig


def create_server(config: SeekerConfig | None = None):
    """Create and return a configured FastMCP server instance.

    Args:
        config: Optional pre-loaded config. If None, loads from cwd.
    """
    from mcp.server.fastmcp import FastMCP

    mcp = FastMCP(
        "seeker",
        instructions="Snapshot/delta system telemetry and sleep jitter benchmarks",
    )
    _config = config or SeekerConfig.load()

    def _interval_s(interval_ms: int | None) -> float:
        ms = interval_ms if interval_ms is not None else _config.sampling.interval_ms
        return ms / 1000.0

    @mcp.tool()
    def seeker_cpu(interval_ms: int | None = None, per_core: bool = False) -> str:
        """CPU utilization breakdown (user, system, idle, iowait, ...) over an interval.

        Args:
            interval_ms: Time between the two snapshots (default from config)
            per_core: Include one row per core
        """
        from seeker.core.snapshot import sample_cpu

        try:
            pair = sample_cpu(_interval_s(interval_ms))
        except OSError as exc:
            return f"Error sampling CPU: {exc}"
        if not pair.captured:
            return "Could not read /proc/stat."
        return format_cpu_delta(pair.delta, per_core=per_core)

    @mcp.tool()
    def seeker_idle(interval_ms: int | None = None) -> str:
        """C-state residency per CPU over an interval.

        Args:
            interval_ms: Time between the two snapshots (default from config)
        """
        from seeker.core.snapshot import sample_idle

        try:
            pair = sample_idle(_interval_s(interval_ms))
        except OSError as exc:
            return f"Error sampling cpuidle: {exc}"
        if not pair.captured:
            return "Could not read cpuidle sysfs."
        return format_idle_delta(pair.delta, pair.after, cap=_config.display.cap_residency)

    @mcp.tool()
    def seeker_net(ifname: str | None = None, interval_ms: int | None = None) -> str:
        """Network interface throughput, packet, error and drop rates.

        Args:
            ifname: Interface name (omit for all interfaces)
            interval_ms: Time between the two snapshots (default from config)
        """
        from seeker.core.snapshot import sample_net

        try:
            pair = sample_net(_interval_s(interval_ms), ifname)
        except OSError as exc:
            return f"Error sampling interfaces: {exc}"
        if not pair.captured:
            target = f"interface '{ifname}'" if ifname else "interface statistics"
            return f"Could not read {target}."
        return format_net_delta(pair.delta)

    @mcp.tool()
    def seeker_io(device: str | None = None, interval_ms: int | None = None) -> str:
        """Block device IOPS, throughput, latency, utilization and queue depth.

        Args:
            device: Block device name such as sda or nvme0n1 (omit for all)
            interval_ms: Time between the two snapshots (default from config)
        """
        from seeker.core.collectors import list_block_devices
        from seeker.core.snapshot import sample_io

        devices = [device] if device else list_block_devices()
        if not devices:
            return "No block devices found."

        sections = []
        for dev in devices:
            try:
                pair = sample_io(
                    _interval_s(interval_ms),
                    dev,
                    min_interval_ns=_config.sampling.min_interval_ns,
                )
            except OSError as exc:
                sections.append(f"Error sampling {dev}: {exc}")
                continue
            if not pair.captured:
                sections.append(f"Could not read stats for {dev}.")
                continue
            sections.append(format_io_delta(pair.delta))
        return "\n\n".join(sections)

    @mcp.tool()
    def seeker_irq(interval_ms: int | None = None, top: int = 10) -> str:
        """Hardware interrupt rates per core and the busiest IRQ lines.

        Args:
            interval_ms: Time between the two snapshots (default from config)
            top: Number of IRQ lines to list, busiest first
        """
        from seeker.core.snapshot import sample_irq

        try:
            pair = sample_irq(_interval_s(interval_ms))
        except OSError as exc:
            return f"Error sampling interrupts: {exc}"
        if not pair.captured:
            return "Could not read /proc/interrupts."
        return format_irq_delta(pair.delta, top=top)

    @mcp.tool()
    def seeker_softirq(interval_ms: int | None = None) -> str:
        """Softirq rates per vector (NET_RX, TIMER, SCHED, ...) and per CPU.

        Args:
            interval_ms: Time between the two snapshots (default from config)
        """
        from seeker.core.snapshot import sample_softirq

        try:
            pair = sample_softirq(_interval_s(interval_ms))
        except OSError as exc:
            return f"Error sampling softirqs: {exc}"
        if not pair.captured:
            return "Could not read /proc/softirqs."
        return format_softirq_delta(pair.delta)

    @mcp.tool()
    def seeker_latency(
        budget_ms: int | None = None,
        sleep_target_us: int | None = None,
        absolute: bool | None = None,
        rt_priority: int | None = None,
    ) -> str:
        """Measure sleep jitter and score real-time suitability (0-100).

        Args:
            budget_ms: Total measurement time, minimum 50 (default from config)
            sleep_target_us: Requested sleep per sample (default from config)
            absolute: Sleep against absolute deadlines instead of relative durations
            rt_priority: SCHED_FIFO priority 1-99, 0 for normal scheduling
        """
        from seeker.core.latency import measure_latency

        base = _config.bench
        bench_config = BenchConfig(
            budget_ms=budget_ms if budget_ms is not None else base.budget_ms,
            sleep_target_us=(
                sleep_target_us if sleep_target_us is not None else base.sleep_target_us
            ),
            use_absolute_time=absolute if absolute is not None else base.use_absolute_time,
            rt_priority=rt_priority if rt_priority is not None else base.rt_priority,
        )
        try:
            stats = measure_latency(bench_config)
        except OSError as exc:
            return f"Error running latency benchmark: {exc}"
        return format_latency(stats)

    return mcp


def main() -> None:
    """Entry point for seeker-mcp (stdio transport)."""
    server = create_server()
    server.run()


if __name__ == "__main__":
    main()
