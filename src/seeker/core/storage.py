"""Block device IOPS, throughput, latency and utilization from two snapshots."""

from __future__ import annotations

from seeker.core.delta import MIN_INTERVAL_NS, compute_delta
from seeker.models.counters import SECTOR_SIZE
from seeker.models.results import IoStatsDelta
from seeker.models.snapshots import IoStatsSnapshot

MS_PER_SEC = 1000.0


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


def compute_io_stats_delta(
    before: IoStatsSnapshot,
    after: IoStatsSnapshot,
    min_interval_ns: int = MIN_INTERVAL_NS,
) -> IoStatsDelta:
    """Rates and percentages for one device.

    Returns the zeroed delta when the devices differ, either snapshot is a
    failed capture, or the interval is not measurable.
    """
    delta = compute_delta(before, after, min_interval_ns=min_interval_ns)
    if not delta.valid:
        return IoStatsDelta()

    secs = delta.elapsed_s
    d = delta.as_dict()

    read_ops = d["read_ops"]
    write_ops = d["write_ops"]
    read_merges = d["read_merges"]
    write_merges = d["write_merges"]

    read_iops = read_ops / secs
    write_iops = write_ops / secs
    read_bps = d["read_sectors"] * SECTOR_SIZE / secs
    write_bps = d["write_sectors"] * SECTOR_SIZE / secs

    wall_ms = secs * MS_PER_SEC
    utilization = min(_ratio(d["io_time_ms"], wall_ms) * 100.0, 100.0)

    return IoStatsDelta(
        device=after.device,
        interval_s=secs,
        read_iops=read_iops,
        write_iops=write_iops,
        total_iops=read_iops + write_iops,
        read_bytes_per_sec=read_bps,
        write_bytes_per_sec=write_bps,
        total_bytes_per_sec=read_bps + write_bps,
        avg_read_latency_ms=_ratio(d["read_time_ms"], read_ops),
        avg_write_latency_ms=_ratio(d["write_time_ms"], write_ops),
        utilization_pct=utilization,
        # weighted time accumulates in-flight count per ms, so this can exceed 1
        avg_queue_depth=_ratio(d["weighted_io_time_ms"], wall_ms),
        read_merges_pct=_ratio(read_merges, read_ops + read_merges) * 100.0,
        write_merges_pct=_ratio(write_merges, write_ops + write_merges) * 100.0,
        discard_iops=d["discard_ops"] / secs,
        discard_bytes_per_sec=d["discard_sectors"] * SECTOR_SIZE / secs,
    )
