"""Network interface rates from two counter snapshots."""

from __future__ import annotations

from seeker.core.delta import NS_PER_SEC
from seeker.models.counters import MAX_INTERFACES, InterfaceCounters
from seeker.models.results import InterfaceRates, InterfaceStatsDelta
from seeker.models.snapshots import InterfaceStatsSnapshot

# (rate field, counter field)
_RATE_FIELDS = (
    ("rx_bytes_per_sec", "rx_bytes"),
    ("tx_bytes_per_sec", "tx_bytes"),
    ("rx_packets_per_sec", "rx_packets"),
    ("tx_packets_per_sec", "tx_packets"),
    ("rx_errors_per_sec", "rx_errors"),
    ("tx_errors_per_sec", "tx_errors"),
    ("rx_dropped_per_sec", "rx_dropped"),
    ("tx_dropped_per_sec", "tx_dropped"),
    ("collisions_per_sec", "collisions"),
)


def compute_rate(before: int, after: int, duration_s: float) -> float:
    """Per-second rate; 0.0 if the counter went backwards (interface reset)."""
    if duration_s <= 0.0 or after < before:
        return 0.0
    return (after - before) / duration_s


def compute_interface_rates(
    before: InterfaceCounters,
    after: InterfaceCounters,
    duration_s: float,
) -> InterfaceRates:
    rates = {
        rate_name: compute_rate(getattr(before, name), getattr(after, name), duration_s)
        for rate_name, name in _RATE_FIELDS
    }
    return InterfaceRates(ifname=after.ifname, duration_s=duration_s, **rates)


def compute_stats_delta(
    before: InterfaceStatsSnapshot,
    after: InterfaceStatsSnapshot,
) -> InterfaceStatsDelta:
    """Rates for interfaces present in both snapshots, in ``after`` order."""
    if after.timestamp_ns <= before.timestamp_ns:
        return InterfaceStatsDelta()

    duration_s = (after.timestamp_ns - before.timestamp_ns) / NS_PER_SEC

    rates = []
    for counters in after.interfaces:
        if len(rates) >= MAX_INTERFACES:
            break
        previous = before.find(counters.ifname)
        if previous is None:
            continue
        rates.append(compute_interface_rates(previous, counters, duration_s))

    return InterfaceStatsDelta(interfaces=tuple(rates), duration_s=duration_s)
