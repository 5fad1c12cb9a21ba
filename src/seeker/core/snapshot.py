"""Capture-wait-capture orchestration for the CLI and tool server.

These helpers own the sampling interval on behalf of a caller; the delta
functions themselves stay pure.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import NamedTuple

from seeker.core import collectors
from seeker.core.cpu import compute_utilization_delta
from seeker.core.delta import MIN_INTERVAL_NS
from seeker.core.idle import compute_cpu_idle_delta
from seeker.core.irq import compute_irq_delta
from seeker.core.network import compute_stats_delta
from seeker.core.softirq import compute_softirq_delta
from seeker.core.storage import compute_io_stats_delta

logger = logging.getLogger("seeker.snapshot")

Sleep = Callable[[float], None]


class SamplePair(NamedTuple):
    """Two snapshots and the delta computed from them."""

    before: object
    after: object
    delta: object

    @property
    def captured(self) -> bool:
        """True when both captures succeeded."""
        return self.before.is_valid and self.after.is_valid


def _sample(capture: Callable[[], object], derive, interval_s: float, sleep: Sleep) -> SamplePair:
    before = capture()
    sleep(max(0.0, interval_s))
    after = capture()
    pair = SamplePair(before, after, derive(before, after))
    if not pair.captured:
        logger.debug("Capture failed in %s", getattr(capture, "__name__", capture))
    return pair


def sample_cpu(interval_s: float, sleep: Sleep = time.sleep) -> SamplePair:
    return _sample(
        collectors.get_cpu_utilization_snapshot, compute_utilization_delta, interval_s, sleep
    )


def sample_idle(interval_s: float, sleep: Sleep = time.sleep) -> SamplePair:
    return _sample(collectors.get_cpu_idle_snapshot, compute_cpu_idle_delta, interval_s, sleep)


def sample_net(
    interval_s: float,
    ifname: str | None = None,
    sleep: Sleep = time.sleep,
) -> SamplePair:
    def capture_interfaces():
        return collectors.get_interface_stats_snapshot(ifname)

    return _sample(capture_interfaces, compute_stats_delta, interval_s, sleep)


def sample_io(
    interval_s: float,
    device: str,
    min_interval_ns: int = MIN_INTERVAL_NS,
    sleep: Sleep = time.sleep,
) -> SamplePair:
    def capture_device():
        return collectors.get_io_stats_snapshot(device)

    def derive(before, after):
        return compute_io_stats_delta(before, after, min_interval_ns=min_interval_ns)

    return _sample(capture_device, derive, interval_s, sleep)


def sample_irq(interval_s: float, sleep: Sleep = time.sleep) -> SamplePair:
    return _sample(collectors.get_irq_snapshot, compute_irq_delta, interval_s, sleep)


def sample_softirq(interval_s: float, sleep: Sleep = time.sleep) -> SamplePair:
    return _sample(collectors.get_softirq_snapshot, compute_softirq_delta, interval_s, sleep)
