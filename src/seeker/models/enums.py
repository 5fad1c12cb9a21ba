"""Enumerations for seeker telemetry models."""

from __future__ import annotations

from enum import Enum


class SleepMode(str, Enum):
    """How the latency sampler waits for each sample."""

    RELATIVE = "sleep"
    ABSOLUTE = "timer_abstime"


class RtVerdict(str, Enum):
    """Classification of a measured jitter distribution."""

    GOOD = "good"
    NEEDS_TUNING = "needs_tuning"


class DeltaStatus(str, Enum):
    """Why a generic counter delta is (or is not) usable."""

    OK = "ok"
    IDENTITY_MISMATCH = "identity_mismatch"
    INVALID_INTERVAL = "invalid_interval"
    INTERVAL_TOO_SHORT = "interval_too_short"


class SoftirqType(str, Enum):
    """Softirq vectors in kernel order, as named in /proc/softirqs."""

    HI = "HI"
    TIMER = "TIMER"
    NET_TX = "NET_TX"
    NET_RX = "NET_RX"
    BLOCK = "BLOCK"
    IRQ_POLL = "IRQ_POLL"
    TASKLET = "TASKLET"
    SCHED = "SCHED"
    HRTIMER = "HRTIMER"
    RCU = "RCU"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_name(cls, name: str) -> SoftirqType:
        try:
            return cls(name)
        except ValueError:
            return cls.UNKNOWN
