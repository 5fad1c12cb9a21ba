"""Generic counter delta engine: ordering checks, wrap policy, elapsed time."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Protocol

from seeker.models.enums import DeltaStatus
from seeker.models.results import CounterDelta

logger = logging.getLogger("seeker.delta")

NS_PER_SEC = 1_000_000_000.0

# Intervals shorter than this give meaningless rates
MIN_INTERVAL_NS = 1_000_000


class Snapshot(Protocol):
    """Anything carrying an identity, a counter record and a timestamp."""

    @property
    def identity(self) -> str: ...

    @property
    def counters(self) -> Any: ...

    @property
    def timestamp_ns(self) -> int: ...


def safe_delta(before: int, after: int) -> int:
    """Difference of a cumulative counter.

    A counter that went backwards is treated as having restarted from zero,
    so the delta is ``after`` itself. This is not the true wrap distance.
    """
    return after - before if after >= before else after


def elapsed_ns(before_ns: int, after_ns: int) -> int:
    """Nanoseconds between two timestamps, 0 unless both are set and increasing."""
    if before_ns == 0 or after_ns == 0 or after_ns <= before_ns:
        return 0
    return after_ns - before_ns


def counter_fields(record: Any) -> tuple[str, ...]:
    """Names of the integer counter fields of a counter dataclass."""
    if not dataclasses.is_dataclass(record):
        return ()
    return tuple(
        f.name
        for f in dataclasses.fields(record)
        if isinstance(getattr(record, f.name), int)
        and not isinstance(getattr(record, f.name), bool)
    )


def compute_counter_deltas(before: Any, after: Any) -> tuple[tuple[str, int], ...]:
    """Field-wise ``safe_delta`` of two records of the same type."""
    if type(before) is not type(after):
        return ()
    return tuple(
        (name, safe_delta(getattr(before, name), getattr(after, name)))
        for name in counter_fields(after)
    )


def compute_delta(
    before: Snapshot,
    after: Snapshot,
    min_interval_ns: int = MIN_INTERVAL_NS,
) -> CounterDelta:
    """Difference two snapshots of the same source.

    Mismatched identities, unset or non-increasing timestamps and intervals
    under ``min_interval_ns`` all yield the default (all-zero) result with
    the reason in ``status``.
    """
    if before.identity != after.identity:
        logger.debug(
            "Delta skipped: identity %r != %r", before.identity, after.identity
        )
        return CounterDelta(status=DeltaStatus.IDENTITY_MISMATCH)

    interval = elapsed_ns(before.timestamp_ns, after.timestamp_ns)
    if interval == 0:
        return CounterDelta(status=DeltaStatus.INVALID_INTERVAL)

    if interval < min_interval_ns:
        logger.debug("Delta skipped for %s: interval %d ns too short", after.identity, interval)
        return CounterDelta(status=DeltaStatus.INTERVAL_TOO_SHORT)

    return CounterDelta(
        identity=after.identity,
        deltas=compute_counter_deltas(before.counters, after.counters),
        elapsed_s=interval / NS_PER_SEC,
        status=DeltaStatus.OK,
    )
