"""Tests for the generic counter delta engine."""

import pytest

from seeker.core.delta import (
    MIN_INTERVAL_NS,
    compute_counter_deltas,
    compute_delta,
    counter_fields,
    elapsed_ns,
    safe_delta,
)
from seeker.models.counters import InterfaceCounters, IoCounters
from seeker.models.enums import DeltaStatus
from seeker.models.snapshots import CounterSnapshot

SEC = 1_000_000_000


def _snap(identity="sda", ts=SEC, **counters):
    return CounterSnapshot(identity=identity, counters=IoCounters(**counters), timestamp_ns=ts)


class TestSafeDelta:
    def test_forward(self):
        assert safe_delta(100, 150) == 50

    def test_equal(self):
        assert safe_delta(7, 7) == 0

    def test_backwards_treated_as_restart(self):
        # not the true 64-bit wrap distance
        assert safe_delta(2**64 - 10, 5) == 5


class TestElapsed:
    def test_normal(self):
        assert elapsed_ns(SEC, 3 * SEC) == 2 * SEC

    def test_sentinel(self):
        assert elapsed_ns(0, SEC) == 0
        assert elapsed_ns(SEC, 0) == 0

    def test_not_increasing(self):
        assert elapsed_ns(SEC, SEC) == 0
        assert elapsed_ns(2 * SEC, SEC) == 0


class TestCounterFields:
    def test_excludes_strings(self):
        names = counter_fields(InterfaceCounters(ifname="eth0"))
        assert "ifname" not in names
        assert "rx_bytes" in names
        assert len(names) == 10

    def test_not_a_dataclass(self):
        assert counter_fields(42) == ()

    def test_type_mismatch(self):
        assert compute_counter_deltas(IoCounters(), InterfaceCounters()) == ()


class TestComputeDelta:
    def test_exact_deltas(self):
        before = _snap(ts=SEC, read_ops=100, write_ops=10)
        after = _snap(ts=3 * SEC, read_ops=300, write_ops=40)
        d = compute_delta(before, after)
        assert d.status == DeltaStatus.OK
        assert d.identity == "sda"
        assert d.elapsed_s == pytest.approx(2.0)
        assert d.get("read_ops") == 200
        assert d.get("write_ops") == 30
        assert d.rate("read_ops") == pytest.approx(100.0)

    def test_self_delta_is_zero(self):
        snap = _snap(ts=SEC, read_ops=100, io_time_ms=5)
        d = compute_delta(snap, snap)
        assert d.status == DeltaStatus.INVALID_INTERVAL
        assert d.deltas == ()

    def test_wrap_policy(self):
        before = _snap(ts=SEC, read_ops=1000)
        after = _snap(ts=2 * SEC, read_ops=40)
        assert compute_delta(before, after).get("read_ops") == 40

    def test_identity_mismatch(self):
        d = compute_delta(_snap("sda", ts=SEC), _snap("sdb", ts=2 * SEC))
        assert d.status == DeltaStatus.IDENTITY_MISMATCH
        assert not d.valid
        assert d.elapsed_s == 0.0

    def test_failed_capture(self):
        d = compute_delta(_snap(ts=0), _snap(ts=2 * SEC))
        assert d.status == DeltaStatus.INVALID_INTERVAL

    def test_reversed_order(self):
        d = compute_delta(_snap(ts=2 * SEC), _snap(ts=SEC))
        assert d.status == DeltaStatus.INVALID_INTERVAL

    def test_interval_too_short(self):
        d = compute_delta(_snap(ts=SEC), _snap(ts=SEC + MIN_INTERVAL_NS - 1))
        assert d.status == DeltaStatus.INTERVAL_TOO_SHORT
        assert d.deltas == ()

    def test_custom_min_interval(self):
        d = compute_delta(_snap(ts=SEC), _snap(ts=SEC + 500), min_interval_ns=100)
        assert d.valid
        assert d.elapsed_s == pytest.approx(500 / SEC)

    def test_all_deltas_non_negative(self):
        before = _snap(ts=SEC, read_ops=50, write_ops=5, io_time_ms=900)
        after = _snap(ts=2 * SEC, read_ops=10, write_ops=50, io_time_ms=100)
        d = compute_delta(before, after)
        assert all(value >= 0 for _, value in d.deltas)
