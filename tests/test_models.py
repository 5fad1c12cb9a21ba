"""Tests for seeker data models."""

import dataclasses

import pytest

from seeker.models import (
    BenchConfig,
    CounterDelta,
    CpuIdleDelta,
    CpuIdleStats,
    CpuTimeCounters,
    CpuUtilizationPercent,
    CStateInfo,
    DeltaStatus,
    InterfaceCounters,
    InterfaceRates,
    InterfaceStatsSnapshot,
    IoCounters,
    IoStatsDelta,
    IoStatsSnapshot,
    LatencyStats,
    RtVerdict,
    SleepMode,
)


class TestEnums:
    def test_sleep_mode_values(self):
        assert SleepMode.RELATIVE == "sleep"
        assert SleepMode.ABSOLUTE == "timer_abstime"

    def test_verdict_values(self):
        assert RtVerdict.GOOD == "good"
        assert RtVerdict.NEEDS_TUNING == "needs_tuning"

    def test_delta_status_values(self):
        assert DeltaStatus.OK == "ok"
        assert DeltaStatus.INTERVAL_TOO_SHORT == "interval_too_short"


class TestCpuTimeCounters:
    def test_total_and_active(self):
        c = CpuTimeCounters(user=10, nice=1, system=5, idle=80, iowait=4)
        assert c.total() == 100
        assert c.active() == 16

    def test_defaults_zero(self):
        c = CpuTimeCounters()
        assert c.total() == 0
        assert c.active() == 0

    def test_frozen(self):
        c = CpuTimeCounters()
        with pytest.raises(dataclasses.FrozenInstanceError):
            c.user = 1  # type: ignore[misc]


class TestCpuIdleStats:
    def test_total_idle_time(self):
        stats = CpuIdleStats(
            cpu_id=0,
            states=(CStateInfo(name="POLL", time_us=10), CStateInfo(name="C1", time_us=90)),
        )
        assert stats.total_idle_time_us() == 100

    def test_deepest_enabled_skips_disabled(self):
        stats = CpuIdleStats(
            cpu_id=0,
            states=(
                CStateInfo(name="POLL"),
                CStateInfo(name="C1"),
                CStateInfo(name="C6", disabled=True),
            ),
        )
        assert stats.deepest_enabled_state() == 1

    def test_deepest_all_disabled(self):
        stats = CpuIdleStats(states=(CStateInfo(disabled=True),))
        assert stats.deepest_enabled_state() == -1
        assert CpuIdleStats().deepest_enabled_state() == -1


class TestInterfaceCounters:
    def test_clean(self):
        c = InterfaceCounters(ifname="eth0", rx_bytes=100)
        assert not c.has_issues()

    def test_issues(self):
        assert InterfaceCounters(rx_errors=1).has_issues()
        assert InterfaceCounters(tx_dropped=2).total_drops() == 2
        assert InterfaceCounters(collisions=1).has_issues()


class TestIoCounters:
    def test_byte_conversion(self):
        c = IoCounters(read_ops=3, write_ops=4, read_sectors=2, write_sectors=4)
        assert c.read_bytes() == 1024
        assert c.write_bytes() == 2048
        assert c.total_bytes() == 3072
        assert c.total_ops() == 7


class TestSnapshots:
    def test_sentinel(self):
        assert not IoStatsSnapshot().is_valid
        assert IoStatsSnapshot(device="sda", timestamp_ns=1).is_valid

    def test_io_identity_is_device(self):
        assert IoStatsSnapshot(device="nvme0n1").identity == "nvme0n1"

    def test_interface_find(self):
        snap = InterfaceStatsSnapshot(
            interfaces=(InterfaceCounters(ifname="lo"), InterfaceCounters(ifname="eth0")),
            timestamp_ns=5,
        )
        assert snap.count == 2
        assert snap.find("eth0").ifname == "eth0"
        assert snap.find("wlan0") is None
        assert snap.find(None) is None


class TestCounterDelta:
    def test_default_is_invalid(self):
        d = CounterDelta()
        assert not d.valid
        assert d.deltas == ()
        assert d.rate("read_ops") == 0.0

    def test_get_and_rate(self):
        d = CounterDelta(
            identity="sda",
            deltas=(("read_ops", 200), ("write_ops", 50)),
            elapsed_s=2.0,
            status=DeltaStatus.OK,
        )
        assert d.valid
        assert d.get("read_ops") == 200
        assert d.get("missing") == 0
        assert d.rate("write_ops") == 25.0
        assert d.as_dict() == {"read_ops": 200, "write_ops": 50}


class TestCpuUtilizationPercent:
    def test_active_excludes_idle_and_iowait(self):
        p = CpuUtilizationPercent(user=30.0, system=10.0, idle=50.0, iowait=10.0)
        assert p.active() == pytest.approx(40.0)
        assert p.total() == pytest.approx(100.0)


class TestCpuIdleDelta:
    def test_residency_can_exceed_100(self):
        d = CpuIdleDelta(
            usage_delta=((1,),),
            time_delta_us=((150_000,),),
            interval_ns=100_000_000,
        )
        assert d.residency_percent(0, 0) == pytest.approx(150.0)
        assert d.capped_residency_percent(0, 0) == 100.0

    def test_out_of_range(self):
        d = CpuIdleDelta(time_delta_us=((10,),), usage_delta=((1,),), interval_ns=1000)
        assert d.residency_percent(1, 0) == 0.0
        assert d.residency_percent(0, 5) == 0.0
        assert d.state_count(-1) == 0

    def test_zero_interval(self):
        d = CpuIdleDelta(time_delta_us=((10,),), usage_delta=((1,),), interval_ns=0)
        assert d.residency_percent(0, 0) == 0.0


class TestInterfaceRates:
    def test_mbps(self):
        r = InterfaceRates(ifname="eth0", rx_bytes_per_sec=125_000.0, tx_bytes_per_sec=250_000.0)
        assert r.rx_mbps() == pytest.approx(1.0)
        assert r.tx_mbps() == pytest.approx(2.0)
        assert r.total_mbps() == pytest.approx(3.0)

    def test_flags(self):
        assert not InterfaceRates().has_errors()
        assert InterfaceRates(tx_errors_per_sec=0.5).has_errors()
        assert InterfaceRates(rx_dropped_per_sec=1.0).has_drops()


class TestIoStatsDelta:
    def test_idle(self):
        assert IoStatsDelta().is_idle()
        assert not IoStatsDelta(total_iops=5.0).is_idle()

    def test_high_utilization(self):
        assert IoStatsDelta(utilization_pct=85.0).is_high_utilization()
        assert not IoStatsDelta(utilization_pct=80.0).is_high_utilization()


class TestBenchConfig:
    def test_defaults(self):
        c = BenchConfig()
        assert c.budget_ms == 250
        assert c.sleep_target_us == 1000
        assert not c.use_absolute_time
        assert c.rt_priority == 0

    def test_presets(self):
        assert BenchConfig.quick() == BenchConfig(budget_ms=250, sleep_target_us=1000)
        assert BenchConfig.thorough().budget_ms == 5000
        rt = BenchConfig.rt_characterization()
        assert rt.budget_ms == 2000
        assert rt.sleep_target_us == 100
        assert rt.use_absolute_time
        assert rt.rt_priority == 90


def _stats(p99_jitter: float, max_jitter: float, target: float = 1_000_000.0) -> LatencyStats:
    return LatencyStats(
        sample_count=100,
        target_ns=target,
        min_ns=target,
        p99_ns=target + p99_jitter,
        max_ns=target + max_jitter,
    )


class TestLatencyStats:
    def test_jitter_properties(self):
        s = LatencyStats(target_ns=1000.0, mean_ns=1200.0, p95_ns=1500.0, min_ns=900.0)
        assert s.jitter_mean_ns == 200.0
        assert s.jitter_p95_ns == 500.0
        assert s.undershoot_ns == 100.0

    def test_sleep_mode(self):
        assert LatencyStats().sleep_mode == SleepMode.RELATIVE
        assert LatencyStats(used_absolute_time=True).sleep_mode == SleepMode.ABSOLUTE

    def test_good_for_rt(self):
        assert _stats(50_000, 60_000).is_good_for_rt()
        assert _stats(50_000, 60_000).verdict == RtVerdict.GOOD
        assert not _stats(100_000, 100_000).is_good_for_rt()
        assert _stats(200_000, 200_000).verdict == RtVerdict.NEEDS_TUNING

    @pytest.mark.parametrize(
        ("p99", "expected"),
        [
            (5_000, 100),
            (20_000, 90),
            (80_000, 75),
            (300_000, 50),
            (800_000, 25),
            (2_000_000, 10),
        ],
    )
    def test_score_bands(self, p99, expected):
        assert _stats(p99, p99).rt_score() == expected

    def test_outlier_penalties(self):
        # max more than 10x p99
        assert _stats(20_000, 250_000).rt_score() == 70
        # max more than 5x p99
        assert _stats(20_000, 150_000).rt_score() == 80

    def test_score_clamped_at_zero(self):
        assert _stats(2_000_000, 30_000_000).rt_score() == 0
