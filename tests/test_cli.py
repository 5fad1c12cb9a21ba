"""Tests for the Typer CLI."""

import logging
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

import seeker.cli.app as cli_app
from seeker.cli.app import app
from seeker.models.counters import (
    CpuIdleStats,
    CpuTimeCounters,
    CStateInfo,
    InterfaceCounters,
    IoCounters,
    IrqLineStats,
    SoftirqTypeStats,
)
from seeker.models.enums import SoftirqType
from seeker.models.latency import BenchConfig, LatencyStats
from seeker.models.snapshots import (
    CpuIdleSnapshot,
    CpuUtilizationSnapshot,
    InterfaceStatsSnapshot,
    IoStatsSnapshot,
    IrqSnapshot,
    SoftirqSnapshot,
)

runner = CliRunner()

SEC = 1_000_000_000


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run in a temp directory with no .seeker/config.toml and wide output."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli_app.console, "width", 200)
    with patch("seeker.cli.app.setup_logging") as mock_setup:
        yield mock_setup


def _cpu_snaps():
    return [
        CpuUtilizationSnapshot(
            aggregate=CpuTimeCounters(user=100, idle=500, iowait=20),
            per_core=(CpuTimeCounters(user=50, idle=250), CpuTimeCounters(user=50, idle=250)),
            timestamp_ns=SEC,
        ),
        CpuUtilizationSnapshot(
            aggregate=CpuTimeCounters(user=150, idle=550, iowait=20),
            per_core=(CpuTimeCounters(user=100, idle=250), CpuTimeCounters(user=50, idle=300)),
            timestamp_ns=2 * SEC,
        ),
    ]


class TestVerbose:
    @patch("seeker.core.collectors.get_cpu_utilization_snapshot")
    def test_verbose_sets_debug(self, mock_snap, isolated):
        mock_snap.side_effect = _cpu_snaps()
        result = runner.invoke(app, ["--verbose", "cpu", "-i", "0"])
        assert result.exit_code == 0
        isolated.assert_called_once_with(logging.DEBUG)


class TestCpu:
    @patch("seeker.core.collectors.get_cpu_utilization_snapshot")
    def test_aggregate(self, mock_snap):
        mock_snap.side_effect = _cpu_snaps()
        result = runner.invoke(app, ["cpu", "-i", "0"])
        assert result.exit_code == 0
        assert "CPU Utilization" in result.output
        assert "50.0%" in result.output
        assert "cpu1" not in result.output

    @patch("seeker.core.collectors.get_cpu_utilization_snapshot")
    def test_per_core(self, mock_snap):
        mock_snap.side_effect = _cpu_snaps()
        result = runner.invoke(app, ["cpu", "-i", "0", "--per-core"])
        assert result.exit_code == 0
        assert "cpu0" in result.output
        assert "cpu1" in result.output

    @patch("seeker.core.collectors.get_cpu_utilization_snapshot")
    def test_capture_failure(self, mock_snap):
        mock_snap.return_value = CpuUtilizationSnapshot()
        result = runner.invoke(app, ["cpu", "-i", "0"])
        assert result.exit_code == 1
        assert "Could not read" in result.output


class TestIdle:
    @patch("seeker.core.collectors.get_cpu_idle_snapshot")
    def test_residency(self, mock_snap):
        def snap(ts, time_us):
            return CpuIdleSnapshot(
                per_cpu=(
                    CpuIdleStats(
                        cpu_id=0,
                        states=(CStateInfo(name="POLL"), CStateInfo(name="C6", time_us=time_us)),
                    ),
                ),
                timestamp_ns=ts,
            )

        mock_snap.side_effect = [snap(SEC, 0), snap(2 * SEC, 400_000)]
        result = runner.invoke(app, ["idle", "-i", "0"])
        assert result.exit_code == 0
        assert "C6=40.0%" in result.output

    @patch("seeker.core.collectors.get_cpu_idle_snapshot")
    def test_no_cpuidle(self, mock_snap):
        mock_snap.return_value = CpuIdleSnapshot(timestamp_ns=SEC)
        result = runner.invoke(app, ["idle", "-i", "0"])
        assert result.exit_code == 0
        assert "No CPUs expose cpuidle" in result.output


class TestNet:
    @patch("seeker.core.collectors.get_interface_stats_snapshot")
    def test_all_interfaces(self, mock_snap):
        mock_snap.side_effect = [
            InterfaceStatsSnapshot(interfaces=(InterfaceCounters(ifname="eth0"),), timestamp_ns=SEC),
            InterfaceStatsSnapshot(
                interfaces=(InterfaceCounters(ifname="eth0", rx_bytes=125_000),),
                timestamp_ns=2 * SEC,
            ),
        ]
        result = runner.invoke(app, ["net", "-i", "0"])
        assert result.exit_code == 0
        assert "eth0" in result.output
        assert "1.00 Mbps" in result.output

    @patch("seeker.core.collectors.list_interfaces")
    def test_unknown_interface(self, mock_list):
        mock_list.return_value = ["lo"]
        result = runner.invoke(app, ["net", "eth9", "-i", "0"])
        assert result.exit_code == 1
        assert "Interface not found" in result.output


class TestIo:
    @patch("seeker.core.collectors.get_io_stats_snapshot")
    def test_single_device(self, mock_snap):
        mock_snap.side_effect = [
            IoStatsSnapshot(device="sda", counters=IoCounters(read_ops=0), timestamp_ns=SEC),
            IoStatsSnapshot(
                device="sda",
                counters=IoCounters(read_ops=200, read_time_ms=50, io_time_ms=900),
                timestamp_ns=2 * SEC,
            ),
        ]
        result = runner.invoke(app, ["io", "sda", "-i", "0"])
        assert result.exit_code == 0
        assert "sda" in result.output
        assert "0.25ms" in result.output
        assert "90.0%" in result.output

    @patch("seeker.core.collectors.list_block_devices")
    def test_no_devices(self, mock_list):
        mock_list.return_value = []
        result = runner.invoke(app, ["io", "-i", "0"])
        assert result.exit_code == 0
        assert "No block devices" in result.output

    @patch("seeker.core.collectors.get_io_stats_snapshot")
    @patch("seeker.core.collectors.list_block_devices")
    def test_unreadable_device(self, mock_list, mock_snap):
        mock_list.return_value = ["sda"]
        mock_snap.return_value = IoStatsSnapshot(device="sda")
        result = runner.invoke(app, ["io", "-i", "0"])
        assert result.exit_code == 1


def _latency_stats(**overrides):
    values = dict(
        sample_count=100, target_ns=1_000_000.0, min_ns=1_005_000.0, max_ns=1_030_000.0,
        mean_ns=1_010_000.0, median_ns=1_009_000.0, p90_ns=1_015_000.0, p95_ns=1_018_000.0,
        p99_ns=1_020_000.0, p999_ns=1_028_000.0, stddev_ns=3_000.0,
    )
    values.update(overrides)
    return LatencyStats(**values)


class TestIrq:
    @patch("seeker.core.collectors.get_irq_snapshot")
    def test_rates(self, mock_snap):
        def snap(ts, loc, nmi):
            return IrqSnapshot(
                lines=(
                    IrqLineStats(name="LOC", per_core=(loc, loc)),
                    IrqLineStats(name="NMI", per_core=(nmi, 0)),
                ),
                core_count=2,
                timestamp_ns=ts,
            )

        mock_snap.side_effect = [snap(SEC, 100, 5), snap(2 * SEC, 1100, 5)]
        result = runner.invoke(app, ["irq", "-i", "0"])
        assert result.exit_code == 0
        assert "Interrupts per CPU" in result.output
        assert "Busiest IRQ lines" in result.output
        assert "LOC" in result.output
        assert "2000" in result.output
        assert "NMI" not in result.output

    @patch("seeker.core.collectors.get_irq_snapshot")
    def test_capture_failure(self, mock_snap):
        mock_snap.return_value = IrqSnapshot()
        result = runner.invoke(app, ["irq", "-i", "0"])
        assert result.exit_code == 1
        assert "/proc/interrupts" in result.output


class TestSoftirq:
    @patch("seeker.core.collectors.get_softirq_snapshot")
    def test_rates(self, mock_snap):
        def snap(ts, timer):
            return SoftirqSnapshot(
                types=(SoftirqTypeStats(name="TIMER", type=SoftirqType.TIMER, per_core=(timer, 0)),),
                cpu_count=2,
                timestamp_ns=ts,
            )

        mock_snap.side_effect = [snap(SEC, 0), snap(2 * SEC, 250)]
        result = runner.invoke(app, ["softirq", "-i", "0"])
        assert result.exit_code == 0
        assert "TIMER" in result.output
        assert "cpu0=250 cpu1=0" in result.output

    @patch("seeker.core.collectors.get_softirq_snapshot")
    def test_capture_failure(self, mock_snap):
        mock_snap.return_value = SoftirqSnapshot()
        result = runner.invoke(app, ["softirq", "-i", "0"])
        assert result.exit_code == 1


class TestBench:
    @patch("seeker.core.latency.measure_latency")
    def test_default(self, mock_measure):
        mock_measure.return_value = _latency_stats()
        result = runner.invoke(app, ["bench"])
        assert result.exit_code == 0
        assert mock_measure.call_args.args[0] == BenchConfig()
        assert "Sleep Latency" in result.output
        assert "90/100" in result.output
        assert "GOOD" in result.output

    @patch("seeker.core.latency.measure_latency")
    def test_preset_with_override(self, mock_measure):
        mock_measure.return_value = _latency_stats(used_absolute_time=True)
        result = runner.invoke(app, ["bench", "--preset", "rt", "--budget-ms", "100"])
        assert result.exit_code == 0
        config = mock_measure.call_args.args[0]
        assert config.budget_ms == 100
        assert config.sleep_target_us == 100
        assert config.use_absolute_time
        assert config.rt_priority == 90
        # priority requested but not granted
        assert "not granted" in result.output

    @patch("seeker.core.latency.measure_latency")
    def test_flags(self, mock_measure):
        mock_measure.return_value = _latency_stats()
        result = runner.invoke(
            app, ["bench", "--target-us", "250", "--absolute", "--rt-priority", "10"]
        )
        assert result.exit_code == 0
        config = mock_measure.call_args.args[0]
        assert config.sleep_target_us == 250
        assert config.use_absolute_time
        assert config.rt_priority == 10

    @patch("seeker.core.latency.measure_latency")
    def test_relative_overrides_preset(self, mock_measure):
        mock_measure.return_value = _latency_stats()
        result = runner.invoke(app, ["bench", "--preset", "rt", "--relative"])
        assert result.exit_code == 0
        config = mock_measure.call_args.args[0]
        assert not config.use_absolute_time
        assert config.rt_priority == 90

    @patch("seeker.core.latency.measure_latency")
    def test_relative_overrides_config(self, mock_measure, tmp_path):
        (tmp_path / ".seeker").mkdir()
        (tmp_path / ".seeker" / "config.toml").write_text("[bench]\nuse_absolute_time = true\n")
        mock_measure.return_value = _latency_stats()

        runner.invoke(app, ["bench"])
        assert mock_measure.call_args.args[0].use_absolute_time

        result = runner.invoke(app, ["bench", "--relative"])
        assert result.exit_code == 0
        assert not mock_measure.call_args.args[0].use_absolute_time

    def test_unknown_preset(self):
        result = runner.invoke(app, ["bench", "--preset", "bogus"])
        assert result.exit_code == 1
        assert "Unknown preset" in result.output

    @patch("seeker.core.latency.measure_latency")
    def test_no_samples(self, mock_measure):
        mock_measure.return_value = LatencyStats()
        result = runner.invoke(app, ["bench"])
        assert result.exit_code == 1


class TestServe:
    @patch("seeker.mcp.server.create_server")
    def test_runs_server(self, mock_create):
        server = MagicMock()
        mock_create.return_value = server
        result = runner.invoke(app, ["serve"])
        assert result.exit_code == 0
        server.run.assert_called_once()
