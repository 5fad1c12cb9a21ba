"""Layered configuration: .seeker/config.toml -> SEEKER_* env vars -> defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib  # 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from seeker.models.latency import BenchConfig

_TRUE_VALUES = ("1", "true", "yes", "on")


def _as_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


@dataclass(frozen=True, slots=True)
class SamplingConfig:
    """Snapshot pair spacing for the delta commands."""

    interval_ms: int = 100
    min_interval_ms: float = 1.0

    @property
    def min_interval_ns(self) -> int:
        return int(self.min_interval_ms * 1_000_000)


@dataclass(frozen=True, slots=True)
class BenchSettings:
    """Defaults for the sleep jitter benchmark."""

    budget_ms: int = 250
    sleep_target_us: int = 1000
    use_absolute_time: bool = False
    rt_priority: int = 0

    def to_bench_config(self) -> BenchConfig:
        return BenchConfig(
            budget_ms=self.budget_ms,
            sleep_target_us=self.sleep_target_us,
            use_absolute_time=self.use_absolute_time,
            rt_priority=self.rt_priority,
        )


@dataclass(frozen=True, slots=True)
class DisplayConfig:
    """Rendering options."""

    cap_residency: bool = True


@dataclass(frozen=True, slots=True)
class SeekerConfig:
    """Top-level configuration container."""

    project_path: Path = field(default_factory=Path.cwd)
    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    bench: BenchSettings = field(default_factory=BenchSettings)
    display: DisplayConfig = field(default_factory=DisplayConfig)

    @property
    def seeker_dir(self) -> Path:
        return self.project_path / ".seeker"

    @property
    def config_path(self) -> Path:
        return self.seeker_dir / "config.toml"

    @classmethod
    def load(cls, project_path: Path | None = None) -> SeekerConfig:
        """Load config with layering: TOML file -> env vars -> defaults."""
        project = Path(project_path) if project_path else Path.cwd()
        toml_path = project / ".seeker" / "config.toml"

        toml_data: dict = {}
        if toml_path.is_file():
            with open(toml_path, "rb") as f:
                toml_data = tomllib.load(f)

        sampling_data = toml_data.get("sampling", {})
        bench_data = toml_data.get("bench", {})
        display_data = toml_data.get("display", {})

        # Use literal defaults (slots=True prevents class-level attribute access)
        _sampling_defaults = SamplingConfig()
        _bench_defaults = BenchSettings()
        _display_defaults = DisplayConfig()

        sampling = SamplingConfig(
            interval_ms=int(
                os.environ.get(
                    "SEEKER_INTERVAL_MS",
                    sampling_data.get("interval_ms", _sampling_defaults.interval_ms),
                )
            ),
            min_interval_ms=float(
                os.environ.get(
                    "SEEKER_MIN_INTERVAL_MS",
                    sampling_data.get(
                        "min_interval_ms", _sampling_defaults.min_interval_ms
                    ),
                )
            ),
        )

        bench = BenchSettings(
            budget_ms=int(
                os.environ.get(
                    "SEEKER_BENCH_BUDGET_MS",
                    bench_data.get("budget_ms", _bench_defaults.budget_ms),
                )
            ),
            sleep_target_us=int(
                os.environ.get(
                    "SEEKER_BENCH_SLEEP_TARGET_US",
                    bench_data.get("sleep_target_us", _bench_defaults.sleep_target_us),
                )
            ),
            use_absolute_time=_as_bool(
                os.environ.get(
                    "SEEKER_BENCH_ABSOLUTE",
                    bench_data.get("use_absolute_time", _bench_defaults.use_absolute_time),
                )
            ),
            rt_priority=int(
                os.environ.get(
                    "SEEKER_BENCH_RT_PRIORITY",
                    bench_data.get("rt_priority", _bench_defaults.rt_priority),
                )
            ),
        )

        display = DisplayConfig(
            cap_residency=_as_bool(
                os.environ.get(
                    "SEEKER_CAP_RESIDENCY",
                    display_data.get("cap_residency", _display_defaults.cap_residency),
                )
            ),
        )

        return cls(
            project_path=project,
            sampling=sampling,
            bench=bench,
            display=display,
        )
