"""
Configuration management for proctrace.

Environment variables provide defaults; command-line flags override them.
A RunConfig is frozen once built and describes exactly one monitored run.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .errors import ConfigError

DEFAULT_INTERVAL_MS = 100
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass
class Settings:
    """Process-wide defaults read from the environment."""

    interval_ms: int = DEFAULT_INTERVAL_MS
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: Path | None = None

    @classmethod
    def from_env(cls) -> Settings:
        """Create settings from PROCTRACE_* environment variables."""
        raw_interval = os.environ.get("PROCTRACE_INTERVAL_MS", str(DEFAULT_INTERVAL_MS))
        try:
            interval_ms = int(raw_interval)
        except ValueError as exc:
            raise ConfigError(
                f"PROCTRACE_INTERVAL_MS must be an integer, got {raw_interval!r}"
            ) from exc

        log_file = os.environ.get("PROCTRACE_LOG_FILE")
        return cls(
            interval_ms=interval_ms,
            log_level=os.environ.get("PROCTRACE_LOG_LEVEL", DEFAULT_LOG_LEVEL),
            log_file=Path(log_file) if log_file else None,
        )


@dataclass(frozen=True)
class RunConfig:
    """Everything needed to monitor one command."""

    command: tuple[str, ...]
    interval_ms: int = DEFAULT_INTERVAL_MS
    graph_memory: bool = False
    graph_cpu: bool = False
    braille: bool = False
    output_path: Path | None = None
    report_path: Path | None = None

    def __post_init__(self) -> None:
        if not self.command or not self.command[0]:
            raise ConfigError("Command is empty")
        if self.interval_ms <= 0:
            raise ConfigError(f"Interval must be positive, got {self.interval_ms} ms")

    @classmethod
    def build(
        cls,
        command: Sequence[str],
        *,
        interval_ms: int | None = None,
        settings: Settings | None = None,
        **options,
    ) -> RunConfig:
        """Build a config, taking the interval from settings when not given."""
        settings = settings or Settings()
        args = list(command)
        # argparse.REMAINDER keeps the "--" separator
        if args and args[0] == "--":
            args = args[1:]
        return cls(
            command=tuple(args),
            interval_ms=interval_ms if interval_ms is not None else settings.interval_ms,
            **options,
        )

    @property
    def interval(self) -> float:
        """Sampling interval in seconds."""
        return self.interval_ms / 1000.0

    @property
    def wants_chart(self) -> bool:
        return self.graph_memory or self.graph_cpu
