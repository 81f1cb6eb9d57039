import json
import statistics
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .errors import EmptyReportError, ReportFileError

REPORT_FORMAT_VERSION = 1


@dataclass(frozen=True)
class Sample:
    """One observation of the monitored process."""

    cpu_percent: float
    rss: int
    vms: int
    shared: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rss": self.rss,
            "vms": self.vms,
            "shared": self.shared,
            "cpu": self.cpu_percent,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Sample":
        return cls(
            cpu_percent=float(data["cpu"]),
            rss=int(data["rss"]),
            vms=int(data["vms"]),
            shared=int(data["shared"]),
        )


@dataclass(frozen=True)
class Report:
    """
    Result of one completed sampling run.

    Holds the raw sample series in temporal order together with the wall-clock
    start and end of the run (epoch seconds). Every statistic is computed on
    demand from the stored samples, so accessors are read-only and idempotent.

    Empty reports are legitimate (the process can exit before the first poll),
    but formatters must treat them as an error, see `require_samples`.

    Note the asymmetry on empty series: `peak_cpu` returns 0.0 while the
    memory peaks return None. Existing reports rely on it.
    """

    time_start: float
    time_end: float
    samples: Tuple[Sample, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.time_end < self.time_start:
            raise ValueError(
                f"Report ends before it starts ({self.time_end} < {self.time_start})"
            )
        # Freeze whatever sequence the caller handed over
        object.__setattr__(self, "samples", tuple(self.samples))

    @classmethod
    def from_records(
        cls,
        records: Iterable[Tuple[Any, float]],
        time_start: float,
        time_end: float,
    ) -> "Report":
        """
        Build a report from (memory_info, cpu_percent) pairs.

        `memory_info` is anything exposing `rss` and `vms` (and optionally
        `shared`), such as the namedtuple returned by psutil.
        """
        samples = [
            Sample(
                cpu_percent=float(cpu),
                rss=int(mem.rss),
                vms=int(mem.vms),
                shared=int(getattr(mem, "shared", 0)),
            )
            for mem, cpu in records
        ]
        return cls(time_start=time_start, time_end=time_end, samples=tuple(samples))

    # ---- basic properties ----

    @property
    def duration(self) -> float:
        """Elapsed wall-clock seconds."""
        return self.time_end - self.time_start

    @property
    def is_empty(self) -> bool:
        return not self.samples

    def __len__(self) -> int:
        return len(self.samples)

    def require_samples(self) -> None:
        """Raise EmptyReportError when there is nothing to summarise."""
        if self.is_empty:
            raise EmptyReportError("Report was empty: the process exited before the first sample")

    # ---- series ----

    @property
    def cpu_series(self) -> List[float]:
        return [s.cpu_percent for s in self.samples]

    @property
    def rss_series(self) -> List[int]:
        return [s.rss for s in self.samples]

    @property
    def vms_series(self) -> List[int]:
        return [s.vms for s in self.samples]

    @property
    def shared_series(self) -> List[int]:
        return [s.shared for s in self.samples]

    # ---- statistics ----

    def mean_cpu(self) -> Optional[float]:
        if self.is_empty:
            return None
        # statistics.mean is exact, so the mean never exceeds the peak
        return float(statistics.mean(self.cpu_series))

    def peak_cpu(self) -> float:
        """Highest CPU percentage seen, 0.0 for an empty report."""
        return float(max(self.cpu_series, default=0.0))

    def mean_rss(self) -> Optional[int]:
        return _int_mean(self.rss_series)

    def peak_rss(self) -> Optional[int]:
        return max(self.rss_series, default=None)

    def mean_vms(self) -> Optional[int]:
        return _int_mean(self.vms_series)

    def peak_vms(self) -> Optional[int]:
        return max(self.vms_series, default=None)

    def mean_shared(self) -> Optional[int]:
        return _int_mean(self.shared_series)

    def peak_shared(self) -> Optional[int]:
        return max(self.shared_series, default=None)

    # ---- persistence ----

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": REPORT_FORMAT_VERSION,
            "time_start": self.time_start,
            "time_end": self.time_end,
            "samples": [s.to_dict() for s in self.samples],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Report":
        try:
            version = data.get("version", REPORT_FORMAT_VERSION)
            if version != REPORT_FORMAT_VERSION:
                raise ReportFileError(f"Unsupported report format version: {version}")
            return cls(
                time_start=float(data["time_start"]),
                time_end=float(data["time_end"]),
                samples=tuple(Sample.from_dict(item) for item in data["samples"]),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise ReportFileError(f"Malformed report: {exc}") from exc

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, payload: str) -> "Report":
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ReportFileError(f"Report is not valid JSON: {exc}") from exc
        return cls.from_dict(data)

    def save(self, path: Union[str, Path]) -> None:
        Path(path).write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Report":
        return cls.from_json(Path(path).read_text(encoding="utf-8"))


def _int_mean(values: Sequence[int]) -> Optional[int]:
    """Truncating integer mean, matching how byte counts were always averaged."""
    if not values:
        return None
    return sum(values) // len(values)
