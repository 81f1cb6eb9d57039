import logging
import subprocess
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence

import psutil

from ..errors import ProcessExited, QueryError, SpawnError
from ..report import Sample
from .base_sampler import BaseSampler
from .process_handle import ProcessHandle, ProcessState

logger = logging.getLogger(__name__)

_RUNNING_STATUSES = frozenset(
    {
        psutil.STATUS_RUNNING,
        psutil.STATUS_SLEEPING,
        psutil.STATUS_DISK_SLEEP,
        psutil.STATUS_STOPPED,
        psutil.STATUS_TRACING_STOP,
        psutil.STATUS_WAKING,
        psutil.STATUS_IDLE,
        psutil.STATUS_LOCKED,
        psutil.STATUS_WAITING,
        psutil.STATUS_PARKED,
    }
)


@dataclass(frozen=True)
class CpuBaseline:
    """CPU time consumed by a process and the wall time it was observed at."""

    cpu_time: float
    wall_time: float


class ProcessSampler(BaseSampler):
    """
    Sampler that launches a command and tracks its CPU and memory usage
    over time using psutil.

    CPU usage is differential: every call to `sample` compares the CPU time
    the process has consumed (user + system) against the baseline recorded by
    the previous call for the same pid, divided by the wall time elapsed in
    between. The first call for a pid only records the baseline and reports
    0.0. Values may exceed 100% on multi-core machines.

    Baselines live on the sampler instance; create one sampler per run.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        super().__init__()
        self._clock = clock

        # pid -> last observed CPU/wall time pair
        self._baselines: Dict[int, CpuBaseline] = {}

    def spawn(self, command: str, args: Sequence[str] = ()) -> ProcessHandle:
        argv = [command, *args]
        try:
            # stdout/stderr are inherited so the child's output passes through untouched
            popen = subprocess.Popen(argv)
        except (OSError, ValueError) as e:
            raise SpawnError(f"Failed to start {command!r}: {e}") from e

        try:
            process = psutil.Process(popen.pid)
        except psutil.Error as e:
            popen.wait()
            raise QueryError(f"Cannot inspect process {popen.pid}: {e}") from e

        logger.info("Process started with id: %d", popen.pid)
        return ProcessHandle(pid=popen.pid, process=process, popen=popen)

    def status(self, handle: ProcessHandle) -> ProcessState:
        try:
            raw_status = handle.process.status()
        except psutil.ZombieProcess:
            return ProcessState.ZOMBIE
        except psutil.NoSuchProcess as e:
            raise QueryError(f"Process {handle.pid} no longer exists") from e
        except psutil.Error as e:
            raise QueryError(f"Status query for process {handle.pid} failed: {e}") from e

        return _to_state(raw_status)

    def sample(self, handle: ProcessHandle) -> Sample:
        """
        Sample current CPU and memory usage of the monitored process.
        Returns:
            Sample: CPU % since the previous call plus rss/vms/shared bytes.
        """
        try:
            mem = handle.process.memory_info()
            cpu_times = handle.process.cpu_times()
        except psutil.ZombieProcess as e:
            raise ProcessExited(f"Process {handle.pid} exited while being sampled") from e
        except psutil.Error as e:
            raise QueryError(f"Sampling process {handle.pid} failed: {e}") from e

        # a live process always maps memory; zero means it is tearing down
        if mem.vms == 0:
            raise ProcessExited(f"Process {handle.pid} released its memory while being sampled")

        cpu_usage = self._cpu_percent(handle.pid, cpu_times.user + cpu_times.system)
        return Sample(
            cpu_percent=cpu_usage,
            rss=int(mem.rss),
            vms=int(mem.vms),
            # not reported on macOS and Windows
            shared=int(getattr(mem, "shared", 0)),
        )

    def forget(self, handle: ProcessHandle) -> None:
        self._baselines.pop(handle.pid, None)

    def baseline(self, handle: ProcessHandle) -> Optional[CpuBaseline]:
        return self._baselines.get(handle.pid)

    def _cpu_percent(self, pid: int, cpu_time: float) -> float:
        now = self._clock()
        previous = self._baselines.get(pid)
        self._baselines[pid] = CpuBaseline(cpu_time=cpu_time, wall_time=now)

        if previous is None:
            return 0.0
        elapsed = now - previous.wall_time
        if elapsed <= 0:
            return 0.0
        return max(0.0, (cpu_time - previous.cpu_time) / elapsed * 100.0)


def _to_state(raw_status: str) -> ProcessState:
    if raw_status == psutil.STATUS_ZOMBIE:
        return ProcessState.ZOMBIE
    if raw_status == psutil.STATUS_DEAD:
        return ProcessState.DEAD
    if raw_status in _RUNNING_STATUSES:
        return ProcessState.RUNNING
    logger.debug("Unrecognised process status %r", raw_status)
    return ProcessState.UNKNOWN
