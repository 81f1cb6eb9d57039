"""
Sampling loop: spawn a command, poll it until it exits, reap it and build a Report.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .config import RunConfig
from .errors import ConfigError, ProcessExited
from .report import Report, Sample
from .samplers.base_sampler import BaseSampler
from .samplers.process_handle import TERMINAL_STATES
from .samplers.process_sampler import ProcessSampler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    """A finished run: the report plus what became of the child."""

    report: Report
    pid: int
    exit_code: Optional[int]


class SamplingLoop:
    """
    Drives a sampler at a fixed cadence until the monitored process dies.

    The loop never samples a process it has not just seen alive, so the last
    sample may slightly undershoot the true final usage. Sampling failures
    abort the run: no partial report is produced. The child is reaped exactly
    once on every path after a successful spawn.
    """

    def __init__(
        self,
        interval: float = 0.1,
        sampler: Optional[BaseSampler] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            interval: Seconds to sleep between two polls
            sampler: Sampler to use; a fresh ProcessSampler per run when omitted
            sleep: Sleep function (not interruptible mid-sleep)
            clock: Wall clock used for the report's start/end timestamps
        """
        if interval <= 0:
            raise ConfigError(f"Interval must be positive, got {interval}s")
        self.interval = interval
        self._sampler = sampler
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_config(cls, config: RunConfig) -> "SamplingLoop":
        return cls(interval=config.interval)

    def run(self, command: Sequence[str]) -> RunResult:
        """
        Run `command` to completion while sampling it.

        Raises:
            ConfigError: if `command` is empty.
            SpawnError: if the command cannot be started.
            QueryError: if polling the process fails mid-run.
        """
        if not command:
            raise ConfigError("Command is empty")
        executable, *args = command

        sampler = self._sampler or ProcessSampler()
        samples: List[Sample] = []

        time_start = self._clock()
        handle = sampler.spawn(executable, args)
        try:
            while True:
                state = sampler.status(handle)
                if state in TERMINAL_STATES:
                    break

                try:
                    sample = sampler.sample(handle)
                except ProcessExited:
                    logger.debug("Process %d exited while being sampled", handle.pid)
                    break
                # only keep readings of a process still alive after the read
                state = sampler.status(handle)
                if state in TERMINAL_STATES:
                    logger.debug("Dropped sample taken while process %d was exiting", handle.pid)
                    break

                samples.append(sample)
                self._sleep(self.interval)
            time_end = self._clock()
        finally:
            exit_code = handle.wait()
            sampler.forget(handle)

        # the wall clock may have been stepped backwards during the run
        report = Report(
            time_start=time_start,
            time_end=max(time_end, time_start),
            samples=tuple(samples),
        )
        logger.info(
            "Process %d exited with code %s after %.3fs (%d samples)",
            handle.pid,
            exit_code,
            report.duration,
            len(report),
        )
        return RunResult(report=report, pid=handle.pid, exit_code=exit_code)
