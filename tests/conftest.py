"""Shared pytest fixtures for the proctrace project."""

import sys
from typing import List, Sequence

import pytest

from proctrace.errors import QueryError
from proctrace.report import Report, Sample
from proctrace.samplers.base_sampler import BaseSampler
from proctrace.samplers.process_handle import ProcessHandle, ProcessState


class FakePopen:
    def __init__(self, pid: int = 4242, returncode: int = 0):
        self.pid = pid
        self.returncode = returncode
        self.wait_calls = 0

    def wait(self) -> int:
        self.wait_calls += 1
        return self.returncode


class FakeSampler(BaseSampler):
    """Replays a scripted sequence of states; samples come from `samples`.

    An exception instance in `samples` is raised instead of returned.
    """

    def __init__(self, states: Sequence[ProcessState], samples: Sequence[Sample] = (), fail_on_sample: int = -1):
        self.states = list(states)
        self.samples = list(samples)
        self.fail_on_sample = fail_on_sample
        self.sample_calls = 0
        self.forgotten: List[int] = []
        self.popen = FakePopen()
        self.spawned: List[Sequence[str]] = []

    def spawn(self, command, args=()):
        self.spawned.append([command, *args])
        return ProcessHandle(pid=self.popen.pid, process=None, popen=self.popen)

    def status(self, handle):
        return self.states.pop(0)

    def sample(self, handle):
        if self.sample_calls == self.fail_on_sample:
            raise QueryError("transient failure")
        result = self.samples[self.sample_calls]
        self.sample_calls += 1
        if isinstance(result, Exception):
            raise result
        return result

    def forget(self, handle):
        self.forgotten.append(handle.pid)


@pytest.fixture
def fake_sampler_cls():
    return FakeSampler


@pytest.fixture
def python_command():
    """Build a command line running a Python snippet in a fresh interpreter."""

    def _build(code: str) -> List[str]:
        return [sys.executable, "-c", code]

    return _build


@pytest.fixture
def two_sample_report() -> Report:
    return Report(
        time_start=1000.0,
        time_end=1001.5,
        samples=(
            Sample(cpu_percent=10.0, rss=100, vms=1000, shared=10),
            Sample(cpu_percent=20.0, rss=200, vms=3001, shared=15),
        ),
    )


@pytest.fixture
def empty_report() -> Report:
    return Report(time_start=1000.0, time_end=1000.0, samples=())
