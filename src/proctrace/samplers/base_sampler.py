from abc import ABC, abstractmethod
from typing import Sequence

from ..report import Sample
from .process_handle import ProcessHandle, ProcessState, TERMINAL_STATES


class BaseSampler(ABC):
    """
    Abstract base class for samplers that launch a process and poll its
    runtime metrics, such as CPU usage and memory footprint.

    Samplers are stateful (CPU usage is measured between two polls) and are
    meant to live for a single monitored run.
    """

    @abstractmethod
    def spawn(self, command: str, args: Sequence[str] = ()) -> ProcessHandle:
        """
        Start `command` with `args` and return a handle to it.
        The child's standard streams are inherited, never captured.

        Raises:
            SpawnError: if the executable cannot be located or started.
        """
        pass

    @abstractmethod
    def status(self, handle: ProcessHandle) -> ProcessState:
        """
        Query the OS process table for the current state of the process.

        Raises:
            QueryError: if the process identifier is no longer valid.
        """
        pass

    @abstractmethod
    def sample(self, handle: ProcessHandle) -> Sample:
        """
        Collect the latest CPU and memory figures for the process.
        This method should be non-blocking. It is called regularly by the sampling loop.

        Raises:
            QueryError: if the OS refuses or fails the query.
            ProcessExited: if the process exited while being read.
        """
        pass

    def forget(self, handle: ProcessHandle) -> None:
        """Drop any per-process state kept for `handle`."""
        pass

    def is_alive(self, handle: ProcessHandle) -> bool:
        return self.status(handle) not in TERMINAL_STATES
