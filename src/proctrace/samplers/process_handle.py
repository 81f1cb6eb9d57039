import enum
import logging
import subprocess
from dataclasses import dataclass, field
from typing import Any, Optional

logger = logging.getLogger(__name__)


class ProcessState(enum.Enum):
    RUNNING = "running"
    DEAD = "dead"
    ZOMBIE = "zombie"
    UNKNOWN = "unknown"


# Once a process reaches one of these it is never sampled again
TERMINAL_STATES = frozenset({ProcessState.DEAD, ProcessState.ZOMBIE})


@dataclass
class ProcessHandle:
    """
    A spawned child process.

    `process` is the introspection object (a psutil.Process in practice) and
    `popen` the object owning the OS-level child, used to reap it.
    """

    pid: int
    process: Any
    popen: Optional[subprocess.Popen] = None
    exit_code: Optional[int] = None
    _reaped: bool = field(default=False, repr=False)

    @property
    def reaped(self) -> bool:
        return self._reaped

    def wait(self) -> Optional[int]:
        """
        Reap the child and return its exit code.

        Only the first call waits; later calls return the recorded exit code.
        """
        if self._reaped:
            return self.exit_code
        if self.popen is not None:
            self.exit_code = self.popen.wait()
            logger.debug("Reaped process %d (exit code %s)", self.pid, self.exit_code)
        self._reaped = True
        return self.exit_code
