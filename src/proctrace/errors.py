class ProcTraceError(Exception):
    """Base class for every error raised by proctrace."""


class ConfigError(ProcTraceError):
    """Run configuration is invalid (empty command, non-positive interval...)."""


class SpawnError(ProcTraceError):
    """The target executable could not be located or started."""


class QueryError(ProcTraceError):
    """
    OS process introspection failed, or the process identifier became invalid.

    Distinct from a process legitimately reported as dead.
    """


class FormatError(ProcTraceError):
    """A report could not be rendered."""


class EmptyReportError(FormatError):
    """A report with zero samples was handed to a formatter."""


class ReportFileError(ProcTraceError):
    """A persisted report file is missing fields or is not valid JSON."""


class ProcessExited(ProcTraceError):
    """
    The process exited while it was being sampled.

    Raised by samplers instead of returning a reading of a dead process;
    the sampling loop treats it as the end of the run, not as a failure.
    """
