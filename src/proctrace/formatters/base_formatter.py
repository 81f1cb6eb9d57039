from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence, Union

from ..report import Report


class ReportFormatter(ABC):
    """
    Renders a Report to text. Formatters only read the report.
    """

    @abstractmethod
    def render(self, report: Report) -> str:
        """
        Render `report` to a string.

        Raises:
            EmptyReportError: if the report holds no samples.
        """
        raise NotImplementedError

    def render_to_file(self, report: Report, path: Union[str, Path]) -> None:
        """Write the rendered report verbatim to `path`; OSError propagates as is."""
        text = self.render(report)
        Path(path).write_text(text, encoding="utf-8")


class CombinedFormatter(ReportFormatter):
    """Concatenates the output of several formatters, skipping empty ones."""

    def __init__(self, formatters: Sequence[ReportFormatter], separator: str = "\n\n"):
        self.formatters = list(formatters)
        self.separator = separator

    def render(self, report: Report) -> str:
        report.require_samples()
        parts = [formatter.render(report) for formatter in self.formatters]
        return self.separator.join(part for part in parts if part)
