import io
from datetime import timedelta

import humanize
from rich import box
from rich.console import Console
from rich.table import Table

from ..report import Report
from .base_formatter import ReportFormatter

DEFAULT_WIDTH = 100


def format_bytes(value: int) -> str:
    """Decimal units, e.g. "1.5 MB"."""
    return humanize.naturalsize(value, binary=False)


def format_duration(seconds: float) -> str:
    return humanize.precisedelta(timedelta(seconds=seconds), minimum_unit="milliseconds")


class TableFormatter(ReportFormatter):
    """
    Summary tables: elapsed duration, then mean and peak for CPU % and the
    rss / vms / shared memory figures.
    Output is plain text (no ANSI codes) so it can be written to a file as is.
    """

    def __init__(self, width: int = DEFAULT_WIDTH):
        self.width = width

    def render(self, report: Report) -> str:
        report.require_samples()

        time_table = Table(box=box.ROUNDED, show_header=False, show_lines=True)
        time_table.add_column(style="bold")
        time_table.add_column()
        time_table.add_row("Duration", format_duration(report.duration))

        table = Table(box=box.ROUNDED, show_lines=True, header_style="italic")
        table.add_column("", style="bold")
        table.add_column("CPU (%)", justify="right")
        table.add_column("Memory (rss)", justify="right")
        table.add_column("Memory (vms)", justify="right")
        table.add_column("Memory (shared)", justify="right")

        table.add_row(
            "Mean",
            f"{report.mean_cpu():.2f}%",
            format_bytes(report.mean_rss()),
            format_bytes(report.mean_vms()),
            format_bytes(report.mean_shared()),
        )
        table.add_row(
            "Peak",
            f"{report.peak_cpu():.2f}%",
            format_bytes(report.peak_rss()),
            format_bytes(report.peak_vms()),
            format_bytes(report.peak_shared()),
        )

        console = Console(file=io.StringIO(), width=self.width, color_system=None, force_terminal=False)
        with console.capture() as capture:
            console.print(time_table)
            console.print(table)
        return capture.get().rstrip("\n")
