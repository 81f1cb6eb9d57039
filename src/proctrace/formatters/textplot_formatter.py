from typing import List, Sequence

import numpy as np
import plotext as plt
from rich.text import Text

from ..report import Report
from .base_formatter import ReportFormatter

# Canvas size in terminal cells
CANVAS_WIDTH = 90
CANVAS_HEIGHT = 24

MEMORY_COLOR = "red"
CPU_COLOR = "green"


class TextplotFormatter(ReportFormatter):
    """
    Line charts over sample index: resident memory in MiB and/or CPU %.
    Charts are joined by a blank line; with both flags off the output is empty.
    """

    def __init__(self, memory: bool = True, cpu: bool = True, braille: bool = False):
        self.memory = memory
        self.cpu = cpu
        self.braille = braille

    def render(self, report: Report) -> str:
        report.require_samples()

        output: List[str] = []
        if self.memory:
            rss_mib = np.asarray(report.rss_series, dtype=float) / (1024 ** 2)
            output.append(self._chart(rss_mib.tolist(), "Memory RSS (MiB)", MEMORY_COLOR))
        if self.cpu:
            output.append(self._chart(report.cpu_series, "CPU (%)", CPU_COLOR))
        return "\n\n".join(output)

    def _chart(self, values: Sequence[float], title: str, color: str) -> str:
        plt.clear_figure()
        plt.plot_size(CANVAS_WIDTH, CANVAS_HEIGHT)
        plt.theme("clear")
        x = list(range(len(values)))
        if self.braille:
            plt.plot(x, list(values), color=color, marker="braille")
        else:
            plt.plot(x, list(values), color=color)
        plt.xlim(0, max(len(values), 1))
        plt.title(title)
        plt.xlabel("sample")
        chart = plt.build()
        plt.clear_figure()
        # plain text, same as the table output
        return Text.from_ansi(chart).plain.rstrip("\n")
