"""
Command-line interface for proctrace.

Usage patterns:
    proctrace run --interval-ms 50 --graph-memory -- python train.py --epochs 3
    proctrace run --output summary.txt --save-report run.json -- make -j8
    proctrace graph --input run.json --braille
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from .config import RunConfig, Settings
from .errors import ProcTraceError
from .formatters.base_formatter import CombinedFormatter, ReportFormatter
from .formatters.table_formatter import TableFormatter
from .formatters.textplot_formatter import TextplotFormatter
from .log_config import setup_logger
from .report import Report
from .sampling_loop import SamplingLoop

logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
    except ProcTraceError as exc:
        setup_logger()
        logger.error("%s", exc)
        return 1

    log_file = args.log_file or settings.log_file
    try:
        setup_logger(args.log_level or settings.log_level, log_file=log_file)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        if args.command == "graph":
            return _graph(args)
        return _run(args, settings)
    except (ProcTraceError, OSError) as exc:
        logger.error("%s", exc)
        return 1


def _run(args: argparse.Namespace, settings: Settings) -> int:
    config = RunConfig.build(
        args.target,
        interval_ms=args.interval_ms,
        settings=settings,
        graph_memory=args.graph_memory,
        graph_cpu=args.graph_cpu,
        braille=args.braille,
        output_path=args.output,
        report_path=args.save_report,
    )
    logger.info("Running command: %s (interval %d ms)", list(config.command), config.interval_ms)

    result = SamplingLoop.from_config(config).run(config.command)
    report = result.report

    exit_status = 0
    if config.report_path:
        # raw data first: it stays usable by `graph` even if rendering fails
        exit_status |= _write(lambda: report.save(config.report_path), config.report_path)

    formatter = _run_formatter(config)
    print(formatter.render(report))

    if config.output_path:
        exit_status |= _write(
            lambda: formatter.render_to_file(report, config.output_path), config.output_path
        )

    if result.exit_code:
        logger.warning("Command exited with code %d", result.exit_code)
    return exit_status


def _graph(args: argparse.Namespace) -> int:
    report = Report.load(args.input)
    memory, cpu = args.graph_memory, args.graph_cpu
    if not memory and not cpu:
        memory = cpu = True

    formatters: list[ReportFormatter] = []
    if args.summary:
        formatters.append(TableFormatter())
    formatters.append(TextplotFormatter(memory=memory, cpu=cpu, braille=args.braille))
    print(CombinedFormatter(formatters).render(report))
    return 0


def _run_formatter(config: RunConfig) -> ReportFormatter:
    formatters: list[ReportFormatter] = [TableFormatter()]
    if config.wants_chart:
        formatters.append(
            TextplotFormatter(memory=config.graph_memory, cpu=config.graph_cpu, braille=config.braille)
        )
    return CombinedFormatter(formatters)


def _write(action, path: Path) -> int:
    try:
        action()
    except OSError as exc:
        logger.error("Failed to write %s: %s", path, exc)
        return 1
    logger.info("Wrote %s", path)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="proctrace",
        description="Run a command and summarise its CPU and memory usage.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level for messages on stderr (default: $PROCTRACE_LOG_LEVEL or WARNING).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write a detailed log to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run a command and sample it until it exits")
    run.add_argument(
        "-i",
        "--interval-ms",
        type=int,
        default=None,
        help="Sampling interval in milliseconds (default: $PROCTRACE_INTERVAL_MS or 100).",
    )
    run.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Also write the rendered report to this file.",
    )
    run.add_argument(
        "--save-report",
        type=Path,
        default=None,
        help="Save the raw samples as JSON for later use with `graph`.",
    )
    run.add_argument("--graph-memory", action="store_true", help="Append a memory chart.")
    run.add_argument("--graph-cpu", action="store_true", help="Append a CPU chart.")
    run.add_argument("--braille", action="store_true", help="Draw charts with braille dots.")
    run.add_argument(
        "target",
        nargs=argparse.REMAINDER,
        metavar="COMMAND",
        help="Command to run and its arguments, after `--`.",
    )

    graph = subparsers.add_parser("graph", help="Chart a report saved with --save-report")
    graph.add_argument("-i", "--input", type=Path, required=True, help="Saved JSON report.")
    graph.add_argument("--braille", action="store_true", help="Draw charts with braille dots.")
    graph.add_argument("--graph-memory", action="store_true", help="Only chart memory (default: both).")
    graph.add_argument("--graph-cpu", action="store_true", help="Only chart CPU (default: both).")
    graph.add_argument("--summary", action="store_true", help="Print the summary table first.")

    return parser
