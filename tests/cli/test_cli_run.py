from __future__ import annotations

import json
import os
import subprocess
import sys
from contextlib import redirect_stdout
from io import StringIO
from pathlib import Path

from proctrace.cli import main

SLEEPER = "import time; time.sleep(0.3)"
SRC_DIR = Path(__file__).resolve().parents[2] / "src"


def _main(argv: list[str]) -> tuple[int, str]:
    stdout = StringIO()
    with redirect_stdout(stdout):
        code = main(argv)
    return code, stdout.getvalue()


def test_run_prints_summary_table() -> None:
    code, output = _main(["run", "--interval-ms", "20", "--", sys.executable, "-c", SLEEPER])

    assert code == 0
    assert "Duration" in output
    assert "Mean" in output
    assert "Peak" in output


def test_run_with_charts_and_files(tmp_path: Path) -> None:
    summary = tmp_path / "summary.txt"
    raw = tmp_path / "run.json"

    code, output = _main(
        [
            "run",
            "--interval-ms",
            "20",
            "--graph-memory",
            "--graph-cpu",
            "--output",
            str(summary),
            "--save-report",
            str(raw),
            "--",
            sys.executable,
            "-c",
            SLEEPER,
        ]
    )

    assert code == 0
    assert "Memory RSS (MiB)" in output
    assert "CPU (%)" in output
    assert summary.read_text(encoding="utf-8") == output.rstrip("\n")
    data = json.loads(raw.read_text(encoding="utf-8"))
    assert data["samples"]
    assert set(data["samples"][0]) == {"rss", "vms", "shared", "cpu"}


def test_run_interval_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("PROCTRACE_INTERVAL_MS", "15")

    code, output = _main(["run", "--", sys.executable, "-c", SLEEPER])

    assert code == 0
    assert "Mean" in output


def test_run_failed_output_write_still_prints_summary(tmp_path: Path, capsys) -> None:
    target = tmp_path / "missing-dir" / "summary.txt"

    code, output = _main(
        ["run", "--interval-ms", "20", "--output", str(target), "--", sys.executable, "-c", SLEEPER]
    )

    assert code == 1
    assert "Mean" in output
    assert not target.exists()
    assert "Failed to write" in capsys.readouterr().err


def test_run_without_command_fails(capsys) -> None:
    code, output = _main(["run"])

    assert code == 1
    assert output == ""
    assert "Command is empty" in capsys.readouterr().err


def test_run_missing_executable_fails(tmp_path: Path, capsys) -> None:
    code, output = _main(["run", "--", str(tmp_path / "no-such-program")])

    assert code == 1
    assert output == ""
    assert "Failed to start" in capsys.readouterr().err


def test_run_reports_child_exit_code_as_warning(capsys) -> None:
    code, _ = _main(["run", "--interval-ms", "20", "--", sys.executable, "-c", "import time, sys; time.sleep(0.3); sys.exit(4)"])

    assert code == 0
    assert "exited with code 4" in capsys.readouterr().err


def test_run_passes_child_output_through() -> None:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    env["PYTHONIOENCODING"] = "utf-8"
    child = (
        "import sys, time; print('child-stdout-line', flush=True); "
        "print('child-stderr-line', file=sys.stderr, flush=True); time.sleep(0.3)"
    )

    completed = subprocess.run(
        [sys.executable, "-m", "proctrace", "run", "--interval-ms", "20", "--", sys.executable, "-c", child],
        capture_output=True,
        text=True,
        encoding="utf-8",
        env=env,
        timeout=60,
    )

    assert completed.returncode == 0, completed.stderr
    assert "child-stdout-line" in completed.stdout
    assert "child-stderr-line" not in completed.stdout
    assert "child-stderr-line" in completed.stderr
    assert "Peak" in completed.stdout
