"""
Entry point for `python -m proctrace`.
"""

from proctrace.cli import main

if __name__ == "__main__":  # pragma: no cover - module execution guard
    raise SystemExit(main())
