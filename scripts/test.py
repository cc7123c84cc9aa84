"""
Unit test and behavior specification runner for Topicus, under coverage.
"""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
from pathlib import Path


def _repo_root() -> Path:
    """
    Resolve the repository root directory.

    :return: Repository root path.
    :rtype: Path
    """
    return Path(__file__).resolve().parent.parent


def _env_with_src() -> dict[str, str]:
    """
    Build an environment with src/ on PYTHONPATH.

    :return: Environment mapping.
    :rtype: dict[str, str]
    """
    env = dict(os.environ)
    src = str(_repo_root() / "src")
    env["PYTHONPATH"] = src + (os.pathsep + env["PYTHONPATH"] if env.get("PYTHONPATH") else "")
    return env


def _run(command: list[str], *, env: dict[str, str]) -> int:
    return subprocess.call(command, env=env, cwd=str(_repo_root()))


def main() -> int:
    """
    Run pytest, then Behave, both under coverage, and write a Hypertext Markup Language
    report.

    :return: Nonzero if either suite failed.
    :rtype: int
    """
    parser = argparse.ArgumentParser(description="Run Topicus tests under coverage.")
    parser.add_argument(
        "--skip-behave",
        action="store_true",
        help="Only run the pytest suite.",
    )
    args = parser.parse_args()

    env = _env_with_src()
    htmlcov_dir = _repo_root() / "reports" / "htmlcov"

    _run([sys.executable, "-m", "coverage", "erase"], env=env)
    rc = _run([sys.executable, "-m", "coverage", "run", "-p", "-m", "pytest"], env=env)
    if not args.skip_behave:
        behave_rc = _run([sys.executable, "-m", "coverage", "run", "-p", "-m", "behave"], env=env)
        rc = rc or behave_rc
    _run([sys.executable, "-m", "coverage", "combine"], env=env)
    _run([sys.executable, "-m", "coverage", "report", "-m"], env=env)
    _run([sys.executable, "-m", "coverage", "html", "-d", str(htmlcov_dir)], env=env)

    print(f"Coverage report in Hypertext Markup Language: {htmlcov_dir / 'index.html'}")
    return int(rc)


if __name__ == "__main__":
    raise SystemExit(main())
