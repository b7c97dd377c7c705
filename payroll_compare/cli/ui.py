"""
CLI Entry Point: payroll-ui

Launches the Payroll Compare Streamlit app. Unrecognised arguments are passed
through to ``streamlit run``.
"""

import argparse
import os
import sys
from pathlib import Path

from streamlit.web import cli as stcli

from payroll_compare.snapshots import DATA_DIR_ENV

APP_PATH = Path(__file__).resolve().parent.parent / "ui" / "app.py"


def build_streamlit_argv(app_path: Path, passthrough: list[str]) -> list[str]:
    return ["streamlit", "run", str(app_path)] + passthrough


def main() -> None:
    parser = argparse.ArgumentParser(description="Launch the Payroll Compare web UI.")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help=f"Storage directory for the dataset and snapshots (sets {DATA_DIR_ENV}).",
    )
    args, passthrough = parser.parse_known_args()

    if not APP_PATH.exists():
        print(f"Error: Could not find UI entry point at {APP_PATH}", file=sys.stderr)
        sys.exit(1)

    # The app runs in this process and builds its SnapshotStore from the environment.
    if args.data_dir is not None:
        os.environ[DATA_DIR_ENV] = str(args.data_dir.expanduser().resolve())

    sys.argv = build_streamlit_argv(APP_PATH, passthrough)
    sys.exit(stcli.main())


if __name__ == "__main__":
    main()
