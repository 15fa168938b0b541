"""CLI runner for the gas report filter.

Usage:
    gosec -fmt=junit-xml ./... | python scripts/report_filter_runner.py
    gosec -fmt=junit-xml ./... | python scripts/report_filter_runner.py --whitelist ci/whitelist.json
"""
from __future__ import annotations

import sys
from pathlib import Path

# Ensure scripts/ is on the path so sibling imports work
scripts_dir = Path(__file__).resolve().parent
if str(scripts_dir) not in sys.path:
    sys.path.insert(0, str(scripts_dir))

from report_filter.cli import main

if __name__ == "__main__":
    sys.exit(main())
