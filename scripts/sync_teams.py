#!/usr/bin/env python3
"""
Sync NBA teams from the ESPN core API.

Usage:
    python scripts/sync_teams.py
    python scripts/sync_teams.py --log

Cron scheduling (weekly, Monday 04:00):
    0 4 * * 1 cd /opt/court-vision && venv/bin/python scripts/sync_teams.py --log
"""
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from court_vision.services.sync.cli import build_parser, run_cli


def main() -> int:
    parser = build_parser("Sync NBA teams from ESPN")
    args = parser.parse_args()
    return run_cli("teams", args)


if __name__ == "__main__":
    sys.exit(main())
