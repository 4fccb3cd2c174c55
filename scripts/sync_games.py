#!/usr/bin/env python3
"""
Sync games from the ESPN scoreboard.

Usage:
    python scripts/sync_games.py                          # today
    python scripts/sync_games.py --dates 20251021         # one day
    python scripts/sync_games.py --dates 20251021-20251027
    python scripts/sync_games.py --week                   # current week
"""
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from court_vision.services.sync.cli import build_parser, run_cli


def main() -> int:
    parser = build_parser("Sync NBA games from the ESPN scoreboard")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--dates", help="YYYYMMDD or YYYYMMDD-YYYYMMDD")
    group.add_argument("--week", action="store_true", help="Sync the current week")
    args = parser.parse_args()
    return run_cli("games", args, dates=args.dates, week=args.week)


if __name__ == "__main__":
    sys.exit(main())
