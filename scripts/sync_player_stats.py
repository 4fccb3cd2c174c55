#!/usr/bin/env python3
"""
Sync per-game player box scores for finished games.

Skips itself in the offseason unless --force is given.

Usage:
    python scripts/sync_player_stats.py
    python scripts/sync_player_stats.py --dates 20251021 --force
"""
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from court_vision.services.sync.cli import build_parser, run_cli


def main() -> int:
    parser = build_parser("Sync player game statistics from ESPN box scores")
    parser.add_argument("--dates", help="YYYYMMDD or YYYYMMDD-YYYYMMDD (default: recent finished games)")
    parser.add_argument("--force", action="store_true", help="Run even in the offseason")
    args = parser.parse_args()
    return run_cli("player-stats", args, dates=args.dates, force=args.force)


if __name__ == "__main__":
    sys.exit(main())
