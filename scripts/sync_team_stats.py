#!/usr/bin/env python3
"""
Sync season team statistics from ESPN.

Usage:
    python scripts/sync_team_stats.py
    python scripts/sync_team_stats.py --season 2025 --season-type 3
"""
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from court_vision.services.sync.cli import build_parser, run_cli


def main() -> int:
    parser = build_parser("Sync NBA team season statistics from ESPN")
    parser.add_argument("--season", help="Season year (default: current season)")
    parser.add_argument(
        "--season-type",
        type=int,
        choices=(1, 2, 3),
        default=2,
        help="1 preseason, 2 regular season, 3 postseason"
    )
    args = parser.parse_args()
    return run_cli("team-stats", args, season=args.season, season_type=args.season_type)


if __name__ == "__main__":
    sys.exit(main())
