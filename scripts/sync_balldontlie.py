#!/usr/bin/env python3
"""
Link players to BallDontLie ids and pull their season averages.

Requires BALLDONTLIE_API_KEY.

Usage:
    python scripts/sync_balldontlie.py
    python scripts/sync_balldontlie.py --season 2024 --max-pages 5
"""
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from court_vision.services.sync.cli import build_parser, run_cli


def main() -> int:
    parser = build_parser("Link players and season averages from BallDontLie")
    parser.add_argument("--season", type=int, help="Season year for averages (default: current)")
    parser.add_argument("--max-pages", type=int, help="Stop after this many player pages")
    args = parser.parse_args()
    return run_cli("balldontlie", args, season=args.season, max_pages=args.max_pages)


if __name__ == "__main__":
    sys.exit(main())
