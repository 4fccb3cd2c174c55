#!/usr/bin/env python3
"""
Sync every ESPN athlete (paged) into the players table.

Usage:
    python scripts/sync_players.py
    python scripts/sync_players.py --max-pages 2   # quick partial run
"""
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from court_vision.services.sync.cli import build_parser, run_cli


def main() -> int:
    parser = build_parser("Sync NBA athletes from ESPN")
    parser.add_argument(
        "--max-pages",
        type=int,
        default=None,
        help="Stop after this many athlete pages (default: all)"
    )
    args = parser.parse_args()
    return run_cli("players", args, max_pages=args.max_pages)


if __name__ == "__main__":
    sys.exit(main())
