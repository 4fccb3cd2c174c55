#!/usr/bin/env python3
"""
Run every ESPN sync job in dependency order.

teams -> players -> games -> player-stats -> team-stats. A failing job is
reported and the rest still run; the exit code is 1 if any job failed.

Usage:
    python scripts/sync_all.py --log
"""
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from court_vision.services.sync.cli import build_parser, run_cli


def main() -> int:
    parser = build_parser("Run all ESPN sync jobs")
    parser.add_argument("--max-pages", type=int, help="Athlete page cap for the players job")
    args = parser.parse_args()
    return run_cli("all", args, max_pages=args.max_pages)


if __name__ == "__main__":
    sys.exit(main())
