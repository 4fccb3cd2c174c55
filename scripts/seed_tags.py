#!/usr/bin/env python3
"""
Seed the default tag taxonomy.

Safe to re-run: tags are upserted by name.

Usage:
    python scripts/seed_tags.py
    python scripts/seed_tags.py --list      # print the taxonomy without writing
"""
import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from court_vision.core.config import settings
from court_vision.core.database import SessionLocal, init_db
from court_vision.core.logging import configure_logging
from court_vision.services.tagging import DEFAULT_TAGS
from court_vision.services.tagging.seed import seed_tags

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the default tag taxonomy")
    parser.add_argument("--list", action="store_true", help="Print the taxonomy and exit")
    args = parser.parse_args()

    if args.list:
        for tag in DEFAULT_TAGS:
            print(f"{tag.icon} {tag.name:<24} {tag.category.value:<18} -> {', '.join(tag.suggestions) or '-'}")
        print(f"\n{len(DEFAULT_TAGS)} tags")
        return 0

    configure_logging(level=settings.LOG_LEVEL, json_output=False)
    init_db()

    db = SessionLocal()
    try:
        counts = seed_tags(db)
    except Exception as e:
        logger.error(f"Tag seeding failed: {e}", exc_info=True)
        print(f"❌ Tag seeding failed: {e}")
        return 1
    finally:
        db.close()

    print(f"✅ Tags: {counts['created']} created, {counts['updated']} updated, {counts['unchanged']} unchanged")
    return 0


if __name__ == "__main__":
    sys.exit(main())
