"""
Idempotent seeding of the default tag taxonomy.
"""
from typing import Dict, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from court_vision.core.logging import get_logger
from court_vision.repositories import TagRepository
from court_vision.services.tagging.taxonomy import DEFAULT_TAGS, TagDefinition

logger = get_logger(__name__)


def seed_tags(db: Session, definitions: Optional[Iterable[TagDefinition]] = None) -> Dict[str, int]:
    """
    Upsert tag definitions by name in a single transaction.

    Running it twice leaves the table unchanged; existing tags keep their ids
    so PlayTags stay attached.

    Returns:
        {"created": n, "updated": n, "unchanged": n}
    """
    repo = TagRepository(db)
    counts = {"created": 0, "updated": 0, "unchanged": 0}

    try:
        for definition in definitions if definitions is not None else DEFAULT_TAGS:
            row = definition.to_row()
            existing = repo.filter_by_first(name=definition.name)
            if existing is None:
                repo.create(name=definition.name, **row)
                counts["created"] += 1
            elif repo.update_instance(existing, row):
                counts["updated"] += 1
            else:
                counts["unchanged"] += 1
        repo.save()
    except SQLAlchemyError:
        repo.rollback()
        logger.exception("Tag seeding failed; no tags written")
        raise

    logger.info(f"Seeded tags: {counts['created']} created, {counts['updated']} updated, "
                f"{counts['unchanged']} unchanged")
    return counts
