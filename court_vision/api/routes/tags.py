"""
Tag taxonomy and quick-action configuration.

Base path: /api/tags
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from court_vision.api.serializers import ok, tag_to_dict
from court_vision.core.database import get_db
from court_vision.repositories import TagRepository
from court_vision.services.tagging import QUICK_ACTIONS, STARTER_ACTIONS, allowed_next_actions
from court_vision.services.tagging.quick_actions import action_groups

router = APIRouter(prefix="/api/tags", tags=["tags"])


@router.get("")
async def list_tags(
    category: Optional[str] = Query(None, description="OFFENSIVE_ACTION, DEFENSIVE_ACTION, SPECIAL_SITUATION"),
    subcategory: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    tags = TagRepository(db).find_filtered(category=category, subcategory=subcategory)
    return ok([tag_to_dict(t) for t in tags], count=len(tags))


@router.get("/quick-actions")
async def quick_actions(
    previous: Optional[str] = Query(None, description="Previously tagged action in the sequence")
):
    """
    Quick-action buttons and the advised next actions.

    Advice only: any tag may follow any other when a play is created.
    """
    return ok({
        "actions": [action.to_dict() for action in QUICK_ACTIONS],
        "groups": action_groups(),
        "starters": list(STARTER_ACTIONS),
        "previous": previous,
        "nextActions": allowed_next_actions(previous),
    })


@router.get("/{tag_id}")
async def get_tag(tag_id: str, db: Session = Depends(get_db)):
    tag = TagRepository(db).find_by_id(tag_id)
    if not tag:
        raise HTTPException(status_code=404, detail=f"Tag {tag_id} not found")
    return ok(tag_to_dict(tag))
