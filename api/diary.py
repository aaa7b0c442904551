"""
Diary entry routes — CRUD scoped to the authenticated user.

Route prefix: /api/diary
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from auth.dependencies import db_session, get_current_user
from database.helpers import create_entry, delete_entry, get_entry, list_entries, update_entry
from database.models import DEFAULT_MOOD, MOODS, User
from utils.errors import NotFound, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["diary"])

TITLE_MAX_LENGTH = 200
CONTENT_MAX_LENGTH = 5000


class EntryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    content: Optional[str] = None
    mood: Optional[str] = None
    tags: Optional[List[str]] = None
    is_private: Optional[bool] = Field(None, alias="isPrivate")


def _clean_fields(req: EntryRequest, *, partial: bool) -> Dict[str, Any]:
    """
    Validate and normalise an entry payload.

    With ``partial=True`` only the supplied fields are returned (update);
    otherwise title and content are required and defaults fill the rest.
    """
    supplied = req.model_fields_set
    fields: Dict[str, Any] = {}

    if req.title is not None:
        fields["title"] = req.title.strip()
    if req.content is not None:
        fields["content"] = req.content

    if not partial and (not fields.get("title") or not fields.get("content")):
        raise ValidationError("Title and content are required")
    if "title" in fields and not fields["title"]:
        raise ValidationError("Title cannot be empty")
    if "content" in fields and not fields["content"]:
        raise ValidationError("Content cannot be empty")
    if len(fields.get("title", "")) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title must be at most {TITLE_MAX_LENGTH} characters")
    if len(fields.get("content", "")) > CONTENT_MAX_LENGTH:
        raise ValidationError(f"Content must be at most {CONTENT_MAX_LENGTH} characters")

    if req.mood is not None:
        if req.mood not in MOODS:
            raise ValidationError("Invalid mood")
        fields["mood"] = req.mood
    elif not partial:
        fields["mood"] = DEFAULT_MOOD

    if req.tags is not None:
        fields["tags"] = [t.strip() for t in req.tags if t and t.strip()]
    elif not partial:
        fields["tags"] = []

    if req.is_private is not None:
        fields["is_private"] = req.is_private
    elif not partial:
        # Entries are private unless the client explicitly opts out.
        fields["is_private"] = True

    if partial and not supplied:
        raise ValidationError("Nothing to update")
    return fields


@router.get("")
async def get_entries(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    entries = await list_entries(session, current_user.id)
    return {"entries": [e.to_dict() for e in entries]}


@router.get("/{entry_id}")
async def get_single_entry(
    entry_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    entry = await get_entry(session, current_user.id, entry_id)
    if entry is None:
        raise NotFound("Entry not found")
    return {"entry": entry.to_dict()}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_diary_entry(
    req: EntryRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    entry = await create_entry(session, current_user.id, _clean_fields(req, partial=False))
    logger.info("User %s created entry %s", current_user.id, entry.id)
    return {"message": "Entry created successfully", "entry": entry.to_dict()}


@router.put("/{entry_id}")
async def update_diary_entry(
    entry_id: str,
    req: EntryRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    entry = await get_entry(session, current_user.id, entry_id)
    if entry is None:
        raise NotFound("Entry not found")
    entry = await update_entry(session, entry, _clean_fields(req, partial=True))
    return {"message": "Entry updated successfully", "entry": entry.to_dict()}


@router.delete("/{entry_id}")
async def delete_diary_entry(
    entry_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
) -> Dict[str, str]:
    entry = await get_entry(session, current_user.id, entry_id)
    if entry is None:
        raise NotFound("Entry not found")
    await delete_entry(session, entry)
    logger.info("User %s deleted entry %s", current_user.id, entry_id)
    return {"message": "Entry deleted successfully"}
