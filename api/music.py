"""
Music routes — proxy Jamendo track search for the player.

Route prefix: /api/music
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import APIRouter, Depends, Query, Request

from auth.dependencies import get_current_user
from music.jamendo import JamendoClient
from utils.errors import NotFound, UpstreamError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["music"], dependencies=[Depends(get_current_user)])


def get_music_client(request: Request) -> JamendoClient:
    return request.app.state.music_client


@router.get("/search")
async def search_tracks(
    q: Optional[str] = Query(None),
    limit: int = Query(10, ge=1, le=200),
    client: JamendoClient = Depends(get_music_client),
) -> Dict[str, Any]:
    if not q or not q.strip():
        raise ValidationError("Search query required")
    try:
        tracks = await client.search(q.strip(), limit=limit)
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("Jamendo search failed: %s", exc)
        raise UpstreamError("Music search failed") from exc
    return {"tracks": tracks}


@router.get("/track/{track_id}")
async def get_track(
    track_id: str,
    client: JamendoClient = Depends(get_music_client),
) -> Dict[str, Any]:
    try:
        track = await client.get_track(track_id)
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("Jamendo track lookup failed for %s: %s", track_id, exc)
        raise UpstreamError("Failed to get track details") from exc
    if track is None:
        raise NotFound("Track not found")
    return {"track": track}
